"""
Scheduling SQLAlchemy persistence models
"""

from .models import (
    BookingModel,
    DoctorModel,
    FamilyMemberModel,
    ScheduleOverrideModel,
    WeeklyTemplateModel,
)

__all__ = [
    "BookingModel",
    "DoctorModel",
    "FamilyMemberModel",
    "ScheduleOverrideModel",
    "WeeklyTemplateModel",
]
