"""
Scheduling Domain Entities
"""

from .booking import Booking, generate_booking_reference
from .doctor import Doctor
from .family_member import FamilyMember
from .schedule_override import ScheduleOverride
from .weekly_template import WeeklyTemplate

__all__ = [
    "Booking",
    "generate_booking_reference",
    "Doctor",
    "FamilyMember",
    "ScheduleOverride",
    "WeeklyTemplate",
]
