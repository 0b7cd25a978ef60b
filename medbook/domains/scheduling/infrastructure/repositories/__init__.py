"""
Scheduling Repository Implementations
"""

from .booking_repository import SQLAlchemyBookingRepository
from .doctor_directory import SQLAlchemyDoctorDirectory
from .in_memory import (
    InMemoryBookingRepository,
    InMemoryDoctorDirectory,
    InMemoryScheduleRepository,
    InMemorySchedulingStore,
)
from .schedule_repository import SQLAlchemyScheduleRepository

__all__ = [
    "SQLAlchemyBookingRepository",
    "SQLAlchemyDoctorDirectory",
    "SQLAlchemyScheduleRepository",
    "InMemoryBookingRepository",
    "InMemoryDoctorDirectory",
    "InMemoryScheduleRepository",
    "InMemorySchedulingStore",
]
