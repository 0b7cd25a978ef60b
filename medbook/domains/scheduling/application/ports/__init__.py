"""
Scheduling Application Ports

Interfaces for data access and external collaborators.
"""

from .booking_repository import IBookingRepository
from .collaborators import BookingEvent, INotificationSender, IPaymentGateway, PaymentOrder
from .doctor_directory import IDoctorDirectory
from .schedule_repository import IScheduleRepository

__all__ = [
    "IBookingRepository",
    "IDoctorDirectory",
    "IScheduleRepository",
    "IPaymentGateway",
    "INotificationSender",
    "BookingEvent",
    "PaymentOrder",
]
