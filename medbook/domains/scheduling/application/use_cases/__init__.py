"""
Scheduling Use Cases
"""

from .cancel_booking import CancelBookingUseCase
from .confirm_payment import ConfirmPaymentUseCase
from .create_booking import CreateBookingUseCase
from .get_availability import GetAvailabilityUseCase
from .get_booking import GetBookingUseCase
from .manage_schedule import ManageScheduleUseCase
from .reschedule_booking import RescheduleBookingUseCase
from .update_booking_status import UpdateBookingStatusUseCase

__all__ = [
    "CancelBookingUseCase",
    "ConfirmPaymentUseCase",
    "CreateBookingUseCase",
    "GetAvailabilityUseCase",
    "GetBookingUseCase",
    "ManageScheduleUseCase",
    "RescheduleBookingUseCase",
    "UpdateBookingStatusUseCase",
]
