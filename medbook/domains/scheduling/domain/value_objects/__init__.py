"""
Scheduling Domain Value Objects
"""

from .actor import ActorContext, ActorRole
from .booking_status import (
    CAPACITY_COUNTING_STATUSES,
    TERMINAL_STATUSES,
    BookingStatus,
    PaymentStatus,
)
from .pricing import FeeBreakdown, RefundQuote
from .schedule import ConsultationType, DayOfWeek, OverrideType, VerificationStatus
from .slot import Slot, SlotKey

__all__ = [
    "ActorContext",
    "ActorRole",
    "BookingStatus",
    "PaymentStatus",
    "CAPACITY_COUNTING_STATUSES",
    "TERMINAL_STATUSES",
    "FeeBreakdown",
    "RefundQuote",
    "ConsultationType",
    "DayOfWeek",
    "OverrideType",
    "VerificationStatus",
    "Slot",
    "SlotKey",
]
