"""
Scheduling Domain Services
"""

from .access_policy import AccessPolicy
from .booking_state_machine import TRANSITIONS, BookingStateMachine
from .clock import Clock, SystemClock
from .fee_policy import FeePolicy, PassThroughFeePolicy, PercentageFeePolicy, build_fee_policy
from .refund_policy import DEFAULT_REFUND_TIERS, RefundPolicy
from .slot_generator import SlotGenerator

__all__ = [
    "AccessPolicy",
    "BookingStateMachine",
    "TRANSITIONS",
    "Clock",
    "SystemClock",
    "FeePolicy",
    "PassThroughFeePolicy",
    "PercentageFeePolicy",
    "build_fee_policy",
    "RefundPolicy",
    "DEFAULT_REFUND_TIERS",
    "SlotGenerator",
]
