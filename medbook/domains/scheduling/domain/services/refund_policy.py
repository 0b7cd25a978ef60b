"""
Refund Policy

Pure tiered refund calculation for cancelled bookings.
"""

from datetime import datetime
from decimal import Decimal

from medbook.core.domain import Money

from ..value_objects.pricing import RefundQuote

# (minimum hours before start, refund percentage), checked in order
DEFAULT_REFUND_TIERS: tuple[tuple[int, int], ...] = (
    (24, 100),
    (4, 75),
    (1, 50),
)


class RefundPolicy:
    """
    Tiered refund policy.

    - 24 hours or more before the appointment: full refund
    - 4 to 24 hours: 75%
    - 1 to 4 hours: 50%
    - under 1 hour (or after start): nothing

    Amounts are rounded half-up to whole currency units.
    """

    def __init__(self, tiers: tuple[tuple[int, int], ...] = DEFAULT_REFUND_TIERS):
        self.tiers = tiers

    def percentage_for(self, hours_until: float) -> int:
        for min_hours, percentage in self.tiers:
            if hours_until >= min_hours:
                return percentage
        return 0

    def calculate_refund(self, total_amount: Money, appointment_at: datetime, now: datetime) -> RefundQuote:
        """
        Quote the refund for cancelling at ``now``.

        Args:
            total_amount: What the patient paid (or owes)
            appointment_at: Appointment start, timezone-aware
            now: Cancellation instant, timezone-aware

        Returns:
            RefundQuote with the rounded amount and the tier applied
        """
        hours_until = (appointment_at - now).total_seconds() / 3600
        percentage = self.percentage_for(hours_until)
        amount = total_amount.multiply(Decimal(percentage) / Decimal(100)).round_to_unit()
        return RefundQuote(amount=amount, percentage=percentage, hours_until=hours_until)
