"""
Pricing Value Objects

Fee breakdowns produced at booking time and refund quotes produced at cancellation.
"""

from dataclasses import dataclass

from medbook.core.domain import Money, ValueObject


@dataclass(frozen=True)
class FeeBreakdown(ValueObject):
    consultation_fee: Money
    platform_fee: Money
    total_amount: Money

    def _validate(self) -> None:
        if self.consultation_fee.add(self.platform_fee) != self.total_amount:
            raise ValueError("total_amount must equal consultation_fee + platform_fee")

    @property
    def requires_payment(self) -> bool:
        return not self.total_amount.is_zero()


@dataclass(frozen=True)
class RefundQuote(ValueObject):
    """
    Refund owed for a cancellation.

    Attributes:
        amount: Refund, rounded half-up to whole currency units
        percentage: Tier applied (100, 75, 50 or 0)
        hours_until: Hours between cancellation and appointment start (negative once started)
    """

    amount: Money
    percentage: int
    hours_until: float

    def _validate(self) -> None:
        if self.percentage not in (0, 50, 75, 100):
            raise ValueError(f"Unsupported refund percentage: {self.percentage}")
