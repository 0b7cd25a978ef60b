"""
Fee Policy

Pluggable computation of what a patient pays for a consultation.
"""

from decimal import Decimal
from typing import Protocol, runtime_checkable

from medbook.core.domain import Money

from ..value_objects.pricing import FeeBreakdown


@runtime_checkable
class FeePolicy(Protocol):
    def calculate(self, consultation_fee: Money) -> FeeBreakdown: ...


class PassThroughFeePolicy:
    """Patient pays exactly the consultation fee; no platform fee."""

    def calculate(self, consultation_fee: Money) -> FeeBreakdown:
        return FeeBreakdown(
            consultation_fee=consultation_fee,
            platform_fee=Money.zero(consultation_fee.currency),
            total_amount=consultation_fee,
        )


class PercentageFeePolicy:
    """Adds a platform fee as a percentage of the consultation fee, rounded to whole units."""

    def __init__(self, percentage: Decimal):
        if percentage < 0 or percentage > 100:
            raise ValueError("Platform fee percentage must be between 0 and 100")
        self.percentage = percentage

    def calculate(self, consultation_fee: Money) -> FeeBreakdown:
        platform_fee = consultation_fee.multiply(self.percentage / Decimal(100)).round_to_unit()
        return FeeBreakdown(
            consultation_fee=consultation_fee,
            platform_fee=platform_fee,
            total_amount=consultation_fee.add(platform_fee),
        )


def build_fee_policy(platform_fee_percentage: Decimal) -> FeePolicy:
    if platform_fee_percentage > 0:
        return PercentageFeePolicy(platform_fee_percentage)
    return PassThroughFeePolicy()
