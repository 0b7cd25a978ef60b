"""
External Collaborator Ports

Payment and notification services the booking engine calls after commit.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol, runtime_checkable

from medbook.core.domain import StatusEnum
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.value_objects import ActorRole


class BookingEvent(StatusEnum):
    CREATED = "booking_created"
    CONFIRMED = "booking_confirmed"
    STATUS_CHANGED = "booking_status_changed"
    CANCELLED = "booking_cancelled"
    RESCHEDULED = "booking_rescheduled"


@dataclass(frozen=True)
class PaymentOrder:
    """Handle returned by the payment collaborator."""

    order_id: str
    amount: Decimal
    currency: str
    checkout_url: str | None = None


@runtime_checkable
class IPaymentGateway(Protocol):
    async def create_payment_order(self, booking: Booking) -> PaymentOrder:
        """
        Open a payment order for the booking's total amount.

        Raises:
            IntegrationException: When the payment service fails
        """
        ...


@runtime_checkable
class INotificationSender(Protocol):
    async def notify(self, event: BookingEvent, booking: Booking, recipient: ActorRole) -> None:
        """
        Deliver a booking notification to the patient, doctor or hospital.

        Raises:
            IntegrationException: When the notification service fails
        """
        ...
