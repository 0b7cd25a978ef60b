"""
Booking Event Dispatcher

Runs the side effects of committed booking changes: opening payment orders
and notifying the people involved. Collaborator failures are logged and
swallowed; a booking that is already committed must not be reported as failed.
"""

from medbook.core.shared.logger import get_logger
from medbook.domains.scheduling.application.ports.collaborators import (
    BookingEvent,
    INotificationSender,
    IPaymentGateway,
    PaymentOrder,
)
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.value_objects import ActorRole, BookingStatus, PaymentStatus

logger = get_logger(__name__, {"component": "booking_events"})

_RECIPIENTS: dict[BookingEvent, tuple[ActorRole, ...]] = {
    BookingEvent.CREATED: (ActorRole.PATIENT, ActorRole.DOCTOR),
    BookingEvent.CONFIRMED: (ActorRole.PATIENT, ActorRole.DOCTOR),
    BookingEvent.STATUS_CHANGED: (ActorRole.PATIENT,),
    BookingEvent.CANCELLED: (ActorRole.PATIENT, ActorRole.DOCTOR, ActorRole.HOSPITAL),
    BookingEvent.RESCHEDULED: (ActorRole.PATIENT, ActorRole.DOCTOR),
}


class BookingEventDispatcher:
    """
    Post-commit side effects for bookings.

    Both collaborators are optional; without them the dispatcher only logs.
    """

    def __init__(
        self,
        payment_gateway: IPaymentGateway | None = None,
        notification_sender: INotificationSender | None = None,
    ):
        self.payment_gateway = payment_gateway
        self.notification_sender = notification_sender

    async def booking_created(self, booking: Booking) -> PaymentOrder | None:
        """Open a payment order when payment is due, then notify."""
        order = None
        if booking.payment_status == PaymentStatus.PENDING:
            order = await self._create_payment_order(booking)

        event = BookingEvent.CONFIRMED if booking.status == BookingStatus.CONFIRMED else BookingEvent.CREATED
        await self._notify(event, booking)
        return order

    async def booking_confirmed(self, booking: Booking) -> None:
        await self._notify(BookingEvent.CONFIRMED, booking)

    async def booking_status_changed(self, booking: Booking) -> None:
        await self._notify(BookingEvent.STATUS_CHANGED, booking)

    async def booking_cancelled(self, booking: Booking) -> None:
        await self._notify(BookingEvent.CANCELLED, booking)

    async def booking_rescheduled(self, booking: Booking) -> None:
        await self._notify(BookingEvent.RESCHEDULED, booking)

    async def _create_payment_order(self, booking: Booking) -> PaymentOrder | None:
        log = logger.with_context(booking_id=booking.id)
        if self.payment_gateway is None:
            log.debug("No payment gateway configured, skipping payment order")
            return None
        try:
            order = await self.payment_gateway.create_payment_order(booking)
        except Exception as e:
            log.exception(f"Payment order creation failed: {e}")
            return None
        log.info(f"Payment order {order.order_id} created")
        return order

    async def _notify(self, event: BookingEvent, booking: Booking) -> None:
        log = logger.with_context(booking_id=booking.id, event=event.value)
        if self.notification_sender is None:
            log.debug("No notification sender configured, skipping notification")
            return
        for recipient in _RECIPIENTS[event]:
            try:
                await self.notification_sender.notify(event, booking, recipient)
            except Exception as e:
                log.exception(f"Notification to {recipient.value} failed: {e}")
