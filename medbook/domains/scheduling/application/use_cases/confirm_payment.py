"""
Confirm Payment Use Case

Called by the payment collaborator once a payment has been captured.
"""

import logging

from medbook.core.domain import AuthorizationException, InvalidTransitionException
from medbook.domains.scheduling.application.dto import ConfirmPaymentRequest
from medbook.domains.scheduling.application.ports import IBookingRepository
from medbook.domains.scheduling.application.services import BookingEventDispatcher
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.services import BookingStateMachine, Clock
from medbook.domains.scheduling.domain.value_objects import ActorContext, ActorRole, BookingStatus

from ._loading import load_booking

logger = logging.getLogger(__name__)


class ConfirmPaymentUseCase:
    """
    Use case for confirming a booking after payment.

    Payment callbacks are retried by the collaborator, so confirming an
    already confirmed booking with the same payment reference is a no-op.
    """

    def __init__(
        self,
        booking_repository: IBookingRepository,
        state_machine: BookingStateMachine,
        events: BookingEventDispatcher,
        clock: Clock,
    ):
        self.booking_repo = booking_repository
        self.state_machine = state_machine
        self.events = events
        self.clock = clock

    async def execute(self, actor: ActorContext, request: ConfirmPaymentRequest) -> Booking:
        if actor.role != ActorRole.SYSTEM:
            raise AuthorizationException(operation="confirm_payment", resource=f"booking:{request.booking_id}")

        booking = await load_booking(self.booking_repo, request.booking_id)

        if booking.status == BookingStatus.CONFIRMED and booking.payment_ref == request.payment_ref:
            logger.info(f"Payment {request.payment_ref} already confirmed for booking {booking.id}")
            return booking
        if booking.status != BookingStatus.PENDING_PAYMENT:
            raise InvalidTransitionException(booking.status.value, BookingStatus.CONFIRMED.value)

        self.state_machine.authorize(booking, BookingStatus.CONFIRMED, actor)

        expected = booking.status
        booking.record_payment(request.payment_ref)
        booking.apply_status(BookingStatus.CONFIRMED, actor.role, self.clock.now())

        if not await self.booking_repo.update_status(booking, expected):
            raise InvalidTransitionException(
                expected.value,
                BookingStatus.CONFIRMED.value,
                message="Booking status changed concurrently, reload and retry",
            )

        logger.info(f"Booking {booking.id} confirmed with payment {request.payment_ref}")
        await self.events.booking_confirmed(booking)
        return booking
