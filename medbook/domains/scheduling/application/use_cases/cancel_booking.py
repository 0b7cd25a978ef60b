"""
Cancel Booking Use Case

Cancels a booking and records the refund owed under the refund policy.
"""

import logging

from medbook.core.domain import InvalidTransitionException, Money
from medbook.domains.scheduling.application.dto import CancelBookingRequest, CancellationResult
from medbook.domains.scheduling.application.ports import IBookingRepository
from medbook.domains.scheduling.application.services import BookingEventDispatcher
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.services import BookingStateMachine, Clock, RefundPolicy
from medbook.domains.scheduling.domain.value_objects import ActorContext, BookingStatus, PaymentStatus

from ._loading import load_booking

logger = logging.getLogger(__name__)


class CancelBookingUseCase:
    """
    Use case for cancelling bookings.

    The refund is quoted on what was actually paid: bookings whose payment
    never completed get a zero refund with the tier still reported.
    """

    def __init__(
        self,
        booking_repository: IBookingRepository,
        state_machine: BookingStateMachine,
        refund_policy: RefundPolicy,
        events: BookingEventDispatcher,
        clock: Clock,
    ):
        self.booking_repo = booking_repository
        self.state_machine = state_machine
        self.refund_policy = refund_policy
        self.events = events
        self.clock = clock

    async def execute(self, actor: ActorContext, request: CancelBookingRequest) -> CancellationResult:
        """
        Cancel a booking.

        Raises:
            EntityNotFoundException: Unknown booking
            InvalidTransitionException: Booking cannot be cancelled from its status,
                or its status changed concurrently
            AuthorizationException: Role not allowed or booking not owned by the actor
        """
        booking = await load_booking(self.booking_repo, request.booking_id)
        self.state_machine.authorize(booking, BookingStatus.CANCELLED, actor)

        now = self.clock.now()
        quote = self.refund_policy.calculate_refund(
            total_amount=self._paid_amount(booking),
            appointment_at=booking.starts_at(self.clock.timezone),
            now=now,
        )

        expected = booking.status
        booking.apply_status(BookingStatus.CANCELLED, actor.role, now, reason=request.reason)
        booking.record_refund(quote)

        if not await self.booking_repo.update_status(booking, expected):
            raise InvalidTransitionException(
                expected.value,
                BookingStatus.CANCELLED.value,
                message="Booking status changed concurrently, reload and retry",
            )

        logger.info(
            f"Booking {booking.id} cancelled by {actor.role.value} "
            f"({quote.hours_until:.1f}h before start, refund {quote.percentage}% = {quote.amount})"
        )
        await self.events.booking_cancelled(booking)
        return CancellationResult(booking=booking, refund=quote)

    @staticmethod
    def _paid_amount(booking: Booking) -> Money:
        if booking.payment_status == PaymentStatus.COMPLETED:
            return Money(amount=booking.total_amount, currency=booking.currency)
        return Money.zero(booking.currency)
