"""
Update Booking Status Use Case

Generic status transition entry point for the booking lifecycle.
"""

import logging

from medbook.core.domain import InvalidTransitionException, ValidationException
from medbook.domains.scheduling.application.dto import CancelBookingRequest, UpdateBookingStatusRequest
from medbook.domains.scheduling.application.ports import IBookingRepository
from medbook.domains.scheduling.application.services import BookingEventDispatcher
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.services import BookingStateMachine, Clock
from medbook.domains.scheduling.domain.value_objects import ActorContext, BookingStatus

from ._loading import load_booking
from .cancel_booking import CancelBookingUseCase

logger = logging.getLogger(__name__)


class UpdateBookingStatusUseCase:
    """
    Use case for moving a booking to a new status.

    Cancellation is delegated to CancelBookingUseCase so the refund is always
    recorded. Rescheduling needs a target slot and confirming an unpaid
    booking needs a payment reference, so both are refused here.
    """

    def __init__(
        self,
        booking_repository: IBookingRepository,
        state_machine: BookingStateMachine,
        cancel_booking: CancelBookingUseCase,
        events: BookingEventDispatcher,
        clock: Clock,
    ):
        self.booking_repo = booking_repository
        self.state_machine = state_machine
        self.cancel_booking = cancel_booking
        self.events = events
        self.clock = clock

    async def execute(self, actor: ActorContext, request: UpdateBookingStatusRequest) -> Booking:
        if request.new_status == BookingStatus.RESCHEDULED:
            raise ValidationException(
                "Rescheduling requires a new date and time; use the reschedule operation",
                field="status",
            )
        if request.new_status == BookingStatus.CANCELLED:
            result = await self.cancel_booking.execute(
                actor, CancelBookingRequest(booking_id=request.booking_id, reason=request.reason)
            )
            return result.booking

        booking = await load_booking(self.booking_repo, request.booking_id)
        if booking.status == BookingStatus.PENDING_PAYMENT and request.new_status == BookingStatus.CONFIRMED:
            raise ValidationException(
                "Unpaid bookings are confirmed by recording the payment; use the payment confirmation operation",
                field="status",
            )
        self.state_machine.authorize(booking, request.new_status, actor)

        expected = booking.status
        booking.apply_status(request.new_status, actor.role, self.clock.now(), reason=request.reason)

        if not await self.booking_repo.update_status(booking, expected):
            raise InvalidTransitionException(
                expected.value,
                request.new_status.value,
                message="Booking status changed concurrently, reload and retry",
            )

        logger.info(
            f"Booking {booking.id}: {expected.value} -> {booking.status.value} by {actor.role.value}"
        )
        await self.events.booking_status_changed(booking)
        return booking
