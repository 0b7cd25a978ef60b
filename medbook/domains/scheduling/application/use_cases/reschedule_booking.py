"""
Reschedule Booking Use Case

Moves a booking to another slot of the same doctor, keeping the same row.
"""

import copy
import logging
from datetime import datetime, timedelta

from medbook.core.domain import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    InvalidTransitionException,
    SlotUnavailableError,
    ValidationException,
)
from medbook.domains.scheduling.application.dto import RescheduleBookingRequest
from medbook.domains.scheduling.application.ports import IBookingRepository, IDoctorDirectory
from medbook.domains.scheduling.application.services import BookingEventDispatcher
from medbook.domains.scheduling.domain.entities import Booking
from medbook.domains.scheduling.domain.services import BookingStateMachine, Clock
from medbook.domains.scheduling.domain.value_objects import ActorContext, BookingStatus

from ._loading import load_booking
from .get_availability import GetAvailabilityUseCase

logger = logging.getLogger(__name__)


class RescheduleBookingUseCase:
    """
    Use case for rescheduling.

    The booking keeps its original duration. The target slot is checked with
    the booking itself left out of the count, and the move is written with a
    compare-and-swap on status plus a capacity check. On any failure the
    stored booking is left untouched.
    """

    def __init__(
        self,
        doctor_directory: IDoctorDirectory,
        booking_repository: IBookingRepository,
        availability: GetAvailabilityUseCase,
        state_machine: BookingStateMachine,
        events: BookingEventDispatcher,
        clock: Clock,
        reservation_retries: int = 1,
    ):
        self.doctor_directory = doctor_directory
        self.booking_repo = booking_repository
        self.availability = availability
        self.state_machine = state_machine
        self.events = events
        self.clock = clock
        self.reservation_retries = reservation_retries

    async def execute(self, actor: ActorContext, request: RescheduleBookingRequest) -> Booking:
        """
        Reschedule a booking.

        Raises:
            EntityNotFoundException: Unknown booking or doctor
            InvalidTransitionException: Booking not confirmed/rescheduled, or changed concurrently
            AuthorizationException: Role not allowed or booking not owned by the actor
            ValidationException: Target in the past, identical to the current slot,
                or running past midnight
            BusinessRuleViolationException: Doctor not bookable, or the patient already
                has an appointment with this doctor on the new date
            SlotUnavailableError: Target slot missing or full
        """
        booking = await load_booking(self.booking_repo, request.booking_id)
        self.state_machine.authorize(booking, BookingStatus.RESCHEDULED, actor)

        now = self.clock.now()
        target_start = datetime.combine(request.new_date, request.new_start_time, tzinfo=self.clock.timezone)
        if target_start <= now:
            raise ValidationException("Cannot reschedule into the past", field="new_date")
        if (request.new_date, request.new_start_time) == (booking.appointment_date, booking.start_time):
            raise ValidationException("Booking is already in this slot", field="new_start_time")

        target_end = target_start + timedelta(minutes=booking.duration_minutes)
        if target_end.date() != request.new_date:
            raise ValidationException("Rescheduled appointment must end on the same day", field="new_start_time")

        doctor = await self.doctor_directory.get_doctor(booking.doctor_id)
        if doctor is None:
            raise EntityNotFoundException(entity_type="Doctor", entity_id=booking.doctor_id)
        if not doctor.is_bookable:
            raise BusinessRuleViolationException(
                rule="doctor_not_bookable",
                message="Doctor is not accepting appointments",
                details={"doctor_id": str(doctor.id)},
            )

        label = f"{request.new_date.isoformat()} {request.new_start_time.strftime('%H:%M')}"
        expected = booking.status

        for attempt in range(self.reservation_retries + 1):
            if request.new_date != booking.appointment_date:
                await self._ensure_not_duplicate(booking, request)

            slot = await self.availability.find_slot(
                doctor, request.new_date, request.new_start_time, exclude_booking_id=booking.id
            )
            if slot is None or not slot.is_available:
                raise SlotUnavailableError(doctor_id=doctor.id, time_slot=label)

            moved = copy.copy(booking)
            moved.move_to(
                request.new_date,
                request.new_start_time,
                target_end.time(),
                actor.role,
                now,
                reason=request.reason,
            )
            if await self.booking_repo.reschedule_if_capacity_available(moved, expected, slot.max_capacity):
                break

            logger.warning(f"Reschedule of booking {booking.id} to {label} lost a race (attempt {attempt + 1})")
            current = await load_booking(self.booking_repo, booking.id)
            if current.status != expected:
                raise InvalidTransitionException(
                    current.status.value,
                    BookingStatus.RESCHEDULED.value,
                    message="Booking status changed concurrently, reload and retry",
                )
        else:
            raise SlotUnavailableError(doctor_id=doctor.id, time_slot=label)

        logger.info(f"Booking {moved.id} rescheduled from {moved.rescheduled_from} to {label} by {actor.role.value}")
        await self.events.booking_rescheduled(moved)
        return moved

    async def _ensure_not_duplicate(self, booking: Booking, request: RescheduleBookingRequest) -> None:
        others = await self.booking_repo.find_active_for_patient(
            booking.patient_id, booking.doctor_id, request.new_date
        )
        if any(other.id != booking.id for other in others):
            raise BusinessRuleViolationException(
                rule="duplicate_booking",
                message="Patient already has an appointment with this doctor on this date",
                details={"booking_id": str(others[0].id)},
            )
