"""
Create Booking Use Case

The booking engine: validates a request against the doctor, the patient and
the slot, then reserves a seat atomically.
"""

import logging

from medbook.core.domain import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    SlotUnavailableError,
    generate_uuid,
)
from medbook.domains.scheduling.application.dto import CreateBookingRequest, CreateBookingResponse
from medbook.domains.scheduling.application.ports import IBookingRepository, IDoctorDirectory
from medbook.domains.scheduling.application.services import BookingEventDispatcher
from medbook.domains.scheduling.domain.entities import Booking, Doctor
from medbook.domains.scheduling.domain.services import AccessPolicy, Clock, FeePolicy
from medbook.domains.scheduling.domain.value_objects import ActorContext, ActorRole, BookingStatus

from .get_availability import GetAvailabilityUseCase

logger = logging.getLogger(__name__)


class CreateBookingUseCase:
    """
    Use case for booking a slot.

    Steps:
    1. Replay: a known (patient, idempotency_key) returns the stored booking
    2. Doctor exists, actor may book for the patient, doctor is bookable
       and offers the consultation type
    3. Family member (if any) belongs to the patient
    4. No other active booking for the patient with this doctor on that date
    5. Slot exists and has room
    6. Atomic capacity-checked insert; on a lost race steps 4-6 are retried
    7. Side effects (payment order, notifications) after commit
    """

    def __init__(
        self,
        doctor_directory: IDoctorDirectory,
        booking_repository: IBookingRepository,
        availability: GetAvailabilityUseCase,
        fee_policy: FeePolicy,
        access_policy: AccessPolicy,
        events: BookingEventDispatcher,
        clock: Clock,
        reservation_retries: int = 1,
    ):
        self.doctor_directory = doctor_directory
        self.booking_repo = booking_repository
        self.availability = availability
        self.fee_policy = fee_policy
        self.access_policy = access_policy
        self.events = events
        self.clock = clock
        self.reservation_retries = reservation_retries

    async def execute(self, actor: ActorContext, request: CreateBookingRequest) -> CreateBookingResponse:
        """
        Book a slot for a patient.

        Raises:
            EntityNotFoundException: Unknown doctor, or family member not found for the patient
            AuthorizationException: Actor may not book for this patient/doctor
            BusinessRuleViolationException: Doctor not bookable, type not offered, duplicate booking
            SlotUnavailableError: Slot missing, full, or lost to concurrent bookings
        """
        replay = await self._find_replay(actor, request)
        if replay is not None:
            return replay

        doctor = await self.doctor_directory.get_doctor(request.doctor_id)
        if doctor is None:
            raise EntityNotFoundException(entity_type="Doctor", entity_id=request.doctor_id)

        self.access_policy.ensure_can_book(actor, request.patient_id, doctor)
        self._ensure_doctor_accepts(doctor, request)
        await self._ensure_family_member(request)

        fees = self.fee_policy.calculate(doctor.fee_for(request.consultation_type))

        for attempt in range(self.reservation_retries + 1):
            await self._ensure_not_duplicate(request)

            slot = await self.availability.find_slot(doctor, request.appointment_date, request.start_time)
            if slot is None or not slot.is_available:
                raise SlotUnavailableError(doctor_id=doctor.id, time_slot=self._slot_label(request))

            booking = self._build_booking(doctor, request, slot.end_time)
            booking.apply_fees(fees)
            if not fees.requires_payment:
                booking.apply_status(BookingStatus.CONFIRMED, ActorRole.SYSTEM, self.clock.now())

            stored = await self.booking_repo.insert_if_capacity_available(booking, slot.max_capacity)
            if stored is not None:
                break

            logger.warning(
                f"Lost reservation race for doctor {doctor.id} at {self._slot_label(request)} "
                f"(attempt {attempt + 1})"
            )
            replay = await self._find_replay(actor, request)
            if replay is not None:
                return replay
        else:
            raise SlotUnavailableError(doctor_id=doctor.id, time_slot=self._slot_label(request))

        logger.info(
            f"Booking {stored.booking_reference} ({stored.id}) created for patient {stored.patient_id} "
            f"with doctor {doctor.id} at {self._slot_label(request)}, status {stored.status.value}"
        )

        payment_order = await self.events.booking_created(stored)
        return CreateBookingResponse(booking=stored, payment_order=payment_order)

    async def _find_replay(self, actor: ActorContext, request: CreateBookingRequest) -> CreateBookingResponse | None:
        if not request.idempotency_key:
            return None
        existing = await self.booking_repo.find_by_idempotency_key(request.patient_id, request.idempotency_key)
        if existing is None:
            return None
        self.access_policy.ensure_can_access_booking(actor, existing, operation="create_booking")
        logger.info(f"Idempotent replay of booking {existing.id} (key {request.idempotency_key})")
        return CreateBookingResponse(booking=existing, replayed=True)

    def _ensure_doctor_accepts(self, doctor: Doctor, request: CreateBookingRequest) -> None:
        if not doctor.is_bookable:
            raise BusinessRuleViolationException(
                rule="doctor_not_bookable",
                message="Doctor is not accepting appointments",
                details={"doctor_id": str(doctor.id)},
            )
        if not doctor.supports(request.consultation_type):
            raise BusinessRuleViolationException(
                rule="consultation_type_not_supported",
                message=f"Doctor does not offer {request.consultation_type.value} consultations",
                details={"doctor_id": str(doctor.id), "consultation_type": request.consultation_type.value},
            )

    async def _ensure_family_member(self, request: CreateBookingRequest) -> None:
        if request.family_member_id is None:
            return
        member = await self.doctor_directory.get_family_member(request.family_member_id)
        if member is None or not member.belongs_to(request.patient_id):
            raise EntityNotFoundException(entity_type="FamilyMember", entity_id=request.family_member_id)

    async def _ensure_not_duplicate(self, request: CreateBookingRequest) -> None:
        existing = await self.booking_repo.find_active_for_patient(
            request.patient_id, request.doctor_id, request.appointment_date
        )
        if existing:
            raise BusinessRuleViolationException(
                rule="duplicate_booking",
                message="Patient already has an appointment with this doctor on this date",
                details={"booking_id": str(existing[0].id)},
            )

    def _build_booking(self, doctor: Doctor, request: CreateBookingRequest, end_time) -> Booking:
        return Booking(
            id=generate_uuid(),
            patient_id=request.patient_id,
            doctor_id=doctor.id,
            hospital_id=doctor.hospital_id,
            family_member_id=request.family_member_id,
            appointment_date=request.appointment_date,
            start_time=request.start_time,
            end_time=end_time,
            consultation_type=request.consultation_type,
            symptoms=request.symptoms,
            patient_notes=request.patient_notes,
            idempotency_key=request.idempotency_key,
        )

    @staticmethod
    def _slot_label(request: CreateBookingRequest) -> str:
        return f"{request.appointment_date.isoformat()} {request.start_time.strftime('%H:%M')}"
