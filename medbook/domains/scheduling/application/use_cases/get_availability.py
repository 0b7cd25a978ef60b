"""
Get Availability Use Case

Read path: schedule data + booking counts -> per-day bookable slots.
"""

import logging
from datetime import date, time, timedelta
from uuid import UUID

from medbook.core.domain import EntityNotFoundException, ValidationException
from medbook.domains.scheduling.application.dto import AvailabilityResult, DayAvailability
from medbook.domains.scheduling.application.ports import (
    IBookingRepository,
    IDoctorDirectory,
    IScheduleRepository,
)
from medbook.domains.scheduling.domain.entities import Doctor
from medbook.domains.scheduling.domain.services import Clock, SlotGenerator
from medbook.domains.scheduling.domain.value_objects import ConsultationType, DayOfWeek, Slot

logger = logging.getLogger(__name__)


class GetAvailabilityUseCase:
    """
    Use case for listing a doctor's bookable slots.

    Results are never cached: "today" and booking counts are read on every
    call. Two calls without a write in between return the same result.
    """

    def __init__(
        self,
        doctor_directory: IDoctorDirectory,
        schedule_repository: IScheduleRepository,
        booking_repository: IBookingRepository,
        slot_generator: SlotGenerator,
        clock: Clock,
        default_days: int = 7,
        max_days: int = 30,
    ):
        self.doctor_directory = doctor_directory
        self.schedule_repo = schedule_repository
        self.booking_repo = booking_repository
        self.slot_generator = slot_generator
        self.clock = clock
        self.default_days = default_days
        self.max_days = max_days

    async def execute(
        self,
        doctor_id: UUID,
        start_date: date | None = None,
        days: int | None = None,
        consultation_type: ConsultationType | None = None,
    ) -> AvailabilityResult:
        """
        List slots for ``days`` dates starting at ``start_date`` (default today).

        Args:
            doctor_id: Doctor to query
            start_date: First date, in the operating timezone
            days: Number of dates, 1..max_days
            consultation_type: Only answer if the doctor offers this type

        Returns:
            AvailabilityResult; ``days`` is empty when the doctor is not
            bookable or does not offer the requested type

        Raises:
            ValidationException: days out of range
            EntityNotFoundException: Unknown doctor
        """
        days = self.default_days if days is None else days
        if days < 1 or days > self.max_days:
            raise ValidationException(f"days must be between 1 and {self.max_days}", field="days")

        doctor = await self.doctor_directory.get_doctor(doctor_id)
        if doctor is None:
            raise EntityNotFoundException(entity_type="Doctor", entity_id=doctor_id)

        if not doctor.is_bookable:
            logger.info(f"Doctor {doctor_id} is not bookable, returning empty availability")
            return AvailabilityResult(doctor_id=doctor_id)
        if consultation_type is not None and not doctor.supports(consultation_type):
            return AvailabilityResult(doctor_id=doctor_id)

        now = self.clock.now()
        start_date = start_date or now.date()
        end_date = start_date + timedelta(days=days - 1)

        templates = {
            template.day_of_week: template
            for template in await self.schedule_repo.list_templates(doctor_id)
            if template.is_active
        }
        overrides = {
            override.override_date: override
            for override in await self.schedule_repo.list_overrides(doctor_id, start_date, end_date)
        }
        counts = await self.booking_repo.count_active_by_slot(doctor_id, start_date, end_date)

        generated = self.slot_generator.generate_range(
            start_date=start_date,
            days=days,
            templates=templates,
            overrides=overrides,
            doctor=doctor,
            now=now,
        )

        result = AvailabilityResult(doctor_id=doctor_id)
        for day, slots in generated.items():
            counted = [slot.with_booked_count(counts.get((day, slot.start_time), 0)) for slot in slots]
            override = overrides.get(day)
            result.days.append(
                DayAvailability(
                    date=day,
                    is_available=any(slot.is_available for slot in counted),
                    slots=counted,
                    override_type=override.override_type if override else None,
                    override_reason=override.reason if override else None,
                )
            )
        return result

    async def find_slot(
        self,
        doctor: Doctor,
        slot_date: date,
        start_time: time,
        exclude_booking_id: UUID | None = None,
    ) -> Slot | None:
        """
        Resolve the single slot starting at ``start_time`` with its current booked count.

        Args:
            exclude_booking_id: Booking left out of the count (rescheduling in place)

        Returns:
            The slot, or None when no such slot exists (or it is in the past)
        """
        template = await self.schedule_repo.get_active_template(doctor.id, DayOfWeek.from_date(slot_date))
        override = await self.schedule_repo.get_override(doctor.id, slot_date)
        slots = self.slot_generator.generate(
            slot_date=slot_date,
            template=template,
            override=override,
            doctor=doctor,
            now=self.clock.now(),
        )
        slot = next((s for s in slots if s.start_time == start_time), None)
        if slot is None:
            return None

        counts = await self.booking_repo.count_active_by_slot(
            doctor.id, slot_date, slot_date, exclude_booking_id=exclude_booking_id
        )
        return slot.with_booked_count(counts.get((slot_date, start_time), 0))
