"""
Manage Schedule Use Case

Reads and writes doctors' weekly templates and date overrides.
"""

import logging
from datetime import date
from uuid import UUID

from medbook.core.domain import EntityNotFoundException, ValidationException, generate_uuid
from medbook.domains.scheduling.application.dto import UpsertOverrideRequest, UpsertTemplateRequest
from medbook.domains.scheduling.application.ports import IDoctorDirectory, IScheduleRepository
from medbook.domains.scheduling.domain.entities import Doctor, ScheduleOverride, WeeklyTemplate
from medbook.domains.scheduling.domain.services import AccessPolicy
from medbook.domains.scheduling.domain.value_objects import ActorContext, DayOfWeek, OverrideType

logger = logging.getLogger(__name__)


class ManageScheduleUseCase:
    """
    Schedule store operations.

    Reads are open to any authenticated actor. Mutations require staff of
    the doctor's hospital or an admin.
    """

    def __init__(
        self,
        doctor_directory: IDoctorDirectory,
        schedule_repository: IScheduleRepository,
        access_policy: AccessPolicy,
    ):
        self.doctor_directory = doctor_directory
        self.schedule_repo = schedule_repository
        self.access_policy = access_policy

    # ==================== TEMPLATES ====================

    async def list_templates(self, doctor_id: UUID, include_inactive: bool = False) -> list[WeeklyTemplate]:
        await self._get_doctor(doctor_id)
        return await self.schedule_repo.list_templates(doctor_id, include_inactive=include_inactive)

    async def get_template(self, doctor_id: UUID, day_of_week: DayOfWeek) -> WeeklyTemplate:
        await self._get_doctor(doctor_id)
        template = await self.schedule_repo.get_active_template(doctor_id, day_of_week)
        if template is None:
            raise EntityNotFoundException(
                entity_type="WeeklyTemplate",
                entity_id=f"{doctor_id}:{day_of_week.value}",
            )
        return template

    async def upsert_template(self, actor: ActorContext, request: UpsertTemplateRequest) -> WeeklyTemplate:
        """
        Replace the active template of a day.

        Raises:
            EntityNotFoundException: Unknown doctor
            AuthorizationException: Actor may not manage this doctor's schedule
            ValidationException: Inconsistent hours, duration, capacity or break
        """
        doctor = await self._get_doctor(request.doctor_id)
        self.access_policy.ensure_can_manage_schedule(actor, doctor)

        template = WeeklyTemplate(
            id=generate_uuid(),
            doctor_id=doctor.id,
            day_of_week=request.day_of_week,
            start_time=request.start_time,
            end_time=request.end_time,
            break_start=request.break_start,
            break_end=request.break_end,
            slot_duration_minutes=(
                request.slot_duration_minutes
                if request.slot_duration_minutes is not None
                else doctor.slot_duration_minutes
            ),
            max_patients_per_slot=(
                request.max_patients_per_slot
                if request.max_patients_per_slot is not None
                else doctor.max_patients_per_slot
            ),
        )
        template.validate()

        saved = await self.schedule_repo.save_template(template)
        logger.info(
            f"Template for doctor {doctor.id} on {request.day_of_week.value} set to "
            f"{saved.start_time:%H:%M}-{saved.end_time:%H:%M} by {actor.role.value} {actor.user_id}"
        )
        return saved

    async def deactivate_template(self, actor: ActorContext, doctor_id: UUID, day_of_week: DayOfWeek) -> WeeklyTemplate:
        doctor = await self._get_doctor(doctor_id)
        self.access_policy.ensure_can_manage_schedule(actor, doctor)

        template = await self.schedule_repo.deactivate_template(doctor_id, day_of_week)
        if template is None:
            raise EntityNotFoundException(
                entity_type="WeeklyTemplate",
                entity_id=f"{doctor_id}:{day_of_week.value}",
            )
        logger.info(f"Template for doctor {doctor_id} on {day_of_week.value} deactivated")
        return template

    # ==================== OVERRIDES ====================

    async def list_overrides(self, doctor_id: UUID, start_date: date, end_date: date) -> list[ScheduleOverride]:
        if start_date > end_date:
            raise ValidationException("start_date must not be after end_date", field="start_date")
        await self._get_doctor(doctor_id)
        return await self.schedule_repo.list_overrides(doctor_id, start_date, end_date)

    async def upsert_override(self, actor: ActorContext, request: UpsertOverrideRequest) -> ScheduleOverride:
        """
        Insert or replace the override of a date.

        Holidays and leave ignore any hours given.
        """
        doctor = await self._get_doctor(request.doctor_id)
        self.access_policy.ensure_can_manage_schedule(actor, doctor)

        keeps_hours = request.override_type == OverrideType.SPECIAL_HOURS
        override = ScheduleOverride(
            id=generate_uuid(),
            doctor_id=doctor.id,
            override_date=request.override_date,
            override_type=request.override_type,
            start_time=request.start_time if keeps_hours else None,
            end_time=request.end_time if keeps_hours else None,
            reason=request.reason,
        )
        override.validate()

        saved = await self.schedule_repo.save_override(override)
        logger.info(
            f"Override {saved.override_type.value} for doctor {doctor.id} on {saved.override_date} "
            f"set by {actor.role.value} {actor.user_id}"
        )
        return saved

    async def remove_override(self, actor: ActorContext, doctor_id: UUID, override_date: date) -> None:
        doctor = await self._get_doctor(doctor_id)
        self.access_policy.ensure_can_manage_schedule(actor, doctor)

        if not await self.schedule_repo.delete_override(doctor_id, override_date):
            raise EntityNotFoundException(
                entity_type="ScheduleOverride",
                entity_id=f"{doctor_id}:{override_date.isoformat()}",
            )
        logger.info(f"Override for doctor {doctor_id} on {override_date} removed")

    async def _get_doctor(self, doctor_id: UUID) -> Doctor:
        doctor = await self.doctor_directory.get_doctor(doctor_id)
        if doctor is None:
            raise EntityNotFoundException(entity_type="Doctor", entity_id=doctor_id)
        return doctor
