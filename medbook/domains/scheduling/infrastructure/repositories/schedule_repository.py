"""
Schedule Repository Implementation

SQLAlchemy implementation of IScheduleRepository.
"""

import logging
from datetime import UTC, date, datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from medbook.core.domain import BusinessRuleViolationException
from medbook.domains.scheduling.application.ports import IScheduleRepository
from medbook.domains.scheduling.domain.entities import ScheduleOverride, WeeklyTemplate
from medbook.domains.scheduling.domain.value_objects import DayOfWeek, OverrideType
from medbook.domains.scheduling.infrastructure.persistence.sqlalchemy.models import (
    ScheduleOverrideModel,
    WeeklyTemplateModel,
)

logger = logging.getLogger(__name__)


class SQLAlchemyScheduleRepository(IScheduleRepository):
    """
    SQLAlchemy implementation of schedule repository.

    Handles weekly templates and date overrides.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ==================== TEMPLATES ====================

    async def list_templates(self, doctor_id: UUID, include_inactive: bool = False) -> list[WeeklyTemplate]:
        query = select(WeeklyTemplateModel).where(WeeklyTemplateModel.doctor_id == doctor_id)
        if not include_inactive:
            query = query.where(WeeklyTemplateModel.is_active.is_(True))
        query = query.order_by(WeeklyTemplateModel.created_at)

        result = await self.session.execute(query)
        templates = [self._template_to_entity(m) for m in result.scalars().all()]
        return sorted(templates, key=lambda t: t.day_of_week.index)

    async def get_active_template(self, doctor_id: UUID, day_of_week: DayOfWeek) -> WeeklyTemplate | None:
        result = await self.session.execute(
            select(WeeklyTemplateModel).where(
                WeeklyTemplateModel.doctor_id == doctor_id,
                WeeklyTemplateModel.day_of_week == day_of_week.value,
                WeeklyTemplateModel.is_active.is_(True),
            )
        )
        model = result.scalar_one_or_none()
        return self._template_to_entity(model) if model else None

    async def save_template(self, template: WeeklyTemplate) -> WeeklyTemplate:
        await self.session.execute(
            update(WeeklyTemplateModel)
            .where(
                WeeklyTemplateModel.doctor_id == template.doctor_id,
                WeeklyTemplateModel.day_of_week == template.day_of_week.value,
                WeeklyTemplateModel.is_active.is_(True),
            )
            .values(is_active=False, deleted_at=datetime.now(UTC))
        )
        model = WeeklyTemplateModel(
            id=template.id,
            doctor_id=template.doctor_id,
            day_of_week=template.day_of_week.value,
            start_time=template.start_time,
            end_time=template.end_time,
            break_start=template.break_start,
            break_end=template.break_end,
            slot_duration_minutes=template.slot_duration_minutes,
            max_patients_per_slot=template.max_patients_per_slot,
            is_active=True,
        )
        self.session.add(model)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(f"Concurrent template update for doctor {template.doctor_id}: {e.orig}")
            raise BusinessRuleViolationException(
                rule="concurrent_template_update",
                message="The schedule for this day was changed concurrently, retry",
            ) from e
        await self.session.refresh(model)
        return self._template_to_entity(model)

    async def deactivate_template(self, doctor_id: UUID, day_of_week: DayOfWeek) -> WeeklyTemplate | None:
        result = await self.session.execute(
            select(WeeklyTemplateModel).where(
                WeeklyTemplateModel.doctor_id == doctor_id,
                WeeklyTemplateModel.day_of_week == day_of_week.value,
                WeeklyTemplateModel.is_active.is_(True),
            )
        )
        model = result.scalar_one_or_none()
        if model is None:
            return None

        model.is_active = False
        model.deleted_at = datetime.now(UTC)
        await self.session.commit()
        await self.session.refresh(model)
        return self._template_to_entity(model)

    # ==================== OVERRIDES ====================

    async def list_overrides(self, doctor_id: UUID, start_date: date, end_date: date) -> list[ScheduleOverride]:
        result = await self.session.execute(
            select(ScheduleOverrideModel)
            .where(
                ScheduleOverrideModel.doctor_id == doctor_id,
                ScheduleOverrideModel.override_date.between(start_date, end_date),
            )
            .order_by(ScheduleOverrideModel.override_date)
        )
        return [self._override_to_entity(m) for m in result.scalars().all()]

    async def get_override(self, doctor_id: UUID, override_date: date) -> ScheduleOverride | None:
        model = await self._find_override_model(doctor_id, override_date)
        return self._override_to_entity(model) if model else None

    async def save_override(self, override: ScheduleOverride) -> ScheduleOverride:
        model = await self._find_override_model(override.doctor_id, override.override_date)
        if model is None:
            model = ScheduleOverrideModel(
                id=override.id,
                doctor_id=override.doctor_id,
                override_date=override.override_date,
            )
            self.session.add(model)

        model.override_type = override.override_type.value
        model.start_time = override.start_time
        model.end_time = override.end_time
        model.reason = override.reason

        await self.session.commit()
        await self.session.refresh(model)
        return self._override_to_entity(model)

    async def delete_override(self, doctor_id: UUID, override_date: date) -> bool:
        result = await self.session.execute(
            delete(ScheduleOverrideModel).where(
                ScheduleOverrideModel.doctor_id == doctor_id,
                ScheduleOverrideModel.override_date == override_date,
            )
        )
        await self.session.commit()
        return result.rowcount > 0

    async def _find_override_model(self, doctor_id: UUID, override_date: date) -> ScheduleOverrideModel | None:
        result = await self.session.execute(
            select(ScheduleOverrideModel).where(
                ScheduleOverrideModel.doctor_id == doctor_id,
                ScheduleOverrideModel.override_date == override_date,
            )
        )
        return result.scalar_one_or_none()

    def _template_to_entity(self, model: WeeklyTemplateModel) -> WeeklyTemplate:
        return WeeklyTemplate(
            id=model.id,
            doctor_id=model.doctor_id,
            day_of_week=DayOfWeek(model.day_of_week),
            start_time=model.start_time,
            end_time=model.end_time,
            break_start=model.break_start,
            break_end=model.break_end,
            slot_duration_minutes=model.slot_duration_minutes,
            max_patients_per_slot=model.max_patients_per_slot,
            is_active=model.is_active,
            deleted_at=model.deleted_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _override_to_entity(self, model: ScheduleOverrideModel) -> ScheduleOverride:
        return ScheduleOverride(
            id=model.id,
            doctor_id=model.doctor_id,
            override_date=model.override_date,
            override_type=OverrideType(model.override_type),
            start_time=model.start_time,
            end_time=model.end_time,
            reason=model.reason,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
