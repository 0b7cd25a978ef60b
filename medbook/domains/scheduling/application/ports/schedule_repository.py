"""
Schedule Repository Port

Persistence contract for weekly templates and date overrides.
"""

from datetime import date
from typing import Protocol, runtime_checkable
from uuid import UUID

from medbook.domains.scheduling.domain.entities import ScheduleOverride, WeeklyTemplate
from medbook.domains.scheduling.domain.value_objects import DayOfWeek


@runtime_checkable
class IScheduleRepository(Protocol):
    """
    Schedule repository interface.

    Example:
        ```python
        class SQLAlchemyScheduleRepository(IScheduleRepository):
            async def get_active_template(self, doctor_id, day_of_week):
                ...
        ```
    """

    async def list_templates(self, doctor_id: UUID, include_inactive: bool = False) -> list[WeeklyTemplate]:
        """List a doctor's templates ordered by day of week."""
        ...

    async def get_active_template(self, doctor_id: UUID, day_of_week: DayOfWeek) -> WeeklyTemplate | None:
        ...

    async def save_template(self, template: WeeklyTemplate) -> WeeklyTemplate:
        """
        Store a new active template for its (doctor, day_of_week).

        Any previously active template for the same day is deactivated in the
        same transaction.
        """
        ...

    async def deactivate_template(self, doctor_id: UUID, day_of_week: DayOfWeek) -> WeeklyTemplate | None:
        """Deactivate the active template of a day; None when there is none."""
        ...

    async def list_overrides(self, doctor_id: UUID, start_date: date, end_date: date) -> list[ScheduleOverride]:
        """List overrides with ``start_date <= override_date <= end_date`` ordered by date."""
        ...

    async def get_override(self, doctor_id: UUID, override_date: date) -> ScheduleOverride | None:
        ...

    async def save_override(self, override: ScheduleOverride) -> ScheduleOverride:
        """Insert or replace the override of (doctor, override_date)."""
        ...

    async def delete_override(self, doctor_id: UUID, override_date: date) -> bool:
        """Remove an override; True when one existed."""
        ...
