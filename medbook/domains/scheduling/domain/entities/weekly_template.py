"""
Weekly Template Entity

A doctor's recurring availability for one day of the week.
"""

from dataclasses import dataclass
from datetime import time
from uuid import UUID

from medbook.core.domain import SoftDeletableEntity, ValidationException

from ..value_objects.schedule import DayOfWeek


@dataclass
class WeeklyTemplate(SoftDeletableEntity[UUID]):
    """
    Recurring working hours for (doctor, day_of_week).

    At most one active template exists per doctor and day. Templates are
    deactivated, never deleted, so historical schedules stay auditable.

    Example:
        ```python
        template = WeeklyTemplate(
            doctor_id=doctor_id,
            day_of_week=DayOfWeek.MONDAY,
            start_time=time(9, 0),
            end_time=time(12, 0),
            slot_duration_minutes=30,
        )
        template.validate()
        ```
    """

    doctor_id: UUID | None = None
    day_of_week: DayOfWeek = DayOfWeek.MONDAY
    start_time: time = time(9, 0)
    end_time: time = time(17, 0)
    break_start: time | None = None
    break_end: time | None = None
    slot_duration_minutes: int = 15
    max_patients_per_slot: int = 1

    @property
    def has_break(self) -> bool:
        return self.break_start is not None and self.break_end is not None

    def validate(self) -> None:
        """
        Check the template is internally consistent.

        Raises:
            ValidationException: On inverted hours, non-positive duration,
                capacity below one, or a break outside working hours.
        """
        if self.start_time >= self.end_time:
            raise ValidationException("start_time must be before end_time", field="start_time")
        if self.slot_duration_minutes <= 0:
            raise ValidationException("slot_duration_minutes must be positive", field="slot_duration_minutes")
        if self.max_patients_per_slot < 1:
            raise ValidationException("max_patients_per_slot must be at least 1", field="max_patients_per_slot")

        if (self.break_start is None) != (self.break_end is None):
            raise ValidationException("break_start and break_end must be given together", field="break_start")
        if self.break_start is not None and self.break_end is not None:
            if self.break_start >= self.break_end:
                raise ValidationException("break_start must be before break_end", field="break_start")
            if self.break_start < self.start_time or self.break_end > self.end_time:
                raise ValidationException("break must fall within working hours", field="break_start")

    def deactivate(self) -> None:
        self.soft_delete()
