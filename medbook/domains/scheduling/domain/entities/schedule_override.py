"""
Schedule Override Entity

A single-date exception to a doctor's weekly template.
"""

from dataclasses import dataclass
from datetime import date, time
from uuid import UUID

from medbook.core.domain import Entity, ValidationException

from ..value_objects.schedule import OverrideType


@dataclass
class ScheduleOverride(Entity[UUID]):
    """
    Holiday, leave or special hours for (doctor, date).

    Holidays and leave remove the day's slots. Special hours replace the
    template's working hours for that date.
    """

    doctor_id: UUID | None = None
    override_date: date | None = None
    override_type: OverrideType = OverrideType.HOLIDAY
    start_time: time | None = None
    end_time: time | None = None
    reason: str | None = None

    @property
    def has_hours(self) -> bool:
        return self.start_time is not None and self.end_time is not None

    def validate(self) -> None:
        if self.override_date is None:
            raise ValidationException("override_date is required", field="override_date")
        if self.override_type == OverrideType.SPECIAL_HOURS:
            if not self.has_hours:
                raise ValidationException(
                    "special_hours overrides require start_time and end_time", field="start_time"
                )
            if self.start_time >= self.end_time:
                raise ValidationException("start_time must be before end_time", field="start_time")
