"""
Slot Generator

Pure domain service turning a doctor's weekly template and date overrides into
discrete bookable slots.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from medbook.core.domain import ConfigurationError

from ..entities.doctor import Doctor
from ..entities.schedule_override import ScheduleOverride
from ..entities.weekly_template import WeeklyTemplate
from ..value_objects.schedule import DayOfWeek, OverrideType
from ..value_objects.slot import Slot


def _to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


@dataclass(frozen=True)
class _DayWindow:
    start: int
    end: int
    duration: int
    capacity: int
    break_start: int | None = None
    break_end: int | None = None

    def overlaps_break(self, slot_start: int) -> bool:
        if self.break_start is None or self.break_end is None:
            return False
        # Zero-length or inverted breaks mean "no break"
        if self.break_start >= self.break_end:
            return False
        return slot_start < self.break_end and slot_start + self.duration > self.break_start


class SlotGenerator:
    """
    Generates slots for one date, or a range of dates, from schedule data.

    The output depends only on its inputs; ``now`` is passed in so the result
    is reproducible. Slots starting at or before ``now`` are dropped.

    Example:
        ```python
        generator = SlotGenerator(max_iterations=1440)
        slots = generator.generate(
            slot_date=date(2025, 3, 10),
            template=monday_template,
            override=None,
            doctor=doctor,
            now=clock.now(),
        )
        ```
    """

    def __init__(
        self,
        max_iterations: int = 1440,
        default_duration_minutes: int = 15,
        default_max_patients: int = 1,
    ):
        """
        Initialize slot generator.

        Args:
            max_iterations: Upper bound of slots emitted for one day
            default_duration_minutes: Duration when neither template nor doctor sets one
            default_max_patients: Capacity when neither template nor doctor sets one
        """
        self.max_iterations = max_iterations
        self.default_duration_minutes = default_duration_minutes
        self.default_max_patients = default_max_patients

    def generate(
        self,
        slot_date: date,
        template: WeeklyTemplate | None,
        override: ScheduleOverride | None,
        doctor: Doctor,
        now: datetime,
    ) -> tuple[Slot, ...]:
        """
        Generate the ordered slots of one date.

        Raises:
            ConfigurationError: If the schedule would not terminate within
                ``max_iterations`` (e.g. a non-positive slot duration).
        """
        window = self._resolve_window(template, override, doctor)
        if window is None:
            return ()
        if window.duration <= 0 or window.capacity < 1:
            raise ConfigurationError(
                "Slot duration must be positive and capacity at least 1",
                details={
                    "doctor_id": str(doctor.id),
                    "date": slot_date.isoformat(),
                    "slot_duration_minutes": window.duration,
                    "max_patients_per_slot": window.capacity,
                },
            )

        consultation_types = tuple(doctor.consultation_types)
        slots: list[Slot] = []
        current = window.start
        iterations = 0

        while current + window.duration <= window.end:
            iterations += 1
            if iterations > self.max_iterations:
                raise ConfigurationError(
                    f"Slot generation for {slot_date.isoformat()} exceeded {self.max_iterations} iterations",
                    details={
                        "doctor_id": str(doctor.id),
                        "date": slot_date.isoformat(),
                        "slot_duration_minutes": window.duration,
                    },
                )

            if not window.overlaps_break(current):
                start = _to_time(current)
                if datetime.combine(slot_date, start, tzinfo=now.tzinfo) > now:
                    slots.append(
                        Slot(
                            slot_date=slot_date,
                            start_time=start,
                            end_time=_to_time(current + window.duration),
                            consultation_types=consultation_types,
                            max_capacity=window.capacity,
                        )
                    )
            current += window.duration

        return tuple(slots)

    def generate_range(
        self,
        start_date: date,
        days: int,
        templates: dict[DayOfWeek, WeeklyTemplate],
        overrides: dict[date, ScheduleOverride],
        doctor: Doctor,
        now: datetime,
    ) -> dict[date, tuple[Slot, ...]]:
        """Generate per-day slots for ``days`` consecutive dates, keyed by date in order."""
        result: dict[date, tuple[Slot, ...]] = {}
        for offset in range(days):
            current_date = start_date + timedelta(days=offset)
            result[current_date] = self.generate(
                slot_date=current_date,
                template=templates.get(DayOfWeek.from_date(current_date)),
                override=overrides.get(current_date),
                doctor=doctor,
                now=now,
            )
        return result

    def _resolve_window(
        self,
        template: WeeklyTemplate | None,
        override: ScheduleOverride | None,
        doctor: Doctor,
    ) -> _DayWindow | None:
        if template is not None and not template.is_active:
            template = None

        if override is not None:
            if override.override_type.blocks_day():
                return None
            if override.override_type == OverrideType.SPECIAL_HOURS and override.has_hours:
                # Special hours never carry the template's break
                return _DayWindow(
                    start=_to_minutes(override.start_time),
                    end=_to_minutes(override.end_time),
                    duration=self._duration(template, doctor),
                    capacity=self._capacity(template, doctor),
                )

        if template is None:
            return None

        return _DayWindow(
            start=_to_minutes(template.start_time),
            end=_to_minutes(template.end_time),
            duration=template.slot_duration_minutes,
            capacity=template.max_patients_per_slot,
            break_start=_to_minutes(template.break_start) if template.break_start is not None else None,
            break_end=_to_minutes(template.break_end) if template.break_end is not None else None,
        )

    def _duration(self, template: WeeklyTemplate | None, doctor: Doctor) -> int:
        if template is not None:
            return template.slot_duration_minutes
        return doctor.slot_duration_minutes or self.default_duration_minutes

    def _capacity(self, template: WeeklyTemplate | None, doctor: Doctor) -> int:
        if template is not None:
            return template.max_patients_per_slot
        return doctor.max_patients_per_slot or self.default_max_patients
