"""
Slot Value Object

A bookable interval derived from a doctor's schedule. Slots are never stored;
they are recomputed from templates, overrides and booking counts.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, time, tzinfo
from uuid import UUID

from medbook.core.domain import ValueObject

from .schedule import ConsultationType

SlotKey = tuple[UUID, date, time]


@dataclass(frozen=True)
class Slot(ValueObject):
    slot_date: date
    start_time: time
    end_time: time
    consultation_types: tuple[ConsultationType, ...]
    max_capacity: int
    booked_count: int = 0

    def _validate(self) -> None:
        if self.end_time <= self.start_time:
            raise ValueError("Slot end_time must be after start_time")
        if self.max_capacity < 1:
            raise ValueError("Slot capacity must be at least 1")
        if self.booked_count < 0:
            raise ValueError("Slot booked_count cannot be negative")

    @property
    def remaining_capacity(self) -> int:
        # Capacity may be lowered after bookings exist
        return max(0, self.max_capacity - self.booked_count)

    @property
    def is_available(self) -> bool:
        return self.remaining_capacity > 0

    @property
    def duration_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return end - start

    def supports(self, consultation_type: ConsultationType) -> bool:
        return consultation_type in self.consultation_types

    def starts_at(self, tz: tzinfo) -> datetime:
        return datetime.combine(self.slot_date, self.start_time, tzinfo=tz)

    def with_booked_count(self, booked_count: int) -> "Slot":
        return replace(self, booked_count=booked_count)

    def key(self, doctor_id: UUID) -> SlotKey:
        return (doctor_id, self.slot_date, self.start_time)
