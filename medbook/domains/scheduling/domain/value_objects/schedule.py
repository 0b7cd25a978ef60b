"""
Schedule Value Objects

Enums describing doctors' availability configuration.
"""

from datetime import date

from medbook.core.domain import StatusEnum


class DayOfWeek(StatusEnum):
    """Day of week, ordered like ``date.weekday()`` (Monday == 0)."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def index(self) -> int:
        return _DAYS.index(self)

    @classmethod
    def from_date(cls, value: date) -> "DayOfWeek":
        return _DAYS[value.weekday()]


_DAYS: list[DayOfWeek] = list(DayOfWeek)


class OverrideType(StatusEnum):
    HOLIDAY = "holiday"
    LEAVE = "leave"
    SPECIAL_HOURS = "special_hours"

    def blocks_day(self) -> bool:
        """Holidays and leave remove every slot of the day."""
        return self in (OverrideType.HOLIDAY, OverrideType.LEAVE)


class ConsultationType(StatusEnum):
    IN_PERSON = "in_person"
    VIDEO = "video"
    CHAT = "chat"


class VerificationStatus(StatusEnum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
