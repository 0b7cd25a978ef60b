"""
Clock

Source of "now" in the operating timezone. Injected so that slot filtering
and refund tiers can be evaluated against a controlled instant.
"""

from datetime import datetime, tzinfo
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    @property
    def timezone(self) -> tzinfo: ...

    def now(self) -> datetime: ...


class SystemClock:
    def __init__(self, tz: tzinfo):
        self._tz = tz

    @property
    def timezone(self) -> tzinfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)
