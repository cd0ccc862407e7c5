"""
Injectable wall clock.

Every "today" and "now" in the booking core is read through a Clock so tests
can pin time without patching datetime.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from tablebook.core.config import get_settings


class Clock(ABC):
    """Source of the current local date and time."""

    @property
    @abstractmethod
    def tz(self) -> ZoneInfo:
        ...

    @abstractmethod
    def now(self) -> datetime:
        """Timezone-aware current time in the local zone."""
        ...


class SystemClock(Clock):
    def __init__(self, tz_name: str):
        self._tz = ZoneInfo(tz_name)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class FixedClock(Clock):
    """Clock frozen at a given instant. Naive datetimes are taken as local."""

    def __init__(self, moment: datetime, tz_name: str = "Asia/Seoul"):
        self._tz = ZoneInfo(tz_name)
        self._moment = self._localize(moment)

    def _localize(self, moment: datetime) -> datetime:
        if moment.tzinfo is None:
            return moment.replace(tzinfo=self._tz)
        return moment.astimezone(self._tz)

    @property
    def tz(self) -> ZoneInfo:
        return self._tz

    def now(self) -> datetime:
        return self._moment

    def set(self, moment: datetime) -> None:
        self._moment = self._localize(moment)

    def advance(self, **kwargs) -> None:
        self._moment = self._moment + timedelta(**kwargs)


_clock: Clock = None


def get_clock() -> Clock:
    """Process-wide system clock in the configured TIMEZONE."""
    global _clock
    if _clock is None:
        _clock = SystemClock(get_settings().TIMEZONE)
    return _clock
