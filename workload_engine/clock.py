"""
Workload Engine - Clock
"Now" is the only implicit input of the engine, so it is injected.
"""

from datetime import datetime, timedelta
from typing import Protocol, Union

from .timeutils import to_naive


class Clock(Protocol):
    """Protocol for sources of the current time."""

    def now(self) -> datetime:
        """Return the current timestamp."""
        ...


class SystemClock:
    """Wall-clock time."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """A clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, **delta) -> "FixedClock":
        self._instant = self._instant + timedelta(**delta)
        return self


# Default clock instance
system_clock = SystemClock()


def resolve_now(now: Union[datetime, Clock, None] = None) -> datetime:
    """Accept a timestamp, a clock, or nothing (system time). Aware results are made naive UTC."""
    if now is None:
        return system_clock.now()
    if isinstance(now, datetime):
        return to_naive(now)
    return to_naive(now.now())
