"""
Workload Engine - Time Utilities
HH:MM handling and day arithmetic shared by the distributor, synchronizer
and load meter.
"""

import math
from datetime import datetime, date, time, timedelta, timezone
from typing import Iterator, Union

from .errors import InvalidTimeError

SECONDS_PER_DAY = 24 * 60 * 60


def time_to_minutes(t: time) -> int:
    """Convert time to minutes since midnight."""
    return t.hour * 60 + t.minute


def minutes_to_time(minutes: int) -> time:
    """Convert minutes since midnight to time."""
    minutes = minutes % (24 * 60)  # Handle overflow
    return time(minutes // 60, minutes % 60)


def parse_time(time_str: str) -> time:
    """Parse time string (HH:MM) to time object."""
    parts = time_str.split(":")
    if len(parts) != 2:
        raise InvalidTimeError(time_str)
    try:
        return time(int(parts[0]), int(parts[1]))
    except ValueError as e:
        raise InvalidTimeError(time_str, str(e)) from e


def format_time(t: time) -> str:
    """Format time to HH:MM string."""
    return t.strftime("%H:%M")


def to_naive(value: datetime) -> datetime:
    """Aware timestamps become naive UTC; naive ones are returned as-is."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def fractional_days_between(start: datetime, end: datetime) -> float:
    """Signed number of days from start to end, with fractions."""
    return (to_naive(end) - to_naive(start)).total_seconds() / SECONDS_PER_DAY


def whole_days_until(due: datetime, now: datetime) -> int:
    """Complete days left before the due timestamp (floor)."""
    return math.floor(fractional_days_between(now, due))


def calendar_days_until(due: datetime, now: datetime) -> int:
    """Days until due, rounding any partial day up (ceil)."""
    return math.ceil(fractional_days_between(now, due))


def as_date(value: Union[date, datetime]) -> date:
    """Normalise a date or datetime to a date."""
    if isinstance(value, datetime):
        return to_naive(value).date()
    return value


def tomorrow(now: datetime) -> date:
    return to_naive(now).date() + timedelta(days=1)


def date_range(start: Union[date, datetime], end: Union[date, datetime]) -> Iterator[date]:
    """Yield each date from start to end inclusive."""
    current = as_date(start)
    last = as_date(end)
    while current <= last:
        yield current
        current += timedelta(days=1)


def start_of_week(day: date) -> date:
    """Sunday on or before the given date."""
    # weekday(): Monday=0 .. Sunday=6
    return day - timedelta(days=(day.weekday() + 1) % 7)
