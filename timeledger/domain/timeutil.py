"""
Calendar helpers shared by the ledger components.

All instants are naive local wall-clock datetimes with millisecond precision.
The last instant of a day is 23:59:59.999, never 23:59:59.999999.
"""

import datetime
import math
from typing import Iterator, Union

ONE_DAY = datetime.timedelta(days=1)
ONE_MINUTE = datetime.timedelta(minutes=1)
LAST_INSTANT = datetime.time(23, 59, 59, 999000)

DateLike = Union[datetime.date, datetime.datetime]


def _as_date(value: DateLike) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def start_of_day(value: DateLike) -> datetime.datetime:
    """00:00:00.000 of the given calendar day"""
    return datetime.datetime.combine(_as_date(value), datetime.time.min)


def end_of_day(value: DateLike) -> datetime.datetime:
    """23:59:59.999 of the given calendar day"""
    return datetime.datetime.combine(_as_date(value), LAST_INSTANT)


def truncate_ms(value: datetime.datetime) -> datetime.datetime:
    """Drop sub-millisecond precision"""
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


def round_minutes(delta: datetime.timedelta) -> int:
    """
    Round a time span to whole minutes, halves rounding up.

    Python's round() uses banker's rounding, which would turn 90.5 into 90;
    durations have always been rounded half-up.
    """
    return int(math.floor(delta / ONE_MINUTE + 0.5))


def minutes_between(start: datetime.datetime, end: datetime.datetime) -> float:
    """Exact (fractional) minutes from start to end"""
    return (end - start) / ONE_MINUTE


def day_index(value: DateLike, week_start: int = 6) -> int:
    """
    0-based position of a day within its week.

    Args:
        value: The day
        week_start: Python weekday number (Monday=0) that gets index 0.
            The default, 6, makes Sunday index 0.
    """
    return (_as_date(value).weekday() - week_start) % 7


def iter_days(first: DateLike, last: DateLike) -> Iterator[datetime.date]:
    """Yield every calendar day from first to last, inclusive"""
    current = _as_date(first)
    stop = _as_date(last)
    while current <= stop:
        yield current
        current += ONE_DAY


def parse_time_of_day(value: str) -> datetime.time:
    """
    Parse an 'HH:MM' string.

    Raises:
        ValueError: If the string is not a well-formed time of day
    """
    parts = value.strip().split(':')
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time of day: {value!r}")
    hour, minute = int(parts[0]), int(parts[1])
    return datetime.time(hour, minute)
