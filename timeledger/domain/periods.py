"""
Reporting period resolution.

Note on weeks: a week starts on the day whose index is 0 (Sunday unless
configured otherwise), while the label carries the ISO-8601 week number,
which is Monday-based. For a Sunday reference the range therefore starts on
that Sunday but the label shows the ISO week the Sunday closes. Both
conventions are kept as they are; the label is informational only.
"""

import calendar
import datetime
from typing import List, Optional, Union

from timeledger.domain.errors import ValidationError
from timeledger.domain.models import Granularity, ReportingPeriod
from timeledger.domain.timeutil import ONE_DAY, day_index, end_of_day, start_of_day
from timeledger.i18n import tr

DateLike = Union[datetime.date, datetime.datetime]

# How many choices the period picker offers per granularity
RECENT_COUNTS = {
    Granularity.WEEK: 12,
    Granularity.MONTH: 12,
    Granularity.YEAR: 3,
}


def _as_date(value: DateLike) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def iso_week_number(value: DateLike) -> int:
    return _as_date(value).isocalendar()[1]


def week_period(reference: DateLike, week_start: int = 6) -> ReportingPeriod:
    day = _as_date(reference)
    first = day - datetime.timedelta(days=day_index(day, week_start))
    return ReportingPeriod(
        granularity=Granularity.WEEK,
        start=start_of_day(first),
        end=end_of_day(first + 6 * ONE_DAY),
        label=tr("period.week", year=day.year, week=iso_week_number(day)),
    )


def month_period(reference: DateLike) -> ReportingPeriod:
    day = _as_date(reference)
    _, last_day = calendar.monthrange(day.year, day.month)
    return ReportingPeriod(
        granularity=Granularity.MONTH,
        start=start_of_day(day.replace(day=1)),
        end=end_of_day(day.replace(day=last_day)),
        label=tr("period.month", year=day.year, month=day.month),
    )


def year_period(reference: DateLike) -> ReportingPeriod:
    day = _as_date(reference)
    return ReportingPeriod(
        granularity=Granularity.YEAR,
        start=start_of_day(datetime.date(day.year, 1, 1)),
        end=end_of_day(datetime.date(day.year, 12, 31)),
        label=tr("period.year", year=day.year),
    )


def custom_period(first: DateLike, last: DateLike) -> ReportingPeriod:
    """
    Period between two calendar dates, both inclusive.

    Raises:
        ValidationError: If last is before first
    """
    first_day, last_day = _as_date(first), _as_date(last)
    if last_day < first_day:
        raise ValidationError(f"Range end {last_day} is before its start {first_day}")
    return ReportingPeriod(
        granularity=Granularity.CUSTOM,
        start=start_of_day(first_day),
        end=end_of_day(last_day),
        label=tr("period.custom", start=first_day.isoformat(), end=last_day.isoformat()),
    )


def resolve(reference: DateLike, granularity: Union[Granularity, str],
            custom_start: Optional[DateLike] = None,
            custom_end: Optional[DateLike] = None,
            week_start: int = 6) -> ReportingPeriod:
    """
    Resolve a granularity selector into a concrete period.

    Args:
        reference: Any instant inside the wanted week/month/year
        granularity: week, month, year or custom
        custom_start: First day of a custom range
        custom_end: Last day of a custom range
        week_start: Python weekday number of the first day of a week

    Returns:
        The resolved period; start at 00:00:00.000, end at 23:59:59.999

    Raises:
        ValidationError: Unknown granularity or incomplete/reversed custom range
    """
    try:
        granularity = Granularity(granularity)
    except ValueError as e:
        raise ValidationError(f"Unknown granularity: {granularity!r}") from e

    if granularity == Granularity.WEEK:
        return week_period(reference, week_start)
    if granularity == Granularity.MONTH:
        return month_period(reference)
    if granularity == Granularity.YEAR:
        return year_period(reference)

    if custom_start is None or custom_end is None:
        raise ValidationError("A custom period needs both a start and an end date")
    return custom_period(custom_start, custom_end)


def _months_back(day: datetime.date, months: int) -> datetime.date:
    index = day.year * 12 + (day.month - 1) - months
    return datetime.date(index // 12, index % 12 + 1, 1)


def recent_periods(now: DateLike, granularity: Union[Granularity, str],
                   count: Optional[int] = None, week_start: int = 6) -> List[ReportingPeriod]:
    """
    The most recent periods of a granularity, newest first.

    Used to offer a list of weeks/months/years to pick from.
    """
    granularity = Granularity(granularity)
    if granularity == Granularity.CUSTOM:
        return []
    count = RECENT_COUNTS[granularity] if count is None else count
    today = _as_date(now)

    periods = []
    for i in range(count):
        if granularity == Granularity.WEEK:
            periods.append(week_period(today - datetime.timedelta(weeks=i), week_start))
        elif granularity == Granularity.MONTH:
            periods.append(month_period(_months_back(today, i)))
        else:
            periods.append(year_period(datetime.date(today.year - i, 1, 1)))
    return periods
