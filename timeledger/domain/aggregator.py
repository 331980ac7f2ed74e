"""
Period aggregation: how much of the elapsed time is accounted for.
"""

import datetime
import math
from typing import Dict, Iterable, List

from timeledger.domain.models import Category, PeriodSummary, ReportingPeriod, TimeEntry, UNRECONCILED
from timeledger.domain.timeutil import minutes_between


def entries_in_period(entries: Iterable[TimeEntry], period: ReportingPeriod) -> List[TimeEntry]:
    """Entries whose start lies in [period.start, period.end], in start order"""
    selected = [e for e in entries if period.start <= e.start_time <= period.end]
    selected.sort(key=lambda e: e.start_time)
    return selected


def possible_minutes(period: ReportingPeriod, now: datetime.datetime) -> float:
    """Minutes of the period that have elapsed by now (0 for a future period)"""
    effective_end = min(period.end, now)
    return max(0.0, minutes_between(period.start, effective_end))


def summarize(entries: Iterable[TimeEntry], period: ReportingPeriod,
              now: datetime.datetime) -> PeriodSummary:
    """
    Aggregate the entries of a period.

    Args:
        entries: Any entries; those starting outside the period are ignored
        period: The resolved reporting period
        now: Current instant; time after it is not "possible" yet

    Returns:
        Logged, possible and unreconciled minutes, per-category totals with a
        synthetic unreconciled bucket, and the coverage percentage
    """
    selected = entries_in_period(entries, period)

    logged = sum(e.duration for e in selected)
    total_possible = possible_minutes(period, now)
    unreconciled = max(0.0, total_possible - logged)

    totals: Dict[str, float] = {c.value: 0 for c in Category}
    for entry in selected:
        totals[entry.category.value] += entry.duration
    totals[UNRECONCILED] = unreconciled

    if total_possible > 0:
        coverage = min(100, int(math.floor(logged / total_possible * 100 + 0.5)))
    else:
        coverage = 100

    return PeriodSummary(
        period=period,
        entry_count=len(selected),
        logged_minutes=logged,
        total_possible_minutes=total_possible,
        unreconciled_minutes=unreconciled,
        category_totals=totals,
        coverage_percent=coverage,
    )
