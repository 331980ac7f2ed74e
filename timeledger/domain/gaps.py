"""
Gap finding: the uncovered stretches of each day a user still has to fill in.

A gap never crosses midnight. Gaps shorter than (or equal to) the threshold
are not reported.
"""

import datetime
from typing import Iterable, List, Optional, Sequence, Union

from timeledger.domain.models import Category, EntryDraft, Gap, ReportingPeriod, TimeEntry, TimePreset
from timeledger.domain.timeutil import end_of_day, iter_days, round_minutes, start_of_day

DEFAULT_THRESHOLD_MINUTES = 15


def _threshold(minutes: float) -> datetime.timedelta:
    return datetime.timedelta(minutes=minutes)


def _entries_starting_between(entries: Iterable[TimeEntry], start: datetime.datetime,
                              end: datetime.datetime) -> List[TimeEntry]:
    selected = [e for e in entries if start <= e.start_time <= end]
    selected.sort(key=lambda e: e.start_time)
    return selected


def gaps_for_day(entries: Iterable[TimeEntry], day: datetime.date, now: datetime.datetime,
                 threshold_minutes: float = DEFAULT_THRESHOLD_MINUTES) -> List[Gap]:
    """
    Gaps of one calendar day in chronological order.

    The day is cut off at now, so today's trailing gap ends at the current instant.
    """
    threshold = _threshold(threshold_minutes)
    day_start = start_of_day(day)
    day_end = min(end_of_day(day), now)
    if day_end < day_start:
        return []

    gaps: List[Gap] = []
    cursor = day_start
    for entry in _entries_starting_between(entries, day_start, day_end):
        if entry.start_time - cursor > threshold:
            gaps.append(Gap(start=cursor, end=entry.start_time))
        cursor = max(cursor, entry.end_time)

    if day_end - cursor > threshold:
        gaps.append(Gap(start=cursor, end=day_end))
    return gaps


def find_gaps(entries: Iterable[TimeEntry], period: ReportingPeriod, now: datetime.datetime,
              threshold_minutes: float = DEFAULT_THRESHOLD_MINUTES) -> List[Gap]:
    """
    Every gap of the elapsed part of a period.

    Args:
        entries: Entries to check; only those starting inside the period count
        period: The resolved reporting period
        now: Current instant; days after it are skipped, today ends at it
        threshold_minutes: Gaps must be strictly longer than this

    Returns:
        Gaps ordered most recent first
    """
    in_period = _entries_starting_between(entries, period.start, period.end)
    last = min(period.end, now)
    if last < period.start:
        return []

    gaps: List[Gap] = []
    for day in iter_days(period.start, last):
        gaps.extend(gaps_for_day(in_period, day, now, threshold_minutes))
    gaps.reverse()
    return gaps


def live_gap(entries: Iterable[TimeEntry], now: datetime.datetime, task_running: bool,
             threshold_minutes: float = DEFAULT_THRESHOLD_MINUTES) -> Optional[Gap]:
    """
    The still-growing gap between today's last entry (or midnight) and now.

    Returns:
        The gap, or None while a task is running or when it is not longer
        than the threshold
    """
    if task_running:
        return None

    day_start = start_of_day(now)
    today = _entries_starting_between(entries, day_start, now)
    cursor = max([day_start] + [e.end_time for e in today])
    if now - cursor > _threshold(threshold_minutes):
        return Gap(start=cursor, end=now, is_live=True)
    return None


def day_timeline(entries: Iterable[TimeEntry], day: datetime.date, now: datetime.datetime,
                 task_running: bool = False,
                 gap_minutes: int = 5) -> List[Union[TimeEntry, Gap]]:
    """
    A day's entries in order, with the gaps between them interleaved.

    Gaps between two entries are shown from gap_minutes on (rounded minutes).
    For today, the live gap up to now is appended while no task is running.
    """
    day_entries = _entries_starting_between(entries, start_of_day(day), end_of_day(day))
    items: List[Union[TimeEntry, Gap]] = []

    for previous, entry in zip([None] + day_entries, day_entries):
        if previous is not None and round_minutes(entry.start_time - previous.end_time) >= gap_minutes:
            items.append(Gap(start=previous.end_time, end=entry.start_time))
        items.append(entry)

    if day == now.date() and not task_running:
        last = day_entries[-1].end_time if day_entries else start_of_day(day)
        if round_minutes(now - last) >= gap_minutes:
            items.append(Gap(start=last, end=now, is_live=True))
    return items


def suggest_preset(gap_start: datetime.datetime, presets: Sequence[TimePreset]) -> Optional[TimePreset]:
    """First preset whose start hour is within one hour of the gap's start hour"""
    for preset in presets:
        if abs(preset.start_hour - gap_start.hour) <= 1:
            return preset
    return None


def draft_for_gap(gap: Gap, preset: Optional[TimePreset] = None,
                  default_category: Category = Category.INVESTMENT) -> EntryDraft:
    """
    Candidate covering a gap, pre-filled from a preset when one is given.

    The title stays empty without a preset; the user has to supply it.
    """
    return EntryDraft(
        title=preset.title if preset else "",
        category=preset.category if preset else default_category,
        start_time=gap.start,
        end_time=gap.end,
        tags=list(preset.tags) if preset else [],
        note="",
    )
