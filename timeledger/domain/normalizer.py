"""
Interval normalization.

Turns a raw candidate into one or two day-bounded entries:
an end time earlier than the start means "the next day at that time", and an
interval that crosses midnight is split at the day boundary.
"""

import datetime
from typing import List

from timeledger.domain.errors import UnsupportedSpan, ValidationError
from timeledger.domain.models import EntryDraft, TimeEntry, new_id
from timeledger.domain.timeutil import ONE_DAY, end_of_day, start_of_day, round_minutes


def correct_wraparound(start: datetime.datetime, end: datetime.datetime) -> datetime.datetime:
    """Return end, moved forward by exactly one day if it lies before start"""
    if end < start:
        return end + ONE_DAY
    return end


def check_span(start: datetime.datetime, end: datetime.datetime) -> int:
    """
    Number of midnights a corrected interval crosses (0 or 1).

    Raises:
        ValidationError: If end is not after start
        UnsupportedSpan: If the interval crosses more than one midnight
    """
    if end <= start:
        raise ValidationError("An entry must end after it starts")

    days_crossed = (end.date() - start.date()).days
    if days_crossed > 1:
        raise UnsupportedSpan(
            f"{start:%Y-%m-%d %H:%M} to {end:%Y-%m-%d %H:%M} crosses {days_crossed} midnights; "
            f"split it into separate entries"
        )
    return days_crossed


def _make_entry(draft: EntryDraft, start: datetime.datetime, end: datetime.datetime) -> TimeEntry:
    try:
        return TimeEntry(
            id=new_id(),
            title=draft.title.strip(),
            category=draft.category,
            start_time=start,
            end_time=end,
            duration=round_minutes(end - start),
            tags=list(draft.tags),
            note=draft.note,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def normalize(draft: EntryDraft) -> List[TimeEntry]:
    """
    Normalize a candidate into day-bounded entries.

    Args:
        draft: The candidate interval and its payload

    Returns:
        One entry, or two siblings when the interval crosses midnight.
        Nothing is checked for conflicts or committed yet.

    Raises:
        ValidationError: If the corrected interval does not end after it starts,
            or the payload does not validate
        UnsupportedSpan: If the interval crosses more than one midnight
    """
    start = draft.start_time
    end = correct_wraparound(start, draft.end_time)

    if check_span(start, end) == 0:
        return [_make_entry(draft, start, end)]

    pieces = [(start, end_of_day(start)), (start_of_day(end), end)]
    # An interval ending exactly at midnight leaves an empty second piece
    return [_make_entry(draft, s, e) for s, e in pieces if e > s]
