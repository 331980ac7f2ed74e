"""
Overlap detection between candidates and stored entries.

Only entries whose start falls on the same calendar day are compared.
Touching endpoints ([10:00, 11:00) and [11:00, 12:00)) do not conflict.
"""

from typing import Iterable, List, NamedTuple, Optional

from timeledger.domain.errors import IntervalConflict
from timeledger.domain.models import TimeEntry


class Conflict(NamedTuple):
    candidate: TimeEntry
    existing: TimeEntry


def overlaps(a: TimeEntry, b: TimeEntry) -> bool:
    """Strict overlap of [start, end) windows"""
    return a.start_time < b.end_time and a.end_time > b.start_time


def find_conflict(candidates: Iterable[TimeEntry], existing: Iterable[TimeEntry],
                  exclude_id: Optional[str] = None) -> Optional[Conflict]:
    """
    Find the first stored entry that a candidate overlaps.

    Args:
        candidates: Normalized, not yet committed entries
        existing: Current store contents
        exclude_id: Entry to skip (the entry being updated)

    Returns:
        The first conflict found, or None
    """
    stored: List[TimeEntry] = [e for e in existing if e.id != exclude_id]
    for candidate in candidates:
        day = candidate.start_time.date()
        for entry in stored:
            if entry.start_time.date() == day and overlaps(candidate, entry):
                return Conflict(candidate, entry)
    return None


def ensure_no_conflict(candidates: Iterable[TimeEntry], existing: Iterable[TimeEntry],
                       exclude_id: Optional[str] = None) -> None:
    """
    Raises:
        IntervalConflict: If any candidate overlaps a stored entry
    """
    conflict = find_conflict(candidates, existing, exclude_id)
    if conflict is not None:
        raise IntervalConflict(conflict.candidate, conflict.existing)
