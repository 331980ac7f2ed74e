"""
EntryStore - the canonical, time-sorted collection of entries.

Architecture Decision: Explicit state object
The store owns every piece of ledger state (entries, presets, the running
task, the selected day, the opaque user profile) and is passed around
explicitly. Each mutation either commits completely or raises and leaves the
state exactly as it was. Persistence happens outside, through snapshot() and
from_document().

Invariants kept across all operations:
- entries are sorted ascending by start_time
- every entry's duration matches its interval (minimum 1 after an update)
- no two entries starting on the same day strictly overlap
"""

import datetime
from typing import Any, Dict, List, Optional

from timeledger.domain.conflicts import ensure_no_conflict
from timeledger.domain.errors import NoActiveTask, NotFound, TaskAlreadyRunning, ValidationError
from timeledger.domain.models import (
    ActiveTask, Category, EntryDraft, LedgerDocument, TimeEntry, TimePreset, clean_tags, new_id,
)
from timeledger.domain.normalizer import check_span, correct_wraparound, normalize
from timeledger.domain.timeutil import end_of_day, round_minutes, start_of_day, truncate_ms

ENTRY_FIELDS = {"title", "category", "start_time", "end_time", "tags", "note"}
PRESET_FIELDS = {"title", "category", "start_time_str", "end_time_str", "tags"}


def _require_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if not title:
        raise ValidationError("A title is required")
    return title


def _require_category(category) -> Category:
    try:
        return Category(category)
    except ValueError as e:
        raise ValidationError(f"Unknown category: {category!r}") from e


class EntryStore:
    """
    Owns the ledger state and every transition on it.
    """

    def __init__(self, entries: Optional[List[TimeEntry]] = None,
                 presets: Optional[List[TimePreset]] = None,
                 active_task: Optional[ActiveTask] = None,
                 selected_date: Optional[datetime.datetime] = None,
                 user: Optional[Dict[str, Any]] = None):
        document = LedgerDocument()
        self._entries: List[TimeEntry] = []
        for entry in entries or []:
            entry = entry.model_copy(deep=True)
            # A stored minimum of 1 minute survives for sub-minute entries
            entry.duration = max(entry.expected_duration(), min(entry.duration, 1))
            self._entries.append(entry)
        self._sort()
        self.presets: List[TimePreset] = list(presets) if presets is not None else document.presets
        self.active_task: Optional[ActiveTask] = active_task
        self.selected_date: datetime.datetime = start_of_day(selected_date or document.selected_date)
        self.user: Dict[str, Any] = dict(user or {})

    # ------------------------------------------------------------------
    # Serialization boundary
    # ------------------------------------------------------------------
    @classmethod
    def from_document(cls, document: LedgerDocument) -> 'EntryStore':
        """Build a store from a persisted document"""
        return cls(
            entries=document.entries,
            presets=document.presets,
            active_task=document.active_task,
            selected_date=document.selected_date,
            user=document.user,
        )

    def snapshot(self) -> LedgerDocument:
        """Point-in-time deep copy of the whole state"""
        return LedgerDocument(
            entries=[e.model_copy(deep=True) for e in self._entries],
            presets=[p.model_copy(deep=True) for p in self.presets],
            active_task=self.active_task.model_copy() if self.active_task else None,
            selected_date=self.selected_date,
            user=dict(self.user),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def entries(self) -> List[TimeEntry]:
        """Entries in ascending start order (a new list; do not mutate the entries)"""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> TimeEntry:
        """
        Raises:
            NotFound: If no entry has this id
        """
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise NotFound(entry_id)

    def entries_between(self, start: datetime.datetime, end: datetime.datetime) -> List[TimeEntry]:
        """Entries whose start lies in [start, end]"""
        return [e for e in self._entries if start <= e.start_time <= end]

    def entries_on(self, day: datetime.date) -> List[TimeEntry]:
        """Entries starting on the given calendar day"""
        return self.entries_between(start_of_day(day), end_of_day(day))

    # ------------------------------------------------------------------
    # Entry mutations
    # ------------------------------------------------------------------
    def add(self, draft: EntryDraft) -> List[TimeEntry]:
        """
        Normalize, conflict-check and insert a candidate.

        Args:
            draft: The candidate interval

        Returns:
            The committed entries (two when the candidate crossed midnight)

        Raises:
            ValidationError: Empty or overlong title, or an interval that does
                not end after it starts
            UnsupportedSpan: Interval crosses more than one midnight
            IntervalConflict: A piece overlaps an entry on the same day
        """
        title = _require_title(draft.title)
        draft = draft.model_copy(update={
            "title": title,
            "start_time": truncate_ms(draft.start_time),
            "end_time": truncate_ms(draft.end_time),
        })
        pieces = normalize(draft)
        ensure_no_conflict(pieces, self._entries)

        self._entries.extend(pieces)
        self._sort()
        return pieces

    def update(self, entry_id: str, **fields) -> TimeEntry:
        """
        Merge new field values into an existing entry.

        The wraparound correction is applied to the merged interval, but an
        updated interval that crosses midnight is NOT split into two entries
        the way add() does. The entry keeps its single identity and simply
        ends on the following day. Spans over more than one midnight are
        rejected as in add().

        Raises:
            NotFound: Unknown id
            ValidationError: Unknown field, empty title, an interval that does not
                end after it starts, or a payload that does not validate
            UnsupportedSpan: The new interval crosses more than one midnight
            IntervalConflict: The new interval overlaps another entry of its start day
        """
        unknown = set(fields) - ENTRY_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

        target = self.get(entry_id)
        merged = target.model_dump()
        merged.update({k: v for k, v in fields.items() if v is not None})
        if "note" in fields:
            merged["note"] = fields["note"]

        merged["title"] = _require_title(merged["title"])
        merged["category"] = _require_category(merged["category"])
        merged["tags"] = clean_tags(merged["tags"])
        start = truncate_ms(merged["start_time"])
        end = correct_wraparound(start, truncate_ms(merged["end_time"]))
        check_span(start, end)
        merged["start_time"] = start
        merged["end_time"] = end
        merged["duration"] = max(1, round_minutes(end - start))

        try:
            updated = TimeEntry(**merged)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        ensure_no_conflict([updated], self._entries, exclude_id=entry_id)

        index = self._entries.index(target)
        self._entries[index] = updated
        self._sort()
        return updated

    def delete(self, entry_id: str) -> bool:
        """
        Remove an entry. Unknown ids are ignored.

        Returns:
            True if an entry was removed
        """
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id != entry_id]
        return len(self._entries) < before

    def clear_all(self) -> None:
        """Drop every entry and the running task; presets and profile stay"""
        self._entries = []
        self.active_task = None

    # ------------------------------------------------------------------
    # Running task
    # ------------------------------------------------------------------
    def start_task(self, title: str, category: Category, now: datetime.datetime) -> ActiveTask:
        """
        Raises:
            TaskAlreadyRunning: If a task is already running
            ValidationError: Empty title
        """
        if self.active_task is not None:
            raise TaskAlreadyRunning(self.active_task.title)
        self.active_task = ActiveTask(
            title=_require_title(title),
            category=_require_category(category),
            start_time=truncate_ms(now),
        )
        return self.active_task

    def stop_task(self, now: datetime.datetime) -> List[TimeEntry]:
        """
        Turn the running task into ledger entries ending at now.

        If the entry cannot be added, the error propagates and the task keeps
        running, so the tracked time is not lost.

        Raises:
            NoActiveTask: If nothing is running
            IntervalConflict, ValidationError, UnsupportedSpan: From add()
        """
        task = self.active_task
        if task is None:
            raise NoActiveTask()
        committed = self.add(EntryDraft(
            title=task.title,
            category=task.category,
            start_time=task.start_time,
            end_time=now,
            tags=[],
            note='',
        ))
        self.active_task = None
        return committed

    # ------------------------------------------------------------------
    # Misc state
    # ------------------------------------------------------------------
    def select_date(self, instant: datetime.datetime) -> datetime.datetime:
        self.selected_date = start_of_day(instant)
        return self.selected_date

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------
    def get_preset(self, preset_id: str) -> TimePreset:
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        raise NotFound(preset_id, kind="preset")

    def add_preset(self, title: str, category: Category, start_time_str: str,
                   end_time_str: str, tags: Optional[List[str]] = None) -> TimePreset:
        try:
            preset = TimePreset(
                id=new_id(),
                title=_require_title(title),
                category=category,
                start_time_str=start_time_str,
                end_time_str=end_time_str,
                tags=tags or [],
            )
        except ValueError as e:
            raise ValidationError(str(e)) from e
        self.presets.append(preset)
        return preset

    def update_preset(self, preset_id: str, **fields) -> TimePreset:
        unknown = set(fields) - PRESET_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
        target = self.get_preset(preset_id)
        merged = target.model_dump()
        merged.update({k: v for k, v in fields.items() if v is not None})
        merged["title"] = _require_title(merged["title"])
        try:
            updated = TimePreset(**merged)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        self.presets[self.presets.index(target)] = updated
        return updated

    def delete_preset(self, preset_id: str) -> bool:
        before = len(self.presets)
        self.presets = [p for p in self.presets if p.id != preset_id]
        return len(self.presets) < before

    def _sort(self) -> None:
        self._entries.sort(key=lambda e: e.start_time)
