"""
Ledger Service - the application-facing entry point to the ledger.

Architecture Decision: Pure core, async shell
EntryStore and the query functions are synchronous and side-effect free apart
from the store's own state. This service owns one store, delegates every
transition to it and writes a snapshot through the repository after each
committed mutation. A rejected mutation is never persisted.
"""

import datetime
import logging
from typing import Callable, List, Optional, Union

from timeledger.domain import aggregator, gaps as gap_finder, periods
from timeledger.domain.errors import LedgerError
from timeledger.domain.models import (
    ActiveTask, Category, EntryDraft, Gap, Granularity, LedgerDocument, PeriodSummary,
    ReportingPeriod, TimeEntry, TimePreset, UserPreferences,
)
from timeledger.domain.store import EntryStore
from timeledger.infra.repository import LedgerRepository

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]


class LedgerService:
    """
    Loads the ledger, applies mutations and persists them.
    """

    def __init__(self, repository: Optional[LedgerRepository] = None,
                 preferences: Optional[UserPreferences] = None,
                 clock: Optional[Clock] = None):
        self.repository = repository or LedgerRepository()
        self.preferences = preferences or UserPreferences()
        self.clock: Clock = clock or datetime.datetime.now
        self.store = EntryStore()

    def now(self) -> datetime.datetime:
        return self.clock()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    async def load(self) -> EntryStore:
        """Load the persisted document, or start from an empty ledger"""
        document = await self.repository.load()
        if document is None:
            logger.info("No saved ledger found, starting empty")
            self.store = EntryStore()
        else:
            self.store = EntryStore.from_document(document)
            logger.info(f"Loaded ledger with {len(self.store)} entries")
        return self.store

    async def replace(self, document: LedgerDocument) -> None:
        """Swap in a whole document (restore) and persist it"""
        self.store = EntryStore.from_document(document)
        await self._persist()

    async def _persist(self) -> None:
        """
        Save the current state.

        The store has already changed when this runs. If the save fails the
        error is logged and re-raised, and the in-memory ledger is ahead of
        the database until load() is called again.
        """
        try:
            await self.repository.save(self.store.snapshot())
        except Exception as e:
            logger.warning(f"Failed to save ledger: {e}")
            raise

    async def _commit(self, action: str, operation: Callable, *args, **kwargs):
        """Run a store transition; persist on success, log and re-raise on rejection"""
        try:
            result = operation(*args, **kwargs)
        except LedgerError as e:
            logger.warning(f"{action} rejected: {e}")
            raise
        await self._persist()
        return result

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------
    async def add_entry(self, draft: EntryDraft) -> List[TimeEntry]:
        entries = await self._commit("Add", self.store.add, draft)
        logger.info(f"Added '{draft.title}' as {len(entries)} entr{'y' if len(entries) == 1 else 'ies'}")
        return entries

    async def update_entry(self, entry_id: str, **fields) -> TimeEntry:
        entry = await self._commit("Update", self.store.update, entry_id, **fields)
        logger.info(f"Updated entry {entry_id}")
        return entry

    async def delete_entry(self, entry_id: str) -> bool:
        removed = self.store.delete(entry_id)
        if removed:
            await self._persist()
            logger.info(f"Deleted entry {entry_id}")
        return removed

    async def clear_all(self) -> None:
        self.store.clear_all()
        await self._persist()
        logger.info("Cleared all entries")

    async def quick_log(self, gap: Gap, title: Optional[str] = None,
                        preset: Optional[TimePreset] = None) -> List[TimeEntry]:
        """Fill a gap, pre-filled from a preset (or the suggested one)"""
        if preset is None:
            preset = gap_finder.suggest_preset(gap.start, self.store.presets)
        draft = gap_finder.draft_for_gap(gap, preset, self.preferences.default_category)
        if title:
            draft.title = title
        return await self.add_entry(draft)

    # ------------------------------------------------------------------
    # Running task
    # ------------------------------------------------------------------
    @property
    def active_task(self) -> Optional[ActiveTask]:
        return self.store.active_task

    async def start_task(self, title: str, category: Union[Category, str]) -> ActiveTask:
        task = await self._commit("Start", self.store.start_task, title, category, self.now())
        logger.info(f"Started task '{task.title}'")
        return task

    async def stop_task(self) -> List[TimeEntry]:
        entries = await self._commit("Stop", self.store.stop_task, self.now())
        logger.info(f"Stopped task, logged {sum(e.duration for e in entries)} min")
        return entries

    # ------------------------------------------------------------------
    # Presets, selection, profile
    # ------------------------------------------------------------------
    async def add_preset(self, title: str, category: Union[Category, str], start_time_str: str,
                         end_time_str: str, tags: Optional[List[str]] = None) -> TimePreset:
        return await self._commit("Add preset", self.store.add_preset,
                                  title, category, start_time_str, end_time_str, tags)

    async def update_preset(self, preset_id: str, **fields) -> TimePreset:
        return await self._commit("Update preset", self.store.update_preset, preset_id, **fields)

    async def delete_preset(self, preset_id: str) -> bool:
        removed = self.store.delete_preset(preset_id)
        if removed:
            await self._persist()
        return removed

    async def select_date(self, instant: Union[datetime.date, datetime.datetime]) -> datetime.datetime:
        if not isinstance(instant, datetime.datetime):
            instant = datetime.datetime.combine(instant, datetime.time.min)
        return await self._commit("Select date", self.store.select_date, instant)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------
    def resolve_period(self, granularity: Union[Granularity, str],
                       reference: Optional[datetime.datetime] = None,
                       custom_start: Optional[datetime.date] = None,
                       custom_end: Optional[datetime.date] = None) -> ReportingPeriod:
        return periods.resolve(
            reference or self.store.selected_date,
            granularity,
            custom_start=custom_start,
            custom_end=custom_end,
            week_start=self.preferences.week_start_number,
        )

    def summary(self, period: ReportingPeriod) -> PeriodSummary:
        return aggregator.summarize(self.store.entries, period, self.now())

    def gaps(self, period: ReportingPeriod) -> List[Gap]:
        return gap_finder.find_gaps(self.store.entries, period, self.now(),
                                    self.preferences.gap_threshold_minutes)

    def live_gap(self) -> Optional[Gap]:
        return gap_finder.live_gap(self.store.entries, self.now(), self.active_task is not None,
                                   self.preferences.gap_threshold_minutes)

    def timeline(self, day: Optional[datetime.date] = None) -> List[Union[TimeEntry, Gap]]:
        day = day or self.store.selected_date.date()
        return gap_finder.day_timeline(self.store.entries, day, self.now(),
                                       task_running=self.active_task is not None,
                                       gap_minutes=self.preferences.timeline_gap_minutes)

    def entries_snapshot(self, period: Optional[ReportingPeriod] = None) -> List[TimeEntry]:
        """Deep copies for collaborators (export, insight) that must not touch live state"""
        entries = self.store.entries
        if period is not None:
            entries = aggregator.entries_in_period(entries, period)
        return [e.model_copy(deep=True) for e in entries]
