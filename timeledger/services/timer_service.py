"""
Timer Service - the running task and the once-a-second refresh.

Architecture Decision: Observer Pattern (Qt Signals)
The service emits signals when state changes, keeping it decoupled from any
view. The tick only reads ledger state: it recomputes the elapsed time of
the running task and the live trailing gap, and never mutates anything.
"""

import datetime
import logging
from typing import Optional, Union

from PySide6.QtCore import QObject, QTimer, Signal

from timeledger.domain.errors import LedgerError
from timeledger.domain.models import Category, Gap
from timeledger.i18n import tr
from timeledger.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)


def format_elapsed(seconds: int) -> str:
    """Format seconds as HH:MM:SS"""
    hours, remainder = divmod(max(0, seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class TimerService(QObject):
    """
    Idle/Running state machine on top of the ledger, plus the refresh tick.
    """

    # Signals
    tick = Signal(str, int)  # (formatted_time, elapsed_seconds)
    live_gap_changed = Signal(object)  # Gap or None
    task_started = Signal(str)  # title
    task_stopped = Signal(int)  # logged minutes
    task_failed = Signal(str)  # error message; the task keeps running

    def __init__(self, ledger: LedgerService, interval_ms: int = 1000):
        super().__init__()
        self.ledger = ledger
        self.interval_ms = interval_ms
        self.last_live_gap: Optional[Gap] = None

        # Internal timer that fires every second
        self.timer = QTimer()
        self.timer.timeout.connect(self._on_tick)

    # ------------------------------------------------------------------
    # Lifecycle of the refresh tick
    # ------------------------------------------------------------------
    def activate(self):
        """Start the periodic refresh (when a view showing the timeline opens)"""
        if not self.timer.isActive():
            self.timer.start(self.interval_ms)
        self._on_tick()

    def shutdown(self):
        """Stop the periodic refresh; ledger state is unaffected"""
        self.timer.stop()

    def is_ticking(self) -> bool:
        return self.timer.isActive()

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------
    def is_tracking(self) -> bool:
        """Check if a task is running"""
        return self.ledger.active_task is not None

    async def start_task(self, title: str, category: Union[Category, str]):
        """
        Idle -> Running.

        Raises:
            TaskAlreadyRunning: If a task is already running
            ValidationError: Empty title or unknown category
        """
        task = await self.ledger.start_task(title, category)
        self.task_started.emit(task.title)
        self._on_tick()
        return task

    async def stop_task(self):
        """
        Running -> Idle, logging the task as an entry that ends now.

        If the entry conflicts with the ledger the task keeps running,
        task_failed is emitted and the error is re-raised.

        Raises:
            NoActiveTask: If nothing is running
            IntervalConflict: The tracked interval overlaps existing entries
        """
        try:
            entries = await self.ledger.stop_task()
        except LedgerError as e:
            self.task_failed.emit(str(e))
            raise
        minutes = sum(e.duration for e in entries)
        self.task_stopped.emit(minutes)
        self._on_tick()
        return entries

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    def elapsed_seconds(self, now: Optional[datetime.datetime] = None) -> int:
        task = self.ledger.active_task
        if task is None:
            return 0
        now = now or self.ledger.now()
        return int((now - task.start_time).total_seconds())

    def elapsed_text(self, now: Optional[datetime.datetime] = None) -> str:
        return format_elapsed(self.elapsed_seconds(now))

    def status_text(self, now: Optional[datetime.datetime] = None) -> str:
        task = self.ledger.active_task
        if task is None:
            return tr("timer.idle")
        return tr("timer.running", title=task.title, elapsed=self.elapsed_text(now))

    def _on_tick(self):
        """Called every second to refresh derived views"""
        now = self.ledger.now()

        if self.is_tracking():
            seconds = self.elapsed_seconds(now)
            self.tick.emit(self.status_text(now), seconds)

        gap = self.ledger.live_gap()
        if gap != self.last_live_gap:
            self.last_live_gap = gap
            self.live_gap_changed.emit(gap)
