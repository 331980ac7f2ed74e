"""Domain layer - Pure ledger entities and logic"""

from .errors import (
    LedgerError, ValidationError, IntervalConflict, NotFound, UnsupportedSpan,
    TaskAlreadyRunning, NoActiveTask,
)
from .models import (
    Category, Granularity, TimeEntry, EntryDraft, TimePreset, ActiveTask, ReportingPeriod,
    Gap, PeriodSummary, AIInsight, LedgerDocument, UserPreferences,
)
from .store import EntryStore

__all__ = [
    "LedgerError", "ValidationError", "IntervalConflict", "NotFound", "UnsupportedSpan",
    "TaskAlreadyRunning", "NoActiveTask",
    "Category", "Granularity", "TimeEntry", "EntryDraft", "TimePreset", "ActiveTask",
    "ReportingPeriod", "Gap", "PeriodSummary", "AIInsight", "LedgerDocument", "UserPreferences",
    "EntryStore",
]
