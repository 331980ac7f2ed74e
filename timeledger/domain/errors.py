"""
Ledger error hierarchy.

Every failure of a ledger operation is input-correctable: the caller gets an
exception, the ledger keeps its previous state, and nothing is retried.
"""

from typing import Optional


class LedgerError(Exception):
    """Base class for all ledger failures"""


class ValidationError(LedgerError):
    """A submission is malformed (empty title, zero-length interval, bad range)"""


class IntervalConflict(LedgerError):
    """A candidate overlaps an existing entry on the same calendar day"""

    def __init__(self, candidate, existing):
        self.candidate = candidate
        self.existing = existing
        super().__init__(
            f"{candidate.start_time:%Y-%m-%d %H:%M}-{candidate.end_time:%H:%M} "
            f"overlaps '{existing.title}' "
            f"({existing.start_time:%H:%M}-{existing.end_time:%H:%M})"
        )


class NotFound(LedgerError):
    """An operation referenced an unknown id"""

    def __init__(self, item_id: str, kind: str = "entry"):
        self.item_id = item_id
        self.kind = kind
        super().__init__(f"No {kind} with id {item_id!r}")


class UnsupportedSpan(LedgerError):
    """An interval crosses more than one midnight"""


class TaskAlreadyRunning(LedgerError):
    """start_task was called while another task is running"""

    def __init__(self, title: Optional[str] = None):
        self.title = title
        super().__init__(f"Task '{title}' is already running" if title else "A task is already running")


class NoActiveTask(LedgerError):
    """stop_task was called while no task is running"""

    def __init__(self):
        super().__init__("No task is running")
