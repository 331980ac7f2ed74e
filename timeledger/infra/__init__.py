"""Infrastructure layer - Database and persistence"""

from .db import DatabaseEngine, LedgerSnapshotModel, get_engine, init_db
from .repository import LedgerRepository

__all__ = ["DatabaseEngine", "get_engine", "init_db", "LedgerSnapshotModel", "LedgerRepository"]
