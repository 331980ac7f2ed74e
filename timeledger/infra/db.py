"""
SQLAlchemy engine and the ledger snapshot table.

The ledger is persisted as one JSON document per storage key. A single
SQLite row per key gives atomic replacement of the whole document; the
async engine matches the async service layer on top.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from timeledger.utils import platform_dir


class Base(DeclarativeBase):
    pass


class LedgerSnapshotModel(Base):
    """One persisted LedgerDocument"""
    __tablename__ = "ledger_snapshots"

    storage_key: Mapped[str] = mapped_column(String(100), primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    document: Mapped[str] = mapped_column(Text, nullable=False)  # LedgerDocument JSON
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self) -> str:
        return f"<LedgerSnapshot {self.storage_key} v{self.version} at {self.updated_at}>"


def default_db_url() -> str:
    data_dir = platform_dir('data')
    data_dir.mkdir(parents=True, exist_ok=True)
    return f"sqlite+aiosqlite:///{data_dir / 'timeledger.db'}"


class DatabaseEngine:
    """
    Process-wide engine and session factory.

    Created on first use; reset() disposes it so a different URL can be used
    (tests, a second ledger file).
    """
    _instance: Optional['DatabaseEngine'] = None

    def __init__(self, db_url: str):
        self.url = db_url
        self.engine: AsyncEngine = create_async_engine(db_url, echo=False)
        self.session_factory = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    @classmethod
    def get_instance(cls, db_url: Optional[str] = None) -> 'DatabaseEngine':
        if cls._instance is None:
            cls._instance = cls(db_url or default_db_url())
        return cls._instance

    @classmethod
    async def reset(cls) -> None:
        if cls._instance is not None:
            await cls._instance.engine.dispose()
            cls._instance = None

    async def create_tables(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def get_session(self) -> AsyncSession:
        return self.session_factory()


def get_engine(db_url: Optional[str] = None) -> DatabaseEngine:
    return DatabaseEngine.get_instance(db_url)


async def init_db(db_url: Optional[str] = None) -> DatabaseEngine:
    """Create the engine (if needed) and the tables"""
    engine = get_engine(db_url)
    await engine.create_tables()
    return engine
