"""
Pytest configuration and fixtures.
"""

import datetime
import sys
from pathlib import Path
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from timeledger.domain.models import Category, EntryDraft, UserPreferences
from timeledger.i18n import set_language
from timeledger.infra.db import Base
from timeledger.infra.repository import LedgerRepository
from timeledger.services.ledger_service import LedgerService


class FakeClock:
    """Settable stand-in for datetime.now"""

    def __init__(self, now: datetime.datetime):
        self.current = now

    def __call__(self) -> datetime.datetime:
        return self.current

    def advance(self, **kwargs):
        self.current += datetime.timedelta(**kwargs)


def at(day: int, hour: int, minute: int = 0, month: int = 3, year: int = 2024) -> datetime.datetime:
    """Shorthand for instants in March 2024 (the 10th is a Sunday)"""
    return datetime.datetime(year, month, day, hour, minute)


def draft(title: str, start: datetime.datetime, end: datetime.datetime,
          category: Category = Category.INVESTMENT, **kwargs) -> EntryDraft:
    return EntryDraft(title=title, category=category, start_time=start, end_time=end, **kwargs)


@pytest.fixture(autouse=True)
def english():
    """Labels are asserted in English"""
    set_language("en")
    yield


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create a new session for a test"""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def repository(db_session):
    return LedgerRepository(session=db_session)


@pytest.fixture
def clock():
    return FakeClock(at(12, 18, 0))


@pytest_asyncio.fixture
async def ledger(repository, clock):
    """A loaded, empty ledger backed by the in-memory database"""
    service = LedgerService(repository, UserPreferences(language="en"), clock=clock)
    await service.load()
    return service


@pytest.fixture(scope="session")
def qapp():
    """Qt core application so QObject signals and QTimer work"""
    from PySide6.QtCore import QCoreApplication
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
