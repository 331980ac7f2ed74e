"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
Separates data access logic from business logic. The ledger only ever sees
LedgerDocument objects; whether they live in SQLite, a JSON file or a cloud
API is decided here.
"""

from datetime import datetime
from typing import List, Optional
import logging

from pydantic import ValidationError as SchemaError
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from timeledger.domain.models import LedgerDocument, STORAGE_VERSION
from timeledger.infra.db import LedgerSnapshotModel, get_engine

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "time-ledger-v5-storage"


class LedgerRepository:
    """
    Loads and saves the whole ledger document under a storage key.
    """

    def __init__(self, session: Optional[AsyncSession] = None,
                 storage_key: str = DEFAULT_STORAGE_KEY):
        self.session = session
        self.storage_key = storage_key

    async def _get_session(self) -> AsyncSession:
        """Get session - either injected or create new one"""
        if self.session:
            return self.session
        engine = get_engine()
        return engine.get_session()

    async def load(self) -> Optional[LedgerDocument]:
        """
        Load the document stored under this repository's key.

        Returns:
            The document, or None if nothing has been saved yet

        Raises:
            ValueError: If the stored document was written by another
                storage version or does not validate
        """
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(LedgerSnapshotModel).where(LedgerSnapshotModel.storage_key == self.storage_key)
            )
            model = result.scalar_one_or_none()
            if model is None:
                return None
            if model.version != STORAGE_VERSION:
                raise ValueError(
                    f"Ledger '{self.storage_key}' has storage version {model.version}, "
                    f"expected {STORAGE_VERSION}"
                )
            try:
                return LedgerDocument.model_validate_json(model.document)
            except SchemaError as e:
                raise ValueError(f"Ledger '{self.storage_key}' is corrupt: {e}") from e

    async def save(self, document: LedgerDocument) -> None:
        """Insert or replace the stored document"""
        payload = document.model_dump_json()
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(LedgerSnapshotModel).where(LedgerSnapshotModel.storage_key == self.storage_key)
            )
            model = result.scalar_one_or_none()
            if model is None:
                model = LedgerSnapshotModel(storage_key=self.storage_key)
                session.add(model)
            model.version = document.version
            model.document = payload
            model.updated_at = datetime.now()
            await session.commit()
        logger.debug(f"Saved ledger '{self.storage_key}' ({len(document.entries)} entries)")

    async def delete(self) -> bool:
        """Remove the stored document. Returns True if one existed."""
        session = await self._get_session()
        async with session:
            result = await session.execute(
                delete(LedgerSnapshotModel).where(LedgerSnapshotModel.storage_key == self.storage_key)
            )
            await session.commit()
            return result.rowcount > 0

    async def list_keys(self) -> List[str]:
        """Storage keys of all saved ledgers"""
        session = await self._get_session()
        async with session:
            result = await session.execute(
                select(LedgerSnapshotModel.storage_key).order_by(LedgerSnapshotModel.storage_key)
            )
            return list(result.scalars().all())
