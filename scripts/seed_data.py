"""
Data Seeder for Time Ledger.
Populates the ledger with a realistic month for testing and demo purposes.
"""

import asyncio
import random
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timeledger.domain.errors import LedgerError
from timeledger.domain.models import Category, EntryDraft
from timeledger.infra.config import get_settings
from timeledger.infra.db import init_db
from timeledger.infra.repository import LedgerRepository
from timeledger.services.ledger_service import LedgerService


async def seed(first: date, last: date):
    settings = get_settings()
    await init_db(settings.get_db_url())

    ledger = LedgerService(LedgerRepository(storage_key=settings.storage_key), settings.preferences)
    await ledger.load()
    print(f"Clearing {len(ledger.store)} existing entries...")
    await ledger.clear_all()

    # Pattern per day:
    # - 23:00 - 07:00: Sleep (split at midnight)
    # - 09:00 - 12:00: Deep work / Email
    # - 12:00 - 13:00: Lunch
    # - 13:00 - 17:00: Work, skipped on weekends
    # - evening: sometimes scrolling, otherwise left open as a gap
    current = first
    while current <= last:
        day = datetime.combine(current, datetime.min.time())
        blocks = [
            ("Deep work" if random.random() > 0.3 else "Email", Category.INVESTMENT, 9, 12),
            ("Lunch", Category.MAINTENANCE, 12, 13),
        ]
        if current.weekday() < 5:
            blocks.append(("Project work", Category.INVESTMENT, 13, 17))
        if random.random() > 0.5:
            blocks.append(("Scrolling", Category.DRAIN, 20, 21))
        blocks.append(("Sleep", Category.MAINTENANCE, 23, 7))

        for title, category, start_hour, end_hour in blocks:
            try:
                await ledger.add_entry(EntryDraft(
                    title=title,
                    category=category,
                    start_time=day.replace(hour=start_hour),
                    end_time=day.replace(hour=end_hour),
                ))
            except LedgerError as e:
                print(f"Skipped {title} on {current}: {e}")

        print(f"Generated entries for {current}")
        current += timedelta(days=1)

    print(f"Seeding complete: {len(ledger.store)} entries.")


if __name__ == "__main__":
    today = date.today()
    asyncio.run(seed(today.replace(day=1), today - timedelta(days=1)))
