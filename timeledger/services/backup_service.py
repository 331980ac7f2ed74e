"""
JSON backups of the whole ledger document.

A backup wraps the persisted document in a small envelope
({version, created_at, app_name, data}) so it can be inspected, edited by
hand and restored on another machine.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as SchemaError

from timeledger.domain.conflicts import find_conflict
from timeledger.domain.models import ActiveTask, LedgerDocument, STORAGE_VERSION, TimeEntry, TimePreset
from timeledger.utils import platform_dir

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass
class BackupInfo:
    path: Path
    created: datetime
    size_bytes: int

    @property
    def size_human(self) -> str:
        size = float(self.size_bytes)
        for unit in ('B', 'KB', 'MB', 'GB'):
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} TB"


class BackupService:
    """
    Writes ledger snapshots to a backup directory and reads them back.

    File names look like timeledger_backup_2024-03-10_184500.json.
    """

    PREFIX = "timeledger_backup_"
    SUFFIX = ".json"
    STAMP = "%Y-%m-%d_%H%M%S"

    def __init__(self, backup_dir: Optional[PathLike] = None):
        self.backup_dir = Path(backup_dir) if backup_dir else platform_dir('data') / 'backups'

    def _ensure_dir(self) -> Path:
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        return self.backup_dir

    def _stamp_of(self, path: Path) -> Optional[datetime]:
        try:
            return datetime.strptime(path.name[len(self.PREFIX):-len(self.SUFFIX)], self.STAMP)
        except ValueError:
            return None

    def create_backup(self, document: LedgerDocument) -> Path:
        """Write the document; returns the new file"""
        now = datetime.now()
        target = self._ensure_dir() / f"{self.PREFIX}{now.strftime(self.STAMP)}{self.SUFFIX}"
        envelope = {
            "version": STORAGE_VERSION,
            "created_at": now.isoformat(),
            "app_name": "TimeLedger",
            "data": document.model_dump(mode='json'),
        }
        target.write_text(json.dumps(envelope, indent=2, ensure_ascii=False), encoding='utf-8')
        logger.info(f"Backup created: {target} ({len(document.entries)} entries)")
        return target

    def restore_backup(self, backup_file: PathLike) -> Tuple[LedgerDocument, Dict[str, int]]:
        """
        Read a backup back into a document.

        Entries that do not validate, do not end after they start, or overlap
        an entry restored before them are skipped with a warning, so the
        result satisfies the ledger's invariants.

        Returns:
            The document and counts: entries, skipped_entries, presets

        Raises:
            FileNotFoundError: No such file
            ValueError: Not a backup, or written by another storage version
        """
        backup_file = Path(backup_file)
        if not backup_file.exists():
            raise FileNotFoundError(f"Backup file not found: {backup_file}")

        envelope = json.loads(backup_file.read_text(encoding='utf-8'))
        if not isinstance(envelope, dict) or "version" not in envelope or "data" not in envelope:
            raise ValueError(f"{backup_file} is not a ledger backup")
        if envelope["version"] != STORAGE_VERSION:
            raise ValueError(f"Unsupported backup version: {envelope['version']}")

        data = envelope["data"]
        counts = {"entries": 0, "skipped_entries": 0, "presets": 0}

        entries: List[TimeEntry] = []
        for raw in data.get("entries", []):
            reason = None
            try:
                entry = TimeEntry.model_validate(raw)
            except SchemaError as e:
                reason = f"invalid ({e.error_count()} errors)"
            else:
                if entry.end_time <= entry.start_time:
                    reason = "ends before it starts"
                else:
                    conflict = find_conflict([entry], entries)
                    if conflict is not None:
                        reason = f"overlaps {conflict.existing.id}"
            if reason:
                logger.warning(f"Skipping entry {raw.get('id', '?')}: {reason}")
                counts["skipped_entries"] += 1
                continue
            entries.append(entry)
            counts["entries"] += 1

        presets: List[TimePreset] = []
        for raw in data.get("presets", []):
            try:
                presets.append(TimePreset.model_validate(raw))
                counts["presets"] += 1
            except SchemaError as e:
                logger.warning(f"Skipping preset {raw.get('title')}: {e}")

        active_task = None
        if data.get("active_task"):
            try:
                active_task = ActiveTask.model_validate(data["active_task"])
            except SchemaError as e:
                logger.warning(f"Dropping running task: {e}")

        document = LedgerDocument(entries=entries, presets=presets, active_task=active_task,
                                  user=data.get("user") or {})
        if data.get("selected_date"):
            document.selected_date = datetime.fromisoformat(data["selected_date"])

        logger.info(f"Backup {backup_file.name} restored: {counts}")
        return document, counts

    def list_backups(self) -> List[BackupInfo]:
        """Backups in the directory, newest first"""
        if not self.backup_dir.exists():
            return []
        backups = []
        for path in self.backup_dir.glob(f"{self.PREFIX}*{self.SUFFIX}"):
            created = self._stamp_of(path)
            if created is not None:
                backups.append(BackupInfo(path=path, created=created, size_bytes=path.stat().st_size))
        backups.sort(key=lambda b: b.created, reverse=True)
        return backups

    def cleanup_old_backups(self, keep_count: int = 5) -> int:
        """Delete all but the newest keep_count backups; returns how many were removed"""
        removed = 0
        for backup in self.list_backups()[keep_count:]:
            try:
                backup.path.unlink()
                removed += 1
                logger.info(f"Removed old backup: {backup.path.name}")
            except OSError as e:
                logger.warning(f"Failed to remove backup {backup.path.name}: {e}")
        return removed
