"""
Export Service - entries as CSV or JSON.

The exporter works on a copy of the entries it is given and returns text;
nothing in the ledger depends on the result.
"""

import csv
import datetime
import io
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

from timeledger.domain.errors import ValidationError
from timeledger.domain.models import TimeEntry
from timeledger.domain.timeutil import end_of_day, start_of_day

logger = logging.getLogger(__name__)

FORMATS = ("csv", "json")
CSV_COLUMNS = ["id", "date", "start", "end", "duration", "title", "category", "tags", "note"]


class ExportService:
    """
    Serializes entries for sharing or analysis elsewhere.
    """

    @staticmethod
    def select(entries: Iterable[TimeEntry], start: Optional[datetime.date] = None,
               end: Optional[datetime.date] = None) -> List[TimeEntry]:
        """
        Entries starting within [start, end] (whole days); no bounds means all.
        """
        lower = start_of_day(start) if start else None
        upper = end_of_day(end) if end else None
        selected = [
            e.model_copy(deep=True) for e in entries
            if (lower is None or e.start_time >= lower) and (upper is None or e.start_time <= upper)
        ]
        selected.sort(key=lambda e: e.start_time)
        return selected

    def export(self, entries: Iterable[TimeEntry], fmt: str = "csv",
               start: Optional[datetime.date] = None,
               end: Optional[datetime.date] = None) -> str:
        """
        Serialize entries.

        Args:
            entries: Entries to export
            fmt: 'csv' or 'json'
            start: First day to include (None for no lower bound)
            end: Last day to include (None for no upper bound)

        Raises:
            ValidationError: Unknown format or reversed range
        """
        fmt = fmt.lower()
        if fmt not in FORMATS:
            raise ValidationError(f"Unknown export format: {fmt} (expected one of {', '.join(FORMATS)})")
        if start and end and end < start:
            raise ValidationError(f"Range end {end} is before its start {start}")

        selected = self.select(entries, start, end)
        if fmt == "csv":
            return self._to_csv(selected)
        return self._to_json(selected, start, end)

    def export_to_file(self, entries: Iterable[TimeEntry], output_file: Path, fmt: Optional[str] = None,
                       start: Optional[datetime.date] = None,
                       end: Optional[datetime.date] = None) -> Path:
        """Export to a file; the format defaults to the file extension"""
        fmt = fmt or output_file.suffix.lstrip('.') or "csv"
        content = self.export(entries, fmt, start, end)
        output_file.parent.mkdir(parents=True, exist_ok=True)
        # utf-8-sig so spreadsheet programs detect the encoding of non-ASCII titles
        encoding = 'utf-8-sig' if fmt.lower() == 'csv' else 'utf-8'
        with open(output_file, 'w', encoding=encoding, newline='') as f:
            f.write(content)
        logger.info(f"Exported entries to {output_file}")
        return output_file

    @staticmethod
    def _to_csv(entries: List[TimeEntry]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator='\n')
        writer.writerow(CSV_COLUMNS)
        for entry in entries:
            writer.writerow([
                entry.id,
                entry.start_time.strftime("%Y-%m-%d"),
                entry.start_time.strftime("%H:%M"),
                entry.end_time.strftime("%H:%M"),
                entry.duration,
                entry.title,
                entry.category.value,
                ";".join(entry.tags),
                entry.note or "",
            ])
        return buffer.getvalue()

    @staticmethod
    def _to_json(entries: List[TimeEntry], start: Optional[datetime.date],
                 end: Optional[datetime.date]) -> str:
        payload = {
            "range": {
                "start": start.isoformat() if start else None,
                "end": end.isoformat() if end else None,
            },
            "count": len(entries),
            "entries": [e.model_dump(mode='json') for e in entries],
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)
