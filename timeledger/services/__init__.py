"""Services layer - Application logic around the ledger"""

from .ledger_service import LedgerService
from .timer_service import TimerService
from .report_service import ReportService
from .export_service import ExportService
from .insight_service import InsightService, GeminiInsightProvider
from .backup_service import BackupService

__all__ = [
    "LedgerService", "TimerService", "ReportService", "ExportService", "InsightService",
    "GeminiInsightProvider", "BackupService",
]
