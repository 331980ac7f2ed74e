#!/usr/bin/env python

"""
Time Ledger - Command Line Entry Point

Log exclusive time intervals against three categories and reconcile each
period against the wall-clock time that actually passed.

Usage:
    python main.py add "Deep work" --start 09:00 --end 11:30 --category investment
    python main.py summary --period week
    python main.py gaps --period month

Requirements:
    - Python 3.12+
    - See pyproject.toml for dependencies
"""

import argparse
import asyncio
import datetime
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from timeledger.domain.errors import LedgerError
from timeledger.domain.models import (
    Category, EntryDraft, Gap, Granularity, ReportingPeriod, TimeEntry, UserPreferences,
)
from timeledger.i18n import get_language, set_language, tr
from timeledger.infra.config import get_settings
from timeledger.infra.db import init_db
from timeledger.infra.repository import LedgerRepository
from timeledger.services import (
    BackupService, ExportService, InsightService, LedgerService, ReportService,
)
from timeledger.services.timer_service import format_elapsed

def parse_day(value: str) -> datetime.date:
    return datetime.date.fromisoformat(value)


def parse_instant(value: str, day: datetime.date) -> datetime.datetime:
    """'HH:MM' on the given day, or a full ISO timestamp"""
    if len(value) <= 5 and ':' in value:
        hour, minute = map(int, value.split(':'))
        return datetime.datetime.combine(day, datetime.time(hour, minute))
    return datetime.datetime.fromisoformat(value)


def parse_tags(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return value.split(',')


def describe(entry: TimeEntry) -> str:
    tags = f" #{' #'.join(entry.tags)}" if entry.tags else ""
    return (f"{entry.id}  {entry.start_time:%Y-%m-%d %H:%M}-{entry.end_time:%H:%M}  "
            f"{entry.duration:>4} min  {entry.title} [{tr('category.' + entry.category.value)}]{tags}")


def describe_gap(gap: Gap) -> str:
    live = " *" if gap.is_live else ""
    return f"{gap.date_label}  {gap.start_label}-{gap.end_label}  {gap.duration_label}{live}"


def report_output_path(output: Optional[Path], prefs: UserPreferences,
                       period: ReportingPeriod, template_name: str) -> Optional[Path]:
    """--output wins; otherwise a file named after the period in the reports directory, if one is set"""
    if output is not None:
        return output
    if not prefs.reports_directory:
        return None
    name = f"{period.granularity.value}_{period.start:%Y-%m-%d}{Path(template_name).suffix}"
    return Path(prefs.reports_directory).expanduser() / name


def add_period_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("--period", choices=[g.value for g in Granularity], default="week")
    parser.add_argument("--date", type=parse_day, help="Reference day (default: selected day)")
    parser.add_argument("--from", dest="start", type=parse_day, help="Custom range start")
    parser.add_argument("--to", dest="end", type=parse_day, help="Custom range end")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timeledger", description="Time ledger and reconciliation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Log an interval")
    add.add_argument("title")
    add.add_argument("--start", required=True, help="HH:MM or ISO timestamp")
    add.add_argument("--end", required=True, help="HH:MM or ISO timestamp; earlier than start means next day")
    add.add_argument("--date", type=parse_day, help="Day for HH:MM times (default: selected day)")
    add.add_argument("--category", choices=[c.value for c in Category])
    add.add_argument("--tags", help="Comma separated")
    add.add_argument("--note")

    edit = sub.add_parser("edit", help="Change an entry")
    edit.add_argument("id")
    edit.add_argument("--title")
    edit.add_argument("--start")
    edit.add_argument("--end")
    edit.add_argument("--date", type=parse_day)
    edit.add_argument("--category", choices=[c.value for c in Category])
    edit.add_argument("--tags")
    edit.add_argument("--note")

    delete = sub.add_parser("delete", help="Remove an entry")
    delete.add_argument("id")

    listing = sub.add_parser("list", help="Show a day's timeline")
    listing.add_argument("--date", type=parse_day)

    select = sub.add_parser("select", help="Change the selected day")
    select.add_argument("date", type=parse_day)

    start = sub.add_parser("start", help="Start the timer")
    start.add_argument("title")
    start.add_argument("--category", choices=[c.value for c in Category])
    sub.add_parser("stop", help="Stop the timer and log the interval")
    sub.add_parser("status", help="Show the running task and live gap")

    for name, help_text in (("summary", "Coverage of a period"), ("gaps", "Unreconciled gaps of a period"),
                            ("insight", "AI summary of a period")):
        add_period_arguments(sub.add_parser(name, help=help_text))

    report = sub.add_parser("report", help="Render a period report")
    add_period_arguments(report)
    report.add_argument("--template")
    report.add_argument("--output", type=Path)

    export = sub.add_parser("export", help="Export entries")
    export.add_argument("--format", choices=["csv", "json"], default="csv")
    export.add_argument("--from", dest="start", type=parse_day)
    export.add_argument("--to", dest="end", type=parse_day)
    export.add_argument("--output", type=Path)

    presets = sub.add_parser("presets", help="List presets")
    presets.add_argument("--delete", metavar="ID")
    preset_add = sub.add_parser("preset-add", help="Add a preset")
    preset_add.add_argument("title")
    preset_add.add_argument("--start", required=True, help="HH:MM")
    preset_add.add_argument("--end", required=True, help="HH:MM")
    preset_add.add_argument("--category", choices=[c.value for c in Category], required=True)
    preset_add.add_argument("--tags")

    backup = sub.add_parser("backup", help="Write a JSON backup")
    backup.add_argument("--dir")
    backup.add_argument("--keep", type=int, help="Delete all but the newest N backups")
    restore = sub.add_parser("restore", help="Replace the ledger with a backup")
    restore.add_argument("file", type=Path)

    config = sub.add_parser("config", help="Show or change preferences")
    config.add_argument("--language", choices=["auto", "en", "zh"])
    config.add_argument("--gap-threshold", type=int, help="Minutes")
    config.add_argument("--week-start", help="Weekday name")
    config.add_argument("--default-category", choices=[c.value for c in Category])
    config.add_argument("--gemini-api-key")
    return parser


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    prefs = settings.preferences
    set_language(prefs.language)

    await init_db(settings.get_db_url())
    ledger = LedgerService(LedgerRepository(storage_key=settings.storage_key), prefs)
    store = await ledger.load()
    day = getattr(args, "date", None) or store.selected_date.date()

    def period():
        reference = None
        if args.date:
            reference = datetime.datetime.combine(args.date, datetime.time.min)
        return ledger.resolve_period(args.period, reference=reference,
                                     custom_start=args.start, custom_end=args.end)

    if args.command == "add":
        entries = await ledger.add_entry(EntryDraft(
            title=args.title,
            category=args.category or prefs.default_category,
            start_time=parse_instant(args.start, day),
            end_time=parse_instant(args.end, day),
            tags=parse_tags(args.tags) or [],
            note=args.note,
        ))
        print(tr("msg.added", count=len(entries)))
        for entry in entries:
            print(describe(entry))

    elif args.command == "edit":
        if args.date is None:
            day = ledger.store.get(args.id).start_time.date()
        fields = {
            "title": args.title,
            "category": args.category,
            "start_time": parse_instant(args.start, day) if args.start else None,
            "end_time": parse_instant(args.end, day) if args.end else None,
            "tags": parse_tags(args.tags),
        }
        if args.note is not None:
            fields["note"] = args.note
        entry = await ledger.update_entry(args.id, **fields)
        print(tr("msg.updated", id=entry.id))
        print(describe(entry))

    elif args.command == "delete":
        removed = await ledger.delete_entry(args.id)
        print(tr("msg.deleted" if removed else "msg.not_deleted", id=args.id))

    elif args.command == "list":
        for item in ledger.timeline(day):
            print(describe(item) if isinstance(item, TimeEntry) else f"  ... {describe_gap(item)}")

    elif args.command == "select":
        await ledger.select_date(args.date)

    elif args.command == "start":
        task = await ledger.start_task(args.title, args.category or prefs.default_category)
        print(tr("msg.started", title=task.title))

    elif args.command == "stop":
        entries = await ledger.stop_task()
        print(tr("msg.stopped", minutes=sum(e.duration for e in entries)))

    elif args.command == "status":
        task = ledger.active_task
        if task is None:
            print(tr("timer.idle"))
        else:
            seconds = int((ledger.now() - task.start_time).total_seconds())
            print(tr("timer.running", title=task.title, elapsed=format_elapsed(seconds)))
        gap = ledger.live_gap()
        if gap is not None:
            print(describe_gap(gap))

    elif args.command == "summary":
        summary = ledger.summary(period())
        print(summary.period.label)
        print(f"{tr('report.logged')}: {summary.logged_minutes / 60:.1f}h")
        print(f"{tr('report.unreconciled')}: {summary.unreconciled_minutes / 60:.1f}h")
        print(f"{tr('report.coverage')}: {summary.coverage_percent}%")
        for bucket in summary.chart_buckets():
            print(f"  {tr('category.' + bucket.name)}: {bucket.minutes / 60:.1f}h")

    elif args.command == "gaps":
        gaps = ledger.gaps(period())
        for gap in gaps:
            print(describe_gap(gap))
        if not gaps:
            print(tr("report.no_gaps"))

    elif args.command == "report":
        selected = period()
        template_name = args.template or prefs.default_report_template
        content = ReportService().render(
            ledger.summary(selected),
            ledger.gaps(selected),
            template_name=template_name,
            entries=ledger.entries_snapshot(selected),
            output_file=report_output_path(args.output, prefs, selected, template_name),
        )
        print(content)

    elif args.command == "insight":
        service = InsightService.from_preferences(prefs, language=get_language())
        insight = await service.generate_async(ledger.entries_snapshot(period()))
        if insight is None:
            print(tr("msg.no_insight"))
        else:
            print(insight.summary)
            for suggestion in insight.suggestions:
                print(f"- {suggestion}")
            print(f"{insight.productivity_score:.0f}/100")

    elif args.command == "export":
        exporter = ExportService()
        entries = ledger.entries_snapshot()
        if args.output:
            exporter.export_to_file(entries, args.output, args.format, args.start, args.end)
            print(tr("msg.exported", count=len(exporter.select(entries, args.start, args.end)),
                     path=args.output))
        else:
            print(exporter.export(entries, args.format, args.start, args.end))

    elif args.command == "presets":
        if args.delete:
            await ledger.delete_preset(args.delete)
        for preset in ledger.store.presets:
            print(f"{preset.id}  {preset.start_time_str}-{preset.end_time_str}  {preset.title} "
                  f"[{tr('category.' + preset.category.value)}]")

    elif args.command == "preset-add":
        preset = await ledger.add_preset(args.title, args.category, args.start, args.end,
                                         parse_tags(args.tags))
        print(preset.id)

    elif args.command == "backup":
        service = BackupService(args.dir)
        path = service.create_backup(ledger.store.snapshot())
        print(tr("msg.backup", path=path))
        if args.keep:
            service.cleanup_old_backups(keep_count=args.keep)

    elif args.command == "restore":
        document, counts = BackupService().restore_backup(args.file)
        await ledger.replace(document)
        print(tr("msg.restored", count=counts["entries"]))

    elif args.command == "config":
        changes = {
            "language": args.language,
            "gap_threshold_minutes": args.gap_threshold,
            "week_start": args.week_start,
            "default_category": args.default_category,
            "gemini_api_key": args.gemini_api_key,
        }
        changes = {k: v for k, v in changes.items() if v is not None}
        if changes:
            settings.preferences = UserPreferences(**{**prefs.model_dump(), **changes})
            settings.save_preferences()
        for key, value in settings.preferences.model_dump(mode="json").items():
            if key == "gemini_api_key" and value:
                value = "***"
            print(f"{key}: {value}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(run(args))
    except (LedgerError, ValueError, FileNotFoundError) as e:
        print(tr("msg.error", error=e), file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
