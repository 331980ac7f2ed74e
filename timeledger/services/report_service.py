"""
Reconciliation reports rendered from Jinja2 templates.

Templates live in timeledger/resources/templates; a different directory can
be passed in so users can keep their own layouts.
"""

import datetime
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader

from timeledger.domain.models import Gap, PeriodSummary, TimeEntry
from timeledger.i18n import get_language, tr
from timeledger.utils import get_resource_path

TEMPLATE_SUFFIXES = (".txt", ".md", ".html")


def format_minutes(minutes: float) -> str:
    """135 -> '2:15'"""
    hours, rest = divmod(int(round(minutes)), 60)
    return f"{hours}:{rest:02d}"


def format_hours(minutes: float) -> str:
    """90 -> '1.5h'"""
    return f"{minutes / 60:.1f}h"


def format_date(value: datetime.datetime, fmt: str = "%Y-%m-%d %H:%M") -> str:
    return value.strftime(fmt)


def category_label(category) -> str:
    """Translated label for a Category or a bucket name such as 'unreconciled'"""
    return tr(f"category.{getattr(category, 'value', category)}")


class ReportService:
    """
    Renders one period's summary, category breakdown and open gaps.
    """

    def __init__(self, template_dir: Optional[Path] = None):
        self.template_dir = Path(template_dir or get_resource_path("templates"))
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(
            format_minutes=format_minutes,
            format_hours=format_hours,
            format_date=format_date,
            category_label=category_label,
        )
        self.env.globals['tr'] = tr

    def render(self, summary: PeriodSummary, gaps: List[Gap],
               template_name: str = "period_report.txt",
               entries: Optional[List[TimeEntry]] = None,
               output_file: Optional[Path] = None) -> str:
        """
        Render a report for one period.

        Args:
            summary: Aggregates of the period
            gaps: Gaps of the period, most recent first
            template_name: Template file inside the template directory
            entries: Entries to list, for templates that show them
            output_file: Also write the report here when given

        Returns:
            The rendered report
        """
        content = self.env.get_template(template_name).render(
            summary=summary,
            period=summary.period,
            gaps=gaps,
            entries=entries or [],
            generated_at=datetime.datetime.now(),
            language=get_language(),
        )
        if output_file:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(content, encoding='utf-8')
        return content

    def render_template_string(self, template_string: str, **context) -> str:
        """Render an ad-hoc template with the same filters and globals"""
        return self.env.from_string(template_string).render(**context)

    def list_templates(self) -> List[str]:
        return sorted(f.name for f in self.template_dir.iterdir() if f.suffix in TEMPLATE_SUFFIXES)
