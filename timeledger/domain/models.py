"""
Domain Models using Pydantic for validation.

Architecture Decision: Why Pydantic?
The whole ledger is persisted as one JSON document. Pydantic validates that
document when it is loaded back and gives us serialization for free, so the
same models serve the domain logic, the repository and the exporters.
"""

import datetime
import uuid
from enum import Enum
from typing import Optional, List, Dict, Any
from pydantic import BaseModel, Field, ConfigDict, field_validator

from timeledger.domain.timeutil import round_minutes, minutes_between, parse_time_of_day


STORAGE_VERSION = 5


def new_id() -> str:
    """Opaque unique identifier for entries and presets"""
    return uuid.uuid4().hex[:12]


def clean_tags(tags: Optional[List[str]]) -> List[str]:
    """Strip labels, drop empty ones and suppress duplicates keeping first-seen order"""
    result: List[str] = []
    for tag in tags or []:
        tag = str(tag).strip()
        if tag and tag not in result:
            result.append(tag)
    return result


class Category(str, Enum):
    """
    The closed set of ledger categories.

    investment: time that builds something (study, deep work, exercise)
    maintenance: time that keeps life running (sleep, meals, chores)
    drain: time that is simply lost
    """
    INVESTMENT = "investment"
    MAINTENANCE = "maintenance"
    DRAIN = "drain"


UNRECONCILED = "unreconciled"


class Granularity(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    CUSTOM = "custom"


class TimeEntry(BaseModel):
    """
    A committed, day-bounded interval.

    duration is always round((end_time - start_time) / 1 minute); the store
    recomputes it on every mutation.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1, max_length=200)
    category: Category
    start_time: datetime.datetime
    end_time: datetime.datetime
    duration: int = 0  # minutes
    tags: List[str] = Field(default_factory=list)
    note: Optional[str] = None

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, value: List[str]) -> List[str]:
        return clean_tags(value)

    def expected_duration(self) -> int:
        return round_minutes(self.end_time - self.start_time)

    @property
    def day(self) -> datetime.date:
        return self.start_time.date()


class EntryDraft(BaseModel):
    """
    A candidate interval that has not been committed yet.

    The title may be empty here; the store rejects it on submission.
    """
    title: str = ""
    category: Category = Category.INVESTMENT
    start_time: datetime.datetime
    end_time: datetime.datetime
    tags: List[str] = Field(default_factory=list)
    note: Optional[str] = None

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, value: List[str]) -> List[str]:
        return clean_tags(value)


class TimePreset(BaseModel):
    """
    A reusable template used to pre-fill a candidate.

    Times are plain time-of-day strings; "23:00" to "07:00" means the
    interval ends the next morning.
    """
    id: str = Field(default_factory=new_id)
    title: str = Field(..., min_length=1, max_length=200)
    category: Category
    start_time_str: str
    end_time_str: str
    tags: List[str] = Field(default_factory=list)

    @field_validator('tags')
    @classmethod
    def normalize_tags(cls, value: List[str]) -> List[str]:
        return clean_tags(value)

    @field_validator('start_time_str', 'end_time_str')
    @classmethod
    def check_time_of_day(cls, value: str) -> str:
        parsed = parse_time_of_day(value)
        return parsed.strftime("%H:%M")

    @property
    def start_hour(self) -> int:
        return parse_time_of_day(self.start_time_str).hour

    def to_draft(self, day: datetime.date) -> EntryDraft:
        """Candidate on the given day; end may be earlier than start (wraps past midnight)"""
        return EntryDraft(
            title=self.title,
            category=self.category,
            start_time=datetime.datetime.combine(day, parse_time_of_day(self.start_time_str)),
            end_time=datetime.datetime.combine(day, parse_time_of_day(self.end_time_str)),
            tags=list(self.tags),
        )


def default_presets() -> List[TimePreset]:
    return [
        TimePreset(id="p1", title="Sleep", category=Category.MAINTENANCE,
                   start_time_str="23:00", end_time_str="07:00", tags=["sleep"]),
        TimePreset(id="p2", title="Lunch", category=Category.MAINTENANCE,
                   start_time_str="12:00", end_time_str="13:00", tags=["meal"]),
    ]


class ActiveTask(BaseModel):
    """The single running timer, if any"""
    title: str = Field(..., min_length=1, max_length=200)
    category: Category
    start_time: datetime.datetime


class ReportingPeriod(BaseModel):
    """A resolved [start, end] window; derived per query, never stored"""
    granularity: Granularity
    start: datetime.datetime
    end: datetime.datetime
    label: str

    def contains(self, instant: datetime.datetime) -> bool:
        return self.start <= instant <= self.end


class Gap(BaseModel):
    """
    An uncovered same-day interval longer than the reporting threshold.
    """
    start: datetime.datetime
    end: datetime.datetime
    is_live: bool = False

    @property
    def minutes(self) -> float:
        return minutes_between(self.start, self.end)

    @property
    def hours(self) -> float:
        return round(self.minutes / 60, 1)

    @property
    def date_label(self) -> str:
        return self.start.strftime("%m/%d")

    @property
    def start_label(self) -> str:
        return self.start.strftime("%H:%M")

    @property
    def end_label(self) -> str:
        return self.end.strftime("%H:%M")

    @property
    def duration_label(self) -> str:
        return f"{self.hours:.1f}h"


class CategoryTotal(BaseModel):
    """One bucket of a period breakdown"""
    name: str
    minutes: float


class PeriodSummary(BaseModel):
    """Aggregate figures for one reporting period"""
    period: ReportingPeriod
    entry_count: int = 0
    logged_minutes: int = 0
    total_possible_minutes: float = 0.0
    unreconciled_minutes: float = 0.0
    category_totals: Dict[str, float] = Field(default_factory=dict)
    coverage_percent: int = 100

    @property
    def is_empty(self) -> bool:
        return not any(v > 0 for v in self.category_totals.values())

    def chart_buckets(self) -> List[CategoryTotal]:
        """Non-zero buckets, or a single placeholder bucket when there is nothing to show"""
        if self.is_empty:
            return [CategoryTotal(name="empty", minutes=1)]
        return [
            CategoryTotal(name=name, minutes=minutes)
            for name, minutes in self.category_totals.items()
            if minutes > 0
        ]


class AIInsight(BaseModel):
    """Result of the optional insight collaborator"""
    summary: str
    suggestions: List[str] = Field(default_factory=list)
    productivity_score: float = Field(default=0, ge=0, le=100)


class LedgerDocument(BaseModel):
    """
    Everything that is persisted, as one versioned document.
    """
    version: int = STORAGE_VERSION
    entries: List[TimeEntry] = Field(default_factory=list)
    presets: List[TimePreset] = Field(default_factory=default_presets)
    active_task: Optional[ActiveTask] = None
    selected_date: datetime.datetime = Field(
        default_factory=lambda: datetime.datetime.combine(datetime.date.today(), datetime.time.min)
    )
    user: Dict[str, Any] = Field(default_factory=dict)  # Opaque profile data


class UserPreferences(BaseModel):
    """
    User configuration and preferences.

    This allows users to customize behavior without touching code.
    """
    model_config = ConfigDict(from_attributes=True)

    # Reconciliation settings
    gap_threshold_minutes: int = Field(default=15, ge=0, description="Shortest gap worth reporting")
    timeline_gap_minutes: int = Field(default=5, ge=0, description="Shortest gap shown between entries of a day")
    week_start: str = Field(default="sunday", description="Day that starts a reporting week")

    # Entry defaults
    default_category: Category = Category.INVESTMENT

    # Report settings
    default_report_template: str = "period_report.txt"
    reports_directory: Optional[str] = None

    # UI settings
    language: str = Field(default="auto", description="UI language: 'en', 'zh', or 'auto' (detect from system)")

    # Insight settings
    gemini_api_key: Optional[str] = Field(default=None, description="API key for AI insights")
    gemini_model: str = Field(default="gemini-2.0-flash", description="Model used for AI insights")
    insight_timeout_seconds: int = Field(default=30, ge=1)

    @field_validator('week_start')
    @classmethod
    def check_week_start(cls, value: str) -> str:
        value = value.lower()
        if value not in WEEKDAY_NUMBERS:
            raise ValueError(f"Unknown weekday: {value}")
        return value

    @property
    def week_start_number(self) -> int:
        """Python weekday number (Monday=0) of the first day of a week"""
        return WEEKDAY_NUMBERS[self.week_start]


WEEKDAY_NUMBERS = {
    "monday": 0,
    "tuesday": 1,
    "wednesday": 2,
    "thursday": 3,
    "friday": 4,
    "saturday": 5,
    "sunday": 6,
}
