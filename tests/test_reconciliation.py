"""
Tests for period aggregation and gap finding.
"""

import datetime
import pytest

from timeledger.domain import aggregator
from timeledger.domain.gaps import day_timeline, draft_for_gap, find_gaps, live_gap, suggest_preset
from timeledger.domain.models import Category, Gap, UNRECONCILED, default_presets
from timeledger.domain.periods import custom_period, resolve
from timeledger.domain.store import EntryStore
from timeledger.domain.timeutil import LAST_INSTANT
from tests.conftest import at, draft


def one_day(day: int = 10):
    return custom_period(datetime.date(2024, 3, day), datetime.date(2024, 3, day))


@pytest.fixture
def store():
    store = EntryStore()
    store.add(draft("Standup", at(10, 9), at(10, 9, 30)))
    return store


class TestSummary:
    def test_elapsed_day(self, store):
        summary = aggregator.summarize(store.entries, one_day(), now=at(11, 8))

        assert summary.entry_count == 1
        assert summary.logged_minutes == 30
        assert summary.total_possible_minutes == pytest.approx(1440, abs=0.001)
        assert summary.unreconciled_minutes == pytest.approx(1410, abs=0.001)
        # 30 / 1440 = 2.08%
        assert summary.coverage_percent == 2

    def test_partial_today(self, store):
        summary = aggregator.summarize(store.entries, one_day(), now=at(10, 10))

        assert summary.total_possible_minutes == 600
        assert summary.unreconciled_minutes == 570
        assert summary.coverage_percent == 5

    def test_future_period_is_fully_covered(self, store):
        summary = aggregator.summarize(store.entries, one_day(20), now=at(11, 8))

        assert summary.total_possible_minutes == 0
        assert summary.unreconciled_minutes == 0
        assert summary.coverage_percent == 100
        assert summary.is_empty
        assert [b.name for b in summary.chart_buckets()] == ["empty"]

    def test_category_buckets(self, store):
        store.add(draft("Chores", at(10, 10), at(10, 11), Category.MAINTENANCE))
        store.add(draft("Doomscroll", at(10, 22), at(10, 22, 45), Category.DRAIN))
        summary = aggregator.summarize(store.entries, one_day(), now=at(11, 8))

        assert summary.category_totals["investment"] == 30
        assert summary.category_totals["maintenance"] == 60
        assert summary.category_totals["drain"] == 45
        assert summary.category_totals[UNRECONCILED] == pytest.approx(1440 - 135, abs=0.001)
        assert {b.name for b in summary.chart_buckets()} == {
            "investment", "maintenance", "drain", UNRECONCILED,
        }

    def test_overlogging_is_capped(self):
        store = EntryStore()
        store.add(draft("Work", at(10, 8), at(10, 10)))
        summary = aggregator.summarize(store.entries, one_day(), now=at(10, 1))

        assert summary.unreconciled_minutes == 0
        assert summary.coverage_percent == 100

    def test_entries_are_attributed_by_start(self):
        store = EntryStore()
        store.add(draft("Sleep", at(9, 23), at(9, 7)))
        summary = aggregator.summarize(store.entries, one_day(), now=at(11, 8))
        assert summary.logged_minutes == 420


class TestGaps:
    def test_gaps_are_most_recent_first(self, store):
        gaps = find_gaps(store.entries, one_day(), now=at(11, 8))

        assert [(g.start, g.end) for g in gaps] == [
            (at(10, 9, 30), datetime.datetime.combine(datetime.date(2024, 3, 10), LAST_INSTANT)),
            (at(10, 0), at(10, 9)),
        ]

    def test_threshold_is_exclusive(self):
        store = EntryStore()
        store.add(draft("A", at(10, 0), at(10, 9)))
        store.add(draft("B", at(10, 9, 15), at(10, 23, 59)))
        assert find_gaps(store.entries, one_day(), now=at(11, 8), threshold_minutes=15) == []
        assert len(find_gaps(store.entries, one_day(), now=at(11, 8), threshold_minutes=14)) == 1

    def test_today_stops_at_now(self, store):
        gaps = find_gaps(store.entries, one_day(), now=at(10, 12))
        assert gaps[0].end == at(10, 12)

    def test_future_days_are_skipped(self, store):
        week = resolve(at(10, 12), "week")
        gaps = find_gaps(store.entries, week, now=at(10, 12))
        assert all(g.start.date() == datetime.date(2024, 3, 10) for g in gaps)

    def test_gaps_never_cross_midnight(self):
        week = resolve(at(10, 12), "week")
        gaps = find_gaps([], week, now=at(13, 6))
        assert all(g.start.date() == g.end.date() for g in gaps)
        assert len(gaps) == 4

    def test_entries_count_for_their_start_day_only(self):
        """An unsplit entry running past midnight leaves the next morning open"""
        store = EntryStore()
        entry, = store.add(draft("Night", at(10, 22), at(10, 23)))
        store.update(entry.id, end_time=at(11, 2))
        store.add(draft("Morning", at(11, 2), at(11, 8)))

        gaps = find_gaps(store.entries, one_day(11), now=at(11, 8))
        assert gaps[0].start == at(11, 0)


class TestLiveGap:
    def test_grows_from_last_entry(self, store):
        gap = live_gap(store.entries, now=at(10, 10), task_running=False)
        assert gap == Gap(start=at(10, 9, 30), end=at(10, 10), is_live=True)

    def test_suppressed_while_running(self, store):
        assert live_gap(store.entries, now=at(10, 10), task_running=True) is None

    def test_below_threshold(self, store):
        assert live_gap(store.entries, now=at(10, 9, 40), task_running=False) is None

    def test_starts_at_midnight_without_entries(self):
        gap = live_gap([], now=at(10, 1), task_running=False)
        assert gap.start == at(10, 0)


class TestTimeline:
    def test_interleaves_gaps(self, store):
        store.add(draft("Review", at(10, 11), at(10, 12)))
        items = day_timeline(store.entries, datetime.date(2024, 3, 10), now=at(11, 8))

        assert [type(i).__name__ for i in items] == ["TimeEntry", "Gap", "TimeEntry"]
        assert items[1].minutes == 90

    def test_today_gets_live_tail(self, store):
        items = day_timeline(store.entries, datetime.date(2024, 3, 10), now=at(10, 10))
        assert items[-1].is_live

    def test_no_live_tail_while_running(self, store):
        items = day_timeline(store.entries, datetime.date(2024, 3, 10), now=at(10, 10), task_running=True)
        assert len(items) == 1


class TestQuickLog:
    def test_suggests_preset_within_an_hour(self):
        presets = default_presets()
        assert suggest_preset(at(10, 22, 10), presets).id == "p1"
        assert suggest_preset(at(10, 13, 5), presets).id == "p2"
        assert suggest_preset(at(10, 16), presets) is None

    def test_draft_uses_gap_bounds(self):
        gap = Gap(start=at(10, 12), end=at(10, 12, 40))
        candidate = draft_for_gap(gap, default_presets()[1])
        assert (candidate.start_time, candidate.end_time) == (gap.start, gap.end)
        assert candidate.title == "Lunch"
        assert candidate.category == Category.MAINTENANCE

    def test_draft_without_preset_needs_title(self):
        candidate = draft_for_gap(Gap(start=at(10, 12), end=at(10, 13)), None, Category.DRAIN)
        assert candidate.title == ""
        assert candidate.category == Category.DRAIN
