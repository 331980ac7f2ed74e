"""
Tests for reporting period resolution.
"""

import datetime
import pytest

from timeledger.domain.errors import ValidationError
from timeledger.domain.models import Granularity
from timeledger.domain.periods import recent_periods, resolve
from timeledger.domain.timeutil import LAST_INSTANT, day_index
from timeledger.i18n import set_language
from tests.conftest import at


class TestWeek:
    def test_sunday_reference_starts_that_sunday(self):
        period = resolve(at(10, 15), Granularity.WEEK)

        assert period.start == at(10, 0)
        assert period.end == datetime.datetime.combine(datetime.date(2024, 3, 16), LAST_INSTANT)
        # ISO week of the Sunday, not of the following Monday
        assert period.label == "2024 Week 10"

    @pytest.mark.parametrize("day", [10, 11, 13, 16])
    def test_every_day_of_the_week_resolves_to_same_range(self, day):
        assert resolve(at(day, 12), "week").start == at(10, 0)

    def test_monday_start(self):
        period = resolve(at(10, 15), Granularity.WEEK, week_start=0)
        assert period.start == at(4, 0)

    def test_day_index_is_sunday_based(self):
        assert day_index(datetime.date(2024, 3, 10)) == 0
        assert day_index(datetime.date(2024, 3, 16)) == 6


class TestMonthAndYear:
    def test_leap_february(self):
        period = resolve(at(15, 12, month=2), Granularity.MONTH)
        assert period.start == at(1, 0, month=2)
        assert period.end.date() == datetime.date(2024, 2, 29)
        assert period.label == "2024-02"

    def test_year(self):
        period = resolve(at(15, 12), Granularity.YEAR)
        assert period.start == datetime.datetime(2024, 1, 1)
        assert period.end == datetime.datetime.combine(datetime.date(2024, 12, 31), LAST_INSTANT)
        assert period.label == "2024"


class TestCustom:
    def test_inclusive_whole_days(self):
        period = resolve(at(15, 12), Granularity.CUSTOM,
                         custom_start=datetime.date(2024, 3, 1), custom_end=datetime.date(2024, 3, 3))
        assert period.start == at(1, 0)
        assert period.end.date() == datetime.date(2024, 3, 3)
        assert period.end.time() == LAST_INSTANT

    def test_single_day(self):
        day = datetime.date(2024, 3, 5)
        period = resolve(at(15, 12), "custom", custom_start=day, custom_end=day)
        assert period.contains(at(5, 23, 59))

    def test_reversed_range(self):
        with pytest.raises(ValidationError):
            resolve(at(15, 12), Granularity.CUSTOM,
                    custom_start=datetime.date(2024, 3, 3), custom_end=datetime.date(2024, 3, 1))

    def test_missing_bound(self):
        with pytest.raises(ValidationError):
            resolve(at(15, 12), Granularity.CUSTOM, custom_start=datetime.date(2024, 3, 3))


def test_unknown_granularity():
    with pytest.raises(ValidationError):
        resolve(at(15, 12), "fortnight")


def test_chinese_labels():
    set_language("zh")
    assert resolve(at(10, 15), Granularity.WEEK).label == "2024年 第10周"


class TestRecentPeriods:
    def test_months_newest_first(self):
        months = recent_periods(at(15, 12), Granularity.MONTH, count=4)
        assert [p.label for p in months] == ["2024-03", "2024-02", "2024-01", "2023-12"]

    def test_default_counts(self):
        assert len(recent_periods(at(15, 12), Granularity.WEEK)) == 12
        assert len(recent_periods(at(15, 12), Granularity.YEAR)) == 3
        assert recent_periods(at(15, 12), Granularity.CUSTOM) == []
