"""
Tests for settings, translations and command line parsing.
"""

import datetime
import pytest

from main import build_parser, parse_instant, parse_tags, report_output_path
from timeledger.domain.models import Category, UserPreferences
from timeledger.domain.periods import custom_period
from timeledger.i18n import (
    get_available_languages, get_language, on_language_changed, remove_language_callback,
    set_language, tr,
)
from timeledger.infra.config import Settings


@pytest.fixture
def settings_dirs(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TIMELEDGER_CONFIG_DIR", str(tmp_path / "config-home"))
    monkeypatch.setenv("TIMELEDGER_DATA_DIR", str(tmp_path / "data"))
    return tmp_path


class TestSettings:
    def test_defaults(self, settings_dirs):
        settings = Settings()

        assert settings.preferences.gap_threshold_minutes == 15
        assert settings.preferences.week_start_number == 6
        assert settings.get_db_url().endswith("timeledger.db")
        assert settings.storage_key == "time-ledger-v5-storage"

    def test_yaml_preferences(self, settings_dirs):
        config = settings_dirs / "config"
        config.mkdir()
        (config / "settings.yaml").write_text(
            "gap_threshold_minutes: 30\nweek_start: Monday\ndefault_category: drain\n", encoding="utf-8")

        prefs = Settings().preferences
        assert prefs.gap_threshold_minutes == 30
        assert prefs.week_start_number == 0
        assert prefs.default_category == Category.DRAIN

    def test_save_and_reload(self, settings_dirs):
        settings = Settings()
        settings.preferences = UserPreferences(language="zh", timeline_gap_minutes=10)
        settings.save_preferences()

        assert Settings().preferences.timeline_gap_minutes == 10

    def test_env_database_url(self, settings_dirs, monkeypatch):
        monkeypatch.setenv("TIMELEDGER_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
        assert Settings().get_db_url() == "sqlite+aiosqlite:///:memory:"

    def test_bad_week_start(self):
        with pytest.raises(ValueError):
            UserPreferences(week_start="someday")


class TestTranslations:
    def test_fallback_to_key(self):
        assert tr("no.such.key") == "no.such.key"

    def test_switch_notifies(self):
        seen = []
        on_language_changed(seen.append)
        try:
            set_language("zh")
            assert tr("category.drain") == "损耗"
            set_language("fr")
            assert get_language() == "en"
        finally:
            remove_language_callback(seen.append)
        assert seen == ["zh", "en"]

    def test_available(self):
        assert [code for code, _ in get_available_languages()] == ["en", "zh"]


class TestCommandLine:
    def test_parse_instant(self):
        day = datetime.date(2024, 3, 10)
        assert parse_instant("7:05", day) == datetime.datetime(2024, 3, 10, 7, 5)
        assert parse_instant("2024-03-11T01:00", day) == datetime.datetime(2024, 3, 11, 1, 0)

    def test_parse_tags(self):
        assert parse_tags(None) is None
        assert parse_tags("a,b") == ["a", "b"]

    def test_add_arguments(self):
        args = build_parser().parse_args(
            ["add", "Sleep", "--start", "23:00", "--end", "07:00", "--category", "maintenance"])
        assert (args.command, args.title, args.category) == ("add", "Sleep", "maintenance")

    def test_summary_defaults_to_week(self):
        args = build_parser().parse_args(["summary"])
        assert args.period == "week"
        assert args.start is None

    def test_report_goes_to_reports_directory(self, tmp_path):
        period = custom_period(datetime.date(2024, 3, 10), datetime.date(2024, 3, 16))
        prefs = UserPreferences(reports_directory=str(tmp_path))

        assert report_output_path(None, prefs, period, "period_report.md") == \
            tmp_path / "custom_2024-03-10.md"
        assert report_output_path(tmp_path / "mine.txt", prefs, period, "period_report.md") == \
            tmp_path / "mine.txt"
        assert report_output_path(None, UserPreferences(), period, "period_report.md") is None
