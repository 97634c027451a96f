"""
Tests for environment-driven configuration.
"""

import pytest
from pydantic import ValidationError

from expenseman.config import (
    GoogleSheetsSettings,
    SyncSettings,
    get_settings,
    validate_all_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test away from any real .env file and with a fresh cache."""
    monkeypatch.chdir(tmp_path)
    for name in ("GOOGLE_SHEETS_SHEET_URL", "GOOGLE_SHEETS_API_KEY",
                 "SYNC_POLL_INTERVAL_SECONDS", "SYNC_KNOWN_USERS", "GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for settings classes."""

    def test_defaults(self):
        sheets = GoogleSheetsSettings()
        sync = SyncSettings()

        assert sheets.sheet_url == ""
        assert sheets.cell_range == "A1:J1000"
        assert sync.poll_interval_seconds == 30.0
        assert sync.known_users_list == ["Rohit", "Gulshan"]

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_SHEETS_SHEET_URL", "  https://docs.google.com/spreadsheets/d/x  ")
        monkeypatch.setenv("SYNC_KNOWN_USERS", "Amit, ,Priya")

        assert get_settings().google_sheets.sheet_url == "https://docs.google.com/spreadsheets/d/x"
        assert get_settings().sync.known_users_list == ["Amit", "Priya"]

    def test_poll_interval_bounds(self, monkeypatch):
        monkeypatch.setenv("SYNC_POLL_INTERVAL_SECONDS", "1")
        with pytest.raises(ValidationError):
            SyncSettings()

    def test_validate_all_settings_reports_missing(self):
        results = validate_all_settings()

        assert results["google_sheets"] is False
        assert "google_sheets_error" in results
        assert results["sync"] is True
        assert results["gemini"] is False
