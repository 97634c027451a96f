"""
Configuration Management for ExpenseMan

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The sheet location and access key are owned by the settings layer;
the sync engine only reads them. Everything has a safe default so the
engine can start in the "idle" state when nothing is configured yet.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GoogleSheetsSettings(BaseSettings):
    """Google Sheets source configuration."""

    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_SHEETS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    sheet_url: str = Field(
        default="",
        description="Full URL of the spreadsheet (must contain /spreadsheets/d/<id>)"
    )
    api_key: str = Field(
        default="",
        description="Google Sheets API key with read access"
    )

    # Range read from every tab
    cell_range: str = Field(
        default="A1:J1000",
        description="A1 range fetched from each tab"
    )
    fetch_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per tab fetch on network failure"
    )

    @field_validator('sheet_url', 'api_key')
    @classmethod
    def strip_value(cls, v: str) -> str:
        """Pasted credentials often carry stray whitespace."""
        return v.strip()


class SyncSettings(BaseSettings):
    """Sync engine behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    poll_interval_seconds: float = Field(
        default=30.0,
        ge=5.0,
        le=3600.0,
        description="Seconds between automatic sync cycles"
    )
    known_users: str = Field(
        default="Rohit,Gulshan",
        description="Comma-separated operators that always get a balance row"
    )
    data_dir: str = Field(
        default=".expenseman",
        description="Directory for locally persisted tasks and habits"
    )

    @property
    def known_users_list(self) -> list[str]:
        """Get known users as a list."""
        return [u.strip() for u in self.known_users.split(",") if u.strip()]

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir)


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the chat assistant."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    api_key: str = Field(
        default="",
        description="Gemini API key (chat is disabled when empty)"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=2048,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def google_sheets(self) -> GoogleSheetsSettings:
        return GoogleSheetsSettings()

    @property
    def sync(self) -> SyncSettings:
        return SyncSettings()

    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    try:
        sheets = settings.google_sheets
        results["google_sheets"] = bool(sheets.sheet_url and sheets.api_key)
        if not results["google_sheets"]:
            results["google_sheets_error"] = "Sheet URL or API key missing"
    except Exception as e:
        results["google_sheets"] = False
        results["google_sheets_error"] = str(e)

    try:
        _ = settings.sync
        results["sync"] = True
    except Exception as e:
        results["sync"] = False
        results["sync_error"] = str(e)

    try:
        results["gemini"] = bool(settings.gemini.api_key)
        if not results["gemini"]:
            results["gemini_error"] = "Gemini API key missing"
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)

    return results
