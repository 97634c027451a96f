"""
Abstract Sheet Source Interface

DESIGN DECISION: The sync engine never talks to Google directly.
It asks a SheetSource for raw cell values. This allows us to:
1. Swap the transport (gspread today) without touching the pipeline
2. Feed canned tab data in tests
3. Keep network errors in one small, well-defined taxonomy

The source is read-only: the spreadsheet is the system of record and
the engine only mirrors it.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Optional

from pydantic import BaseModel, Field


# Tabs the engine reads, in fetch order
MAIN_TAB = "Main"
LABOUR_TAB = "Labour"
PARTIES_TAB = "Parties"
SITES_TAB = "Sites"
REQUIRED_TABS = (MAIN_TAB, LABOUR_TAB, PARTIES_TAB, SITES_TAB)

SPREADSHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")


def extract_spreadsheet_id(sheet_url: str) -> Optional[str]:
    """
    Pull the spreadsheet id out of a sheet URL.

    >>> extract_spreadsheet_id("https://docs.google.com/spreadsheets/d/abc-123/edit#gid=0")
    'abc-123'
    """
    match = SPREADSHEET_ID_PATTERN.search(sheet_url or "")
    return match.group(1) if match else None


def require_spreadsheet_id(sheet_url: str) -> str:
    """Like extract_spreadsheet_id, but a bad URL is a ConfigurationError."""
    spreadsheet_id = extract_spreadsheet_id(sheet_url)
    if spreadsheet_id is None:
        raise ConfigurationError("Invalid Sheet URL")
    return spreadsheet_id


class TabFetchResult(BaseModel):
    """Outcome of fetching one tab. Exactly one of rows/error is meaningful."""
    tab: str
    rows: list[list[str]] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SheetSource(ABC):
    """
    Abstract interface for reading a spreadsheet.

    Implementations must be safe to call concurrently from one event loop.
    """

    @abstractmethod
    async def fetch_values(
        self,
        spreadsheet_id: str,
        api_key: str,
        range_name: str,
    ) -> list[list[str]]:
        """
        Read a range of cells.

        Args:
            spreadsheet_id: Id extracted from the sheet URL
            api_key: Access key
            range_name: A1 notation including the tab, e.g. ``Main!A1:J1000``

        Returns:
            Rows of cell strings, header row included

        Raises:
            TransportError: Non-2xx response
            NetworkError: The request never got a response
        """
        pass

    @abstractmethod
    async def fetch_metadata(
        self,
        spreadsheet_id: str,
        api_key: str,
    ) -> dict[str, Any]:
        """
        Read spreadsheet metadata (title, tab list).

        Raises:
            TransportError: Non-2xx response
            NetworkError: The request never got a response
        """
        pass


def sheet_titles(metadata: dict[str, Any]) -> list[str]:
    """Tab titles from a spreadsheet metadata document."""
    return [
        sheet.get("properties", {}).get("title", "")
        for sheet in metadata.get("sheets", [])
    ]


class SheetsError(Exception):
    """Base exception for sheet access."""
    pass


class ConfigurationError(SheetsError):
    """Credentials missing or the sheet URL cannot be understood."""
    pass


class TransportError(SheetsError):
    """The sheet service answered with an error status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class NetworkError(TransportError):
    """The request failed before any response arrived."""
    pass
