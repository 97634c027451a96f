"""
Sheet Services Package

Read-only access to the source spreadsheet.
"""

from expenseman.services.sheets.interface import (
    LABOUR_TAB,
    MAIN_TAB,
    PARTIES_TAB,
    REQUIRED_TABS,
    SITES_TAB,
    ConfigurationError,
    NetworkError,
    SheetSource,
    SheetsError,
    TabFetchResult,
    TransportError,
    extract_spreadsheet_id,
    require_spreadsheet_id,
    sheet_titles,
)
from expenseman.services.sheets.google_sheets import GoogleSheetsSource

__all__ = [
    # Tabs
    "LABOUR_TAB",
    "MAIN_TAB",
    "PARTIES_TAB",
    "REQUIRED_TABS",
    "SITES_TAB",
    # Interface
    "SheetSource",
    "TabFetchResult",
    "extract_spreadsheet_id",
    "require_spreadsheet_id",
    "sheet_titles",
    # Exceptions
    "ConfigurationError",
    "NetworkError",
    "SheetsError",
    "TransportError",
    # Google Sheets implementation
    "GoogleSheetsSource",
]
