"""
Google Sheets Source Implementation

DESIGN DECISION: The dashboard reads the spreadsheet with a plain API key
rather than a service account because:
1. The business owner only has to share the sheet and paste a key
2. The engine never writes back, so read access is enough
3. No credentials file has to live next to the app

gspread does the HTTP work. Its client is blocking, so every call is
pushed to a worker thread; the event loop stays free and the four tab
fetches of a sync cycle really run side by side.

TRADEOFFS:
- Only network failures are retried; an HTTP error status is final
- No timeout beyond what the underlying HTTP session applies
"""

import asyncio
from typing import Any, Optional

import gspread
import structlog
from gspread.exceptions import APIError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expenseman.config import get_settings
from expenseman.services.sheets.interface import (
    NetworkError,
    SheetSource,
    TransportError,
)


logger = structlog.get_logger(__name__)


def _status_code(error: APIError) -> Optional[int]:
    response = getattr(error, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status
    code = getattr(error, "code", None)
    return code if isinstance(code, int) else None


def _error_message(error: APIError) -> str:
    details = getattr(error, "error", None)
    if isinstance(details, dict) and details.get("message"):
        return str(details["message"])
    return str(error) or "Fetch failed"


class GoogleSheetsSource(SheetSource):
    """
    Read-only Google Sheets access using an API key.

    One gspread client is kept per access key; changing the key in
    settings simply builds a new client on the next call.
    """

    def __init__(self, retry_attempts: Optional[int] = None):
        settings = get_settings().google_sheets
        self._retry_attempts = retry_attempts or settings.fetch_retry_attempts
        self._api_key: Optional[str] = None
        self._client: Optional[gspread.Client] = None

    def _get_client(self, api_key: str) -> gspread.Client:
        """Get or create the gspread client for this key."""
        if self._client is None or self._api_key != api_key:
            self._client = gspread.api_key(api_key)
            self._api_key = api_key
        return self._client

    def _call(self, api_key: str, method: str, *args: Any) -> Any:
        """Run one blocking HTTP call, translating errors."""
        try:
            http_client = self._get_client(api_key).http_client
            return getattr(http_client, method)(*args)
        except APIError as e:
            status = _status_code(e)
            raise TransportError(_error_message(e), status_code=status) from e
        except Exception as e:
            raise NetworkError(f"Network error: {e}") from e

    async def _request(self, api_key: str, method: str, *args: Any) -> Any:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(NetworkError),
            reraise=True,
        ):
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.info(
                        "sheets_request_retry",
                        method=method,
                        attempt=attempt.retry_state.attempt_number,
                    )
                return await asyncio.to_thread(self._call, api_key, method, *args)

    async def fetch_values(
        self,
        spreadsheet_id: str,
        api_key: str,
        range_name: str,
    ) -> list[list[str]]:
        """Read a range; cells are returned as strings."""
        data = await self._request(api_key, "values_get", spreadsheet_id, range_name)
        values = (data or {}).get("values") or []
        return [
            ["" if cell is None else str(cell) for cell in row]
            for row in values
        ]

    async def fetch_metadata(
        self,
        spreadsheet_id: str,
        api_key: str,
    ) -> dict[str, Any]:
        """Read spreadsheet metadata (title and tabs)."""
        return await self._request(api_key, "fetch_sheet_metadata", spreadsheet_id)
