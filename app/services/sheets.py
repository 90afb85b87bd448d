"""Google Sheets client for the lead mirror.

Exposes the two operations the sync needs: append one lead row and rewrite a
single cell. Nothing here raises for ordinary failures (missing config, quota,
network, auth). Every call returns a SyncResult instead.
"""

import asyncio
import logging
import re
from typing import Any, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from app.services.sync_state import SyncResult

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Row layout: id, name, email, phone, course, college, year, status, created_at, reminder sent
FIRST_COLUMN = "A"
LAST_COLUMN = "J"
STATUS_COLUMN = "H"

_UPDATED_RANGE_RE = re.compile(r"![A-Z]+(\d+)(?::[A-Z]+\d+)?$")


def parse_row_ref(updated_range: Optional[str]) -> Optional[int]:
    """Extract the first row number from an A1 range like 'Sheet1!A5:J5'."""
    if not updated_range:
        return None
    match = _UPDATED_RANGE_RE.search(updated_range)
    if not match:
        return None
    return int(match.group(1))


def _quote_sheet_name(name: str) -> str:
    if re.match(r"^[A-Za-z0-9_]+$", name):
        return name
    return "'" + name.replace("'", "''") + "'"


def _build_service(service_account_file: str, api_key: str):
    """Build a Sheets v4 service, preferring a service account over an API key."""
    if service_account_file:
        try:
            credentials = service_account.Credentials.from_service_account_file(
                service_account_file, scopes=SCOPES
            )
            service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
            logger.info("Google Sheets API initialized with service account")
            return service
        except (OSError, ValueError) as e:
            logger.warning("Service account file unusable (%s), falling back to API key", e)

    if api_key:
        service = build("sheets", "v4", developerKey=api_key, cache_discovery=False)
        logger.info("Google Sheets API initialized with API key")
        return service

    logger.warning("No Google Sheets API credentials found")
    return None


class SheetsClient:
    """Thin wrapper over the Sheets values API for one worksheet."""

    def __init__(self, service=None, spreadsheet_id: str = "", sheet_name: str = "Sheet1"):
        self._service = service
        self.spreadsheet_id = spreadsheet_id
        self.sheet_name = sheet_name
        self._warned_unavailable = False

    @classmethod
    def from_settings(cls, settings) -> "SheetsClient":
        """Build a client from app settings. Returns an unavailable client when not configured."""
        if not settings.sheets_configured:
            logger.warning("Google Sheets not configured - Google Sheets sync disabled")
            return cls(sheet_name=settings.GOOGLE_SHEET_NAME)

        try:
            service = _build_service(settings.GOOGLE_SERVICE_ACCOUNT_FILE, settings.GOOGLE_SHEETS_API_KEY)
        except Exception as e:
            logger.error("Error initializing Google Sheets: %s", e)
            service = None

        return cls(service, settings.GOOGLE_SHEETS_ID, settings.GOOGLE_SHEET_NAME)

    def is_available(self) -> bool:
        return self._service is not None and bool(self.spreadsheet_id)

    def _range(self, a1: str) -> str:
        return f"{_quote_sheet_name(self.sheet_name)}!{a1}"

    def _unavailable(self, action: str) -> SyncResult:
        if not self._warned_unavailable:
            logger.warning("Google Sheets not configured, skipping %s", action)
            self._warned_unavailable = True
        return SyncResult.unavailable()

    async def _execute(self, request) -> dict:
        # googleapiclient is blocking; keep it off the event loop
        return await asyncio.to_thread(request.execute)

    async def append_row(self, values: List[Any]) -> SyncResult:
        """Append one row and return its 1-based row number as row_ref."""
        if not self.is_available():
            return self._unavailable("append")

        try:
            request = self._service.spreadsheets().values().append(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(f"{FIRST_COLUMN}:{LAST_COLUMN}"),
                valueInputOption="USER_ENTERED",
                insertDataOption="INSERT_ROWS",
                body={"values": [values]},
            )
            response = await self._execute(request)
        except HttpError as e:
            logger.error("Google Sheets API error appending row: %s", e)
            return SyncResult.failed(f"Google Sheets API error: {e.resp.status}")
        except Exception as e:
            logger.error("Unexpected error appending row to Google Sheets: %s", e)
            return SyncResult.failed(str(e))

        updated_range = (response or {}).get("updates", {}).get("updatedRange")
        row_ref = parse_row_ref(updated_range)
        if row_ref is None:
            logger.error("No usable updated range returned from Google Sheets: %r", updated_range)
            return SyncResult.failed("No row ID returned")

        return SyncResult.synced(row_ref)

    async def update_cell(self, row_ref: int, column: str, value: Any) -> SyncResult:
        """Overwrite exactly one cell, e.g. column 'H' of row 5."""
        if not self.is_available():
            return self._unavailable("cell update")

        try:
            request = self._service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=self._range(f"{column}{row_ref}"),
                valueInputOption="USER_ENTERED",
                body={"values": [[value]]},
            )
            await self._execute(request)
        except HttpError as e:
            logger.error("Google Sheets API error updating %s%d: %s", column, row_ref, e)
            return SyncResult.failed(f"Google Sheets API error: {e.resp.status}")
        except Exception as e:
            logger.error("Unexpected error updating %s%d in Google Sheets: %s", column, row_ref, e)
            return SyncResult.failed(str(e))

        return SyncResult.synced(row_ref)
