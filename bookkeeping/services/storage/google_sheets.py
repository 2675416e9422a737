"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as an optional backend because:
1. The office can look at (and back up) its books without extra tooling
2. No database setup required
3. Several machines can point at the same spreadsheet

TRADEOFFS:
- One cell holds one collection, and a cell is capped at 50,000 characters
  (a few hundred transactions per account)
- No transactions (last write wins)
- Every read is a network round trip

The implementation follows the abstract interface, so the rest of the
application does not know which backend it is talking to.
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from bookkeeping.config import GoogleSheetsSettings, get_settings
from bookkeeping.services.storage.interface import (
    ConnectionError,
    KeyValueStore,
    StorageError,
)


STORE_COLUMNS = ["key", "value"]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_store_sheet(self) -> gspread.Worksheet:
        """Get or create the key/value worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.store_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.store_sheet_name,
                rows=100,
                cols=len(STORE_COLUMNS),
            )
            sheet.append_row(STORE_COLUMNS)
        return sheet


class GoogleSheetsKeyValueStore(KeyValueStore):
    """
    Google Sheets implementation of the key-value store.

    Each key is one row: column A holds the key, column B the raw value.
    Row 1 is the header.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _rows(self) -> tuple[gspread.Worksheet, list[list[str]]]:
        sheet = self._client.get_store_sheet()
        return sheet, sheet.get_all_values()

    @staticmethod
    def _find_row(rows: list[list[str]], key: str) -> Optional[int]:
        """1-based sheet row number of a key, skipping the header."""
        for idx, row in enumerate(rows[1:], start=2):
            if row and row[0] == key:
                return idx
        return None

    def get(self, key: str) -> Optional[str]:
        try:
            _, rows = self._rows()
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to read '{key}': {e}")

        idx = self._find_row(rows, key)
        if idx is None:
            return None
        row = rows[idx - 1]
        return row[1] if len(row) > 1 else ""

    def set(self, key: str, value: str) -> None:
        try:
            sheet, rows = self._rows()
            idx = self._find_row(rows, key)
            if idx is None:
                sheet.append_row([key, value], value_input_option="RAW")
            else:
                sheet.update_cell(idx, 2, value)
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to write '{key}': {e}")

    def remove(self, key: str) -> None:
        try:
            sheet, rows = self._rows()
            idx = self._find_row(rows, key)
            if idx is not None:
                sheet.delete_rows(idx)
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to remove '{key}': {e}")

    def keys(self) -> list[str]:
        try:
            _, rows = self._rows()
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list keys: {e}")
        return [row[0] for row in rows[1:] if row and row[0]]
