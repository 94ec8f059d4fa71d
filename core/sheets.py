"""
Google Sheets storage - the store used by the Streamlit Cloud deployment.

The "store" worksheet holds one row per key:
  key | value (JSON array as text)

Authentication via Service Account (credentials in Streamlit secrets):
  1. Create a Service Account on Google Cloud
  2. Share the Google Sheet with the service account email
  3. Put the credentials in .streamlit/secrets.toml
"""

import logging
from typing import Optional

import gspread

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.store import KeyValueStore
from config import SHEET_STORE

logger = logging.getLogger(__name__)

STORE_COLUMNS = ["key", "value"]


def get_gspread_client(creds_dict: dict):
    """Client gspread authenticated with a Service Account."""
    return gspread.service_account_from_dict(dict(creds_dict))


class SheetsStore(KeyValueStore):
    def __init__(self, worksheet):
        self.ws = worksheet

    @classmethod
    def open(cls, creds_dict: dict, spreadsheet_id: str, sheet_name: str = SHEET_STORE) -> "SheetsStore":
        """Opens the worksheet, creating it with the header row if missing."""
        gc = get_gspread_client(creds_dict)
        sh = gc.open_by_key(spreadsheet_id)
        try:
            ws = sh.worksheet(sheet_name)
        except gspread.WorksheetNotFound:
            ws = sh.add_worksheet(title=sheet_name, rows=20, cols=len(STORE_COLUMNS))
            ws.append_row(STORE_COLUMNS)
        return cls(ws)

    def _find_row(self, key: str) -> Optional[int]:
        """1-indexed row of the key, None if absent."""
        keys = self.ws.col_values(1)
        for i, val in enumerate(keys[1:], start=2):
            if val == key:
                return i
        return None

    def load(self, key: str) -> Optional[bytes]:
        row = self._find_row(key)
        if row is None:
            return None
        value = self.ws.cell(row, 2).value
        return value.encode("utf-8") if value else None

    def save(self, key: str, data: bytes) -> None:
        text = data.decode("utf-8")
        row = self._find_row(key)
        if row is None:
            # RAW so that Sheets does not interpret the JSON
            self.ws.append_row([key, text], value_input_option="RAW")
        else:
            self.ws.update_cell(row, 2, text)
        logger.debug("Saved %d bytes under key %r", len(data), key)
