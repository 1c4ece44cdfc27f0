from __future__ import annotations

import os
from typing import Any, List, Optional

from google.oauth2 import service_account
from googleapiclient.discovery import Resource, build

from .logging_setup import get_logger, with_extras

logger = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


def a1_range(worksheet: str, cells: Optional[str] = None) -> str:
    """A1 notation for ``cells`` on ``worksheet``, with the sheet name quoted."""
    quoted = "'" + worksheet.replace("'", "''") + "'"
    return f"{quoted}!{cells}" if cells else quoted


class SheetsClient:
    """Thin wrapper over the Sheets values API (read a range, write a range)."""

    def __init__(self, credentials_path: Optional[str] = None, service: Optional[Resource] = None):
        self.credentials_path = credentials_path or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "")
        self._service = service

    def _values(self):
        if self._service is None:
            if not self.credentials_path:
                raise RuntimeError("GOOGLE_APPLICATION_CREDENTIALS env var is not set")
            credentials = service_account.Credentials.from_service_account_file(
                self.credentials_path, scopes=SCOPES
            )
            self._service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
            logger.info("Connected to Google Sheets API")
        return self._service.spreadsheets().values()

    def read_values(self, spreadsheet_id: str, range_: str) -> List[List[Any]]:
        resp = self._values().get(spreadsheetId=spreadsheet_id, range=range_).execute()
        return resp.get("values", [])

    def write_values(self, spreadsheet_id: str, range_: str, values: List[List[Any]]) -> dict:
        body = (
            self._values()
            .update(
                spreadsheetId=spreadsheet_id,
                range=range_,
                valueInputOption="RAW",
                body={"range": range_, "majorDimension": "ROWS", "values": values},
            )
            .execute()
        )
        with_extras(logger, range=range_, updated_cells=body.get("updatedCells")).info("Sheet range written")
        return body


def read_table(client: SheetsClient, spreadsheet_id: str, worksheet: str) -> List[dict]:
    """Read a worksheet into dict rows keyed by its header row."""
    values = client.read_values(spreadsheet_id, a1_range(worksheet))
    if not values:
        return []
    header = [str(h).strip() for h in values[0]]
    rows = []
    for raw in values[1:]:
        padded = list(raw) + [""] * (len(header) - len(raw))
        rows.append(dict(zip(header, padded)))
    return rows
