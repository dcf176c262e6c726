"""Google Sheets access for the knowledge base.

The first row of the configured range holds the field names; data rows
follow until the first fully empty row. The Google API client is blocking,
so calls run in a worker thread to keep the event loop free.
"""
import asyncio
import logging
import re
from typing import Dict, List, Tuple

from google.oauth2 import service_account
from googleapiclient.discovery import build

from . import config

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

RANGE_START_PATTERN = re.compile(r"^\s*([A-Za-z]+)(\d*)")


def _get_service():
    """Creates a Sheets v4 service from the configured service account."""
    if not config.GOOGLE_SHEET_ID:
        raise ValueError("GOOGLE_SHEET_ID is not configured.")
    if not config.GOOGLE_SERVICE_ACCOUNT_FILE:
        raise ValueError("GOOGLE_SERVICE_ACCOUNT_FILE is not configured.")

    creds = service_account.Credentials.from_service_account_file(
        config.GOOGLE_SERVICE_ACCOUNT_FILE, scopes=SCOPES
    )
    return build("sheets", "v4", credentials=creds, cache_discovery=False)


def _qualify(cell_range: str) -> str:
    if config.GOOGLE_SHEET_NAME:
        return f"'{config.GOOGLE_SHEET_NAME}'!{cell_range}"
    return cell_range


def column_letter(index: int) -> str:
    """Convert a 1-based column index to its A1 letter (1 -> A, 27 -> AA)."""
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def column_index(letters: str) -> int:
    """Convert an A1 column letter to its 1-based index (A -> 1, AA -> 27)."""
    index = 0
    for char in letters.upper():
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


def range_origin(cell_range: str) -> Tuple[int, int]:
    """Return the (1-based column, row) of the top-left cell of an A1 range.

    A range without a row number, like ``C:Z``, starts at row 1.
    """
    match = RANGE_START_PATTERN.match(cell_range.rsplit("!", 1)[-1])
    if not match:
        raise ValueError(f"Unsupported sheet range: {cell_range!r}")
    letters, row = match.groups()
    return column_index(letters), int(row) if row else 1


def parse_values(values: List[List[str]]) -> Tuple[List[str], List[Dict[str, str]]]:
    """Turn a raw values grid into (headers, rows of named fields).

    Rows stop at the first fully empty row. The API omits trailing empty
    cells, so short rows are padded with empty strings.
    """
    if not values:
        return [], []

    headers = [str(h).strip() for h in values[0]]
    rows = []
    for raw in values[1:]:
        if not any(str(cell).strip() for cell in raw):
            break
        rows.append({
            header: str(raw[i]) if i < len(raw) else ""
            for i, header in enumerate(headers)
            if header
        })
    return headers, rows


def _select_rows_sync() -> Tuple[List[str], List[Dict[str, str]]]:
    service = _get_service()
    result = service.spreadsheets().values().get(
        spreadsheetId=config.GOOGLE_SHEET_ID,
        range=_qualify(config.GOOGLE_SHEET_RANGE),
    ).execute()
    headers, rows = parse_values(result.get("values", []))
    logger.info(f"[SHEETS] Read {len(rows)} rows ({len(headers)} columns)")
    return headers, rows


def _write_column_sync(headers: List[str], field_name: str, values: List[str]) -> dict:
    service = _get_service()
    origin_column, header_row = range_origin(config.GOOGLE_SHEET_RANGE)
    letter = column_letter(origin_column + headers.index(field_name))
    first_row = header_row + 1
    cell_range = _qualify(f"{letter}{first_row}:{letter}{first_row + len(values) - 1}")
    response = service.spreadsheets().values().update(
        spreadsheetId=config.GOOGLE_SHEET_ID,
        range=cell_range,
        valueInputOption="RAW",
        body={"values": [[value] for value in values]},
    ).execute()
    logger.info(f"[SHEETS] Wrote {len(values)} {field_name} cells in {cell_range}")
    return response


async def select_rows() -> Tuple[List[str], List[Dict[str, str]]]:
    """Fetch the header names and data rows of the knowledge sheet."""
    return await asyncio.to_thread(_select_rows_sync)


async def write_column(headers: List[str], field_name: str, values: List[str]) -> dict:
    """Overwrite one column of the data rows, one value per row in order.

    Other columns are left untouched.
    """
    return await asyncio.to_thread(_write_column_sync, headers, field_name, values)
