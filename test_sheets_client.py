#!/usr/bin/env python3
"""
Tests for reading and writing the knowledge sheet through a mocked Sheets service
"""
import asyncio
from unittest.mock import MagicMock, patch

import pytest

from supportbot import config, sheets_client
from supportbot.sheets_client import column_index, range_origin


def _service(values=None):
    service = MagicMock()
    sheet_values = service.spreadsheets.return_value.values.return_value
    sheet_values.get.return_value.execute.return_value = {"values": values or []}
    sheet_values.update.return_value.execute.return_value = {"updatedCells": 0}
    return service, sheet_values


def _run(coro, service, sheet_range="A1:Z1000", sheet_name=None):
    with patch.object(sheets_client, "_get_service", return_value=service), \
         patch.object(config, "GOOGLE_SHEET_ID", "sheet-123"), \
         patch.object(config, "GOOGLE_SHEET_RANGE", sheet_range), \
         patch.object(config, "GOOGLE_SHEET_NAME", sheet_name):
        return asyncio.run(coro)


def test_select_rows_reads_configured_range():
    service, sheet_values = _service([["Question", "Answer", "Embedding"], ["q1", "a1"]])

    headers, rows = _run(sheets_client.select_rows(), service, sheet_name="KB")

    sheet_values.get.assert_called_once_with(spreadsheetId="sheet-123", range="'KB'!A1:Z1000")
    assert headers == ["Question", "Answer", "Embedding"]
    assert rows == [{"Question": "q1", "Answer": "a1", "Embedding": ""}]


def test_write_column_updates_only_the_embedding_column():
    service, sheet_values = _service()
    headers = ["Question", "Answer", "", "Embedding"]

    _run(sheets_client.write_column(headers, "Embedding", ["[1]", "[2]"]), service)

    sheet_values.update.assert_called_once_with(
        spreadsheetId="sheet-123",
        range="D2:D3",
        valueInputOption="RAW",
        body={"values": [["[1]"], ["[2]"]]},
    )


def test_round_trip_keeps_unnamed_columns_untouched():
    service, sheet_values = _service([
        ["Question", "Answer", "", "Embedding"],
        ["q1", "a1", "staff note", ""],
    ])
    headers, rows = _run(sheets_client.select_rows(), service)

    _run(sheets_client.write_column(headers, "Embedding", ["[0.5]" for _ in rows]), service)

    kwargs = sheet_values.update.call_args.kwargs
    assert kwargs["range"] == "D2:D2"
    assert kwargs["body"] == {"values": [["[0.5]"]]}


def test_write_column_follows_range_origin():
    service, sheet_values = _service()
    headers = ["Question", "Answer", "Embedding"]

    _run(
        sheets_client.write_column(headers, "Embedding", ["[1]", "[2]"]),
        service,
        sheet_range="C5:Z1000",
        sheet_name="KB",
    )

    assert sheet_values.update.call_args.kwargs["range"] == "'KB'!E6:E7"


def test_range_origin():
    assert range_origin("A1:Z1000") == (1, 1)
    assert range_origin("C5:Z1000") == (3, 5)
    assert range_origin("Sheet1!AB12:AZ99") == (28, 12)
    assert range_origin("B:Z") == (2, 1)
    with pytest.raises(ValueError):
        range_origin("1:100")


def test_column_index_inverts_column_letter():
    for index in (1, 3, 26, 27, 52, 703):
        assert column_index(sheets_client.column_letter(index)) == index
