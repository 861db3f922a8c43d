"""Unit tests for spreadsheet decoding, record mapping and the depth filter."""

from __future__ import annotations

import importlib.util
import io

import numpy as np
import pandas as pd
import pytest

from drill_ai.parser import (
    NoFileProvided,
    ParseFailure,
    clean_cell,
    coerce_cell,
    decode_sheet,
    depth_candidate,
    filter_by_depth,
    ingest_table,
    is_valid_depth,
    map_records,
    parse_numeric,
    parse_upload,
)
from drill_ai.queries import compute_max_depth


def _workbook_bytes(rows, columns) -> bytes:
    buffer = io.BytesIO()
    pd.DataFrame(rows, columns=columns).to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


def test_literal_table_yields_ordered_records_and_depth() -> None:
    """Two depth rows come out in order and drive the well depth."""
    table = [["Depth", "DT"], [1267, 62.624], [1274.4, 65.123]]

    result = ingest_table(table)

    assert result["records"] == [
        {"Depth": 1267, "DT": 62.624},
        {"Depth": 1274.4, "DT": 65.123},
    ]
    assert result["total_rows"] == 2
    assert result["filtered_rows"] == 2
    assert compute_max_depth(result["records"]) == 1274.4


def test_delimited_records_match_header_set() -> None:
    """Every data row becomes one record keyed by every header."""
    content = b"Depth,SH,Formation\n100,40,Shale\n\n200,,Sand\n300,12ft\n"

    result = parse_upload(content, "log.CSV")

    assert result["total_rows"] == 3
    assert result["headers"] == ["Depth", "SH", "Formation"]
    assert all(set(record) == {"Depth", "SH", "Formation"} for record in result["records"])
    assert result["records"][0] == {"Depth": 100.0, "SH": 40.0, "Formation": "Shale"}
    assert result["records"][1]["SH"] == 0
    assert result["records"][2] == {"Depth": 300.0, "SH": "12ft", "Formation": 0}


def test_delimited_cells_are_trimmed() -> None:
    content = b"Depth , GR\r\n 150 ,  75.5 \r\n"

    result = parse_upload(content, "trim.csv")

    assert result["headers"] == ["Depth", "GR"]
    assert result["records"] == [{"Depth": 150.0, "GR": 75.5}]


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("42", 42.0),
        ("3.14", 3.14),
        (" -7 ", -7.0),
        (".5", 0.5),
        ("5.", 5.0),
        ("1e3", 1000.0),
        ("", None),
        ("12ft", None),
        ("0x1A", None),
        ("1_000", None),
        ("nan", None),
        ("inf", None),
        ("1e999", None),
    ],
)
def test_parse_numeric(text, expected) -> None:
    assert parse_numeric(text) == expected


def test_coerce_cell_rule() -> None:
    """Numeric strings parse, blanks become zero, everything else is kept."""
    assert coerce_cell("42") == 42
    assert coerce_cell("3.14") == 3.14
    assert coerce_cell("12ft") == "12ft"
    assert coerce_cell("") == 0
    assert coerce_cell(None) == 0
    assert coerce_cell(float("nan")) == 0
    assert coerce_cell(17) == 17
    assert coerce_cell(True) is True


def test_short_rows_fill_missing_cells_with_zero() -> None:
    records = map_records([["Depth", "DT", "GR"], [100, 55]])

    assert records == [{"Depth": 100, "DT": 55, "GR": 0}]


def test_mapping_is_deterministic() -> None:
    table = [["Depth", "Note"], ["10", "a"], ["10", "a"]]

    first = map_records(table)
    second = map_records(table)

    assert first == second
    assert first[0] == first[1]


def test_unit_suffixed_alias_accepts_rows() -> None:
    """Rows are accepted through the 'DEPTH (FT)' header."""
    table = [["DEPTH (FT)", "GR"], ["0", "50"], ["1200.5", "60"], ["1210", "65"]]

    result = ingest_table(table)

    assert result["filtered_rows"] == 2
    assert [record["DEPTH (FT)"] for record in result["records"]] == [1200.5, 1210.0]


def test_first_present_alias_wins_even_when_zero() -> None:
    records = [
        {"Depth": 0, "DEPTH (FT)": 100},
        {"Depth": 5, "DEPTH (FT)": 0},
    ]

    accepted = filter_by_depth(records, data_row_count=2)

    assert accepted == [records[1]]
    assert depth_candidate(records[0]) == 0


@pytest.mark.parametrize(
    ("candidate", "expected"),
    [(1, True), ("12.5", True), (0, False), (-3, False), ("12ft", False), (None, False), (True, False)],
)
def test_is_valid_depth(candidate, expected) -> None:
    assert is_valid_depth(candidate) is expected


def test_fallback_returns_all_rows_when_nothing_passes() -> None:
    """Unrecognised depth columns degrade to the unfiltered record set."""
    table = [["Name", "Value"], ["alpha", "1"], ["beta", "2"]]

    result = ingest_table(table)

    assert result["filtered_rows"] == 0
    assert result["records"] == map_records(table)
    assert len(result["records"]) == 2


def test_fallback_applies_to_non_positive_depths() -> None:
    table = [["Depth", "GR"], ["0", "50"], ["-5", "60"]]

    result = ingest_table(table)

    assert len(result["records"]) == 2


def test_header_only_file_yields_no_records() -> None:
    result = parse_upload(b"Depth,DT\n", "header.csv")

    assert result["records"] == []
    assert result["total_rows"] == 0
    assert result["headers"] == ["Depth", "DT"]


def test_empty_uploads_yield_no_records() -> None:
    assert parse_upload(b"", "empty.csv")["records"] == []
    assert parse_upload(b"", "empty.xlsx")["records"] == []


def test_missing_payload_raises_no_file_provided() -> None:
    with pytest.raises(NoFileProvided):
        parse_upload(None, "log.csv")


def test_malformed_workbook_raises_parse_failure() -> None:
    with pytest.raises(ParseFailure):
        decode_sheet(b"definitely not a workbook", "log.xlsx")


def test_undecodable_text_raises_parse_failure() -> None:
    with pytest.raises(ParseFailure):
        decode_sheet(b"\xff\xfe\xfa\x00", "log.csv")


def test_workbook_first_sheet_is_decoded() -> None:
    content = _workbook_bytes(
        [[1267, 47.59, 62.624], [1274.4, 45.23, 65.123]],
        ["Depth", "SH", "DT"],
    )

    result = parse_upload(content, "sample-drilling-data.xlsx")

    assert result["headers"] == ["Depth", "SH", "DT"]
    assert len(result["records"]) == 2
    assert result["records"][0]["Depth"] == 1267
    assert result["records"][1] == {"Depth": 1274.4, "SH": 45.23, "DT": 65.123}
    assert compute_max_depth(result["records"]) == 1274.4


def test_workbook_uses_first_sheet_by_position() -> None:
    """The first sheet is read even when another sheet sorts before it by name."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame({"Depth": [10]}).to_excel(writer, sheet_name="Zeta", index=False)
        pd.DataFrame({"Depth": [99], "GR": [1]}).to_excel(writer, sheet_name="Alpha", index=False)

    result = parse_upload(buffer.getvalue(), "two-sheets.xlsx")

    assert result["headers"] == ["Depth"]
    assert result["records"] == [{"Depth": 10}]


def test_legacy_workbooks_have_a_reader() -> None:
    """.xls uploads need the xlrd engine; a corrupt one fails as a parse error."""
    assert importlib.util.find_spec("xlrd") is not None

    ole2_header = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 504

    with pytest.raises(ParseFailure) as excinfo:
        parse_upload(ole2_header, "log.xls")

    assert "Install xlrd" not in str(excinfo.value)


def test_workbook_blank_cells_become_zero() -> None:
    content = _workbook_bytes([[100, None, "note"], [200, 5.5, None]], ["Depth", "GR", "Comment"])

    result = parse_upload(content, "gaps.xlsx")

    assert result["records"][0]["GR"] == 0
    assert result["records"][0]["Comment"] == "note"
    assert result["records"][1]["Comment"] == 0


def test_clean_cell_converts_numpy_values() -> None:
    assert clean_cell(np.int64(3)) == 3
    assert type(clean_cell(np.int64(3))) is int
    assert clean_cell(np.float64("nan")) is None
    assert clean_cell(pd.Timestamp("2024-01-15")) == "2024-01-15 00:00:00"
    assert clean_cell("Shale") == "Shale"
