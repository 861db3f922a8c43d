"""
Spreadsheet parser for Drill AI.

Turns an uploaded drilling spreadsheet (CSV or Excel workbook) into an ordered
list of canonical records keyed by the literal header names, then drops rows
that do not carry a usable depth value.

Pipeline:
    raw bytes -> raw table (row 0 = headers) -> header-keyed records -> depth filter
"""

import io
import logging
import math
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)

CellValue = Union[int, float, str]
Record = Dict[str, CellValue]
RawTable = List[List[Any]]

# Header names tried in order when looking for a row's depth.
# Case-sensitive, first key present in the record wins.
DEPTH_ALIASES = ("Depth", "depth", "DEPTH", "Depth (ft)", "DEPTH (FT)")

DELIMITED_EXTENSIONS = (".csv",)
DELIMITER = ","

# Plain decimal literal: 42, -3.5, .5, 1e3. No hex, no underscores, no inf/nan.
NUMERIC_PATTERN = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')


class IngestError(Exception):
    """Base class for upload ingestion failures"""
    pass


class NoFileProvided(IngestError):
    """Raised when ingestion is invoked without a file payload"""
    pass


class ParseFailure(IngestError):
    """Raised when the uploaded bytes cannot be decoded into a table"""
    pass


def parse_numeric(text: str) -> Optional[float]:
    """
    Parse a string that is entirely a finite decimal number.

    Surrounding whitespace is ignored. Empty strings are not numeric.

    Args:
        text: Cell text

    Returns:
        The parsed number, or None if the text is not a complete numeric literal
    """
    stripped = text.strip()
    if not stripped or not NUMERIC_PATTERN.match(stripped):
        return None

    number = float(stripped)
    if not math.isfinite(number):
        # Literals like 1e999 overflow to inf
        return None
    return number


def clean_cell(value: Any) -> Any:
    """
    Convert a pandas/numpy cell into a plain Python value.
    Blank cells come back as None, timestamps as strings.
    """
    if value is None:
        return None

    if isinstance(value, float) and math.isnan(value):
        return None

    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None

    if isinstance(value, np.bool_):
        return bool(value)

    if isinstance(value, (np.integer, np.floating)):
        return value.item()

    if isinstance(value, (pd.Timestamp, np.datetime64)):
        return str(value)

    if not isinstance(value, (str, int, float, bool)):
        return str(value)

    return value


def is_delimited(filename: str) -> bool:
    """Check whether the filename selects the delimited-text decoder"""
    return Path(filename or "").suffix.lower() in DELIMITED_EXTENSIONS


def decode_delimited(content: bytes) -> RawTable:
    """
    Decode delimited text into a raw table of strings.

    Lines are split on newline, blank lines are discarded, each line is split on
    the delimiter and every cell is trimmed.
    """
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseFailure(f"File is not valid UTF-8 text: {e}") from e

    table = []
    for line in text.split("\n"):
        if not line.strip():
            continue
        table.append([cell.strip() for cell in line.split(DELIMITER)])
    return table


def decode_workbook(content: bytes) -> RawTable:
    """
    Decode a binary workbook and return its first sheet as a raw table.

    The first sheet is chosen by position, not by name. Values are read as they
    are stored in the sheet (numbers stay numbers).
    """
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None)
    except Exception as e:
        raise ParseFailure(f"Error reading Excel file: {str(e)}") from e

    table = []
    for row in df.itertuples(index=False, name=None):
        cells = [clean_cell(value) for value in row]
        # pandas pads short rows to the sheet width; drop the padding
        while cells and cells[-1] is None:
            cells.pop()
        table.append(cells)

    # Trailing blank rows carry no data
    while table and not table[-1]:
        table.pop()

    return table


def decode_sheet(content: bytes, filename: str) -> RawTable:
    """
    Decode uploaded bytes into a raw table.

    The filename extension only selects the decoding strategy: ``.csv`` is read
    as delimited text, anything else as an Excel workbook.

    Args:
        content: Uploaded file bytes
        filename: Original filename

    Returns:
        List of rows; row 0 is the header row

    Raises:
        ParseFailure: If the content cannot be decoded
    """
    if is_delimited(filename):
        return decode_delimited(content)

    if not content:
        # An empty workbook upload is an empty table, not a decode error
        return []

    return decode_workbook(content)


def coerce_cell(value: Any) -> CellValue:
    """
    Apply the cell coercion rule used for every record field.

    - a string that fully parses as a number becomes that number
    - an empty or missing cell becomes 0
    - anything else is kept unchanged

    Args:
        value: Raw cell value

    Returns:
        Coerced cell value
    """
    if isinstance(value, str):
        number = parse_numeric(value)
        if number is not None:
            return number
        if not value.strip():
            return 0
        return value

    if value is None:
        return 0

    if isinstance(value, float) and math.isnan(value):
        return 0

    return value


def header_names(table: RawTable) -> List[str]:
    """Return the header row as strings (row 0 of the raw table)"""
    if not table:
        return []
    return ["" if name is None else str(name) for name in table[0]]


def map_records(table: RawTable) -> List[Record]:
    """
    Convert the data rows of a raw table into header-keyed records.

    Every header becomes a key in every record. Rows shorter than the header
    are treated as having missing cells.

    Args:
        table: Raw table with the header in row 0

    Returns:
        One record per data row, in row order
    """
    headers = header_names(table)
    records = []

    for row in table[1:]:
        record: Record = {}
        for index, header in enumerate(headers):
            value = row[index] if index < len(row) else None
            record[header] = coerce_cell(value)
        records.append(record)

    return records


def to_number(value: Any) -> Optional[float]:
    """
    Coerce a record value to a finite number.

    Returns:
        The number, or None for text that is not numeric, booleans and
        non-finite values
    """
    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        number = parse_numeric(value)
        if number is None:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number


def depth_candidate(record: Record, aliases: Sequence[str] = DEPTH_ALIASES) -> Optional[CellValue]:
    """
    Find the depth value of a record.

    The first alias present as a key wins, even when its value is zero.

    Returns:
        The raw value under the first matching alias, or None if no alias is present
    """
    for alias in aliases:
        if alias in record:
            return record[alias]
    return None


def is_valid_depth(candidate: Any) -> bool:
    """A depth is usable when it coerces to a finite number above zero"""
    number = to_number(candidate)
    return number is not None and number > 0


def filter_by_depth(records: List[Record], data_row_count: int) -> List[Record]:
    """
    Keep the records that carry a positive depth value.

    If no record passes but the table had data rows, the filter is bypassed and
    every record is returned: the depth header heuristics probably failed to
    match, and showing unfiltered data beats showing nothing. This can also let
    an unrelated spreadsheet through.

    Args:
        records: Mapped records in row order
        data_row_count: Number of data rows in the raw table

    Returns:
        Accepted records, order preserved
    """
    accepted = [record for record in records if is_valid_depth(depth_candidate(record))]

    if not accepted and data_row_count > 0:
        logger.warning(
            "⚠ No rows passed the depth filter (%d rows) - returning unfiltered data",
            data_row_count
        )
        return list(records)

    return accepted


def ingest_table(table: RawTable) -> Dict[str, Any]:
    """
    Map and filter an already decoded raw table.

    Returns:
        Dictionary with:
        - records: accepted canonical records
        - total_rows: data rows before filtering
        - filtered_rows: rows that passed the depth filter
        - headers: header names used as record keys
    """
    headers = header_names(table)
    records = map_records(table)
    data_row_count = max(len(table) - 1, 0)

    passed = sum(1 for record in records if is_valid_depth(depth_candidate(record)))
    final_records = filter_by_depth(records, data_row_count)

    return {
        "records": final_records,
        "total_rows": data_row_count,
        "filtered_rows": passed,
        "headers": headers,
    }


def parse_upload(content: Optional[bytes], filename: str) -> Dict[str, Any]:
    """
    Ingestion entry point: decode, map and filter one uploaded file.

    Args:
        content: Uploaded file bytes
        filename: Original filename (selects the decoder)

    Returns:
        Same dictionary as ``ingest_table``

    Raises:
        NoFileProvided: If no payload was given
        ParseFailure: If the bytes cannot be decoded
    """
    if content is None:
        raise NoFileProvided("No file uploaded")

    table = decode_sheet(content, filename)
    logger.info(
        "Parsed '%s' (%s): %d rows, headers=%s",
        filename,
        "CSV" if is_delimited(filename) else "Excel",
        len(table),
        header_names(table)
    )

    result = ingest_table(table)
    logger.info(
        "✓ %d data rows, %d passed depth filter, %d returned",
        result["total_rows"],
        result["filtered_rows"],
        len(result["records"])
    )
    return result
