"""CSV parsing with delimiter sniffing and per-cell type inference."""

import csv
import io
import re
import sys
from collections.abc import Iterator
from typing import Any

from bench_eval.dataset.domain.parse_result import ParseOptions, ParseResult, Row

_SNIFF_DELIMITERS = ",;\t|"
_SNIFF_SAMPLE_CHARS = 64 * 1024
_NUMBER = re.compile(r"^\s*-?(\d+\.?|\.\d+|\d+\.\d+)([eE][-+]?\d+)?\s*$")
_INTEGER = re.compile(r"^\s*-?\d+\s*$")
_MAX_SAFE_INTEGER = 2**53 - 1

csv.field_size_limit(sys.maxsize)


def parse_csv(content: str, options: ParseOptions) -> ParseResult:
    """Parse CSV text. The first non-blank row is the header row.

    Blank lines are skipped, short rows are padded with None and surplus
    cells are dropped. A record the csv module cannot read ends the parse
    with the rows read so far. Never raises on malformed input.
    """
    content = content.removeprefix("\ufeff")
    delimiter = options.csv_delimiter or _sniff_delimiter(content)

    records = [
        record
        for record in _read_records(content, delimiter)
        if any(cell.strip() for cell in record)
    ]
    if not records:
        return ParseResult(format="csv", headers=[], rows=[], total_count=0)

    headers = _dedupe_headers(records[0])
    all_rows = [_to_row(headers=headers, record=record) for record in records[1:]]
    rows = all_rows[: options.preview] if options.preview else all_rows

    return ParseResult(
        format="csv",
        headers=headers,
        rows=rows,
        total_count=len(all_rows),
    )


def _read_records(content: str, delimiter: str) -> Iterator[list[str]]:
    reader = csv.reader(io.StringIO(content), delimiter=delimiter)
    try:
        yield from reader
    except csv.Error:
        return


def _sniff_delimiter(content: str) -> str:
    sample = content[:_SNIFF_SAMPLE_CHARS]
    try:
        return csv.Sniffer().sniff(sample, delimiters=_SNIFF_DELIMITERS).delimiter
    except csv.Error:
        return ","


def _dedupe_headers(raw: list[str]) -> list[str]:
    """Rename repeated header names to name_1, name_2, ... so no column is lost."""
    seen: dict[str, int] = {}
    headers: list[str] = []
    for name in raw:
        name = name.strip()
        if name in seen:
            seen[name] += 1
            headers.append(f"{name}_{seen[name]}")
        else:
            seen[name] = 0
            headers.append(name)
    return headers


def _to_row(headers: list[str], record: list[str]) -> Row:
    row: Row = {}
    for index, header in enumerate(headers):
        row[header] = infer_cell(record[index]) if index < len(record) else None
    return row


def infer_cell(value: str) -> Any:
    """Convert a raw CSV cell to bool, int, float or None where it looks like one."""
    if value == "":
        return None
    if value in ("true", "TRUE", "True"):
        return True
    if value in ("false", "FALSE", "False"):
        return False
    if _NUMBER.match(value):
        if _INTEGER.match(value):
            number = int(value)
            return number if abs(number) <= _MAX_SAFE_INTEGER else value
        return float(value)
    return value
