"""XLSX parsing via openpyxl: sheet selection and string-formatted cells."""

import io
import zipfile
from datetime import date, datetime, time
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from bench_eval.dataset.domain.parse_result import (
    ParseMetadata,
    ParseOptions,
    ParseResult,
    Row,
)


def parse_xlsx(data: bytes, options: ParseOptions) -> ParseResult:
    """Parse the selected worksheet of an XLSX workbook.

    The sheet is chosen by name, by 0-based index (falling back to the first
    sheet when out of range), or defaults to the first sheet. A workbook that
    cannot be opened, has no sheets, or lacks the requested sheet yields an
    empty result instead of an error.
    """
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError):
        return _empty(sheet_name=None)

    try:
        sheet_name = _select_sheet_name(workbook.sheetnames, options.sheet)
        if sheet_name is None or sheet_name not in workbook.sheetnames:
            return _empty(sheet_name=sheet_name)

        records = [
            list(values)
            for values in workbook[sheet_name].iter_rows(values_only=True)
            if any(_format_cell(value) != "" for value in values)
        ]
    finally:
        workbook.close()

    if not records:
        return ParseResult(
            format="xlsx",
            headers=[],
            rows=[],
            total_count=0,
            metadata=ParseMetadata(sheet_name=sheet_name),
        )

    keys = _header_keys(records[0])
    all_rows = [_to_row(keys=keys, record=record) for record in records[1:]]
    # Headers come from the first data row only; later rows never add columns.
    headers = list(all_rows[0].keys()) if all_rows else []
    rows = all_rows[: options.preview] if options.preview else all_rows

    return ParseResult(
        format="xlsx",
        headers=headers,
        rows=rows,
        total_count=len(all_rows),
        metadata=ParseMetadata(sheet_name=sheet_name),
    )


def _select_sheet_name(sheet_names: list[str], sheet: str | int | None) -> str | None:
    if isinstance(sheet, str):
        return sheet
    if not sheet_names:
        return None
    if isinstance(sheet, int) and 0 <= sheet < len(sheet_names):
        return sheet_names[sheet]
    return sheet_names[0]


def _header_keys(header_row: list[Any]) -> list[str]:
    """Name each column from the header row; blank headers become __EMPTY, __EMPTY_1, ..."""
    keys: list[str] = []
    seen: dict[str, int] = {}
    for value in header_row:
        name = _format_cell(value) or "__EMPTY"
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        keys.append(name)
    return keys


def _to_row(keys: list[str], record: list[Any]) -> Row:
    return {
        key: _format_cell(record[index]) if index < len(record) else ""
        for index, key in enumerate(keys)
    }


def _format_cell(value: Any) -> str:
    """Render a cell the way it would read in a spreadsheet; missing cells are ''."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _empty(sheet_name: str | None) -> ParseResult:
    return ParseResult(
        format="xlsx",
        headers=[],
        rows=[],
        total_count=0,
        metadata=ParseMetadata(sheet_name=sheet_name),
    )
