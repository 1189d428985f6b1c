"""Tests for parse_xlsx. Workbooks are built in memory with openpyxl."""

import io
from datetime import date
from typing import Any

from openpyxl import Workbook

from bench_eval.dataset.domain.parse_result import ParseOptions
from bench_eval.dataset.infrastructure.xlsx_parser import parse_xlsx


def _make_workbook(sheets: dict[str, list[list[Any]]]) -> bytes:
    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(title=name)
        for row in rows:
            sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


class TestSheetSelection:
    """Sheets are chosen by name, by 0-based index, or default to the first."""

    def _data(self) -> bytes:
        return _make_workbook(
            {
                "first": [["q"], ["one"]],
                "second": [["q"], ["two"], ["three"]],
            }
        )

    def test_defaults_to_first_sheet(self) -> None:
        result = parse_xlsx(self._data(), ParseOptions())

        assert result.metadata is not None
        assert result.metadata.sheet_name == "first"
        assert result.rows == [{"q": "one"}]

    def test_selects_by_name(self) -> None:
        result = parse_xlsx(self._data(), ParseOptions(sheet="second"))

        assert result.rows == [{"q": "two"}, {"q": "three"}]

    def test_selects_by_index(self) -> None:
        result = parse_xlsx(self._data(), ParseOptions(sheet=1))

        assert result.metadata is not None
        assert result.metadata.sheet_name == "second"

    def test_out_of_range_index_falls_back_to_first(self) -> None:
        result = parse_xlsx(self._data(), ParseOptions(sheet=9))

        assert result.metadata is not None
        assert result.metadata.sheet_name == "first"

    def test_missing_sheet_name_gives_empty_result(self) -> None:
        result = parse_xlsx(self._data(), ParseOptions(sheet="nope"))

        assert result.headers == []
        assert result.rows == []
        assert result.total_count == 0
        assert result.metadata is not None
        assert result.metadata.sheet_name == "nope"


class TestCells:
    def test_cells_are_strings_and_missing_cells_are_empty(self) -> None:
        data = _make_workbook(
            {
                "s": [
                    ["name", "score", "passed", "when"],
                    ["ann", 3.0, True, date(2024, 1, 2)],
                    ["bo", 2.5],
                ]
            }
        )

        result = parse_xlsx(data, ParseOptions())

        assert result.rows[0] == {
            "name": "ann",
            "score": "3",
            "passed": "TRUE",
            "when": "2024-01-02T00:00:00",
        }
        assert result.rows[1] == {"name": "bo", "score": "2.5", "passed": "", "when": ""}

    def test_blank_rows_are_skipped(self) -> None:
        data = _make_workbook({"s": [["q"], [None], ["a"], [None], ["b"]]})

        result = parse_xlsx(data, ParseOptions())

        assert result.rows == [{"q": "a"}, {"q": "b"}]
        assert result.total_count == 2

    def test_blank_header_cells_get_placeholder_names(self) -> None:
        data = _make_workbook({"s": [["q", None], ["x", "y"]]})

        result = parse_xlsx(data, ParseOptions())

        assert result.headers == ["q", "__EMPTY"]


class TestHeadersAndPreview:
    def test_headers_come_from_first_data_row(self) -> None:
        data = _make_workbook({"s": [["q", "a"], ["x", "y"]]})

        result = parse_xlsx(data, ParseOptions())

        assert result.headers == ["q", "a"]

    def test_header_only_sheet_has_no_headers(self) -> None:
        data = _make_workbook({"s": [["q", "a"]]})

        result = parse_xlsx(data, ParseOptions())

        assert result.headers == []
        assert result.total_count == 0

    def test_preview_truncates_but_counts_all(self) -> None:
        data = _make_workbook({"s": [["n"]] + [[i] for i in range(1, 8)]})

        result = parse_xlsx(data, ParseOptions(preview=2))

        assert result.rows == [{"n": "1"}, {"n": "2"}]
        assert result.total_count == 7


class TestUnreadableWorkbook:
    def test_garbage_bytes_give_empty_result(self) -> None:
        result = parse_xlsx(b"this is not a workbook", ParseOptions())

        assert result.format == "xlsx"
        assert result.rows == []
        assert result.total_count == 0

    def test_empty_sheet_gives_empty_result(self) -> None:
        result = parse_xlsx(_make_workbook({"s": []}), ParseOptions())

        assert result.headers == []
        assert result.total_count == 0
