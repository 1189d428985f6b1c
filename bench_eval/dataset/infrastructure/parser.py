"""DatasetParser: detects the format and dispatches to the matching parser."""

from typing import assert_never

from bench_eval.dataset.domain.format import DatasetFormat
from bench_eval.dataset.domain.observer import DatasetObserver
from bench_eval.dataset.domain.parse_result import ParseOptions, ParseResult
from bench_eval.dataset.infrastructure.csv_parser import parse_csv
from bench_eval.dataset.infrastructure.detect import detect_format
from bench_eval.dataset.infrastructure.errors import (
    DatasetParseError,
    UnsupportedInputError,
)
from bench_eval.dataset.infrastructure.json_parser import parse_json, parse_jsonl
from bench_eval.dataset.infrastructure.observer import StructlogDatasetObserver
from bench_eval.dataset.infrastructure.xlsx_parser import parse_xlsx


class DatasetParser:
    """Parses raw dataset content into a ParseResult, emitting observer events."""

    def __init__(self, observer: DatasetObserver) -> None:
        self._observer = observer

    def parse(
        self,
        content: str | bytes,
        filename: str | None = None,
        options: ParseOptions | None = None,
    ) -> ParseResult:
        """
        Parse content as csv, xlsx, json or jsonl.

        The format comes from ``options.format`` when it is not "auto",
        otherwise from detect_format(content, filename).

        Raises:
            DatasetParseError: if JSON or JSONL content is malformed.
            UnsupportedInputError: if xlsx is requested for text content.
        """
        options = options or ParseOptions()
        format: DatasetFormat = (
            detect_format(content=content, filename=filename)
            if options.format == "auto"
            else options.format
        )
        self._observer.dataset_parsing_started(filename=filename, format=format)

        try:
            result = _dispatch(content=content, format=format, options=options)
        except (DatasetParseError, UnsupportedInputError) as exc:
            self._observer.dataset_parsing_failed(format=format, reason=str(exc))
            raise

        self._observer.dataset_parsing_completed(
            format=format,
            total_count=result.total_count,
            returned_rows=len(result.rows),
        )
        return result


def parse_dataset(
    content: str | bytes,
    filename: str | None = None,
    options: ParseOptions | None = None,
    observer: DatasetObserver | None = None,
) -> ParseResult:
    """Parse with a DatasetParser that logs through structlog unless told otherwise."""
    parser = DatasetParser(observer=observer or StructlogDatasetObserver())
    return parser.parse(content=content, filename=filename, options=options)


def _dispatch(
    content: str | bytes, format: DatasetFormat, options: ParseOptions
) -> ParseResult:
    match format:
        case "csv":
            return parse_csv(content=_as_text(content), options=options)
        case "xlsx":
            if isinstance(content, str):
                raise UnsupportedInputError(
                    "XLSX format requires binary input (bytes)"
                )
            return parse_xlsx(data=content, options=options)
        case "json":
            return parse_json(content=_as_text(content), options=options)
        case "jsonl":
            return parse_jsonl(content=_as_text(content), options=options)
        case _:
            assert_never(format)


def _as_text(content: str | bytes) -> str:
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content
