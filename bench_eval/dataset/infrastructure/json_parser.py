"""JSON and JSONL parsing with line-addressed errors."""

import json

from bench_eval.dataset.domain.parse_result import ParseOptions, ParseResult, Row
from bench_eval.dataset.infrastructure.errors import DatasetParseError

_EXCERPT_CHARS = 100


def parse_json(content: str, options: ParseOptions) -> ParseResult:
    """Parse a JSON array of row objects. Headers are the first element's keys.

    Raises:
        DatasetParseError: if the content is not valid JSON or not an array.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise DatasetParseError(
            reason=f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}",
            line_number=exc.lineno,
        ) from exc

    if not isinstance(data, list):
        raise DatasetParseError(reason="JSON file must contain an array of objects")

    headers = _keys_of(data[0]) if data else []
    rows = data[: options.preview] if options.preview else data

    return ParseResult(
        format="json",
        headers=headers,
        rows=[_as_row(item) for item in rows],
        total_count=len(data),
    )


def parse_jsonl(content: str, options: ParseOptions) -> ParseResult:
    """Parse newline-delimited JSON, one row per non-blank line.

    Only the lines that will be returned are decoded, so with ``preview`` a
    malformed line past the preview window is not reported.

    Raises:
        DatasetParseError: naming the 1-based line number and an excerpt of
            the first line that is not valid JSON.
    """
    lines = [line.strip() for line in content.split("\n")]
    lines = [line for line in lines if line]

    to_parse = lines[: options.preview] if options.preview else lines
    rows: list[Row] = []
    for index, line in enumerate(to_parse):
        try:
            value = json.loads(line)
        except json.JSONDecodeError as exc:
            excerpt = line[:_EXCERPT_CHARS]
            raise DatasetParseError(
                reason=f"invalid JSON at line {index + 1}: {excerpt}",
                line_number=index + 1,
                excerpt=excerpt,
            ) from exc
        rows.append(_as_row(value))

    headers = _keys_of(rows[0]) if rows else []

    return ParseResult(
        format="jsonl",
        headers=headers,
        rows=rows,
        total_count=len(lines),
    )


def _keys_of(value: object) -> list[str]:
    return list(value.keys()) if isinstance(value, dict) else []


def _as_row(value: object) -> Row:
    # Non-object elements are kept under a single "value" column.
    if isinstance(value, dict):
        return value
    return {"value": value}
