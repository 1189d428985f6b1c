"""Format detection from a filename extension or the content itself."""

import json

from bench_eval.dataset.domain.format import DatasetFormat

_ZIP_MAGIC = b"PK\x03\x04"

_EXTENSIONS: dict[str, DatasetFormat] = {
    "csv": "csv",
    "xlsx": "xlsx",
    "xls": "xlsx",
    "json": "json",
    "jsonl": "jsonl",
}


def detect_format(content: str | bytes, filename: str | None = None) -> DatasetFormat:
    """Classify content as csv, xlsx, json or jsonl.

    A known filename extension wins regardless of content. Binary content with a
    ZIP header is xlsx. Otherwise the text is inspected, and anything
    unrecognised falls through to csv. Never raises.
    """
    if filename:
        _, dot, ext = filename.rpartition(".")
        if dot and ext.lower() in _EXTENSIONS:
            return _EXTENSIONS[ext.lower()]

    if isinstance(content, bytes):
        if content.startswith(_ZIP_MAGIC):
            return "xlsx"
        content = content.decode("utf-8", errors="replace")

    return _detect_from_text(content)


def _detect_from_text(text: str) -> DatasetFormat:
    trimmed = text.strip()

    if trimmed.startswith("["):
        return "json"

    lines = [line.strip() for line in trimmed.splitlines() if line.strip()]
    if lines and lines[0].startswith("{") and all(_is_json(line) for line in lines):
        return "jsonl"

    return "csv"


def _is_json(line: str) -> bool:
    try:
        json.loads(line)
    except ValueError:
        return False
    return True
