"""Dataset file formats understood by the parser."""

from typing import Literal, TypeAlias

DatasetFormat: TypeAlias = Literal["csv", "xlsx", "json", "jsonl"]

SUPPORTED_FORMATS: tuple[DatasetFormat, ...] = ("csv", "xlsx", "json", "jsonl")
