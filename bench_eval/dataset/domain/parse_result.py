"""ParseOptions and ParseResult: the input and output contract of dataset parsing."""

from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, model_validator

from bench_eval.dataset.domain.format import DatasetFormat

Row: TypeAlias = dict[str, Any]


class ParseOptions(BaseModel, frozen=True):
    """Recognised parsing options. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    preview: int | None = Field(default=None, ge=1)
    csv_delimiter: str | None = Field(default=None, min_length=1)
    sheet: str | int | None = None
    format: Literal["auto"] | DatasetFormat = "auto"


class ParseMetadata(BaseModel, frozen=True):
    sheet_name: str | None = None


class ParseResult(BaseModel, frozen=True):
    """Immutable result of parsing one dataset file.

    ``total_count`` is the number of rows in the source before any preview
    truncation, so callers can show "n of N rows" without keeping every row.
    """

    format: DatasetFormat
    headers: list[str]
    rows: list[Row]
    total_count: int = Field(ge=0)
    metadata: ParseMetadata | None = None

    @model_validator(mode="after")
    def _rows_within_total(self) -> "ParseResult":
        if len(self.rows) > self.total_count:
            raise ValueError(
                f"rows ({len(self.rows)}) exceed total_count ({self.total_count})"
            )
        return self
