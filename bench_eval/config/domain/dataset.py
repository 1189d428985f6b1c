"""Dataset configuration model."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from bench_eval.dataset.domain.field_mapping import FieldMapping
from bench_eval.dataset.domain.parse_result import ParseOptions


class DatasetConfig(BaseModel, frozen=True):
    """Where the dataset file lives and how to read it.

    Without a ``mapping`` the columns are inferred from the headers.
    """

    model_config = ConfigDict(extra="forbid")

    path: Path
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    options: ParseOptions = Field(default_factory=ParseOptions)
    mapping: FieldMapping | None = None
