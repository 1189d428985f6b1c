"""Answer extractor configuration models: discriminated union on `type` field."""

from typing import Annotated, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field


class RegexExtractor(BaseModel, frozen=True):
    """Take a capture group of the first regex match."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["regex"]
    pattern: str = Field(min_length=1)
    group: int = Field(default=1, ge=0)


class DelimiterExtractor(BaseModel, frozen=True):
    """Take the segment after the first, or after the last, delimiter."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["delimiter"]
    delimiter: str = Field(min_length=1)
    position: Literal["first", "last"] = "last"


class LastLineExtractor(BaseModel, frozen=True):
    model_config = ConfigDict(extra="forbid")

    type: Literal["last_line"]
    trim: bool = True


class ChoiceIndexExtractor(BaseModel, frozen=True):
    """Map the last standalone choice label (A, B, ...) to its 0-based index."""

    model_config = ConfigDict(extra="forbid")

    type: Literal["choice_index"]
    labels: list[str] = Field(default_factory=lambda: ["A", "B", "C", "D"], min_length=1)
    pattern: str | None = None


Extractor: TypeAlias = Annotated[
    RegexExtractor | DelimiterExtractor | LastLineExtractor | ChoiceIndexExtractor,
    Field(discriminator="type"),
]
