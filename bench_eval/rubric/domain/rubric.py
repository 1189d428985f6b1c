"""Rubric configuration models: a closed discriminated union on the `kind` field.

Every rubric carries an ``id``, a positive ``weight`` used when several
rubrics grade one case, and an optional answer ``extractor``. Matchers that
compare against an expected value read the test case's ``expected`` first and
fall back to the rubric's own ``value``.
"""

from typing import Annotated, Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, Field

from bench_eval.rubric.domain.extractor import Extractor


class _RubricBase(BaseModel, frozen=True):
    model_config = ConfigDict(extra="forbid")

    id: str = ""
    weight: float = Field(default=1.0, gt=0)
    extractor: Extractor | None = None


class ContainsRubric(_RubricBase, frozen=True):
    """Case-sensitive substring test."""

    kind: Literal["contains"]
    value: str | None = None


class StartsWithRubric(_RubricBase, frozen=True):
    """Case-insensitive prefix test."""

    kind: Literal["starts_with"]
    value: str | None = None


class EndsWithRubric(_RubricBase, frozen=True):
    kind: Literal["ends_with"]
    value: str | None = None


class EqualsRubric(_RubricBase, frozen=True):
    kind: Literal["equals"]
    value: str | None = None


class RegexRubric(_RubricBase, frozen=True):
    """Search anywhere in the output. Flags are letters from ``imsxau``."""

    kind: Literal["regex"]
    pattern: str = Field(min_length=1)
    flags: str = "i"


class AnyOfRubric(_RubricBase, frozen=True):
    kind: Literal["any_of"]
    values: list[str] = Field(min_length=1)
    case_sensitive: bool = False


class NumericRubric(_RubricBase, frozen=True):
    kind: Literal["numeric"]
    value: float | None = None
    tolerance: float = Field(default=0.01, ge=0)


class LevenshteinRubric(_RubricBase, frozen=True):
    kind: Literal["levenshtein"]
    value: str | None = None
    threshold: float = Field(default=0.8, ge=0, le=1)


class JsonSchemaRubric(_RubricBase, frozen=True):
    model_config = ConfigDict(populate_by_name=True)

    kind: Literal["json_schema"]
    json_schema: dict[str, Any] = Field(alias="schema")


class LlmRubric(_RubricBase, frozen=True):
    """Graded by an LLM judge against free-text criteria."""

    kind: Literal["llm_rubric"]
    criteria: str = "Evaluate whether the output is correct and helpful."
    model: str | None = None
    provider: str | None = None
    system_role: str | None = None
    threshold: float = Field(default=0.6, ge=0, le=1)

    @property
    def qualified_model(self) -> str | None:
        """Judge model in LiteLLM's ``provider/model`` form, or None for the judge default."""
        if self.model and self.provider and "/" not in self.model:
            return f"{self.provider}/{self.model}"
        return self.model


Rubric: TypeAlias = Annotated[
    ContainsRubric
    | StartsWithRubric
    | EndsWithRubric
    | EqualsRubric
    | RegexRubric
    | AnyOfRubric
    | NumericRubric
    | LevenshteinRubric
    | JsonSchemaRubric
    | LlmRubric,
    Field(discriminator="kind"),
]
