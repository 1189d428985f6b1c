"""Tests for the rubric dispatch point and up-front rubric validation."""

import pytest
from pydantic import TypeAdapter, ValidationError

from bench_eval.rubric.application.registry import match, validate_rubric
from bench_eval.rubric.domain.extractor import RegexExtractor
from bench_eval.rubric.domain.rubric import (
    AnyOfRubric,
    ContainsRubric,
    JsonSchemaRubric,
    LlmRubric,
    NumericRubric,
    RegexRubric,
    Rubric,
    StartsWithRubric,
)
from bench_eval.rubric.infrastructure.errors import RubricConfigError
from tests.rubric.fake_judge import FakeJudge

_RUBRIC_ADAPTER: TypeAdapter[Rubric] = TypeAdapter(Rubric)


class TestRubricModels:
    """Rubric configs are a closed union discriminated on ``kind``."""

    def test_parses_by_kind(self) -> None:
        rubric = _RUBRIC_ADAPTER.validate_python({"kind": "regex", "pattern": r"\d+"})

        assert isinstance(rubric, RegexRubric)
        assert rubric.flags == "i"

    def test_schema_alias(self) -> None:
        rubric = _RUBRIC_ADAPTER.validate_python(
            {"kind": "json_schema", "schema": {"type": "object"}}
        )

        assert isinstance(rubric, JsonSchemaRubric)
        assert rubric.json_schema == {"type": "object"}

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _RUBRIC_ADAPTER.validate_python({"kind": "fuzzy"})

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _RUBRIC_ADAPTER.validate_python({"kind": "contains", "colour": "red"})

    def test_non_positive_weight_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _RUBRIC_ADAPTER.validate_python({"kind": "contains", "weight": 0})


class TestMatchDispatch:
    async def test_expected_takes_precedence_over_value(self) -> None:
        rubric = ContainsRubric(kind="contains", value="nope")

        result = await match("The answer is 42", "42", rubric)

        assert result.passed is True

    async def test_value_used_when_case_has_no_expected(self) -> None:
        rubric = StartsWithRubric(kind="starts_with", value="yes")

        result = await match("Yes it is", None, rubric)

        assert result.passed is True

    async def test_no_expected_and_no_value_fails(self) -> None:
        result = await match("anything", None, ContainsRubric(kind="contains"))

        assert result.passed is False
        assert result.detail == "No expected value to compare"

    async def test_numeric_parses_expected(self) -> None:
        result = await match("about 18 dollars", "18", NumericRubric(kind="numeric"))

        assert result.passed is True

    async def test_any_of_ignores_expected(self) -> None:
        rubric = AnyOfRubric(kind="any_of", values=["yes", "y"])

        result = await match("Y", "something else", rubric)

        assert result.passed is True


class TestLlmRubric:
    async def test_without_judge_fails(self) -> None:
        result = await match("out", None, LlmRubric(kind="llm_rubric"))

        assert result.passed is False
        assert result.detail == "LLM judge not available"

    async def test_score_at_threshold_passes(self) -> None:
        judge = FakeJudge(score=0.6, reason="Partly right.")
        rubric = LlmRubric(kind="llm_rubric", criteria="Be correct.", model="gpt-4o")

        result = await match("out", "exp", rubric, judge=judge)

        assert result.passed is True
        assert result.score == pytest.approx(0.6)
        assert result.detail == "Partly right."

    async def test_forwards_rubric_fields_to_judge(self) -> None:
        judge = FakeJudge()
        rubric = LlmRubric(
            kind="llm_rubric",
            criteria="Be correct.",
            model="gpt-4o",
            system_role="You grade strictly.",
        )

        await match("out", "exp", rubric, judge=judge)

        call = judge.calls[0]
        assert call.criteria == "Be correct."
        assert call.actual == "out"
        assert call.expected == "exp"
        assert call.model == "gpt-4o"
        assert call.system_role == "You grade strictly."

    async def test_provider_qualifies_judge_model(self) -> None:
        judge = FakeJudge()
        rubric = LlmRubric(kind="llm_rubric", model="claude-3-5-sonnet", provider="anthropic")

        await match("out", None, rubric, judge=judge)

        assert judge.calls[0].model == "anthropic/claude-3-5-sonnet"

    async def test_provider_ignored_for_prefixed_or_missing_model(self) -> None:
        judge = FakeJudge()

        await match(
            "out",
            None,
            LlmRubric(kind="llm_rubric", model="openai/gpt-4o", provider="azure"),
            judge=judge,
        )
        await match("out", None, LlmRubric(kind="llm_rubric", provider="azure"), judge=judge)

        assert judge.calls[0].model == "openai/gpt-4o"
        assert judge.calls[1].model is None

    async def test_low_score_fails(self) -> None:
        result = await match(
            "out", None, LlmRubric(kind="llm_rubric"), judge=FakeJudge(score=0.2)
        )

        assert result.passed is False


class TestValidateRubric:
    def test_valid_rubric_passes(self) -> None:
        validate_rubric(RegexRubric(kind="regex", pattern=r"\d+"))

    def test_invalid_regex_raises(self) -> None:
        with pytest.raises(RubricConfigError):
            validate_rubric(RegexRubric(kind="regex", pattern="(unclosed"))

    def test_invalid_schema_raises(self) -> None:
        rubric = JsonSchemaRubric(kind="json_schema", schema={"type": 12})

        with pytest.raises(RubricConfigError):
            validate_rubric(rubric)

    def test_default_extractor_is_checked(self) -> None:
        with pytest.raises(RubricConfigError):
            validate_rubric(
                ContainsRubric(kind="contains"),
                default_extractor=RegexExtractor(type="regex", pattern="["),
            )

    def test_error_message_starts_with_failed(self) -> None:
        with pytest.raises(RubricConfigError) as exc_info:
            validate_rubric(RegexRubric(kind="regex", pattern="("))

        assert str(exc_info.value).startswith("Failed to configure rubric")
