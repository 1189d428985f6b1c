"""Matcher registry: the single dispatch point from a Rubric to its matcher."""

from typing import assert_never

from bench_eval.rubric.domain.extractor import Extractor
from bench_eval.rubric.domain.judge import LlmJudge
from bench_eval.rubric.domain.match_result import MatchResult
from bench_eval.rubric.domain.rubric import (
    AnyOfRubric,
    ContainsRubric,
    EndsWithRubric,
    EqualsRubric,
    JsonSchemaRubric,
    LevenshteinRubric,
    LlmRubric,
    NumericRubric,
    RegexRubric,
    Rubric,
    StartsWithRubric,
)
from bench_eval.rubric.infrastructure.extractors import check_extractor
from bench_eval.rubric.infrastructure.matchers import (
    check_json_schema,
    compile_pattern,
    match_any_of,
    match_contains,
    match_ends_with,
    match_equals,
    match_json_schema,
    match_levenshtein,
    match_numeric,
    match_regex,
    match_starts_with,
    parse_expected_number,
)

_NO_EXPECTED = MatchResult(passed=False, score=0.0, detail="No expected value to compare")


async def match(
    actual: str,
    expected: str | None,
    rubric: Rubric,
    judge: LlmJudge | None = None,
) -> MatchResult:
    """Apply rubric to actual.

    ``expected`` is the test case's expected value; matchers that compare
    against one fall back to the rubric's own ``value`` when it is None.
    Every matcher except ``llm_rubric`` is synchronous and pure.

    Raises:
        RubricConfigError: if the rubric's parameters are unusable.
        JudgeInvocationError: if the LLM judge call fails.
    """
    match rubric:
        case ContainsRubric():
            target = expected if expected is not None else rubric.value
            return _NO_EXPECTED if target is None else match_contains(actual, target)
        case StartsWithRubric():
            target = expected if expected is not None else rubric.value
            return _NO_EXPECTED if target is None else match_starts_with(actual, target)
        case EndsWithRubric():
            target = expected if expected is not None else rubric.value
            return _NO_EXPECTED if target is None else match_ends_with(actual, target)
        case EqualsRubric():
            target = expected if expected is not None else rubric.value
            return _NO_EXPECTED if target is None else match_equals(actual, target)
        case RegexRubric():
            return match_regex(actual, pattern=rubric.pattern, flags=rubric.flags)
        case AnyOfRubric():
            return match_any_of(actual, rubric.values, rubric.case_sensitive)
        case NumericRubric():
            number = parse_expected_number(expected) if expected is not None else None
            if number is None:
                number = rubric.value
            if number is None:
                return _NO_EXPECTED
            return match_numeric(actual, number, rubric.tolerance)
        case LevenshteinRubric():
            target = expected if expected is not None else rubric.value
            if target is None:
                return _NO_EXPECTED
            return match_levenshtein(actual, target, rubric.threshold)
        case JsonSchemaRubric():
            return match_json_schema(actual, rubric.json_schema)
        case LlmRubric():
            return await _match_llm(actual=actual, expected=expected, rubric=rubric, judge=judge)
        case _:
            assert_never(rubric)


async def _match_llm(
    actual: str, expected: str | None, rubric: LlmRubric, judge: LlmJudge | None
) -> MatchResult:
    if judge is None:
        return MatchResult(passed=False, score=0.0, detail="LLM judge not available")
    verdict = await judge.judge(
        criteria=rubric.criteria,
        actual=actual,
        expected=expected,
        model=rubric.qualified_model,
        system_role=rubric.system_role,
    )
    return MatchResult(
        passed=verdict.score >= rubric.threshold,
        score=verdict.score,
        detail=verdict.reason,
    )


def validate_rubric(rubric: Rubric, default_extractor: Extractor | None = None) -> None:
    """Check parameters that can only fail at match time, ahead of any run.

    Raises:
        RubricConfigError: on an invalid regex pattern or JSON schema.
    """
    extractor = rubric.extractor or default_extractor
    if extractor is not None:
        check_extractor(extractor)
    if isinstance(rubric, RegexRubric):
        compile_pattern(pattern=rubric.pattern, flags=rubric.flags)
    elif isinstance(rubric, JsonSchemaRubric):
        check_json_schema(rubric.json_schema)
