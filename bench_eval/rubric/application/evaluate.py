"""Multi-rubric grading of one agent output against one test case."""

import json

from pydantic import BaseModel, ConfigDict, Field

from bench_eval.dataset.domain.test_case import TestCaseContent
from bench_eval.rubric.application.registry import match
from bench_eval.rubric.domain.extractor import Extractor
from bench_eval.rubric.domain.judge import LlmJudge
from bench_eval.rubric.domain.match_result import GradeResult, MatchResult, RubricResult
from bench_eval.rubric.domain.rubric import AnyOfRubric, ContainsRubric, Rubric
from bench_eval.rubric.infrastructure.extractors import extract

DEFAULT_PASS_THRESHOLD = 0.6

_DEFAULT_RUBRIC = ContainsRubric(kind="contains", id="default-contains")


class EvaluateOptions(BaseModel, frozen=True):
    """Run-wide grading policy."""

    model_config = ConfigDict(extra="forbid")

    extractor: Extractor | None = None
    pass_threshold: float = Field(default=DEFAULT_PASS_THRESHOLD, ge=0, le=1)


async def evaluate(
    actual: str,
    rubrics: list[Rubric],
    test_case: TestCaseContent,
    options: EvaluateOptions | None = None,
    judge: LlmJudge | None = None,
) -> GradeResult:
    """Grade actual against every rubric and combine the results.

    1. With no rubrics, a case that has ``expected`` is graded by a default
       ``contains`` rubric; a case without one fails.
    2. Each rubric's extractor (or the run-wide default) is applied first.
    3. An ``expected`` holding a JSON array is treated as a list of accepted
       candidates and the best-scoring candidate wins.
    4. The overall score is the weight-averaged rubric score and the case
       passes when it reaches ``pass_threshold``.

    Raises:
        RubricConfigError: if a rubric or extractor is misconfigured.
        JudgeInvocationError: if an LLM judge call fails.
    """
    options = options or EvaluateOptions()

    if not rubrics:
        if test_case.expected is None:
            return GradeResult(passed=False, score=0.0, detail="No rubrics configured")
        rubrics = [_DEFAULT_RUBRIC]

    candidates = _candidates(test_case.expected)
    results: list[RubricResult] = []
    total_weight = 0.0
    weighted_score = 0.0

    for index, rubric in enumerate(rubrics):
        extractor = rubric.extractor or options.extractor
        extracted = extract(actual, extractor) if extractor is not None else actual

        if candidates is not None and not isinstance(rubric, AnyOfRubric):
            result = await _best_of(extracted, candidates, rubric, judge)
        else:
            result = await match(extracted, test_case.expected, rubric, judge)

        results.append(
            RubricResult(
                rubric_id=rubric.id or f"{rubric.kind}-{index}",
                passed=result.passed,
                score=result.score,
                detail=result.detail,
            )
        )
        total_weight += rubric.weight
        weighted_score += result.score * rubric.weight

    score = weighted_score / total_weight if total_weight > 0 else 0.0
    score = min(1.0, max(0.0, score))
    return GradeResult(
        passed=score >= options.pass_threshold,
        score=score,
        rubric_results=results,
    )


async def _best_of(
    actual: str, candidates: list[str], rubric: Rubric, judge: LlmJudge | None
) -> MatchResult:
    best: MatchResult | None = None
    for candidate in candidates:
        result = await match(actual, candidate, rubric, judge)
        if best is None or result.score > best.score:
            best = result
    assert best is not None
    return best


def _candidates(expected: str | None) -> list[str] | None:
    """Return the candidate list when expected is a non-empty JSON array string."""
    if expected is None or not expected.startswith("["):
        return None
    try:
        parsed = json.loads(expected)
    except ValueError:
        return None
    if not isinstance(parsed, list) or not parsed:
        return None
    return [str(item) for item in parsed]
