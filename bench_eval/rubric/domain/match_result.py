"""MatchResult and GradeResult: verdicts produced by rubric matching."""

from pydantic import BaseModel, Field


class MatchResult(BaseModel, frozen=True):
    """Verdict of applying one matcher to one output.

    ``detail`` says what was compared or why the match failed.
    """

    passed: bool
    score: float = Field(ge=0.0, le=1.0)
    detail: str | None = None


class RubricResult(BaseModel, frozen=True):
    rubric_id: str
    passed: bool
    score: float = Field(ge=0.0, le=1.0)
    detail: str | None = None


class GradeResult(BaseModel, frozen=True):
    """Weighted verdict across every rubric applied to a test case."""

    passed: bool
    score: float = Field(ge=0.0, le=1.0)
    detail: str | None = None
    rubric_results: list[RubricResult] = Field(default_factory=list)
