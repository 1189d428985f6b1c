"""LlmJudge Protocol: structural interface for LLM-graded rubrics."""

from typing import Protocol

from pydantic import BaseModel, Field


class JudgeVerdict(BaseModel, frozen=True):
    """Structured judge output: a 0-1 score and a short reason."""

    score: float = Field(ge=0.0, le=1.0)
    reason: str


class LlmJudge(Protocol):
    """Scores an output against criteria, optionally with an expected answer."""

    async def judge(
        self,
        criteria: str,
        actual: str,
        expected: str | None,
        model: str | None,
        system_role: str | None,
    ) -> JudgeVerdict: ...
