"""JudgeObserver port: domain events emitted during LLM judge invocations."""

from typing import Protocol


class JudgeObserver(Protocol):
    """Observer port for judge domain events.

    Implementations may log to structlog, record for tests, or emit metrics.
    """

    def judge_scoring_started(self, model: str) -> None: ...

    def judge_scoring_completed(self, model: str, duration_ms: int, score: float) -> None: ...

    def judge_scoring_failed(self, model: str, reason: str) -> None: ...
