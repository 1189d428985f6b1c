"""Structlog implementation of the JudgeObserver port."""

import structlog


class StructlogJudgeObserver:
    """Delegates judge domain events to structlog.

    Satisfies the JudgeObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def judge_scoring_started(self, model: str) -> None:
        self._log.debug("judge.scoring_started", model=model)

    def judge_scoring_completed(self, model: str, duration_ms: int, score: float) -> None:
        self._log.info(
            "judge.scoring_completed",
            model=model,
            duration_ms=duration_ms,
            score=score,
        )

    def judge_scoring_failed(self, model: str, reason: str) -> None:
        self._log.error("judge.scoring_failed", model=model, reason=reason)
