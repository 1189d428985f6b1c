"""RunMetrics: aggregate figures derived from a run snapshot."""

from typing import Self

from pydantic import BaseModel

from bench_eval.evaluation.domain.run import RunSnapshot
from bench_eval.evaluation.domain.status import CaseStatus


class RunMetrics(BaseModel, frozen=True):
    """Counts per case status plus pass rate and averages.

    ``pass_rate`` is over graded cases only (passed + failed); errored and
    unfinished cases are excluded. Averages are ``None`` when nothing was
    graded or timed.
    """

    total: int
    pending: int
    running: int
    passed: int
    failed: int
    errored: int
    timed_out: int
    pass_rate: float | None
    average_score: float | None
    average_duration_ms: float | None

    @classmethod
    def from_snapshot(cls, snapshot: RunSnapshot) -> Self:
        passed = snapshot.count(CaseStatus.PASSED)
        failed = snapshot.count(CaseStatus.FAILED)
        graded = passed + failed

        scores = [c.result.score for c in snapshot.cases if c.result is not None]
        durations = [
            c.duration_ms for c in snapshot.cases if c.duration_ms is not None
        ]

        return cls(
            total=len(snapshot.cases),
            pending=snapshot.count(CaseStatus.PENDING),
            running=snapshot.count(CaseStatus.RUNNING),
            passed=passed,
            failed=failed,
            errored=snapshot.count(CaseStatus.ERROR),
            timed_out=sum(1 for c in snapshot.cases if c.timed_out),
            pass_rate=passed / graded if graded else None,
            average_score=sum(scores) / len(scores) if scores else None,
            average_duration_ms=sum(durations) / len(durations) if durations else None,
        )
