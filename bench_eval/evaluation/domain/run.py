"""RunCase and RunSnapshot: the observable state of a run."""

from datetime import datetime
from typing import TypeAlias

from pydantic import BaseModel, Field

from bench_eval.agent.domain.snapshot import AgentSnapshot
from bench_eval.evaluation.domain.options import RunOptions
from bench_eval.evaluation.domain.status import CaseStatus, RunStatus
from bench_eval.rubric.domain.match_result import GradeResult

RunId: TypeAlias = str


class RunCase(BaseModel, frozen=True):
    """Execution record of one test case within a run.

    ``index`` is the case's position in the dataset and never changes,
    whatever order cases finish in.
    """

    index: int = Field(ge=0)
    test_case_id: str
    status: CaseStatus = CaseStatus.PENDING
    output: str | None = None
    result: GradeResult | None = None
    error: str | None = None
    timed_out: bool = False
    attempts: int = 0
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def duration_ms(self) -> int | None:
        if self.started_at is None or self.finished_at is None:
            return None
        return int((self.finished_at - self.started_at).total_seconds() * 1000)


class RunSnapshot(BaseModel, frozen=True):
    """Point-in-time copy of a run, safe to hand to pollers."""

    run_id: RunId
    dataset_id: str
    status: RunStatus
    options: RunOptions
    agent: AgentSnapshot | None = None
    created_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: str | None = None
    cases: list[RunCase]

    def count(self, status: CaseStatus) -> int:
        return sum(1 for case in self.cases if case.status == status)
