"""Error types raised by the run state machine and the run registry."""

from bench_eval.core.errors import BenchEvalError
from bench_eval.evaluation.domain.status import CaseStatus, RunStatus


class IllegalTransitionError(BenchEvalError):
    """Raised when a run or case is asked to move along an edge that does not exist."""

    def __init__(
        self,
        subject: str,
        source: RunStatus | CaseStatus,
        target: RunStatus | CaseStatus,
    ) -> None:
        super().__init__(
            f"Failed to transition {subject}: {source} -> {target} is not allowed"
        )
        self.source = source
        self.target = target


class UnknownRunError(BenchEvalError):
    def __init__(self, run_id: str) -> None:
        super().__init__(f"Failed to find run: {run_id}")
        self.run_id = run_id
