"""RunStateMachine: the single writer of a run's status and its cases."""

from datetime import UTC, datetime

from bench_eval.agent.domain.snapshot import AgentSnapshot
from bench_eval.dataset.domain.test_case import TestCase
from bench_eval.evaluation.domain.errors import IllegalTransitionError
from bench_eval.evaluation.domain.options import RunOptions
from bench_eval.evaluation.domain.run import RunCase, RunId, RunSnapshot
from bench_eval.evaluation.domain.status import (
    CaseStatus,
    RunStatus,
    can_transition,
    is_terminal,
)
from bench_eval.rubric.domain.match_result import GradeResult


def _now() -> datetime:
    return datetime.now(UTC)


class RunStateMachine:
    """Holds the authoritative status of a run and of every one of its cases.

    The case set is fixed at construction, one ``pending`` case per test case.
    Cases only move forward; a terminal case or run never changes again.
    A counter of terminal cases decides when ``completed`` becomes legal, so
    the run reaches it exactly once and only after every case has settled.
    ``aborted`` and ``failed`` may leave not-yet-started cases ``pending``.
    """

    def __init__(
        self,
        run_id: RunId,
        dataset_id: str,
        test_cases: list[TestCase],
        options: RunOptions,
        agent: AgentSnapshot | None = None,
    ) -> None:
        self._run_id = run_id
        self._dataset_id = dataset_id
        self._options = options
        self._agent = agent
        self._status = RunStatus.PENDING
        self._created_at = _now()
        self._started_at: datetime | None = None
        self._finished_at: datetime | None = None
        self._error: str | None = None
        self._cases = [
            RunCase(index=index, test_case_id=test_case.id)
            for index, test_case in enumerate(test_cases)
        ]
        self._terminal_cases = 0

    @property
    def run_id(self) -> RunId:
        return self._run_id

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def options(self) -> RunOptions:
        return self._options

    @property
    def total_cases(self) -> int:
        return len(self._cases)

    @property
    def all_cases_terminal(self) -> bool:
        return self._terminal_cases == len(self._cases)

    def case(self, index: int) -> RunCase:
        return self._cases[index]

    def transition_run(self, target: RunStatus, error: str | None = None) -> None:
        """Move the run to ``target``.

        Raises:
            IllegalTransitionError: if the edge does not exist, or ``target`` is
                ``completed`` while some case has not settled.
        """
        if not can_transition(self._status, target):
            raise IllegalTransitionError(f"run {self._run_id}", self._status, target)
        if target == RunStatus.COMPLETED and not self.all_cases_terminal:
            raise IllegalTransitionError(f"run {self._run_id}", self._status, target)

        self._status = target
        if target == RunStatus.RUNNING:
            self._started_at = _now()
        if is_terminal(target):
            self._finished_at = _now()
            self._error = error

    def ensure_running(self) -> bool:
        """Move a pending run to running. Returns True if this call changed it."""
        if self._status != RunStatus.PENDING:
            return False
        self.transition_run(RunStatus.RUNNING)
        return True

    def start_case(self, index: int) -> RunCase:
        case = self._cases[index]
        self._check_case(case, CaseStatus.RUNNING)
        updated = case.model_copy(
            update={"status": CaseStatus.RUNNING, "started_at": _now(), "attempts": 1}
        )
        self._cases[index] = updated
        return updated

    def record_attempt(self, index: int) -> RunCase:
        """Count one more attempt of a case that is still running."""
        case = self._cases[index]
        if case.status != CaseStatus.RUNNING:
            raise IllegalTransitionError(
                f"case {index}", case.status, CaseStatus.RUNNING
            )
        updated = case.model_copy(update={"attempts": case.attempts + 1})
        self._cases[index] = updated
        return updated

    def finish_case(
        self,
        index: int,
        status: CaseStatus,
        output: str | None = None,
        result: GradeResult | None = None,
        error: str | None = None,
        timed_out: bool = False,
    ) -> RunCase:
        case = self._cases[index]
        self._check_case(case, status)
        if not is_terminal(status):
            raise IllegalTransitionError(f"case {index}", case.status, status)
        updated = case.model_copy(
            update={
                "status": status,
                "output": output,
                "result": result,
                "error": error,
                "timed_out": timed_out,
                "finished_at": _now(),
            }
        )
        self._cases[index] = updated
        self._terminal_cases += 1
        return updated

    def running_case_indices(self) -> list[int]:
        return [c.index for c in self._cases if c.status == CaseStatus.RUNNING]

    def snapshot(self) -> RunSnapshot:
        return RunSnapshot(
            run_id=self._run_id,
            dataset_id=self._dataset_id,
            status=self._status,
            options=self._options,
            agent=self._agent,
            created_at=self._created_at,
            started_at=self._started_at,
            finished_at=self._finished_at,
            error=self._error,
            cases=list(self._cases),
        )

    def _check_case(self, case: RunCase, target: CaseStatus) -> None:
        if not can_transition(case.status, target):
            raise IllegalTransitionError(f"case {case.index}", case.status, target)
