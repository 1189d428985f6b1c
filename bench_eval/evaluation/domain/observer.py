"""Observer port for the evaluation domain: defines events in domain language."""

from typing import Protocol

from bench_eval.evaluation.domain.metrics import RunMetrics
from bench_eval.evaluation.domain.run import RunCase
from bench_eval.evaluation.domain.status import RunStatus


class RunObserver(Protocol):
    """Observer port receiving every run and case transition as it happens.

    Implementations may log to structlog, drive a progress display, or record
    for tests. Events are pushed one at a time, never batched.
    """

    def run_created(
        self,
        run_id: str,
        dataset_id: str,
        total_cases: int,
        concurrency: int,
        timeout_seconds: float,
    ) -> None: ...

    def run_status_changed(
        self, run_id: str, status: RunStatus, reason: str | None
    ) -> None: ...

    def run_abort_requested(self, run_id: str) -> None: ...

    def case_status_changed(self, run_id: str, case: RunCase) -> None: ...

    def case_retry(
        self,
        run_id: str,
        index: int,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None: ...

    def run_finished(
        self, run_id: str, status: RunStatus, metrics: RunMetrics
    ) -> None: ...
