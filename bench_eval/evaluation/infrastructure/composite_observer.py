"""CompositeRunObserver: fans out all events to a list of observers."""

from bench_eval.evaluation.domain.metrics import RunMetrics
from bench_eval.evaluation.domain.observer import RunObserver
from bench_eval.evaluation.domain.run import RunCase
from bench_eval.evaluation.domain.status import RunStatus


class CompositeRunObserver:
    """Delegates every observer event to each observer in order.

    Does NOT inherit from RunObserver (structural typing via Protocol).
    """

    def __init__(self, observers: list[RunObserver]) -> None:
        self._observers = observers

    def run_created(
        self,
        run_id: str,
        dataset_id: str,
        total_cases: int,
        concurrency: int,
        timeout_seconds: float,
    ) -> None:
        for obs in self._observers:
            obs.run_created(
                run_id=run_id,
                dataset_id=dataset_id,
                total_cases=total_cases,
                concurrency=concurrency,
                timeout_seconds=timeout_seconds,
            )

    def run_status_changed(
        self, run_id: str, status: RunStatus, reason: str | None
    ) -> None:
        for obs in self._observers:
            obs.run_status_changed(run_id=run_id, status=status, reason=reason)

    def run_abort_requested(self, run_id: str) -> None:
        for obs in self._observers:
            obs.run_abort_requested(run_id=run_id)

    def case_status_changed(self, run_id: str, case: RunCase) -> None:
        for obs in self._observers:
            obs.case_status_changed(run_id=run_id, case=case)

    def case_retry(
        self,
        run_id: str,
        index: int,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None:
        for obs in self._observers:
            obs.case_retry(
                run_id=run_id,
                index=index,
                attempt=attempt,
                reason=reason,
                backoff_seconds=backoff_seconds,
            )

    def run_finished(
        self, run_id: str, status: RunStatus, metrics: RunMetrics
    ) -> None:
        for obs in self._observers:
            obs.run_finished(run_id=run_id, status=status, metrics=metrics)
