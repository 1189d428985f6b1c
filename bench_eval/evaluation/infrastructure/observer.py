"""StructlogRunObserver: production observer that delegates to structlog."""

import structlog

from bench_eval.evaluation.domain.metrics import RunMetrics
from bench_eval.evaluation.domain.run import RunCase
from bench_eval.evaluation.domain.status import CaseStatus, RunStatus


class StructlogRunObserver:
    """Logs run domain events to structlog.

    Does NOT inherit from RunObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def run_created(
        self,
        run_id: str,
        dataset_id: str,
        total_cases: int,
        concurrency: int,
        timeout_seconds: float,
    ) -> None:
        self._log.info(
            "run.created",
            run_id=run_id,
            dataset_id=dataset_id,
            total_cases=total_cases,
            concurrency=concurrency,
            timeout_seconds=timeout_seconds,
        )

    def run_status_changed(
        self, run_id: str, status: RunStatus, reason: str | None
    ) -> None:
        if status == RunStatus.FAILED:
            self._log.error(
                "run.status_changed", run_id=run_id, status=status, reason=reason
            )
            return
        self._log.info("run.status_changed", run_id=run_id, status=status)

    def run_abort_requested(self, run_id: str) -> None:
        self._log.warning("run.abort_requested", run_id=run_id)

    def case_status_changed(self, run_id: str, case: RunCase) -> None:
        if case.status == CaseStatus.ERROR:
            self._log.warning(
                "run.case.status_changed",
                run_id=run_id,
                index=case.index,
                test_case_id=case.test_case_id,
                status=case.status,
                error=case.error,
                timed_out=case.timed_out,
            )
            return
        self._log.info(
            "run.case.status_changed",
            run_id=run_id,
            index=case.index,
            test_case_id=case.test_case_id,
            status=case.status,
            score=case.result.score if case.result is not None else None,
            duration_ms=case.duration_ms,
        )

    def case_retry(
        self,
        run_id: str,
        index: int,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None:
        self._log.warning(
            "run.case.retry",
            run_id=run_id,
            index=index,
            attempt=attempt,
            reason=reason,
            backoff_seconds=backoff_seconds,
        )

    def run_finished(
        self, run_id: str, status: RunStatus, metrics: RunMetrics
    ) -> None:
        self._log.info(
            "run.finished",
            run_id=run_id,
            status=status,
            passed=metrics.passed,
            failed=metrics.failed,
            errored=metrics.errored,
            pending=metrics.pending,
            pass_rate=(
                round(metrics.pass_rate, 3) if metrics.pass_rate is not None else None
            ),
        )
