"""Tests for RunMetrics."""

from datetime import UTC, datetime, timedelta

import pytest

from bench_eval.evaluation.domain.metrics import RunMetrics
from bench_eval.evaluation.domain.options import RunOptions
from bench_eval.evaluation.domain.run import RunCase, RunSnapshot
from bench_eval.evaluation.domain.status import CaseStatus, RunStatus
from bench_eval.rubric.domain.match_result import GradeResult

_START = datetime(2026, 1, 1, tzinfo=UTC)


def _make_case(
    index: int,
    status: CaseStatus,
    score: float | None = None,
    duration_ms: int | None = None,
    timed_out: bool = False,
) -> RunCase:
    return RunCase(
        index=index,
        test_case_id=f"tc-{index}",
        status=status,
        result=GradeResult(passed=score is not None and score >= 0.6, score=score)
        if score is not None
        else None,
        timed_out=timed_out,
        started_at=_START if duration_ms is not None else None,
        finished_at=_START + timedelta(milliseconds=duration_ms)
        if duration_ms is not None
        else None,
    )


def _make_snapshot(cases: list[RunCase]) -> RunSnapshot:
    return RunSnapshot(
        run_id="run-1",
        dataset_id="ds-1",
        status=RunStatus.COMPLETED,
        options=RunOptions(),
        created_at=_START,
        cases=cases,
    )


class TestRunMetrics:
    def test_counts_per_status(self) -> None:
        metrics = RunMetrics.from_snapshot(
            _make_snapshot(
                [
                    _make_case(0, CaseStatus.PASSED, score=1.0, duration_ms=100),
                    _make_case(1, CaseStatus.FAILED, score=0.0, duration_ms=300),
                    _make_case(2, CaseStatus.ERROR, duration_ms=200, timed_out=True),
                    _make_case(3, CaseStatus.PENDING),
                ]
            )
        )

        assert metrics.total == 4
        assert metrics.passed == 1
        assert metrics.failed == 1
        assert metrics.errored == 1
        assert metrics.pending == 1
        assert metrics.running == 0
        assert metrics.timed_out == 1

    def test_pass_rate_excludes_errors(self) -> None:
        metrics = RunMetrics.from_snapshot(
            _make_snapshot(
                [
                    _make_case(0, CaseStatus.PASSED, score=1.0),
                    _make_case(1, CaseStatus.PASSED, score=0.8),
                    _make_case(2, CaseStatus.FAILED, score=0.3),
                    _make_case(3, CaseStatus.ERROR),
                ]
            )
        )

        assert metrics.pass_rate == pytest.approx(2 / 3)
        assert metrics.average_score == pytest.approx(0.7)

    def test_average_duration(self) -> None:
        metrics = RunMetrics.from_snapshot(
            _make_snapshot(
                [
                    _make_case(0, CaseStatus.PASSED, score=1.0, duration_ms=100),
                    _make_case(1, CaseStatus.FAILED, score=0.0, duration_ms=300),
                ]
            )
        )

        assert metrics.average_duration_ms == pytest.approx(200)

    def test_nothing_graded(self) -> None:
        metrics = RunMetrics.from_snapshot(
            _make_snapshot([_make_case(0, CaseStatus.ERROR)])
        )

        assert metrics.pass_rate is None
        assert metrics.average_score is None
        assert metrics.average_duration_ms is None

    def test_empty_run(self) -> None:
        metrics = RunMetrics.from_snapshot(_make_snapshot([]))

        assert metrics.total == 0
        assert metrics.pass_rate is None
