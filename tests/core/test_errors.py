"""Tests verifying the BenchEvalError type hierarchy."""

from pathlib import Path

import pytest

from bench_eval.agent.infrastructure.errors import (
    AgentInvocationError,
    AgentTimeoutError,
    AgentUnavailableError,
)
from bench_eval.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)
from bench_eval.core.errors import BenchEvalError, RunFaultError
from bench_eval.dataset.infrastructure.errors import DatasetParseError, UnsupportedInputError
from bench_eval.evaluation.domain.errors import IllegalTransitionError, UnknownRunError
from bench_eval.evaluation.domain.status import RunStatus
from bench_eval.rubric.infrastructure.errors import JudgeInvocationError, RubricConfigError

_ALL_ERRORS: list[BenchEvalError] = [
    MissingEnvVarsError(missing_vars=["MY_VAR"]),
    ConfigValidationError(reason="bad value"),
    ConfigLoadError(path=Path("/some/config.yaml")),
    DatasetParseError(reason="bad line", line_number=3, excerpt="{oops"),
    UnsupportedInputError(reason="xlsx needs bytes"),
    RubricConfigError(reason="bad pattern"),
    JudgeInvocationError(reason="down"),
    AgentInvocationError(reason="empty response"),
    AgentTimeoutError(timeout_seconds=30),
    AgentUnavailableError(reason="bad key"),
    RunFaultError(reason="gone"),
    IllegalTransitionError("run r-1", RunStatus.COMPLETED, RunStatus.RUNNING),
    UnknownRunError(run_id="r-404"),
]


class TestBenchEvalErrorHierarchy:
    """All bench-eval-specific exceptions inherit from BenchEvalError."""

    @pytest.mark.parametrize("error", _ALL_ERRORS, ids=lambda e: type(e).__name__)
    def test_is_bench_eval_error(self, error: BenchEvalError) -> None:
        assert isinstance(error, BenchEvalError)

    @pytest.mark.parametrize("error", _ALL_ERRORS, ids=lambda e: type(e).__name__)
    def test_message_starts_with_failed(self, error: BenchEvalError) -> None:
        assert str(error).startswith("Failed to ")

    def test_bench_eval_error_is_exception(self) -> None:
        assert isinstance(BenchEvalError("test"), Exception)

    def test_not_retriable_by_default(self) -> None:
        assert BenchEvalError("test").retriable is False


class TestRunFaultError:
    def test_agent_unavailable_is_run_fault(self) -> None:
        assert isinstance(AgentUnavailableError(reason="bad key"), RunFaultError)

    def test_agent_invocation_error_is_not_run_fault(self) -> None:
        assert not isinstance(AgentInvocationError(reason="x"), RunFaultError)


class TestDatasetParseError:
    def test_carries_line_details(self) -> None:
        error = DatasetParseError(reason="bad line", line_number=3, excerpt="{oops")

        assert error.line_number == 3
        assert error.excerpt == "{oops"


class TestMissingEnvVarsError:
    def test_lists_variables_sorted(self) -> None:
        error = MissingEnvVarsError(missing_vars=["B_VAR", "A_VAR"])

        assert "A_VAR, B_VAR" in str(error)
        assert error.missing_vars == ["B_VAR", "A_VAR"]


class TestAgentTimeoutError:
    def test_message_names_timeout(self) -> None:
        assert "30s" in str(AgentTimeoutError(timeout_seconds=30))
