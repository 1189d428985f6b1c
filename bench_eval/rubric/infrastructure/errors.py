"""Error types raised by rubric infrastructure."""

from bench_eval.core.errors import BenchEvalError


class RubricConfigError(BenchEvalError):
    """Raised when a rubric's parameters are unusable, e.g. an invalid regex."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to configure rubric: {reason}")


class JudgeInvocationError(BenchEvalError):
    """Raised when the judge cannot be invoked or returns an unparseable response."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to score response: {reason}")
