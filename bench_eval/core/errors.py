"""Base exception class for all bench-eval-specific errors."""


class BenchEvalError(Exception):
    """Base class for all bench-eval errors."""

    def __init__(self, message: str, retriable: bool = False) -> None:
        super().__init__(message)
        self.retriable = retriable


class RunFaultError(BenchEvalError):
    """Raised when a whole run cannot continue, as opposed to a single case failing.

    An invoker raises this when the target agent is unavailable entirely. The
    orchestrator moves the run to ``failed`` when it sees one.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to continue run: {reason}")
