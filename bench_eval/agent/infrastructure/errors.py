"""Error types raised by agent infrastructure."""

from bench_eval.core.errors import BenchEvalError, RunFaultError


class AgentInvocationError(BenchEvalError):
    """Raised when the agent call fails or returns an unusable response."""

    def __init__(self, reason: str, retriable: bool = False) -> None:
        super().__init__(f"Failed to invoke agent: {reason}", retriable=retriable)


class AgentTimeoutError(BenchEvalError):
    """Raised when one agent call exceeds the per-case timeout."""

    def __init__(self, timeout_seconds: float) -> None:
        super().__init__(
            f"Failed to get agent response: timed out after {timeout_seconds:g}s"
        )
        self.timeout_seconds = timeout_seconds


class AgentUnavailableError(RunFaultError):
    """Raised when the agent cannot serve any case (bad credentials, unknown model)."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"agent unavailable: {reason}")
