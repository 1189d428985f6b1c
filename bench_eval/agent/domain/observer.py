"""AgentObserver port: domain events emitted during agent invocations."""

from typing import Protocol


class AgentObserver(Protocol):
    """Observer port for agent domain events.

    Implementations may log to structlog, record for tests, or emit metrics.
    """

    def agent_invocation_started(self, model: str) -> None: ...

    def agent_invocation_completed(
        self, model: str, duration_ms: int, output_chars: int
    ) -> None: ...

    def agent_invocation_failed(self, model: str, reason: str) -> None: ...
