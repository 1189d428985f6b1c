"""Structlog implementation of the AgentObserver port."""

import structlog


class StructlogAgentObserver:
    """Delegates agent domain events to structlog.

    Satisfies the AgentObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def agent_invocation_started(self, model: str) -> None:
        self._log.debug("agent.invocation_started", model=model)

    def agent_invocation_completed(
        self, model: str, duration_ms: int, output_chars: int
    ) -> None:
        self._log.debug(
            "agent.invocation_completed",
            model=model,
            duration_ms=duration_ms,
            output_chars=output_chars,
        )

    def agent_invocation_failed(self, model: str, reason: str) -> None:
        self._log.warning("agent.invocation_failed", model=model, reason=reason)
