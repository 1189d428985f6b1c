"""AgentInvoker Protocol: the opaque target-agent call a run drives."""

from typing import Protocol


class AgentInvoker(Protocol):
    """Structural interface satisfied by any target agent.

    ``ask`` returns the agent's raw text output or raises. Implementations raise
    ``AgentInvocationError`` for a failed call and ``RunFaultError`` when the
    agent is unusable for every remaining case.
    """

    async def ask(self, question: str) -> str: ...
