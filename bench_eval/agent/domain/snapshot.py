"""AgentSnapshot: the agent identity captured when a run is created."""

from pydantic import BaseModel, Field


class AgentSnapshot(BaseModel, frozen=True):
    """Model and provider as they were at run creation.

    Stored on the run unchanged so later agent edits never rewrite history.
    """

    model: str = Field(min_length=1)
    provider: str | None = None
    system_prompt: str | None = None
