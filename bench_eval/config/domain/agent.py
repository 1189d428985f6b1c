"""Agent configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class AgentConfig(BaseModel, frozen=True):
    model_config = ConfigDict(extra="forbid")

    model: str = Field(min_length=1)
    provider: str | None = None
    system_prompt: str | None = None
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)

    @property
    def qualified_model(self) -> str:
        """Model name in LiteLLM's ``provider/model`` form."""
        if self.provider and "/" not in self.model:
            return f"{self.provider}/{self.model}"
        return self.model
