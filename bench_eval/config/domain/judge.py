"""Judge configuration model."""

from pydantic import BaseModel, ConfigDict, Field


class JudgeConfig(BaseModel, frozen=True):
    model_config = ConfigDict(extra="forbid")

    model: str = Field(min_length=1)
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
