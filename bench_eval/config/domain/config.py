"""Top-level EvalConfig aggregate: the root configuration object."""

from pydantic import BaseModel, ConfigDict, Field

from bench_eval.config.domain.agent import AgentConfig
from bench_eval.config.domain.dataset import DatasetConfig
from bench_eval.config.domain.judge import JudgeConfig
from bench_eval.evaluation.domain.options import RunOptions
from bench_eval.rubric.domain.rubric import Rubric


class EvalConfig(BaseModel, frozen=True):
    """Root configuration aggregate for a bench-eval run.

    An empty ``rubrics`` list grades each case with a ``contains`` check
    against its expected value.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    dataset: DatasetConfig
    agent: AgentConfig
    rubrics: list[Rubric] = Field(default_factory=list)
    judge: JudgeConfig | None = None
    execution: RunOptions = Field(default_factory=RunOptions)
