"""RunOptions: the recognised knobs of a single run."""

from pydantic import BaseModel, ConfigDict, Field

from bench_eval.rubric.domain.extractor import Extractor

DEFAULT_CONCURRENCY = 5
MAX_CONCURRENCY = 64
DEFAULT_TIMEOUT_SECONDS = 30 * 60
MAX_TIMEOUT_SECONDS = 240 * 60


class RetryPolicy(BaseModel, frozen=True):
    """Bounded retry of a failed agent call; every attempt gets the full timeout."""

    model_config = ConfigDict(extra="forbid")

    max_attempts: int = Field(default=1, ge=1, le=10)
    initial_backoff_seconds: float = Field(default=1.0, ge=0)
    backoff_multiplier: float = Field(default=2.0, ge=1)
    retry_on_timeout: bool = False


class RunOptions(BaseModel, frozen=True):
    """Run configuration. Unrecognised keys are rejected.

    ``extractor`` and ``pass_threshold`` are the run-wide grading defaults;
    a rubric's own extractor takes precedence.
    """

    model_config = ConfigDict(extra="forbid")

    concurrency: int = Field(default=DEFAULT_CONCURRENCY, ge=1, le=MAX_CONCURRENCY)
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS, gt=0, le=MAX_TIMEOUT_SECONDS
    )
    pass_threshold: float = Field(default=0.6, ge=0, le=1)
    extractor: Extractor | None = None
    retry: RetryPolicy = Field(default_factory=RetryPolicy)
