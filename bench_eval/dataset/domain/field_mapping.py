"""FieldMapping: which source column feeds which TestCase field."""

from pydantic import BaseModel, ConfigDict, Field


class FieldMapping(BaseModel, frozen=True):
    """Column-to-field assignment for one dataset import. Unknown keys are rejected.

    ``expected_delimiter`` splits the expected column into several accepted
    answers. ``metadata`` maps metadata keys to source columns.
    """

    model_config = ConfigDict(extra="forbid")

    input: str = Field(min_length=1)
    expected: str | None = None
    expected_delimiter: str | None = Field(default=None, min_length=1)
    choices: str | None = None
    category: str | None = None
    sort_order: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
