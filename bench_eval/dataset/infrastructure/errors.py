"""Error types raised by dataset infrastructure."""

from bench_eval.core.errors import BenchEvalError


class DatasetParseError(BenchEvalError):
    """Raised when JSON or JSONL content is malformed.

    For JSONL the offending 1-based ``line_number`` and a 100-character
    ``excerpt`` of the line are carried alongside the message. The line
    number counts non-blank lines only, so it differs from the physical
    file line when blank lines precede the offending one.
    """

    def __init__(
        self,
        reason: str,
        line_number: int | None = None,
        excerpt: str | None = None,
    ) -> None:
        self.line_number = line_number
        self.excerpt = excerpt
        super().__init__(f"Failed to parse dataset: {reason}")


class UnsupportedInputError(BenchEvalError):
    """Raised when the input type cannot be parsed in the requested format."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to parse dataset: {reason}")


class DatasetMappingError(BenchEvalError):
    """Raised when parsed rows cannot be mapped onto test cases."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"Failed to map dataset: {reason}")
