"""Answer extraction from raw agent output, applied before matching."""

import re
from typing import assert_never

from bench_eval.rubric.domain.extractor import (
    ChoiceIndexExtractor,
    DelimiterExtractor,
    Extractor,
    LastLineExtractor,
    RegexExtractor,
)
from bench_eval.rubric.infrastructure.errors import RubricConfigError


def extract(output: str, extractor: Extractor) -> str:
    """Return the part of output the extractor selects, or output unchanged.

    Raises:
        RubricConfigError: if a configured pattern does not compile.
    """
    match extractor:
        case RegexExtractor():
            found = _compile(extractor.pattern).search(output)
            if found is None:
                return output
            try:
                group = found.group(extractor.group)
            except IndexError:
                group = None
            return group if group is not None else found.group(0)
        case DelimiterExtractor():
            parts = output.split(extractor.delimiter)
            if len(parts) < 2:
                return output
            segment = parts[1] if extractor.position == "first" else parts[-1]
            return segment.strip()
        case LastLineExtractor():
            lines = [line for line in output.split("\n") if line.strip()]
            if not lines:
                return output
            return lines[-1].strip() if extractor.trim else lines[-1]
        case ChoiceIndexExtractor():
            return _choice_index(output=output, extractor=extractor)
        case _:
            assert_never(extractor)


def _choice_index(output: str, extractor: ChoiceIndexExtractor) -> str:
    labels = [label.upper() for label in extractor.labels]
    pattern = extractor.pattern or (
        r"\b([" + "".join(re.escape(label) for label in labels) + r"])\b"
    )
    matches = list(_compile(pattern, re.IGNORECASE).finditer(output))
    if not matches:
        return output
    last = matches[-1]
    letter = (last.group(1) if last.groups() and last.group(1) else last.group(0)).upper()
    return str(labels.index(letter)) if letter in labels else output


def _compile(pattern: str, flags: int = 0) -> re.Pattern[str]:
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        raise RubricConfigError(f"invalid extractor pattern {pattern!r}: {exc}") from exc


def check_extractor(extractor: Extractor) -> None:
    """Raises RubricConfigError if the extractor's pattern does not compile."""
    if isinstance(extractor, RegexExtractor):
        _compile(extractor.pattern)
    elif isinstance(extractor, ChoiceIndexExtractor) and extractor.pattern:
        _compile(extractor.pattern, re.IGNORECASE)
