"""Matcher implementations: pure functions from (actual, criteria) to MatchResult.

Case sensitivity is a per-matcher contract: ``contains`` compares verbatim,
while ``starts_with``, ``ends_with``, ``equals`` and ``levenshtein`` compare
trimmed, lower-cased text.
"""

import json
import re
from typing import Any

from jsonschema import SchemaError
from jsonschema.validators import validator_for
from rapidfuzz.distance import Levenshtein

from bench_eval.rubric.domain.match_result import MatchResult
from bench_eval.rubric.infrastructure.errors import RubricConfigError

_REGEX_FLAGS: dict[str, re.RegexFlag] = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
    "a": re.ASCII,
    "u": re.UNICODE,
}
_NON_NUMERIC = re.compile(r"[^.\-\d]")
_LEADING_NUMBER = re.compile(r"^-?(\d+\.?\d*|\.\d+)")


def normalize(text: str, case_sensitive: bool = False) -> str:
    """Trim whitespace and, unless case_sensitive, lower-case."""
    trimmed = text.strip()
    return trimmed if case_sensitive else trimmed.lower()


def _verdict(passed: bool, detail: str | None = None) -> MatchResult:
    return MatchResult(passed=passed, score=1.0 if passed else 0.0, detail=detail)


def match_contains(actual: str, expected: str) -> MatchResult:
    passed = expected in actual
    return _verdict(passed, None if passed else f"output does not contain {expected!r}")


def match_starts_with(actual: str, expected: str) -> MatchResult:
    passed = normalize(actual).startswith(normalize(expected))
    return _verdict(passed, None if passed else f"output does not start with {expected!r}")


def match_ends_with(actual: str, expected: str) -> MatchResult:
    passed = normalize(actual).endswith(normalize(expected))
    return _verdict(passed, None if passed else f"output does not end with {expected!r}")


def match_equals(actual: str, expected: str) -> MatchResult:
    passed = normalize(actual) == normalize(expected)
    return _verdict(passed, None if passed else f"output does not equal {expected!r}")


def compile_pattern(pattern: str, flags: str = "") -> re.Pattern[str]:
    """Compile pattern with letter flags.

    Raises:
        RubricConfigError: on an unknown flag letter or an invalid pattern.
    """
    combined = re.NOFLAG
    for letter in flags:
        if letter not in _REGEX_FLAGS:
            raise RubricConfigError(f"unknown regex flag {letter!r}")
        combined |= _REGEX_FLAGS[letter]
    try:
        return re.compile(pattern, combined)
    except re.error as exc:
        raise RubricConfigError(f"invalid regex pattern {pattern!r}: {exc}") from exc


def match_regex(actual: str, pattern: str, flags: str = "") -> MatchResult:
    """Pass iff pattern matches anywhere in actual.

    Raises:
        RubricConfigError: if the pattern does not compile.
    """
    compiled = compile_pattern(pattern=pattern, flags=flags)
    found = compiled.search(actual)
    if found is None:
        return _verdict(False, f"pattern {pattern!r} not found")
    return _verdict(True, f"matched {found.group(0)!r}")


def match_any_of(actual: str, values: list[str], case_sensitive: bool = False) -> MatchResult:
    candidate = normalize(actual, case_sensitive)
    passed = any(normalize(value, case_sensitive) == candidate for value in values)
    return _verdict(passed, None if passed else "output matches none of the candidates")


def _parse_leading_float(text: str) -> float | None:
    found = _LEADING_NUMBER.match(text.strip())
    return float(found.group(0)) if found else None


def match_numeric(actual: str, expected: float, tolerance: float = 0.01) -> MatchResult:
    actual_number = _parse_leading_float(_NON_NUMERIC.sub("", actual))
    if actual_number is None:
        return _verdict(False, f'Could not parse number from "{actual}"')
    passed = abs(actual_number - expected) <= tolerance
    return _verdict(passed, f"actual={actual_number} expected={expected} tolerance={tolerance}")


def parse_expected_number(expected: str) -> float | None:
    return _parse_leading_float(expected)


def match_levenshtein(actual: str, expected: str, threshold: float = 0.8) -> MatchResult:
    a = normalize(actual)
    e = normalize(expected)
    similarity = Levenshtein.normalized_similarity(a, e)
    return MatchResult(
        passed=similarity >= threshold,
        score=similarity,
        detail=f"similarity={similarity:.3f}",
    )


def check_json_schema(schema: dict[str, Any]) -> None:
    """Raises RubricConfigError if schema is not a valid JSON Schema."""
    try:
        validator_for(schema).check_schema(schema)
    except SchemaError as exc:
        raise RubricConfigError(f"invalid JSON schema: {exc.message}") from exc


def match_json_schema(actual: str, schema: dict[str, Any]) -> MatchResult:
    """Pass iff actual is JSON that validates against schema.

    Raises:
        RubricConfigError: if the schema itself is invalid.
    """
    check_json_schema(schema)
    try:
        parsed = json.loads(actual)
    except (ValueError, RecursionError):
        return _verdict(False, "Output is not valid JSON")

    validator = validator_for(schema)(schema)
    errors = sorted(validator.iter_errors(parsed), key=lambda err: list(err.path))
    if errors:
        return _verdict(False, "; ".join(err.message for err in errors))
    return _verdict(True)
