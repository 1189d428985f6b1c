"""Tests for the per-kind matcher functions."""

import pytest

from bench_eval.rubric.infrastructure.errors import RubricConfigError
from bench_eval.rubric.infrastructure.matchers import (
    check_json_schema,
    match_any_of,
    match_contains,
    match_ends_with,
    match_equals,
    match_json_schema,
    match_levenshtein,
    match_numeric,
    match_regex,
    match_starts_with,
)


class TestContains:
    """contains is a verbatim, case-sensitive substring test."""

    def test_substring_passes(self) -> None:
        result = match_contains("The answer is 42", "42")

        assert result.passed is True
        assert result.score == 1.0

    def test_missing_substring_fails_with_detail(self) -> None:
        result = match_contains("no match", "42")

        assert result.passed is False
        assert result.score == 0.0
        assert result.detail is not None

    def test_case_matters(self) -> None:
        assert match_contains("Paris", "paris").passed is False


class TestStartsWith:
    """starts_with ignores case and surrounding whitespace."""

    def test_prefix_ignores_case(self) -> None:
        assert match_starts_with("Hello world", "hello").passed is True

    def test_non_prefix_fails(self) -> None:
        assert match_starts_with("Hello world", "world").passed is False

    def test_leading_whitespace_is_trimmed(self) -> None:
        assert match_starts_with("   Yes, indeed", "yes").passed is True


class TestEndsWithAndEquals:
    def test_ends_with_ignores_case(self) -> None:
        assert match_ends_with("The capital is PARIS.\n", "paris.").passed is True

    def test_equals_normalizes(self) -> None:
        assert match_equals("  Paris ", "paris").passed is True

    def test_equals_rejects_extra_text(self) -> None:
        assert match_equals("Paris, France", "paris").passed is False


class TestRegex:
    def test_pattern_found_anywhere(self) -> None:
        assert match_regex("answer: 42", r"\d+").passed is True

    def test_pattern_not_found(self) -> None:
        assert match_regex("no numbers", r"\d+").passed is False

    def test_flags_apply(self) -> None:
        assert match_regex("PARIS", "paris").passed is False
        assert match_regex("PARIS", "paris", flags="i").passed is True

    def test_invalid_pattern_raises(self) -> None:
        with pytest.raises(RubricConfigError):
            match_regex("anything", "(unclosed")

    def test_unknown_flag_raises(self) -> None:
        with pytest.raises(RubricConfigError):
            match_regex("anything", "a", flags="g")


class TestAnyOf:
    def test_matches_one_candidate(self) -> None:
        assert match_any_of(" B ", ["a", "b", "c"]).passed is True

    def test_case_sensitive_option(self) -> None:
        assert match_any_of("b", ["B"], case_sensitive=True).passed is False

    def test_no_candidate_matches(self) -> None:
        assert match_any_of("d", ["a", "b"]).passed is False


class TestNumeric:
    def test_number_inside_text(self) -> None:
        assert match_numeric("The answer is 42.", 42).passed is True

    def test_within_tolerance(self) -> None:
        assert match_numeric("3.14159", 3.14, tolerance=0.01).passed is True

    def test_outside_tolerance(self) -> None:
        assert match_numeric("3.2", 3.14, tolerance=0.01).passed is False

    def test_negative_number(self) -> None:
        assert match_numeric("-5", -5).passed is True

    def test_unparseable_output(self) -> None:
        result = match_numeric("no digits here", 1)

        assert result.passed is False
        assert result.detail is not None
        assert result.detail.startswith("Could not parse number")


class TestLevenshtein:
    def test_score_is_one_minus_distance_over_longer_length(self) -> None:
        result = match_levenshtein("kitten", "sitting", threshold=0.5)

        assert result.passed is True
        assert result.score == pytest.approx(1 - 3 / 7)

    def test_similar_strings_pass_with_similarity_score(self) -> None:
        result = match_levenshtein("colour", "color", threshold=0.8)

        assert result.passed is True
        assert result.score == pytest.approx(1 - 1 / 6)

    def test_dissimilar_strings_fail(self) -> None:
        assert match_levenshtein("apple", "orange").passed is False

    def test_two_empty_strings_are_identical(self) -> None:
        assert match_levenshtein("", "").score == 1.0


class TestJsonSchema:
    _SCHEMA = {
        "type": "object",
        "properties": {"answer": {"type": "integer"}},
        "required": ["answer"],
    }

    def test_valid_document_passes(self) -> None:
        assert match_json_schema('{"answer": 4}', self._SCHEMA).passed is True

    def test_schema_violation_fails_with_messages(self) -> None:
        result = match_json_schema('{"answer": "four"}', self._SCHEMA)

        assert result.passed is False
        assert result.detail is not None
        assert "integer" in result.detail

    def test_non_json_output_fails(self) -> None:
        result = match_json_schema("four", self._SCHEMA)

        assert result.passed is False
        assert result.detail == "Output is not valid JSON"

    def test_deeply_nested_output_fails(self) -> None:
        nested = "[" * 100_000 + "]" * 100_000

        result = match_json_schema(nested, self._SCHEMA)

        assert result.passed is False
        assert result.detail == "Output is not valid JSON"

    def test_invalid_schema_raises(self) -> None:
        with pytest.raises(RubricConfigError):
            check_json_schema({"type": "not-a-type"})
