"""Field mapping: turns parsed rows into the TestCases of a Dataset."""

import json
import math
from typing import Any

from bench_eval.dataset.domain.field_mapping import FieldMapping
from bench_eval.dataset.domain.observer import DatasetObserver
from bench_eval.dataset.domain.parse_result import ParseResult, Row
from bench_eval.dataset.domain.test_case import Dataset, TestCase, TestCaseContent
from bench_eval.dataset.infrastructure.errors import DatasetMappingError

_INPUT_CANDIDATES = frozenset(
    {"input", "question", "prompt", "query", "text", "instruction", "problem"}
)
_EXPECTED_CANDIDATES = frozenset(
    {
        "expected",
        "answer",
        "ideal",
        "target",
        "output",
        "response",
        "label",
        "ground_truth",
        "groundtruth",
    }
)
_CHOICES_CANDIDATES = frozenset({"choices", "options", "alternatives", "candidates"})
_CATEGORY_CANDIDATES = frozenset(
    {"category", "topic", "type", "subject", "class", "tag"}
)
_SORT_ORDER_CANDIDATES = frozenset(
    {"id", "number", "index", "no", "order", "sort_order"}
)


def infer_field_mapping(headers: list[str]) -> FieldMapping:
    """Guess a FieldMapping from header names.

    Each role takes the first header whose lower-cased, trimmed name is a known
    candidate. When no input column is recognised the first column is used.

    Raises:
        DatasetMappingError: if there are no headers to map.
    """
    if not headers:
        raise DatasetMappingError("dataset has no columns")

    roles: dict[str, str] = {}
    candidates = (
        ("input", _INPUT_CANDIDATES),
        ("expected", _EXPECTED_CANDIDATES),
        ("choices", _CHOICES_CANDIDATES),
        ("category", _CATEGORY_CANDIDATES),
        ("sort_order", _SORT_ORDER_CANDIDATES),
    )
    for header in headers:
        name = header.strip().lower()
        for role, names in candidates:
            if role not in roles and name in names:
                roles[role] = header
                break

    if "input" not in roles:
        roles["input"] = headers[0]
        for role in ("expected", "choices", "category", "sort_order"):
            if roles.get(role) == headers[0]:
                del roles[role]

    return FieldMapping(**roles)


def build_dataset(
    result: ParseResult,
    mapping: FieldMapping,
    dataset_id: str,
    name: str,
    observer: DatasetObserver,
    description: str | None = None,
) -> Dataset:
    """Build a Dataset from parsed rows according to mapping.

    Rows whose input is empty are skipped. Test cases are ordered by their
    sort order, which comes from the mapped column when it holds a finite
    number and otherwise from the 1-based row position.
    """
    cases: list[TestCase] = []
    skipped = 0
    for index, row in enumerate(result.rows):
        raw_input = row.get(mapping.input)
        if raw_input is None or str(raw_input).strip() == "":
            skipped += 1
            continue
        sort_order = _sort_order(row=row, mapping=mapping, position=index + 1)
        cases.append(
            TestCase(
                id=f"{dataset_id}-{index + 1}",
                sort_order=sort_order,
                content=TestCaseContent(
                    input=str(raw_input),
                    expected=_expected(row=row, mapping=mapping),
                    choices=_choices(row=row, mapping=mapping),
                ),
                metadata=_metadata(row=row, mapping=mapping),
            )
        )

    cases.sort(key=lambda case: case.sort_order)
    observer.dataset_mapped(
        dataset_id=dataset_id, total_cases=len(cases), skipped_rows=skipped
    )
    return Dataset(
        id=dataset_id,
        name=name,
        description=description,
        test_cases=cases,
    )


def _expected(row: Row, mapping: FieldMapping) -> str | None:
    if mapping.expected is None:
        return None
    raw = row.get(mapping.expected)
    if raw is None:
        return None
    if mapping.expected_delimiter:
        candidates = [
            part.strip()
            for part in str(raw).split(mapping.expected_delimiter)
            if part.strip()
        ]
        if len(candidates) > 1:
            return json.dumps(candidates, ensure_ascii=False)
    return str(raw)


def _choices(row: Row, mapping: FieldMapping) -> list[str] | None:
    if mapping.choices is None:
        return None
    raw = row.get(mapping.choices)
    if isinstance(raw, list):
        return [str(item) for item in raw]
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except ValueError:
            return None
        if isinstance(parsed, list):
            return [str(item) for item in parsed]
    return None


def _sort_order(row: Row, mapping: FieldMapping, position: int) -> float:
    if mapping.sort_order is None:
        return position
    raw = row.get(mapping.sort_order)
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return position
    return value if math.isfinite(value) else position


def _metadata(row: Row, mapping: FieldMapping) -> dict[str, Any]:
    metadata: dict[str, Any] = {
        key: row.get(column) for key, column in mapping.metadata.items()
    }
    if mapping.category is not None and row.get(mapping.category) is not None:
        metadata["category"] = str(row[mapping.category])
    return metadata
