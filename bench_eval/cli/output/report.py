"""Run report serialization: aggregate JSON and per-case JSONL."""

import time
from importlib.metadata import PackageNotFoundError, version
from typing import Any, TypeAlias

from bench_eval.config.domain.config import EvalConfig
from bench_eval.evaluation.domain.metrics import RunMetrics
from bench_eval.evaluation.domain.run import RunCase, RunSnapshot

JsonDict: TypeAlias = dict[str, Any]

REPORT_SCHEMA_VERSION = "1.0"


def _bench_eval_version() -> str:
    try:
        return version("bench-eval")
    except PackageNotFoundError:
        return "dev"


def build_report_json(
    snapshot: RunSnapshot,
    metrics: RunMetrics,
    config: EvalConfig,
    dataset_name: str,
) -> JsonDict:
    """Build the aggregate report dict. Returns a plain JSON-serializable dict."""
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "run_id": snapshot.run_id,
        "config_name": config.name,
        "generated_timestamp": str(int(time.time())),
        "eval_library": {
            "name": "bench-eval",
            "version": _bench_eval_version(),
        },
        "dataset": {
            "id": snapshot.dataset_id,
            "name": dataset_name,
            "path": str(config.dataset.path),
            "total_cases": len(snapshot.cases),
        },
        "agent": snapshot.agent.model_dump(mode="json") if snapshot.agent else None,
        "options": snapshot.options.model_dump(mode="json"),
        "rubrics": [
            rubric.model_dump(mode="json", by_alias=True) for rubric in config.rubrics
        ],
        "status": snapshot.status.value,
        "error": snapshot.error,
        "created_at": snapshot.created_at.isoformat(),
        "started_at": snapshot.started_at.isoformat() if snapshot.started_at else None,
        "finished_at": (
            snapshot.finished_at.isoformat() if snapshot.finished_at else None
        ),
        "metrics": metrics.model_dump(mode="json"),
        "cases_file_path": None,  # Set by caller after computing stem
    }


def _case_line(run_id: str, case: RunCase) -> JsonDict:
    result = case.result
    return {
        "run_id": run_id,
        "index": case.index,
        "test_case_id": case.test_case_id,
        "status": case.status.value,
        "attempts": case.attempts,
        "duration_ms": case.duration_ms,
        "timed_out": case.timed_out,
        "error": case.error,
        "output": case.output,
        "score": result.score if result is not None else None,
        "rubric_results": (
            [r.model_dump(mode="json") for r in result.rubric_results]
            if result is not None
            else []
        ),
    }


def build_case_jsonl_lines(snapshot: RunSnapshot) -> list[JsonDict]:
    """One line dict per case, in dataset order."""
    return [_case_line(run_id=snapshot.run_id, case=case) for case in snapshot.cases]
