"""CLI entrypoint for bench-eval: typer app with `inspect` and `run` commands."""

import asyncio
import contextlib
import json
import signal
import sys
import time
from datetime import datetime
from pathlib import Path

import structlog
import typer

from bench_eval.agent.infrastructure.litellm_agent import LiteLLMAgent
from bench_eval.agent.infrastructure.observer import StructlogAgentObserver
from bench_eval.cli.output.report import build_case_jsonl_lines, build_report_json
from bench_eval.config.domain.config import EvalConfig
from bench_eval.config.infrastructure.observer import StructlogConfigObserver
from bench_eval.config.infrastructure.yaml_loader import YamlConfigLoader
from bench_eval.core.errors import BenchEvalError
from bench_eval.dataset.application.mapping import build_dataset, infer_field_mapping
from bench_eval.dataset.domain.parse_result import ParseOptions
from bench_eval.dataset.domain.test_case import Dataset
from bench_eval.dataset.infrastructure.observer import StructlogDatasetObserver
from bench_eval.dataset.infrastructure.parser import DatasetParser
from bench_eval.evaluation.application.context import RunContext
from bench_eval.evaluation.application.orchestrator import RunOrchestrator
from bench_eval.evaluation.domain.metrics import RunMetrics
from bench_eval.evaluation.domain.observer import RunObserver
from bench_eval.evaluation.domain.run import RunSnapshot
from bench_eval.evaluation.domain.status import RunStatus
from bench_eval.evaluation.infrastructure.composite_observer import (
    CompositeRunObserver,
)
from bench_eval.evaluation.infrastructure.observer import StructlogRunObserver
from bench_eval.evaluation.infrastructure.progress_observer import ProgressRunObserver
from bench_eval.rubric.domain.judge import LlmJudge
from bench_eval.rubric.domain.rubric import LlmRubric
from bench_eval.rubric.infrastructure.litellm_judge import LiteLLMJudge
from bench_eval.rubric.infrastructure.observer import StructlogJudgeObserver

app = typer.Typer(add_completion=False)


def _configure_structlog(log_format: str) -> None:
    """Configure structlog based on the requested format."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _output_stem(config_name: str, run_id: str) -> str:
    """Build the output file stem: {config_name}_{YYYYMMDD}_{short_run_id}."""
    date_str = datetime.now().strftime("%Y%m%d")
    return f"{config_name}_{date_str}_{run_id[:8]}"


def _write_outputs(
    output_dir: Path,
    stem: str,
    snapshot: RunSnapshot,
    metrics: RunMetrics,
    config: EvalConfig,
    dataset_name: str,
) -> tuple[Path, Path]:
    """Write the report JSON and the per-case JSONL. Returns (json_path, jsonl_path)."""
    json_path = output_dir / f"{stem}.json"
    jsonl_path = output_dir / f"{stem}.cases.jsonl"

    report = build_report_json(
        snapshot=snapshot, metrics=metrics, config=config, dataset_name=dataset_name
    )
    report["cases_file_path"] = jsonl_path.name
    json_path.write_text(json.dumps(report, indent=2), encoding="utf-8")

    lines = build_case_jsonl_lines(snapshot=snapshot)
    jsonl_path.write_text(
        "".join(json.dumps(line) + "\n" for line in lines),
        encoding="utf-8",
    )
    return json_path, jsonl_path


def _load_dataset(config: EvalConfig) -> Dataset:
    """Parse the configured file and map its rows to test cases.

    Raises:
        DatasetParseError, UnsupportedInputError, DatasetMappingError
    """
    path = config.dataset.path
    observer = StructlogDatasetObserver()
    try:
        content = path.read_bytes()
    except FileNotFoundError as exc:
        raise BenchEvalError(f"Failed to read dataset: file not found: {path}") from exc

    parsed = DatasetParser(observer=observer).parse(
        content=content, filename=path.name, options=config.dataset.options
    )
    mapping = config.dataset.mapping or infer_field_mapping(parsed.headers)
    return build_dataset(
        result=parsed,
        mapping=mapping,
        dataset_id=path.stem,
        name=config.dataset.name or path.stem,
        description=config.dataset.description,
        observer=observer,
    )


def _build_judge(config: EvalConfig) -> LlmJudge | None:
    if not any(isinstance(rubric, LlmRubric) for rubric in config.rubrics):
        return None
    if config.judge is not None:
        return LiteLLMJudge(
            default_model=config.judge.model,
            observer=StructlogJudgeObserver(),
            temperature=config.judge.temperature,
        )
    # Every llm_rubric names its own model when there is no judge section.
    return LiteLLMJudge(
        default_model=config.agent.qualified_model,
        observer=StructlogJudgeObserver(),
    )


async def _run_evaluation(
    config: EvalConfig, dataset: Dataset, observer: RunObserver
) -> RunSnapshot:
    """Run the dataset to completion; SIGINT requests a cooperative abort."""
    agent = LiteLLMAgent(config=config.agent, observer=StructlogAgentObserver())
    orchestrator = RunOrchestrator(
        context=RunContext(), observer=observer, judge=_build_judge(config)
    )
    run_id = orchestrator.create_run(
        dataset=dataset,
        invoker=agent,
        rubrics=config.rubrics,
        options=config.execution,
        agent_snapshot=agent.snapshot(),
    )

    loop = asyncio.get_running_loop()
    # add_signal_handler is unavailable on Windows event loops.
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGINT, orchestrator.abort_run, run_id)
    try:
        return await orchestrator.wait(run_id)
    finally:
        with contextlib.suppress(NotImplementedError):
            loop.remove_signal_handler(signal.SIGINT)


# ---------------------------------------------------------------------------
# ANSI helpers
# ---------------------------------------------------------------------------
_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_CYAN = "\033[36m"
_YELLOW = "\033[33m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_WHITE = "\033[97m"

_STATUS_COLORS: dict[RunStatus, str] = {
    RunStatus.COMPLETED: _GREEN,
    RunStatus.ABORTED: _YELLOW,
    RunStatus.FAILED: _RED,
}


def _rule(width: int = 72, color: str = _DIM) -> None:
    typer.echo(f"{color}{'─' * width}{_RESET}")


def _format_elapsed(elapsed_seconds: float) -> str:
    """Format elapsed seconds as '1m 23.4s' or '5.2s'."""
    minutes, seconds = divmod(elapsed_seconds, 60)
    if minutes >= 1:
        return f"{int(minutes)}m {seconds:.1f}s"
    return f"{elapsed_seconds:.1f}s"


def _percent(value: float | None) -> str:
    return "--" if value is None else f"{value * 100:.1f}%"


def _print_summary(
    config: EvalConfig,
    snapshot: RunSnapshot,
    metrics: RunMetrics,
    json_path: Path,
    elapsed_seconds: float,
) -> None:
    """Print a colorized run summary to stdout."""
    status_color = _STATUS_COLORS.get(snapshot.status, _WHITE)

    typer.echo("")
    _rule(color=_CYAN)
    typer.echo(f"{_CYAN}{_BOLD}  bench-eval  ·  Run {snapshot.status.value}{_RESET}")
    _rule(color=_CYAN)
    typer.echo("")

    meta_rows: list[tuple[str, str]] = [
        ("Run ID", f"{snapshot.run_id[:8]}-..."),
        ("Config", config.name),
        ("Dataset", snapshot.dataset_id),
        ("Agent", config.agent.qualified_model),
        ("Status", f"{status_color}{snapshot.status.value}{_RESET}"),
        ("Elapsed", _format_elapsed(elapsed_seconds=elapsed_seconds)),
        ("Report", str(json_path)),
    ]
    if snapshot.error:
        meta_rows.append(("Error", f"{_RED}{snapshot.error}{_RESET}"))
    label_w = max(len(label) for label, _ in meta_rows)
    for label, value in meta_rows:
        typer.echo(f"  {_DIM}{label:<{label_w}}{_RESET}  {_WHITE}{value}{_RESET}")

    typer.echo("")
    typer.echo(
        f"  {_GREEN}passed {metrics.passed}{_RESET}"
        f"  {_RED}failed {metrics.failed}{_RESET}"
        f"  {_YELLOW}error {metrics.errored}{_RESET}"
        f"  {_DIM}pending {metrics.pending}  of {metrics.total}{_RESET}"
    )
    typer.echo(
        f"  {_DIM}pass rate{_RESET} {_WHITE}{_percent(metrics.pass_rate)}{_RESET}"
        f"  {_DIM}avg score{_RESET} {_WHITE}{_percent(metrics.average_score)}{_RESET}"
        f"  {_DIM}timeouts{_RESET} {_WHITE}{metrics.timed_out}{_RESET}"
    )
    typer.echo("")
    _rule(color=_CYAN)
    typer.echo("")


@app.command()
def inspect(
    path: Path = typer.Argument(..., help="Dataset file (csv, xlsx, json, jsonl)"),
    preview: int = typer.Option(5, "--preview", "-n", min=1, help="Rows to show"),
    delimiter: str | None = typer.Option(
        None, "--delimiter", help="CSV delimiter (sniffed when omitted)"
    ),
    sheet: str | None = typer.Option(
        None, "--sheet", help="XLSX sheet name or 0-based index"
    ),
) -> None:
    """Parse a dataset file and show its format, columns and inferred mapping."""
    _configure_structlog(log_format="console")
    sheet_ref: str | int | None = int(sheet) if sheet and sheet.isdigit() else sheet
    try:
        parsed = DatasetParser(observer=StructlogDatasetObserver()).parse(
            content=path.read_bytes(),
            filename=path.name,
            options=ParseOptions(
                preview=preview, csv_delimiter=delimiter, sheet=sheet_ref
            ),
        )
        mapping = infer_field_mapping(parsed.headers) if parsed.headers else None
    except FileNotFoundError as exc:
        typer.echo(f"Failed to read dataset: file not found: {path}")
        raise typer.Exit(code=1) from exc
    except BenchEvalError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc

    typer.echo(f"{_DIM}format{_RESET}   {parsed.format}")
    if parsed.metadata is not None and parsed.metadata.sheet_name is not None:
        typer.echo(f"{_DIM}sheet{_RESET}    {parsed.metadata.sheet_name}")
    typer.echo(f"{_DIM}headers{_RESET}  {', '.join(parsed.headers) or '(none)'}")
    typer.echo(f"{_DIM}rows{_RESET}     {len(parsed.rows)} of {parsed.total_count}")
    if mapping is not None:
        typer.echo(
            f"{_DIM}mapping{_RESET}  "
            + json.dumps(mapping.model_dump(exclude_defaults=True))
        )
    typer.echo("")
    for row in parsed.rows:
        typer.echo(json.dumps(row, default=str, ensure_ascii=False))


@app.command()
def run(
    config_path: Path = typer.Argument(..., help="Path to evaluation config YAML"),
    output_dir: Path = typer.Option(
        Path("./results"),
        "--output-dir",
        "-o",
        help="Directory for output files",
    ),
    log_format: str = typer.Option(
        "console",
        "--log-format",
        help="Log format: 'console' or 'json'",
    ),
) -> None:
    """Run a bench-eval evaluation from a YAML config file."""
    try:
        _configure_structlog(log_format=log_format)

        loader = YamlConfigLoader(observer=StructlogConfigObserver())
        config = loader.load(path=config_path)
        dataset = _load_dataset(config=config)

        output_dir.mkdir(parents=True, exist_ok=True)

        observers: list[RunObserver] = [StructlogRunObserver()]
        if log_format != "json":
            observers.append(ProgressRunObserver())
        run_observer = CompositeRunObserver(observers=observers)

        started_at = time.monotonic()
        snapshot = asyncio.run(
            _run_evaluation(config=config, dataset=dataset, observer=run_observer)
        )
        elapsed_seconds = time.monotonic() - started_at

        metrics = RunMetrics.from_snapshot(snapshot)
        json_path, _ = _write_outputs(
            output_dir=output_dir,
            stem=_output_stem(config_name=config.name, run_id=snapshot.run_id),
            snapshot=snapshot,
            metrics=metrics,
            config=config,
            dataset_name=dataset.name,
        )
        _print_summary(
            config=config,
            snapshot=snapshot,
            metrics=metrics,
            json_path=json_path,
            elapsed_seconds=elapsed_seconds,
        )
        if snapshot.status != RunStatus.COMPLETED:
            sys.exit(1)

    except KeyboardInterrupt:
        typer.echo("Evaluation interrupted.")
        sys.exit(1)
    except BenchEvalError as exc:
        typer.echo(str(exc))
        sys.exit(1)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Unexpected error: {exc}\nPlease report this bug.")
        sys.exit(1)


if __name__ == "__main__":
    app()
