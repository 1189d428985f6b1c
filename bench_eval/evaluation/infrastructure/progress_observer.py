"""ProgressRunObserver: renders a live Rich progress bar for a run on stderr."""

from rich.console import Console, Group
from rich.live import Live
from rich.progress import (
    Progress,
    ProgressColumn,
    Task,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)
from rich.text import Text

from bench_eval.evaluation.domain.metrics import RunMetrics
from bench_eval.evaluation.domain.run import RunCase
from bench_eval.evaluation.domain.status import CaseStatus, RunStatus


class _ThreeSegmentBarColumn(ProgressColumn):
    """ProgressColumn that renders three segments: done, in-flight, remaining."""

    def __init__(self, bar_width: int = 40) -> None:
        super().__init__()
        self.bar_width = bar_width

    def render(self, task: Task) -> Text:
        bar_width = self.bar_width or 40
        total = task.total or 0
        if total > 0:
            done_cells = int(task.completed / total * bar_width)
            inflight = int(task.fields.get("inflight", 0))
            inflight_cells = min(
                int(inflight / total * bar_width),
                bar_width - done_cells,
            )
        else:
            done_cells = 0
            inflight_cells = 0
        remaining_cells = bar_width - done_cells - inflight_cells

        result = Text()
        result.append("█" * done_cells, style="bright_green")
        result.append("▒" * inflight_cells, style="grey50")
        result.append("░" * remaining_cells, style="dim white")
        return result


class ProgressRunObserver:
    """Renders one progress row per run with pass/fail/error tallies.

    Only creation, case transitions and the finish event produce output; all
    other events are no-ops. Pass ``disabled=True`` to keep the counters
    without touching the terminal (useful in tests).

    Does NOT inherit from RunObserver (structural typing via Protocol).
    """

    def __init__(self, disabled: bool = False) -> None:
        self._disabled = disabled
        self._counts: dict[str, dict[CaseStatus, int]] = {}
        self._task_ids: dict[str, TaskID] = {}
        self._progress: Progress | None = None
        self._live: Live | None = None

    def counts(self, run_id: str) -> dict[CaseStatus, int]:
        return dict(self._counts.get(run_id, {}))

    def run_created(
        self,
        run_id: str,
        dataset_id: str,
        total_cases: int,
        concurrency: int,
        timeout_seconds: float,
    ) -> None:
        self._counts[run_id] = {status: 0 for status in CaseStatus}
        self._counts[run_id][CaseStatus.PENDING] = total_cases

        if self._disabled:
            return

        if self._progress is None:
            console = Console(stderr=True)
            self._progress = Progress(
                TextColumn("{task.description}"),
                _ThreeSegmentBarColumn(bar_width=40),
                TextColumn(
                    "[green]{task.fields[passed]}✓[/green] "
                    "[red]{task.fields[failed]}✗[/red] "
                    "[yellow]{task.fields[errored]}![/yellow] "
                    "/{task.total:.0f}"
                ),
                TimeElapsedColumn(),
                TextColumn("eta"),
                TimeRemainingColumn(),
                console=console,
                refresh_per_second=10,
                transient=False,
            )
            legend = Text.assemble(
                "  Legend:  ",
                ("█", "bright_green"),
                " done  ",
                ("▒", "grey50"),
                " in-flight  ",
                ("░", "dim white"),
                " pending",
            )
            self._live = Live(
                Group(self._progress, Text(""), legend),
                console=console,
                refresh_per_second=10,
            )
            self._live.start()

        self._task_ids[run_id] = self._progress.add_task(
            description=dataset_id,
            total=float(total_cases),
            inflight=0,
            passed=0,
            failed=0,
            errored=0,
        )

    def run_status_changed(
        self, run_id: str, status: RunStatus, reason: str | None
    ) -> None:
        pass

    def run_abort_requested(self, run_id: str) -> None:
        pass

    def case_status_changed(self, run_id: str, case: RunCase) -> None:
        counts = self._counts.get(run_id)
        if counts is None:
            return
        # Every case reaches running from pending, then one terminal status.
        source = (
            CaseStatus.PENDING
            if case.status == CaseStatus.RUNNING
            else CaseStatus.RUNNING
        )
        counts[source] = max(0, counts[source] - 1)
        counts[case.status] += 1
        self._update_task(run_id)

    def case_retry(
        self,
        run_id: str,
        index: int,
        attempt: int,
        reason: str,
        backoff_seconds: float,
    ) -> None:
        pass

    def run_finished(
        self, run_id: str, status: RunStatus, metrics: RunMetrics
    ) -> None:
        self._update_task(run_id)
        self._task_ids.pop(run_id, None)
        if self._live is not None and not self._task_ids:
            self._live.stop()
            self._live = None
            self._progress = None

    def _update_task(self, run_id: str) -> None:
        if self._progress is None or run_id not in self._task_ids:
            return
        counts = self._counts[run_id]
        done = (
            counts[CaseStatus.PASSED]
            + counts[CaseStatus.FAILED]
            + counts[CaseStatus.ERROR]
        )
        self._progress.update(
            self._task_ids[run_id],
            completed=done,
            inflight=counts[CaseStatus.RUNNING],
            passed=counts[CaseStatus.PASSED],
            failed=counts[CaseStatus.FAILED],
            errored=counts[CaseStatus.ERROR],
        )
