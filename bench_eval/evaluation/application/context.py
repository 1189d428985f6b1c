"""RunContext: caller-owned registry of the runs an orchestrator manages."""

import asyncio
from dataclasses import dataclass, field

from bench_eval.dataset.domain.test_case import TestCase
from bench_eval.evaluation.domain.errors import UnknownRunError
from bench_eval.evaluation.domain.run import RunId
from bench_eval.evaluation.domain.state_machine import RunStateMachine


@dataclass
class RunHandle:
    """Everything the orchestrator keeps for one run.

    ``halt`` is set on abort or on a run fault; in-flight agent calls watch it
    and no new case starts once it is set.
    """

    machine: RunStateMachine
    test_cases: list[TestCase]
    slots: asyncio.Semaphore
    halt: asyncio.Event = field(default_factory=asyncio.Event)
    abort_requested: bool = False
    fault: str | None = None
    task: asyncio.Task[None] | None = None


class RunContext:
    """Holds run handles by id. The caller creates it and decides its lifetime.

    Nothing here is global: two contexts never share runs.
    """

    def __init__(self) -> None:
        self._runs: dict[RunId, RunHandle] = {}

    def register(self, handle: RunHandle) -> None:
        self._runs[handle.machine.run_id] = handle

    def get(self, run_id: RunId) -> RunHandle:
        try:
            return self._runs[run_id]
        except KeyError:
            raise UnknownRunError(run_id) from None

    def remove(self, run_id: RunId) -> None:
        """Forget a run. Raises UnknownRunError if it was never registered."""
        self.get(run_id)
        del self._runs[run_id]

    def run_ids(self) -> list[RunId]:
        return list(self._runs)

    def __contains__(self, run_id: object) -> bool:
        return run_id in self._runs
