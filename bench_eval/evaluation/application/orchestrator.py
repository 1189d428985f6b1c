"""RunOrchestrator: drives every case of a run through agent call and grading."""

import asyncio
import contextlib
import uuid

from bench_eval.agent.domain.invoker import AgentInvoker
from bench_eval.agent.domain.snapshot import AgentSnapshot
from bench_eval.agent.infrastructure.errors import AgentTimeoutError
from bench_eval.core.errors import BenchEvalError, RunFaultError
from bench_eval.dataset.domain.test_case import Dataset
from bench_eval.evaluation.application.context import RunContext, RunHandle
from bench_eval.evaluation.domain.metrics import RunMetrics
from bench_eval.evaluation.domain.observer import RunObserver
from bench_eval.evaluation.domain.options import RunOptions
from bench_eval.evaluation.domain.run import RunId, RunSnapshot
from bench_eval.evaluation.domain.state_machine import RunStateMachine
from bench_eval.evaluation.domain.status import CaseStatus, RunStatus, is_terminal
from bench_eval.rubric.application.evaluate import EvaluateOptions, evaluate
from bench_eval.rubric.application.registry import validate_rubric
from bench_eval.rubric.domain.judge import LlmJudge
from bench_eval.rubric.domain.match_result import GradeResult
from bench_eval.rubric.domain.rubric import Rubric

ABORTED_DETAIL = "Aborted"


class _Halted(Exception):
    """The run was halted while this case's agent call was in flight."""


class RunOrchestrator:
    """Creates runs, executes them in the background, and answers status polls.

    Execution is bounded by ``RunOptions.concurrency``: a case holds one slot
    for its agent call and grading, and never while sleeping between retries.
    Invocation, timeout and grading errors settle only their own case as
    ``error``; a ``RunFaultError`` from the invoker halts the run and moves it
    to ``failed``. The orchestrator is the only writer of its runs' state.
    """

    def __init__(
        self,
        context: RunContext,
        observer: RunObserver,
        judge: LlmJudge | None = None,
    ) -> None:
        self._context = context
        self._observer = observer
        self._judge = judge

    def create_run(
        self,
        dataset: Dataset,
        invoker: AgentInvoker,
        rubrics: list[Rubric],
        options: RunOptions | None = None,
        agent_snapshot: AgentSnapshot | None = None,
    ) -> RunId:
        """Register a run and start executing it on the running event loop.

        Must be called from inside a running loop. Every case starts
        ``pending``; the run becomes ``running`` when its first case starts.

        Raises:
            RubricConfigError: if any rubric or extractor is misconfigured. No
                run is created in that case.
        """
        options = options or RunOptions()
        for rubric in rubrics:
            validate_rubric(rubric, default_extractor=options.extractor)

        run_id = str(uuid.uuid4())
        test_cases = list(dataset.test_cases)
        handle = RunHandle(
            machine=RunStateMachine(
                run_id=run_id,
                dataset_id=dataset.id,
                test_cases=test_cases,
                options=options,
                agent=agent_snapshot,
            ),
            test_cases=test_cases,
            slots=asyncio.Semaphore(options.concurrency),
        )
        self._context.register(handle)
        self._observer.run_created(
            run_id=run_id,
            dataset_id=dataset.id,
            total_cases=len(test_cases),
            concurrency=options.concurrency,
            timeout_seconds=options.timeout_seconds,
        )
        handle.task = asyncio.get_running_loop().create_task(
            self._execute(handle=handle, invoker=invoker, rubrics=list(rubrics)),
            name=f"run-{run_id}",
        )
        return run_id

    def get_run_status(self, run_id: RunId) -> RunSnapshot:
        """Return a snapshot of the run and all of its cases.

        Raises:
            UnknownRunError: if the context holds no such run.
        """
        return self._context.get(run_id).machine.snapshot()

    def abort_run(self, run_id: RunId) -> None:
        """Request a cooperative abort.

        No new case starts, in-flight agent calls are cancelled and their cases
        settle as ``error``, and the run becomes ``aborted`` once they have.
        Cases that never started stay ``pending``. Aborting a finished run
        does nothing.

        Raises:
            UnknownRunError: if the context holds no such run.
        """
        handle = self._context.get(run_id)
        if is_terminal(handle.machine.status) or handle.abort_requested:
            return
        handle.abort_requested = True
        self._observer.run_abort_requested(run_id=run_id)
        handle.halt.set()

    async def wait(self, run_id: RunId) -> RunSnapshot:
        """Wait for the run to reach a terminal status and return its snapshot.

        Cancelling the waiter does not cancel the run.
        """
        handle = self._context.get(run_id)
        if handle.task is not None:
            await asyncio.shield(handle.task)
        return handle.machine.snapshot()

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def _execute(
        self, handle: RunHandle, invoker: AgentInvoker, rubrics: list[Rubric]
    ) -> None:
        machine = handle.machine
        if machine.total_cases == 0:
            self._mark_running(handle)

        try:
            async with asyncio.TaskGroup() as tg:
                for index in range(machine.total_cases):
                    tg.create_task(
                        self._run_case(
                            handle=handle,
                            index=index,
                            invoker=invoker,
                            rubrics=rubrics,
                        )
                    )
        except* Exception as eg:
            self._halt_on_fault(handle, reason=str(eg.exceptions[0]))

        # Cases left running by an unexpected fault are settled here.
        for index in machine.running_case_indices():
            self._settle(
                handle,
                index,
                CaseStatus.ERROR,
                error=handle.fault or ABORTED_DETAIL,
            )

        if handle.fault is not None:
            target, reason = RunStatus.FAILED, handle.fault
        elif handle.abort_requested:
            target, reason = RunStatus.ABORTED, None
        else:
            target, reason = RunStatus.COMPLETED, None

        machine.transition_run(target, error=reason)
        self._observer.run_status_changed(
            run_id=machine.run_id, status=target, reason=reason
        )
        self._observer.run_finished(
            run_id=machine.run_id,
            status=target,
            metrics=RunMetrics.from_snapshot(machine.snapshot()),
        )

    async def _run_case(
        self,
        handle: RunHandle,
        index: int,
        invoker: AgentInvoker,
        rubrics: list[Rubric],
    ) -> None:
        """Execute one case with retry and backoff.

        The slot is held only during the agent call and grading. The sleep
        between attempts happens outside it so other cases can proceed.
        """
        machine = handle.machine
        options = machine.options
        retry = options.retry
        backoff = retry.initial_backoff_seconds
        test_case = handle.test_cases[index]

        for attempt in range(1, retry.max_attempts + 1):
            async with handle.slots:
                if handle.halt.is_set():
                    if attempt > 1:
                        self._settle(
                            handle,
                            index,
                            CaseStatus.ERROR,
                            error=self._halt_detail(handle),
                        )
                    return

                if attempt == 1:
                    self._mark_running(handle)
                    case = machine.start_case(index)
                    self._observer.case_status_changed(
                        run_id=machine.run_id, case=case
                    )
                else:
                    machine.record_attempt(index)

                try:
                    output = await self._invoke(
                        handle=handle,
                        invoker=invoker,
                        question=test_case.content.input,
                        timeout_seconds=options.timeout_seconds,
                    )
                except _Halted:
                    self._settle(
                        handle, index, CaseStatus.ERROR, error=self._halt_detail(handle)
                    )
                    return
                except RunFaultError as exc:
                    self._settle(handle, index, CaseStatus.ERROR, error=str(exc))
                    self._halt_on_fault(handle, reason=str(exc))
                    return
                except AgentTimeoutError as exc:
                    if not retry.retry_on_timeout or attempt == retry.max_attempts:
                        self._settle(
                            handle,
                            index,
                            CaseStatus.ERROR,
                            error=str(exc),
                            timed_out=True,
                        )
                        return
                    reason = str(exc)
                except Exception as exc:
                    retriable = isinstance(exc, BenchEvalError) and exc.retriable
                    if not retriable or attempt == retry.max_attempts:
                        self._settle(
                            handle, index, CaseStatus.ERROR, error=_describe(exc)
                        )
                        return
                    reason = _describe(exc)
                else:
                    await self._grade(
                        handle=handle,
                        index=index,
                        output=output,
                        rubrics=rubrics,
                        options=options,
                    )
                    return

                self._observer.case_retry(
                    run_id=machine.run_id,
                    index=index,
                    attempt=attempt,
                    reason=reason,
                    backoff_seconds=backoff,
                )
            # Slot released here; the backoff wait ends early on halt.
            with contextlib.suppress(TimeoutError):
                await asyncio.wait_for(handle.halt.wait(), timeout=backoff)
            backoff *= retry.backoff_multiplier

    async def _invoke(
        self,
        handle: RunHandle,
        invoker: AgentInvoker,
        question: str,
        timeout_seconds: float,
    ) -> str:
        """Await the agent under the per-case timeout, cancelling it on halt.

        Raises:
            AgentTimeoutError: if the call outlives ``timeout_seconds``.
            _Halted: if the run was halted first.
        """
        agent_task = asyncio.ensure_future(invoker.ask(question))
        halt_task = asyncio.ensure_future(handle.halt.wait())
        try:
            done, _ = await asyncio.wait(
                {agent_task, halt_task},
                timeout=timeout_seconds,
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            agent_task.cancel()
            raise
        finally:
            halt_task.cancel()

        if agent_task in done:
            return agent_task.result()

        agent_task.cancel()
        await asyncio.wait({agent_task})
        if not agent_task.cancelled():
            agent_task.exception()
        if halt_task in done:
            raise _Halted()
        raise AgentTimeoutError(timeout_seconds=timeout_seconds)

    async def _grade(
        self,
        handle: RunHandle,
        index: int,
        output: str,
        rubrics: list[Rubric],
        options: RunOptions,
    ) -> None:
        test_case = handle.test_cases[index]
        try:
            grade = await evaluate(
                actual=output,
                rubrics=rubrics,
                test_case=test_case.content,
                options=EvaluateOptions(
                    extractor=options.extractor,
                    pass_threshold=options.pass_threshold,
                ),
                judge=self._judge,
            )
        except Exception as exc:
            self._settle(
                handle, index, CaseStatus.ERROR, output=output, error=_describe(exc)
            )
            return

        self._settle(
            handle,
            index,
            CaseStatus.PASSED if grade.passed else CaseStatus.FAILED,
            output=output,
            result=grade,
        )

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def _mark_running(self, handle: RunHandle) -> None:
        if handle.machine.ensure_running():
            self._observer.run_status_changed(
                run_id=handle.machine.run_id, status=RunStatus.RUNNING, reason=None
            )

    def _settle(
        self,
        handle: RunHandle,
        index: int,
        status: CaseStatus,
        output: str | None = None,
        result: GradeResult | None = None,
        error: str | None = None,
        timed_out: bool = False,
    ) -> None:
        case = handle.machine.finish_case(
            index,
            status,
            output=output,
            result=result,
            error=error,
            timed_out=timed_out,
        )
        self._observer.case_status_changed(run_id=handle.machine.run_id, case=case)

    def _halt_on_fault(self, handle: RunHandle, reason: str) -> None:
        if handle.fault is None:
            handle.fault = reason
        handle.halt.set()

    def _halt_detail(self, handle: RunHandle) -> str:
        if handle.fault is not None:
            return f"Run failed: {handle.fault}"
        return ABORTED_DETAIL


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__
