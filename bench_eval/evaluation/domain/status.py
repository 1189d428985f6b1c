"""Run and case status values and their legal transitions."""

from enum import StrEnum


class RunStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    ABORTED = "aborted"


class CaseStatus(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


RUN_TRANSITIONS: dict[RunStatus, frozenset[RunStatus]] = {
    RunStatus.PENDING: frozenset(
        {RunStatus.RUNNING, RunStatus.ABORTED, RunStatus.FAILED}
    ),
    RunStatus.RUNNING: frozenset(
        {RunStatus.COMPLETED, RunStatus.FAILED, RunStatus.ABORTED}
    ),
    RunStatus.COMPLETED: frozenset(),
    RunStatus.FAILED: frozenset(),
    RunStatus.ABORTED: frozenset(),
}

CASE_TRANSITIONS: dict[CaseStatus, frozenset[CaseStatus]] = {
    CaseStatus.PENDING: frozenset({CaseStatus.RUNNING}),
    CaseStatus.RUNNING: frozenset(
        {CaseStatus.PASSED, CaseStatus.FAILED, CaseStatus.ERROR}
    ),
    CaseStatus.PASSED: frozenset(),
    CaseStatus.FAILED: frozenset(),
    CaseStatus.ERROR: frozenset(),
}


def is_terminal(status: RunStatus | CaseStatus) -> bool:
    if isinstance(status, RunStatus):
        return not RUN_TRANSITIONS[status]
    return not CASE_TRANSITIONS[status]


def can_transition(
    source: RunStatus | CaseStatus, target: RunStatus | CaseStatus
) -> bool:
    if isinstance(source, RunStatus) and isinstance(target, RunStatus):
        return target in RUN_TRANSITIONS[source]
    if isinstance(source, CaseStatus) and isinstance(target, CaseStatus):
        return target in CASE_TRANSITIONS[source]
    return False
