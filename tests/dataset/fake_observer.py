"""FakeDatasetObserver: records dataset domain events for assertion in tests."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ParsingStartedEvent:
    filename: str | None
    format: str


@dataclass(frozen=True)
class ParsingCompletedEvent:
    format: str
    total_count: int
    returned_rows: int


@dataclass(frozen=True)
class ParsingFailedEvent:
    format: str
    reason: str


@dataclass(frozen=True)
class DatasetMappedEvent:
    dataset_id: str
    total_cases: int
    skipped_rows: int


class FakeDatasetObserver:
    """Records all emitted dataset events as typed frozen dataclasses."""

    def __init__(self) -> None:
        self.started: list[ParsingStartedEvent] = []
        self.completed: list[ParsingCompletedEvent] = []
        self.failed: list[ParsingFailedEvent] = []
        self.mapped: list[DatasetMappedEvent] = []

    def dataset_parsing_started(self, filename: str | None, format: str) -> None:
        self.started.append(ParsingStartedEvent(filename=filename, format=format))

    def dataset_parsing_completed(
        self, format: str, total_count: int, returned_rows: int
    ) -> None:
        self.completed.append(
            ParsingCompletedEvent(
                format=format, total_count=total_count, returned_rows=returned_rows
            )
        )

    def dataset_parsing_failed(self, format: str, reason: str) -> None:
        self.failed.append(ParsingFailedEvent(format=format, reason=reason))

    def dataset_mapped(
        self, dataset_id: str, total_cases: int, skipped_rows: int
    ) -> None:
        self.mapped.append(
            DatasetMappedEvent(
                dataset_id=dataset_id,
                total_cases=total_cases,
                skipped_rows=skipped_rows,
            )
        )
