"""Observer port for the dataset domain: defines events in domain language."""

from typing import Protocol


class DatasetObserver(Protocol):
    def dataset_parsing_started(self, filename: str | None, format: str) -> None: ...

    def dataset_parsing_completed(
        self, format: str, total_count: int, returned_rows: int
    ) -> None: ...

    def dataset_parsing_failed(self, format: str, reason: str) -> None: ...

    def dataset_mapped(self, dataset_id: str, total_cases: int, skipped_rows: int) -> None: ...
