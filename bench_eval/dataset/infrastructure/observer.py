"""Structlog implementation of the DatasetObserver port."""

import structlog


class StructlogDatasetObserver:
    """Delegates dataset domain events to structlog.

    Satisfies the DatasetObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def dataset_parsing_started(self, filename: str | None, format: str) -> None:
        self._log.info("dataset.parsing_started", filename=filename, format=format)

    def dataset_parsing_completed(
        self, format: str, total_count: int, returned_rows: int
    ) -> None:
        self._log.info(
            "dataset.parsing_completed",
            format=format,
            total_count=total_count,
            returned_rows=returned_rows,
        )

    def dataset_parsing_failed(self, format: str, reason: str) -> None:
        self._log.error("dataset.parsing_failed", format=format, reason=reason)

    def dataset_mapped(self, dataset_id: str, total_cases: int, skipped_rows: int) -> None:
        self._log.info(
            "dataset.mapped",
            dataset_id=dataset_id,
            total_cases=total_cases,
            skipped_rows=skipped_rows,
        )
