"""
app/session.py

Explicit per-user dashboard state and its transitions.

The dataset is replaced wholesale on upload. Filtered view, selection,
insight and the loading flag are derived state: every change to the
dataset or the filter criteria recomputes the view and clears selection
and insight, even when the selected row would still qualify.
"""

from __future__ import annotations

import dataclasses
import logging

from app.domain.email_metrics import EmailDataset, EmailRecord, FilterCriteria
from app.domain.errors import InvalidStateError
from app.logging_utils import log_event
from app.services.csv_ingestion_service import CSVIngestionService
from app.services.filter_engine import apply_filters
from app.services.insight_service import InsightOutcome, InsightService, InsightStatus

logger = logging.getLogger(__name__)

NO_SELECTION_MESSAGE = "Please select an email row from the table first to get insights."
REQUEST_IN_PROGRESS_MESSAGE = "An insight request is already in progress."


class DashboardSession:
    """
    Holds dataset, criteria, filtered view, selection and insight.
    """

    def __init__(
        self,
        *,
        ingestion_service: CSVIngestionService,
        insight_service: InsightService,
    ) -> None:
        self._ingestion_service = ingestion_service
        self._insight_service = insight_service
        self._dataset = EmailDataset()
        self._criteria = FilterCriteria()
        self._filtered_view: tuple[EmailRecord, ...] = ()
        self._selected_row_id: int | None = None
        self._insight = ""
        self._insight_row_id: int | None = None
        self._loading = False
        # Bumped whenever the view or the selection changes.
        self._view_version = 0
        self._selection_version = 0

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def dataset(self) -> EmailDataset:
        return self._dataset

    @property
    def criteria(self) -> FilterCriteria:
        return self._criteria

    @property
    def filtered_view(self) -> tuple[EmailRecord, ...]:
        return self._filtered_view

    @property
    def selected_row_id(self) -> int | None:
        return self._selected_row_id

    @property
    def selected_record(self) -> EmailRecord | None:
        if self._selected_row_id is None:
            return None
        return self._dataset.get(self._selected_row_id)

    @property
    def insight(self) -> str:
        return self._insight

    @property
    def insight_row_id(self) -> int | None:
        return self._insight_row_id

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def view_version(self) -> int:
        return self._view_version

    @property
    def has_data(self) -> bool:
        return len(self._dataset) > 0

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load_csv(self, data: bytes, *, source_name: str | None = None) -> EmailDataset:
        """
        Parse an upload and replace the dataset.

        On ``CSVParseError`` the previous dataset and all derived state are
        left untouched and the error propagates to the caller.
        """

        dataset = self._ingestion_service.parse(data, source_name=source_name)
        self._dataset = dataset
        self._recompute_view()
        log_event(
            logger,
            logging.INFO,
            "dataset_replaced",
            source_name=source_name,
            rows=len(dataset),
            visible=len(self._filtered_view),
        )
        return dataset

    def set_criteria(self, criteria: FilterCriteria) -> tuple[EmailRecord, ...]:
        """
        Replace the filter criteria and recompute the filtered view.
        """

        self._criteria = criteria
        self._recompute_view()
        return self._filtered_view

    def select(self, row_id: int) -> EmailRecord:
        """
        Select one row of the current filtered view and clear any insight.
        """

        record = self._dataset.get(row_id)
        if record is None or not any(item.row_id == row_id for item in self._filtered_view):
            raise InvalidStateError(f"Row {row_id} is not in the current filtered view.")

        self._selected_row_id = row_id
        self._clear_insight()
        self._selection_version += 1
        return record

    def clear_selection(self) -> None:
        self._clear_selection()

    def request_insight(self) -> InsightOutcome:
        """
        Request an AI insight for the selected row.

        If selection, criteria or dataset change while the request is
        outstanding, the result is discarded and returned with status
        ``STALE``; current insight state is left as it is.

        Raises:
            InvalidStateError: when nothing is selected or a request is
                already in progress.
        """

        record = self.selected_record
        if record is None:
            raise InvalidStateError(NO_SELECTION_MESSAGE)
        if self._loading:
            raise InvalidStateError(REQUEST_IN_PROGRESS_MESSAGE)

        started_version = self._selection_version
        self._loading = True
        self._clear_insight()
        try:
            outcome = self._insight_service.generate_insight(record)
        finally:
            self._loading = False

        if started_version != self._selection_version:
            log_event(
                logger,
                logging.WARNING,
                "insight_discarded",
                row_id=record.row_id,
                current_row_id=self._selected_row_id,
                status=outcome.status.value,
            )
            return dataclasses.replace(outcome, status=InsightStatus.STALE)

        self._insight = outcome.text
        self._insight_row_id = outcome.row_id
        return outcome

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _recompute_view(self) -> None:
        self._filtered_view = apply_filters(self._dataset.records, self._criteria)
        self._view_version += 1
        self._clear_selection()

    def _clear_selection(self) -> None:
        self._selected_row_id = None
        self._clear_insight()
        self._selection_version += 1

    def _clear_insight(self) -> None:
        self._insight = ""
        self._insight_row_id = None
