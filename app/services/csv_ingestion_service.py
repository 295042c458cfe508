"""
app/services/csv_ingestion_service.py

Service layer for turning an uploaded CSV file into an email dataset.

The service is pure: it never touches dashboard state. Replacing the
current dataset (and clearing selection and insight) is done by
``DashboardSession.load_csv`` once ``parse`` has returned successfully.
"""

from __future__ import annotations

import csv
import io
import logging
from functools import lru_cache

from app.config import get_csv_ingestion_settings
from app.domain.email_metrics import EmailDataset, EmailRecord
from app.domain.errors import CSVParseError
from app.logging_utils import log_event
from app.validators.metric_normalizer import MetricNormalizer

logger = logging.getLogger(__name__)

_OVERFLOW_KEY = "__overflow__"


class CSVIngestionService:
    """
    Coordinates CSV decoding, header checks, and metric normalization.
    """

    def __init__(
        self,
        *,
        max_upload_bytes: int,
        normalizer: MetricNormalizer | None = None,
    ) -> None:
        self._max_upload_bytes = max(1, max_upload_bytes)
        self._normalizer = normalizer or MetricNormalizer()

    def parse(self, data: bytes, *, source_name: str | None = None) -> EmailDataset:
        """
        Parse raw CSV bytes into an ordered dataset.

        The first non-blank row is the header; rows whose values are all blank are
        skipped. Rows shorter than the header are padded with empty values.

        Raises:
            CSVParseError: when the file is not structurally valid.
        """

        if len(data) > self._max_upload_bytes:
            raise CSVParseError(
                f"File is {len(data)} bytes; the upload limit is {self._max_upload_bytes} bytes."
            )

        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CSVParseError("CSV must be UTF-8 encoded.") from exc

        records: list[EmailRecord] = []
        skipped_rows = 0
        try:
            buffer = io.StringIO(text, newline="")
            header_reader = csv.reader(buffer, strict=True)
            headers = next(
                (row for row in header_reader if any(value.strip() for value in row)),
                None,
            )
            if headers is None:
                raise CSVParseError("CSV header row is missing.")
            fields = self._validate_headers(headers)
            header_line = header_reader.line_num

            reader = csv.DictReader(
                buffer,
                fieldnames=list(fields),
                restkey=_OVERFLOW_KEY,
                restval="",
                strict=True,
            )
            for raw_row in reader:
                overflow = raw_row.pop(_OVERFLOW_KEY, None)
                if overflow and any(str(value).strip() for value in overflow):
                    raise CSVParseError(
                        f"Line {header_line + reader.line_num} has "
                        f"{len(fields) + len(overflow)} values "
                        f"but the header has {len(fields)} fields."
                    )
                if self._normalizer.is_completely_empty_row(raw_row):
                    skipped_rows += 1
                    continue

                records.append(
                    self._normalizer.normalize_row(
                        raw_row=raw_row,
                        fields=fields,
                        row_id=len(records),
                    )
                )
        except csv.Error as exc:
            raise CSVParseError(f"Invalid CSV format: {exc}") from exc

        log_event(
            logger,
            logging.INFO,
            "csv_parsed",
            source_name=source_name,
            fields=len(fields),
            rows=len(records),
            skipped_rows=skipped_rows,
        )
        return EmailDataset(fields=fields, records=tuple(records), source_name=source_name)

    @staticmethod
    def _validate_headers(headers: list[str]) -> tuple[str, ...]:
        """
        Reject headers that cannot key a record unambiguously.
        """

        blank_positions = [str(index + 1) for index, header in enumerate(headers) if not header.strip()]
        if blank_positions:
            raise CSVParseError(
                f"CSV header has blank column names at position(s) {', '.join(blank_positions)}."
            )

        seen: set[str] = set()
        duplicates: list[str] = []
        for header in headers:
            if header in seen and header not in duplicates:
                duplicates.append(header)
            seen.add(header)
        if duplicates:
            names = ", ".join(repr(name) for name in duplicates)
            raise CSVParseError(f"CSV header contains duplicate column names: {names}.")
        return tuple(headers)


@lru_cache(maxsize=1)
def get_csv_ingestion_service() -> CSVIngestionService:
    """
    Return a singleton CSV ingestion service configured from settings.
    """

    settings = get_csv_ingestion_settings()
    return CSVIngestionService(max_upload_bytes=settings.max_upload_bytes)
