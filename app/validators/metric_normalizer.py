"""
app/validators/metric_normalizer.py

Lenient numeric coercion for designated email-metric columns.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Sequence

from app.domain.email_metrics import METRIC_FIELDS, EmailRecord, MetricField, MetricValue

# Longest leading numeric prefix, e.g. "25.5%" -> "25.5", "1,200" -> "1".
_FLOAT_PREFIX = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_PREFIX = re.compile(r"[+-]?\d+")


def parse_float_prefix(value: Any) -> float | None:
    """
    Parse the leading decimal number of a value.

    Returns None for empty, non-numeric or non-finite input.
    """

    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None

    match = _FLOAT_PREFIX.match(str(value).lstrip())
    if match is None:
        return None
    parsed = float(match.group(0))
    return parsed if math.isfinite(parsed) else None


def parse_int_prefix(value: Any) -> int | None:
    """
    Parse the leading integer of a value; fractional parts are truncated.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None

    match = _INT_PREFIX.match(str(value).lstrip())
    if match is None:
        return None
    return int(match.group(0))


def coerce_metric(value: Any, metric: MetricField) -> MetricValue:
    """
    Coerce one raw cell to the metric's numeric kind, defaulting to zero.
    """

    if metric.kind is int:
        parsed_int = parse_int_prefix(value)
        return parsed_int if parsed_int is not None else 0

    parsed_float = parse_float_prefix(value)
    return parsed_float if parsed_float is not None else 0.0


class MetricNormalizer:
    """
    Converts raw CSV rows into typed email records.
    """

    def __init__(self, metric_fields: Sequence[MetricField] = METRIC_FIELDS) -> None:
        self._metrics = {metric.name: metric for metric in metric_fields}

    def is_completely_empty_row(self, row: Mapping[str, Any]) -> bool:
        """
        Return True when all values in the row are empty or whitespace.
        """

        return all(self._is_blank(value) for value in row.values())

    def normalize_row(
        self,
        *,
        raw_row: Mapping[str, str | None],
        fields: Sequence[str],
        row_id: int,
    ) -> EmailRecord:
        """
        Build a record where designated fields are numeric and the rest
        pass through as text.

        Only fields listed in ``fields`` appear on the record; a designated
        metric missing from the header stays absent.
        """

        metrics: dict[str, MetricValue] = {}
        text: dict[str, str] = {}
        for name in fields:
            value = raw_row.get(name)
            metric = self._metrics.get(name)
            if metric is not None:
                metrics[name] = coerce_metric(value, metric)
            else:
                text[name] = "" if value is None else str(value)

        return EmailRecord(
            row_id=row_id,
            fields=tuple(fields),
            metrics=metrics,
            text=text,
        )

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, str):
            return value.strip() == ""
        return False
