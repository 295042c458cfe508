"""
app/domain/email_metrics.py

Domain models for uploaded email-campaign metrics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Union

MetricValue = Union[int, float]

NAME_FIELD = "Email Name"
OPEN_RATE_FIELD = "Open Rate"
CLICK_RATE_FIELD = "Click Rate"
SPAM_REPORTS_FIELD = "Spam Reports"
SPAM_RATE_FIELD = "Spam Rate"


@dataclass(frozen=True)
class MetricField:
    """
    One designated numeric column and how it is coerced and displayed.
    """

    name: str
    kind: type
    is_rate: bool = False


METRIC_FIELDS: tuple[MetricField, ...] = (
    MetricField("Sent", int),
    MetricField("Delivered", int),
    MetricField(OPEN_RATE_FIELD, float, is_rate=True),
    MetricField(CLICK_RATE_FIELD, float, is_rate=True),
    MetricField("Hard Bounce Rate", float, is_rate=True),
    MetricField("Unsubscribe Rate", float, is_rate=True),
    MetricField("Bounce Rate", float, is_rate=True),
    MetricField(SPAM_RATE_FIELD, float, is_rate=True),
    MetricField("Delivery Rate", float, is_rate=True),
)

METRIC_FIELDS_BY_NAME: dict[str, MetricField] = {metric.name: metric for metric in METRIC_FIELDS}


def _insight_prompt_lines() -> tuple[tuple[str, bool], ...]:
    lines = [(NAME_FIELD, False)]
    for metric in METRIC_FIELDS:
        if metric.name == SPAM_RATE_FIELD:
            lines.append((SPAM_REPORTS_FIELD, False))
        lines.append((metric.name, metric.is_rate))
    return tuple(lines)


# (column, rendered with a percentage suffix) in the order the analysis prompt lists them
INSIGHT_PROMPT_LINES: tuple[tuple[str, bool], ...] = _insight_prompt_lines()


@dataclass(frozen=True)
class EmailRecord:
    """
    One campaign row with designated metrics coerced to numbers.

    ``row_id`` is the 0-based position of the row in its dataset and is the
    key used for selection. ``fields`` keeps the header order; every field
    is present in exactly one of ``metrics`` or ``text``.
    """

    row_id: int
    fields: tuple[str, ...]
    metrics: Mapping[str, MetricValue] = field(default_factory=dict)
    text: Mapping[str, str] = field(default_factory=dict)

    @property
    def name(self) -> str | None:
        return self.text.get(NAME_FIELD)

    def metric(self, field_name: str) -> MetricValue | None:
        """
        Return a designated metric, or None when the header lacks it.
        """

        return self.metrics.get(field_name)

    def get(self, field_name: str, default: Any = None) -> Any:
        if field_name in self.metrics:
            return self.metrics[field_name]
        return self.text.get(field_name, default)

    def as_dict(self) -> dict[str, Any]:
        """
        Return the row as a plain mapping in header order.
        """

        return {name: self.get(name) for name in self.fields}


@dataclass(frozen=True)
class EmailDataset:
    """
    Ordered, immutable set of records parsed from one upload.
    """

    fields: tuple[str, ...] = ()
    records: tuple[EmailRecord, ...] = ()
    source_name: str | None = None

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[EmailRecord]:
        return iter(self.records)

    def get(self, row_id: int) -> EmailRecord | None:
        if 0 <= row_id < len(self.records):
            return self.records[row_id]
        return None


@dataclass(frozen=True)
class FilterCriteria:
    """
    Independent optional constraints applied by the filter engine.

    A bound of None imposes no constraint. Bounds are inclusive.
    """

    search_term: str = ""
    min_open_rate: float | None = None
    max_open_rate: float | None = None
    min_click_rate: float | None = None
    max_click_rate: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.search_term and all(
            bound is None
            for bound in (
                self.min_open_rate,
                self.max_open_rate,
                self.min_click_rate,
                self.max_click_rate,
            )
        )
