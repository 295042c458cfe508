"""
app/domain package marker.
"""

from app.domain.email_metrics import (
    CLICK_RATE_FIELD,
    INSIGHT_PROMPT_LINES,
    METRIC_FIELDS,
    NAME_FIELD,
    OPEN_RATE_FIELD,
    EmailDataset,
    EmailRecord,
    FilterCriteria,
    MetricField,
)
from app.domain.errors import CSVParseError, DashboardError, InvalidStateError

__all__ = [
    "CLICK_RATE_FIELD",
    "INSIGHT_PROMPT_LINES",
    "CSVParseError",
    "DashboardError",
    "EmailDataset",
    "EmailRecord",
    "FilterCriteria",
    "InvalidStateError",
    "METRIC_FIELDS",
    "MetricField",
    "NAME_FIELD",
    "OPEN_RATE_FIELD",
]
