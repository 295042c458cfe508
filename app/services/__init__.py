"""
app/services package marker.
"""

from app.services.csv_ingestion_service import CSVIngestionService, get_csv_ingestion_service
from app.services.filter_engine import apply_filters, build_filter_criteria
from app.services.insight_service import (
    InsightOutcome,
    InsightService,
    InsightStatus,
    build_llm_adapter,
    get_insight_service,
)

__all__ = [
    "CSVIngestionService",
    "InsightOutcome",
    "InsightService",
    "InsightStatus",
    "apply_filters",
    "build_filter_criteria",
    "build_llm_adapter",
    "get_csv_ingestion_service",
    "get_insight_service",
]
