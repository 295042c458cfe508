"""
app/services/filter_engine.py

Conjunctive row filtering over an email dataset.

Each active constraint is an independent pass over the narrowing candidate
set, in a fixed order: name search, open-rate minimum, open-rate maximum,
click-rate minimum, click-rate maximum. Absent constraints are skipped.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from app.domain.email_metrics import (
    CLICK_RATE_FIELD,
    OPEN_RATE_FIELD,
    EmailRecord,
    FilterCriteria,
)
from app.logging_utils import log_event
from app.validators.metric_normalizer import parse_float_prefix

logger = logging.getLogger(__name__)

RecordPredicate = Callable[[EmailRecord], bool]


def parse_bound(raw_value: Any) -> float | None:
    """
    Convert raw filter input into a bound; empty or non-numeric is None.
    """

    return parse_float_prefix(raw_value)


def build_filter_criteria(
    *,
    search_term: str | None = "",
    min_open_rate: Any = None,
    max_open_rate: Any = None,
    min_click_rate: Any = None,
    max_click_rate: Any = None,
) -> FilterCriteria:
    """
    Build criteria from the raw values of the five filter inputs.
    """

    return FilterCriteria(
        search_term=search_term or "",
        min_open_rate=parse_bound(min_open_rate),
        max_open_rate=parse_bound(max_open_rate),
        min_click_rate=parse_bound(min_click_rate),
        max_click_rate=parse_bound(max_click_rate),
    )


def _name_contains(term: str) -> RecordPredicate:
    needle = term.lower()

    def predicate(record: EmailRecord) -> bool:
        name = record.name
        return bool(name) and needle in name.lower()

    return predicate


def _at_least(field_name: str, bound: float) -> RecordPredicate:
    def predicate(record: EmailRecord) -> bool:
        value = record.metric(field_name)
        return value is not None and value >= bound

    return predicate


def _at_most(field_name: str, bound: float) -> RecordPredicate:
    def predicate(record: EmailRecord) -> bool:
        value = record.metric(field_name)
        return value is not None and value <= bound

    return predicate


def active_passes(criteria: FilterCriteria) -> list[tuple[str, RecordPredicate]]:
    """
    Return the named predicates for every constraint that is set, in order.
    """

    passes: list[tuple[str, RecordPredicate]] = []
    if criteria.search_term:
        passes.append(("search_term", _name_contains(criteria.search_term)))
    if criteria.min_open_rate is not None:
        passes.append(("min_open_rate", _at_least(OPEN_RATE_FIELD, criteria.min_open_rate)))
    if criteria.max_open_rate is not None:
        passes.append(("max_open_rate", _at_most(OPEN_RATE_FIELD, criteria.max_open_rate)))
    if criteria.min_click_rate is not None:
        passes.append(("min_click_rate", _at_least(CLICK_RATE_FIELD, criteria.min_click_rate)))
    if criteria.max_click_rate is not None:
        passes.append(("max_click_rate", _at_most(CLICK_RATE_FIELD, criteria.max_click_rate)))
    return passes


def apply_filters(
    records: Iterable[EmailRecord],
    criteria: FilterCriteria,
) -> tuple[EmailRecord, ...]:
    """
    Return the subsequence of ``records`` satisfying every active constraint.

    The result preserves input order and depends only on the inputs.
    """

    candidates = tuple(records)
    total = len(candidates)
    passes = active_passes(criteria)
    for _, predicate in passes:
        candidates = tuple(record for record in candidates if predicate(record))

    log_event(
        logger,
        logging.DEBUG,
        "filters_applied",
        passes=[name for name, _ in passes],
        total=total,
        matched=len(candidates),
    )
    return candidates
