"""
tests/test_filter_engine.py

Pytest unit tests for the filter engine.

All tests are pure Python with in-memory datasets. Every assertion is
deterministic: the same dataset and criteria give the same view.
"""

from __future__ import annotations

import itertools

import pytest

from app.domain.email_metrics import EmailDataset, FilterCriteria
from app.services.csv_ingestion_service import CSVIngestionService
from app.services.filter_engine import active_passes, apply_filters, build_filter_criteria, parse_bound

_CSV = (
    "Email Name,Sent,Open Rate,Click Rate\n"
    "Promo Blast,100,25.5,2.0\n"
    "Weekly Newsletter,200,40,5.5\n"
    ",50,60,9\n"
    "promo follow-up,80,30,3\n"
    "Re-engagement,90,10,0.5\n"
)


@pytest.fixture()
def dataset() -> EmailDataset:
    return CSVIngestionService(max_upload_bytes=1024 * 1024).parse(_CSV.encode("utf-8"))


def _names(view) -> list:
    return [record.name for record in view]


class TestParseBound:
    def test_empty_and_non_numeric_are_absent(self) -> None:
        for raw in (None, "", "  ", "abc"):
            assert parse_bound(raw) is None

    def test_zero_is_a_real_bound(self) -> None:
        assert parse_bound("0") == 0.0

    def test_numbers_pass_through(self) -> None:
        assert parse_bound(12) == 12.0
        assert parse_bound("12.5") == 12.5


class TestBuildCriteria:
    def test_blank_inputs_give_empty_criteria(self) -> None:
        criteria = build_filter_criteria(
            search_term="",
            min_open_rate="",
            max_open_rate="x",
            min_click_rate=None,
            max_click_rate="",
        )
        assert criteria == FilterCriteria()
        assert criteria.is_empty
        assert active_passes(criteria) == []

    def test_pass_order_is_fixed(self) -> None:
        criteria = build_filter_criteria(
            search_term="a",
            min_open_rate="1",
            max_open_rate="2",
            min_click_rate="3",
            max_click_rate="4",
        )
        assert [name for name, _ in active_passes(criteria)] == [
            "search_term",
            "min_open_rate",
            "max_open_rate",
            "min_click_rate",
            "max_click_rate",
        ]


class TestApplyFilters:
    def test_no_criteria_keeps_everything(self, dataset: EmailDataset) -> None:
        assert apply_filters(dataset.records, FilterCriteria()) == dataset.records

    def test_search_is_case_insensitive_substring(self, dataset: EmailDataset) -> None:
        view = apply_filters(dataset.records, FilterCriteria(search_term="promo"))
        assert _names(view) == ["Promo Blast", "promo follow-up"]

    def test_empty_name_never_matches_search(self, dataset: EmailDataset) -> None:
        view = apply_filters(dataset.records, FilterCriteria(search_term="e"))
        assert "" not in _names(view)

    def test_bounds_are_inclusive(self, dataset: EmailDataset) -> None:
        view = apply_filters(
            dataset.records,
            FilterCriteria(min_open_rate=25.5, max_open_rate=40),
        )
        assert _names(view) == ["Promo Blast", "Weekly Newsletter", "promo follow-up"]

    def test_min_open_rate_scenario(self) -> None:
        single = CSVIngestionService(max_upload_bytes=1024).parse(
            b"Email Name,Sent,Open Rate\nPromo,100,25.5\n"
        )
        assert apply_filters(single.records, FilterCriteria(min_open_rate=30)) == ()

    def test_zero_bound_is_not_skipped(self, dataset: EmailDataset) -> None:
        view = apply_filters(dataset.records, FilterCriteria(max_click_rate=0))
        assert view == ()

    def test_click_rate_bounds(self, dataset: EmailDataset) -> None:
        view = apply_filters(
            dataset.records,
            FilterCriteria(min_click_rate=2, max_click_rate=5.5),
        )
        assert _names(view) == ["Promo Blast", "Weekly Newsletter", "promo follow-up"]

    def test_missing_rate_column_fails_active_bound(self) -> None:
        no_rates = CSVIngestionService(max_upload_bytes=1024).parse(b"Email Name,Sent\nPromo,1\n")
        assert apply_filters(no_rates.records, FilterCriteria(min_open_rate=0)) == ()
        assert len(apply_filters(no_rates.records, FilterCriteria())) == 1

    def test_view_is_ordered_subsequence(self, dataset: EmailDataset) -> None:
        view = apply_filters(dataset.records, FilterCriteria(min_open_rate=20, min_click_rate=2))
        row_ids = [record.row_id for record in view]
        assert row_ids == sorted(row_ids)
        assert all(record in dataset.records for record in view)

    def test_idempotent(self, dataset: EmailDataset) -> None:
        criteria = FilterCriteria(search_term="o", min_open_rate=20)
        first = apply_filters(dataset.records, criteria)
        assert apply_filters(dataset.records, criteria) == first
        assert apply_filters(first, criteria) == first

    def test_constraint_order_does_not_change_result(self, dataset: EmailDataset) -> None:
        single_constraints = [
            FilterCriteria(search_term="o"),
            FilterCriteria(min_open_rate=20),
            FilterCriteria(max_open_rate=50),
            FilterCriteria(min_click_rate=1),
        ]
        combined = apply_filters(
            dataset.records,
            FilterCriteria(search_term="o", min_open_rate=20, max_open_rate=50, min_click_rate=1),
        )

        for ordering in itertools.permutations(single_constraints):
            view = dataset.records
            for criteria in ordering:
                view = apply_filters(view, criteria)
            assert view == combined
