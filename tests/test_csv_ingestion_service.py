"""
tests/test_csv_ingestion_service.py

Pytest unit tests for CSVIngestionService.

Coverage
--------
- Header-driven field set and record count
- Blank line skipping, including before the header
- Short rows padded, long rows rejected
- Structural failures raise CSVParseError with the physical line number
- Upload size limit
"""

from __future__ import annotations

import pytest

from app.domain.errors import CSVParseError
from app.services.csv_ingestion_service import CSVIngestionService


@pytest.fixture()
def svc() -> CSVIngestionService:
    return CSVIngestionService(max_upload_bytes=1024 * 1024)


def _csv(*lines: str) -> bytes:
    return ("\n".join(lines) + "\n").encode("utf-8")


class TestParse:
    def test_single_row_scenario(self, svc: CSVIngestionService) -> None:
        dataset = svc.parse(_csv("Email Name,Sent,Open Rate", "Promo,100,25.5"))

        assert len(dataset) == 1
        record = dataset.records[0]
        assert record.as_dict() == {"Email Name": "Promo", "Sent": 100, "Open Rate": 25.5}
        assert isinstance(record.get("Sent"), int)
        assert "Click Rate" not in record.as_dict()

    def test_record_count_matches_non_blank_lines(self, svc: CSVIngestionService) -> None:
        data = _csv(
            "Email Name,Sent,Open Rate,Click Rate",
            "A,10,1,2",
            "",
            "B,20,3,4",
            "   ,  ,,",
            "C,30,5,6",
        )

        dataset = svc.parse(data, source_name="metrics.csv")

        assert [record.name for record in dataset] == ["A", "B", "C"]
        assert [record.row_id for record in dataset] == [0, 1, 2]
        assert dataset.source_name == "metrics.csv"

    def test_every_record_has_header_field_set(self, svc: CSVIngestionService) -> None:
        data = _csv("Email Name,Sent,Segment", "A,10,vip", "B,,")

        dataset = svc.parse(data)

        assert dataset.fields == ("Email Name", "Sent", "Segment")
        for record in dataset:
            assert tuple(record.as_dict()) == dataset.fields

    def test_short_row_is_padded(self, svc: CSVIngestionService) -> None:
        dataset = svc.parse(_csv("Email Name,Sent,Open Rate", "Promo"))

        assert dataset.records[0].as_dict() == {"Email Name": "Promo", "Sent": 0, "Open Rate": 0.0}

    def test_trailing_empty_values_are_tolerated(self, svc: CSVIngestionService) -> None:
        dataset = svc.parse(_csv("Email Name,Sent", "Promo,5,,"))

        assert dataset.records[0].as_dict() == {"Email Name": "Promo", "Sent": 5}

    def test_header_only_file_gives_empty_dataset(self, svc: CSVIngestionService) -> None:
        dataset = svc.parse(_csv("Email Name,Sent"))

        assert len(dataset) == 0
        assert dataset.fields == ("Email Name", "Sent")

    def test_leading_blank_lines_before_header(self, svc: CSVIngestionService) -> None:
        dataset = svc.parse(b"\n  \nEmail Name,Sent\nPromo,1\n")

        assert dataset.fields == ("Email Name", "Sent")
        assert [record.as_dict() for record in dataset] == [{"Email Name": "Promo", "Sent": 1}]

    def test_utf8_bom_is_stripped(self, svc: CSVIngestionService) -> None:
        data = "\ufeffEmail Name,Sent\nPromo,1\n".encode("utf-8")

        dataset = svc.parse(data)

        assert dataset.fields[0] == "Email Name"

    def test_quoted_values_keep_commas(self, svc: CSVIngestionService) -> None:
        dataset = svc.parse(_csv('Email Name,Sent', '"Promo, part 2",7'))

        assert dataset.records[0].name == "Promo, part 2"
        assert dataset.records[0].get("Sent") == 7


class TestParseErrors:
    def test_empty_file(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVParseError, match="header row is missing"):
            svc.parse(b"")

    def test_non_utf8(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVParseError, match="UTF-8"):
            svc.parse(b"Email Name,Sent\n\xff\xfe,1\n")

    def test_blank_lines_only(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVParseError, match="header row is missing"):
            svc.parse(b"\n \n\n")

    def test_extra_values_report_physical_line(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVParseError, match="Line 4 "):
            svc.parse(_csv("Email Name,Sent", "A,1", "", "B,2,extra"))

    def test_extra_values_after_multiline_cell_report_physical_line(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVParseError, match="Line 5 "):
            svc.parse(_csv("Email Name,Sent", '"Promo', 'part 2",1', "", "B,2,extra"))

    def test_row_with_extra_values(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVParseError, match="Line 3 "):
            svc.parse(_csv("Email Name,Sent", "A,1", "B,2,unexpected"))

    def test_duplicate_headers(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVParseError, match="duplicate"):
            svc.parse(_csv("Email Name,Sent,Sent", "A,1,2"))

    @pytest.mark.parametrize("header", ["Email Name,,Sent", "Email Name,Sent,", "Email Name,  ,Sent"])
    def test_blank_header_names(self, svc: CSVIngestionService, header: str) -> None:
        with pytest.raises(CSVParseError, match="blank column names"):
            svc.parse(_csv(header, "Promo,x,1"))

    def test_unterminated_quote(self, svc: CSVIngestionService) -> None:
        with pytest.raises(CSVParseError, match="Invalid CSV format"):
            svc.parse(b'Email Name,Sent\n"Promo,1')

    def test_upload_limit(self) -> None:
        small = CSVIngestionService(max_upload_bytes=10)

        with pytest.raises(CSVParseError, match="upload limit"):
            small.parse(_csv("Email Name,Sent", "Promo,1"))
