"""Tests for CSV export and console summaries."""

import csv

from receipt_digitizer.core.models import AnalyzedItem, ReceiptAnalysisResult
from receipt_digitizer.core.reporting import CSV_FIELDS, format_summary, write_csv
from receipt_digitizer.core.utils import money_fmt


def _result(**kwargs) -> ReceiptAnalysisResult:
    defaults = dict(
        items=(AnalyzedItem(id="ocr-0", name="아메리카노", price=4500),
               AnalyzedItem(id="ocr-1", name="카페라떼", price=5000)),
        total_amount=9500,
        confidence=0.8,
    )
    defaults.update(kwargs)
    return ReceiptAnalysisResult(**defaults)


class TestWriteCsv:
    """Tests for write_csv."""

    def test_rows_per_item(self, tmp_path) -> None:
        out = tmp_path / "items.csv"
        write_csv([("a.png", _result()), ("b.png", _result(items=(), total_amount=0))], out)
        with out.open(encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert list(rows[0]) == CSV_FIELDS
        assert len(rows) == 3
        assert rows[0]["name"] == "아메리카노"
        assert rows[1]["price"] == "5000"
        assert rows[1]["total_amount"] == "9500"
        assert rows[2]["source_file"] == "b.png"
        assert rows[2]["name"] == ""


class TestFormatSummary:
    """Tests for format_summary."""

    def test_success(self) -> None:
        text = format_summary(_result(warnings=("w",), suggestions=("s",)), title="a.png")
        assert text.splitlines()[0] == "a.png"
        assert "Total: 9,500원" in text
        assert "- 아메리카노: 4,500원" in text
        assert "[WARN] w" in text
        assert "-> s" in text

    def test_no_total(self) -> None:
        assert "Total: (none)" in format_summary(_result(items=(), total_amount=0))

    def test_errors(self) -> None:
        text = format_summary(_result(items=(), total_amount=0, confidence=0.0,
                                      errors=("Unsupported image format",)))
        assert "[ERROR] Unsupported image format" in text
        assert "Total" not in text


class TestMoneyFmt:
    def test_format(self) -> None:
        assert money_fmt(31000) == "31,000원"
        assert money_fmt(None) == ""
