from __future__ import annotations

import pytest

from product_importer.models.import_report import ImportReport
from product_importer.models.records import RowError
from product_importer.services.summary import _format_number, render_summary_line


def test_render_success():
    report = ImportReport(success=True, processed_count=3, committed=True, total_rows=3)
    assert render_summary_line(report, 2.0) == (
        "SUMMARY rows=3 inserted=3 failed=0 committed=yes elapsed_sec=2"
    )


def test_render_rolled_back():
    report = ImportReport(
        success=False,
        processed_count=0,
        errors=(RowError(2, "x"), RowError(3, "y")),
        committed=False,
        total_rows=2,
    )
    assert render_summary_line(report, 0.25) == (
        "SUMMARY rows=2 inserted=0 failed=2 committed=no elapsed_sec=0.25"
    )


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (3.0, "3"), (1.23456, "1.235"), (0.0012, "0.0012"), (12.5, "12.5")],
)
def test_format_number(value, expected):
    assert _format_number(value) == expected
