from __future__ import annotations

import pytest

from product_importer.services.orchestrator import ImportFailedError, import_products

"""Report shape returned to the caller of an import."""

HEADERS = ["product_name", "category_name", "price", "stock"]


def test_success_report_shape(make_cursor):
    report = import_products(make_cursor(), [dict(zip(HEADERS, ["Hammer", "Tools", "9.99", "5"]))], HEADERS)
    assert report.to_dict() == {
        "success": True,
        "processed": 1,
        "errors": [],
        "message": "Successfully uploaded 1 products",
    }


def test_failure_report_shape(make_cursor):
    rows = [dict(zip(HEADERS, v)) for v in (["Hammer", "Tools", "9.99", "5"], ["Saw", "Tools", "9.99", "lots"])]
    with pytest.raises(ImportFailedError) as e:
        import_products(make_cursor(), rows, HEADERS)
    out = e.value.report.to_dict()
    assert set(out) == {"success", "processed", "errors", "message"}
    assert out["success"] is False
    assert out["processed"] == 1
    assert out["errors"] == [
        {"row_number": 3, "message": "Stock must be a number greater than or equal to 0"}
    ]
    assert out["message"].startswith("Uploaded 1 products with 1 errors: Row 3: ")
