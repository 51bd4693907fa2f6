from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal

import numpy as np
import pytest

from product_importer.excel.headers import build_header_map
from product_importer.models.records import ExtractedRecord
from product_importer.services.extraction import extract_record, parse_price, parse_stock, text_field


@pytest.mark.parametrize(
    "value, expected",
    [
        ("  Hammer ", "Hammer"),
        (None, ""),
        (float("nan"), ""),
        ("", ""),
        (42, "42"),
        (0, "0"),
    ],
)
def test_text_field(value, expected):
    assert text_field(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [
        (9.99, Decimal("9.99")),
        (5, Decimal("5")),
        (np.float64(2.5), Decimal("2.5")),
        ("9.99", Decimal("9.99")),
        ("$1,299.50", Decimal("1299.50")),
        (" 12 USD", Decimal("12")),
        ("-1", Decimal("-1")),
        ("12.5.1", Decimal("12.5")),
        ("7-3", Decimal("7")),
        (".5", Decimal(".5")),
        ("", Decimal(0)),
        (None, Decimal(0)),
        ("free", Decimal(0)),
    ],
)
def test_parse_price(value, expected):
    assert parse_price(value) == expected


@pytest.mark.parametrize("value", ["-", "--5", ".", float("nan"), math.inf])
def test_parse_price_not_a_number(value):
    assert parse_price(value) is None


def test_parse_price_bool_is_not_numeric():
    # True is an int subclass; treat as text "True" -> nothing left -> 0
    assert parse_price(True) == Decimal(0)


@pytest.mark.parametrize(
    "value, expected",
    [
        (5, 5),
        (np.int64(7), 7),
        (4.0, 4),
        ("10", 10),
        ("4 pcs", 4),
        ("-3", -3),
        ("1,000", 1000),
        ("", 0),
        (None, 0),
    ],
)
def test_parse_stock(value, expected):
    assert parse_stock(value) == expected


@pytest.mark.parametrize("value", [2.5, float("nan"), "-", "--2"])
def test_parse_stock_not_a_number(value):
    assert parse_stock(value) is None


def test_parse_stock_date_cell_uses_leading_digits():
    assert parse_stock(datetime(2024, 1, 5)) == 2024


def test_extract_record_uses_header_map():
    headers = [" Product_Name ", "CATEGORY_NAME", "Price", "stock"]
    row = {" Product_Name ": " Widget ", "CATEGORY_NAME": " Tools", "Price": "9.99", "stock": "5"}
    record = extract_record(row, build_header_map(headers))
    assert record == ExtractedRecord(
        product_name="Widget", category_name="Tools", price=Decimal("9.99"), stock=5
    )


def test_extract_record_missing_cells():
    headers = ["product_name", "category_name", "price", "stock"]
    record = extract_record({}, build_header_map(headers))
    assert record == ExtractedRecord(product_name="", category_name="", price=Decimal(0), stock=0)
