from __future__ import annotations

import math
import numbers
import re
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from ..models.records import ExtractedRecord

"""Field extraction for product rows.

Cells arrive with whatever type the workbook had: numbers, strings such as
"$9.99" or " 12 pcs", dates, or None. Extraction is type tolerant and never
raises for bad data. A numeric field that cannot be parsed becomes None and
RowValidator turns that into a row error.
"""

__all__ = [
    "text_field",
    "parse_price",
    "parse_stock",
    "extract_record",
]

_PRICE_STRIP = re.compile(r"[^0-9.\-]")
_STOCK_STRIP = re.compile(r"[^0-9\-]")
# Leading literal only: "12.5.1" -> 12.5, "7-3" -> 7
_DECIMAL_PREFIX = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")
_INTEGER_PREFIX = re.compile(r"-?\d+")


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def text_field(value: Any) -> str:
    """String form of a text cell, trimmed. Empty / missing -> ""."""
    if _is_missing(value):
        return ""
    return str(value).strip()


def parse_price(value: Any) -> Decimal | None:
    """Parse a price cell. Returns None when the value is not a number.

    Numeric cells are used as is. Anything else is reduced to [0-9.-] and the
    leading decimal literal is parsed; nothing left after stripping means 0.
    """
    if _is_number(value):
        if not math.isfinite(value):
            return None
        try:
            return Decimal(str(value))
        except InvalidOperation:
            return None
    cleaned = _PRICE_STRIP.sub("", "" if value is None else str(value))
    if not cleaned:
        return Decimal(0)
    match = _DECIMAL_PREFIX.match(cleaned)
    if match is None:
        return None
    return Decimal(match.group())


def parse_stock(value: Any) -> int | None:
    """Parse a stock cell. Returns None when the value is not an integer."""
    if _is_number(value):
        if isinstance(value, numbers.Integral):
            return int(value)
        # pandas reads integer columns containing blanks as float64
        if math.isfinite(value) and float(value).is_integer():
            return int(value)
        return None
    cleaned = _STOCK_STRIP.sub("", "" if value is None else str(value))
    if not cleaned:
        return 0
    match = _INTEGER_PREFIX.match(cleaned)
    if match is None:
        return None
    return int(match.group())


def extract_record(row: Mapping[str, Any], header_map: Mapping[str, str]) -> ExtractedRecord:
    """Pull the four product fields out of one raw row.

    header_map must already contain every required field; that is checked
    once per import, not per row.
    """
    def cell(field: str) -> Any:
        return row.get(header_map[field])

    return ExtractedRecord(
        product_name=text_field(cell("product_name")),
        category_name=text_field(cell("category_name")),
        price=parse_price(cell("price")),
        stock=parse_stock(cell("stock")),
    )
