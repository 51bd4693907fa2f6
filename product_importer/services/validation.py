from __future__ import annotations

from ..models.records import ExtractedRecord, RowError, RowOutcome, ValidatedRecord
from .categories import CategoryResolver

"""Business rules for one extracted product row.

Checks run in a fixed order and stop at the first failure, so a row carries
at most one error:

1. product_name / category_name present
2. price > 0
3. stock >= 0
4. category exists
"""

__all__ = [
    "MISSING_FIELD_MESSAGE",
    "INVALID_PRICE_MESSAGE",
    "INVALID_STOCK_MESSAGE",
    "display_row_number",
    "validate_row",
]

MISSING_FIELD_MESSAGE = "Missing product_name or category_name"
INVALID_PRICE_MESSAGE = "Price must be a number greater than 0"
INVALID_STOCK_MESSAGE = "Stock must be a number greater than or equal to 0"


def display_row_number(index: int) -> int:
    """Zero-based data row index -> row number the spreadsheet user sees."""
    return index + 2


def validate_row(record: ExtractedRecord, row_number: int, resolver: CategoryResolver) -> RowOutcome:
    if not record.product_name or not record.category_name:
        return RowError(row_number, MISSING_FIELD_MESSAGE, "MISSING_FIELD")

    if record.price is None or record.price <= 0:
        return RowError(row_number, INVALID_PRICE_MESSAGE, "INVALID_PRICE")

    if record.stock is None or record.stock < 0:
        return RowError(row_number, INVALID_STOCK_MESSAGE, "INVALID_STOCK")

    category_id = resolver.lookup(record.category_name)
    if category_id is None:
        return RowError(
            row_number,
            f'Category "{record.category_name}" does not exist. '
            f"Available categories: {', '.join(resolver.names)}",
            "UNKNOWN_CATEGORY",
        )

    return ValidatedRecord(
        row_number=row_number,
        product_name=record.product_name,
        category_id=category_id,
        price=record.price,
        stock=record.stock,
    )
