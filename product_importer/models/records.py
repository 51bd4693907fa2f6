from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

"""Per-row domain models for the product importer.

A spreadsheet row goes through three shapes during one import:

    RawRow (dict)  ->  ExtractedRecord  ->  ValidatedRecord | RowError

Only ValidatedRecord reaches the database. RowError is a value, not an
exception: rows are isolated from one another and errors are aggregated
by the import service.
"""

__all__ = [
    "Category",
    "ExtractedRecord",
    "ValidatedRecord",
    "RowError",
    "RowOutcome",
]


@dataclass(frozen=True)
class Category:
    """One row of the category snapshot taken at the start of an import."""
    category_id: int
    category_name: str


@dataclass(frozen=True)
class ExtractedRecord:
    """Fields pulled out of one spreadsheet row, before business rules.

    price / stock are None when the cell could not be parsed as a number.
    """
    product_name: str  # trimmed
    category_name: str  # trimmed
    price: Decimal | None
    stock: int | None


@dataclass(frozen=True)
class ValidatedRecord:
    """A row that passed every check and is ready for INSERT."""
    row_number: int  # display row number (data index + 2)
    product_name: str
    category_id: int
    price: Decimal
    stock: int


@dataclass(frozen=True)
class RowError:
    """Row-scoped failure; never aborts processing of the other rows.

    Attributes:
        row_number: Display row number as the spreadsheet user sees it
        message: Human readable reason
        error_type: UPPER_SNAKE classification used by the error log
    """
    row_number: int
    message: str
    error_type: str = "VALIDATION_ERROR"

    def __str__(self) -> str:
        return f"Row {self.row_number}: {self.message}"


RowOutcome = ValidatedRecord | RowError
