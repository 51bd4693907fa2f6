from __future__ import annotations

from typing import Any

from ..models.records import Category, ValidatedRecord

"""SQL for the product import: category snapshot read and single-row INSERT.

Table names come from validated config (identifier pattern enforced by the
JSON schema) and are interpolated; values always go through driver parameters.
"""

__all__ = [
    "ProductInsertError",
    "fetch_categories",
    "insert_product",
]


class ProductInsertError(Exception):
    pass


def fetch_categories(cursor: Any, table: str = "category") -> list[Category]:
    """Read every category (id, name) as of now, ordered by id."""
    cursor.execute(f"SELECT category_id, category_name FROM {table} ORDER BY category_id")
    return [Category(category_id=row[0], category_name=row[1]) for row in cursor.fetchall()]


def insert_product(cursor: Any, record: ValidatedRecord, table: str = "products") -> None:
    """INSERT one validated product.

    Raises:
        ProductInsertError: any driver error (constraint violation, timeout,
            lost connection); the caller turns it into a row error.
    """
    try:
        cursor.execute(
            f"INSERT INTO {table} (product_name, category_id, price, stock) VALUES (%s, %s, %s, %s)",
            (record.product_name, record.category_id, record.price, record.stock),
        )
    except Exception as e:
        raise ProductInsertError(str(e).strip()) from e
