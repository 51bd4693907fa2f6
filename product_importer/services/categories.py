from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..db.products import fetch_categories
from ..models.records import Category

"""Category snapshot used for row validation.

Categories are read once at the start of an import and looked up by name
case-insensitively from memory. Categories created while an import is running
are not visible to it.
"""

__all__ = [
    "NoCategoriesError",
    "CategoryResolver",
]

logger = logging.getLogger(__name__)


class NoCategoriesError(Exception):
    """Raised when the category table is empty; bulk import needs at least one."""

    def __init__(self) -> None:
        super().__init__("No categories found in the database. Please add categories first.")


class CategoryResolver:
    """Immutable name -> id lookup over one category snapshot."""

    def __init__(self, categories: Iterable[Category]) -> None:
        self._categories: tuple[Category, ...] = tuple(categories)
        self._ids: dict[str, int] = {}
        for category in self._categories:
            self._ids.setdefault(category.category_name.lower(), category.category_id)

    @classmethod
    def load(cls, cursor: Any, table: str = "category") -> CategoryResolver:
        """Take the snapshot with a single query.

        Raises:
            NoCategoriesError: snapshot is empty
        """
        categories = fetch_categories(cursor, table)
        if not categories:
            raise NoCategoriesError()
        resolver = cls(categories)
        logger.info("Available categories: %s", ", ".join(resolver.names))
        return resolver

    def lookup(self, name: str) -> int | None:
        """Category id for `name` (already trimmed), ignoring case."""
        return self._ids.get(name.lower())

    @property
    def names(self) -> list[str]:
        return [c.category_name for c in self._categories]

    def __len__(self) -> int:
        return len(self._categories)
