from __future__ import annotations

import pytest

from product_importer.models.records import Category
from product_importer.services.categories import CategoryResolver, NoCategoriesError


def test_load_takes_single_snapshot(make_cursor):
    cur = make_cursor(categories=[(1, "Tools"), (2, "Garden")])
    resolver = CategoryResolver.load(cur)
    assert len(resolver) == 2
    assert cur.executed == ["SELECT category_id, category_name FROM category ORDER BY category_id"]


def test_load_uses_configured_table(make_cursor):
    cur = make_cursor()
    CategoryResolver.load(cur, table="product_category")
    assert "FROM product_category" in cur.executed[0]


def test_load_empty_snapshot_raises(make_cursor):
    with pytest.raises(NoCategoriesError, match="Please add categories first"):
        CategoryResolver.load(make_cursor(categories=[]))


def test_lookup_is_case_insensitive():
    resolver = CategoryResolver([Category(1, "Tools"), Category(2, "Garden Supplies")])
    assert resolver.lookup("tools") == 1
    assert resolver.lookup("TOOLS") == 1
    assert resolver.lookup("garden supplies") == 2
    assert resolver.lookup("Electronics") is None


def test_lookup_does_not_trim():
    resolver = CategoryResolver([Category(1, "Tools")])
    assert resolver.lookup(" Tools ") is None


def test_names_keep_snapshot_order():
    resolver = CategoryResolver([Category(3, "Zed"), Category(1, "Alpha")])
    assert resolver.names == ["Zed", "Alpha"]


def test_snapshot_is_not_requeried(make_cursor):
    cur = make_cursor(categories=[(1, "Tools")])
    resolver = CategoryResolver.load(cur)
    cur.categories.append((2, "Garden"))
    assert resolver.lookup("Garden") is None
    assert len(cur.statements) == 1
