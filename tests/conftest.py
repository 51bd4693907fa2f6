# Shared pytest fixtures
from __future__ import annotations
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest


class FakeCursor:
    """DB-API cursor double.

    Records every statement and keeps a tiny in-memory products table that
    honours BEGIN / SAVEPOINT / ROLLBACK TO SAVEPOINT / COMMIT / ROLLBACK.
    """

    def __init__(
        self,
        categories: tuple[tuple[int, str], ...] | list[tuple[int, str]] = (),
        fail_products: set[str] | None = None,
        fail_statements: set[str] | None = None,
    ) -> None:
        self.categories = list(categories)
        self.fail_products = fail_products or set()
        # exact SQL or leading keyword ("BEGIN", "COMMIT", "SELECT", ...)
        self.fail_statements = fail_statements or set()
        self.statements: list[tuple[str, Any]] = []
        self.committed: list[tuple[Any, ...]] = []
        self._pending: list[tuple[Any, ...]] = []
        self._savepoint_mark = 0
        self._result: list[tuple[Any, ...]] = []

    def execute(self, sql: str, params: Any = None) -> None:
        self.statements.append((sql, params))
        keyword = sql.split()[0].upper()
        if sql in self.fail_statements or keyword in self.fail_statements:
            raise RuntimeError(f"{keyword} failed: server closed the connection unexpectedly")
        if keyword == "SELECT":
            self._result = list(self.categories)
        elif keyword == "INSERT":
            if params[0] in self.fail_products:
                raise RuntimeError(
                    'duplicate key value violates unique constraint "products_product_name_key"'
                )
            self._pending.append(tuple(params))
        elif sql.startswith("SAVEPOINT"):
            self._savepoint_mark = len(self._pending)
        elif sql.startswith("ROLLBACK TO SAVEPOINT"):
            del self._pending[self._savepoint_mark:]
        elif sql == "COMMIT":
            self.committed.extend(self._pending)
            self._pending.clear()
        elif sql == "ROLLBACK":
            self._pending.clear()

    def fetchall(self) -> list[tuple[Any, ...]]:
        return list(self._result)

    @property
    def executed(self) -> list[str]:
        return [sql for sql, _ in self.statements]

    @property
    def inserts(self) -> list[tuple[Any, ...]]:
        return [params for sql, params in self.statements if sql.startswith("INSERT")]


@pytest.fixture()
def make_cursor():
    def _make(categories=((1, "Tools"), (2, "Garden")), **kwargs: Any) -> FakeCursor:
        return FakeCursor(categories, **kwargs)
    return _make


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sheet_name: Products
max_file_size_mb: 5
tables:
  products: products
  category: category
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def make_workbook(temp_workdir: Path):
    """Write an .xlsx under data/; each sheet is a list of rows (first = header)."""
    def _make(name: str, sheets: dict[str, list[list[object]]]) -> Path:
        path = temp_workdir / "data" / name
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in sheets.items():
                pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
        return path
    return _make


@pytest.fixture()
def products_xlsx(make_workbook) -> Path:
    return make_workbook(
        "products.xlsx",
        {
            "Products": [
                [" Product_Name ", "CATEGORY_NAME", "Price ", "stock"],
                ["Hammer", "Tools", 12.5, 10],
                ["Rake", "garden", "$7.99", "4 pcs"],
            ]
        },
    )


@pytest.fixture()
def fake_db(monkeypatch, make_cursor):
    """Replace the CLI's psycopg2 connection with a FakeCursor; returns the cursor."""
    from contextlib import contextmanager

    from product_importer.cli import app

    def _install(**kwargs: Any) -> FakeCursor:
        cur = make_cursor(**kwargs)

        @contextmanager
        def _connection(cfg):
            yield cur

        monkeypatch.setattr(app, "_db_connection", _connection)
        return cur
    return _install
