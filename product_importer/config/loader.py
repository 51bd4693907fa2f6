from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError
from psycopg2.extensions import make_dsn

"""Config loader for the product importer.

Responsibilities:
- Load YAML config (default: config/import.yml)
- Validate against config_schema.json shipped next to this module
- Apply defaults (sheet "Products", 5 MB limit, tables products/category)
- Resolve the PostgreSQL DSN from environment first, config second
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

DEFAULT_SHEET_NAME = "Products"
DEFAULT_MAX_FILE_SIZE_MB = 5


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection fallback; environment variables take precedence."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class TableNames:
    products: str = "products"
    category: str = "category"


@dataclass(frozen=True)
class ImportConfig:
    sheet_name: str = DEFAULT_SHEET_NAME
    max_file_size_mb: float = DEFAULT_MAX_FILE_SIZE_MB
    tables: TableNames = field(default_factory=TableNames)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)

    @property
    def max_file_bytes(self) -> int:
        return int(self.max_file_size_mb * 1024 * 1024)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data violates
            the schema (unknown keys, wrong types, bad table identifiers).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> ImportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    tables_raw = data.get("tables") or {}
    db_raw = data.get("database") or {}
    return ImportConfig(
        sheet_name=data.get("sheet_name", DEFAULT_SHEET_NAME),
        max_file_size_mb=data.get("max_file_size_mb", DEFAULT_MAX_FILE_SIZE_MB),
        tables=TableNames(
            products=tables_raw.get("products", "products"),
            category=tables_raw.get("category", "category"),
        ),
        database=DatabaseConfig(
            host=db_raw.get("host"),
            port=db_raw.get("port"),
            user=db_raw.get("user"),
            password=db_raw.get("password"),
            database=db_raw.get("database"),
            dsn=db_raw.get("dsn"),
        ),
    )


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    """Build the libpq DSN.

    Priority:
        1. DATABASE_URL / PGDSN environment variables (whole DSN)
        2. config `database.dsn`
        3. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE, each falling
           back to the matching config key, then to libpq defaults
    """
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn

    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    # make_dsn quotes values containing spaces or quotes; None drops the key
    return make_dsn(host=host, port=port, user=user, dbname=database, password=password or None)
