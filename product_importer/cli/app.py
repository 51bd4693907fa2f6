from __future__ import annotations

import argparse
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import psycopg2
from dotenv import load_dotenv

from product_importer.config.loader import ConfigError, ImportConfig, load_config, resolve_dsn
from product_importer.db.transaction import TransactionError
from product_importer.excel.headers import MissingColumnsError, build_header_map, find_missing_fields
from product_importer.excel.reader import SheetData, SheetError, read_products_sheet
from product_importer.logging.error_log import ErrorLogBuffer, ErrorRecord
from product_importer.logging.init import log_summary, setup_logging
from product_importer.models.import_report import ImportReport
from product_importer.services.categories import NoCategoriesError
from product_importer.services.orchestrator import ImportFailedError, import_products
from product_importer.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- load .env, then config/import.yml
- read the products sheet of the given .xlsx
- connect to PostgreSQL and run one import
- print row errors, the SUMMARY line, and return the exit code
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_IMPORT_FAILED = 2  # row errors; check committed= in SUMMARY


class DatabaseConnectError(Exception):
    pass


@contextmanager
def _db_connection(cfg: ImportConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper; tested via integration)
    """psycopg2 connection + cursor in autocommit mode.

    The import service issues BEGIN / COMMIT / ROLLBACK itself, so the driver
    must not open implicit transactions.
    """
    try:
        conn = psycopg2.connect(resolve_dsn(cfg.database))
    except psycopg2.Error as e:
        raise DatabaseConnectError(str(e).strip()) from e
    try:
        conn.autocommit = True
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env; its values win over the existing environment."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Excel -> PostgreSQL product importer")
    p.add_argument("file", type=Path, help="Path to the .xlsx workbook to import")
    p.add_argument("--config", type=Path, default=Path("config/import.yml"), help="YAML config path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print headers & first rows then exit")
    return p.parse_args(argv)


def _inspect_data(sheet: SheetData) -> int:
    header_map = build_header_map(sheet.columns)
    print(f"SHEET: {sheet.sheet_name} rows={len(sheet.rows)} cols={sheet.columns}")
    print(f"  column_mapping={header_map}")
    missing = find_missing_fields(header_map)
    print(f"  missing_required={missing if missing else '[]'}")
    # datetime cells are not JSON friendly; isoformat them for display
    for row in sheet.rows[:3]:
        print("  sample_row=", {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in row.items()})
    return EXIT_SUCCESS


def _flush_error_log(error_log: ErrorLogBuffer, logger: Any) -> None:
    try:
        path = error_log.flush()
    except OSError as e:
        logger.warning(f"error log write failed: {e}")
        return
    if path is not None:
        logger.info(f"error log: {path}")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pick up pytest's own argv
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        setup_logging(debug=True)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    file_name = args.file.name
    error_log = ErrorLogBuffer()

    try:
        sheet = read_products_sheet(args.file, sheet_name=cfg.sheet_name, max_file_bytes=cfg.max_file_bytes)
    except SheetError as e:
        logger.error(f"sheet: {e}")
        error_log.append(
            ErrorRecord.create(file=file_name, sheet=cfg.sheet_name, row=-1, error_type="SHEET_ERROR", message=str(e))
        )
        _flush_error_log(error_log, logger)
        return EXIT_FATAL

    logger.info(f"Read {len(sheet.rows)} rows from {file_name} [{sheet.sheet_name}]")

    if args.inspect_data:
        return _inspect_data(sheet)

    start = time.perf_counter()
    report: ImportReport
    try:
        with _db_connection(cfg) as cur:
            report = import_products(
                cur,
                sheet.rows,
                sheet.columns,
                tables=cfg.tables,
                error_log=error_log,
                file_name=file_name,
                sheet_name=sheet.sheet_name,
            )
        exit_code = EXIT_SUCCESS
        logger.info(report.message)
    except ImportFailedError as e:
        report = e.report
        for err in report.errors:
            logger.warning(str(err))
        if report.committed:
            logger.error(f"import: {report.processed_count} products committed, {report.failed_count} rows failed")
        else:
            logger.error("import: no valid products found, nothing committed")
        exit_code = EXIT_IMPORT_FAILED
    except (MissingColumnsError, NoCategoriesError) as e:
        logger.error(f"import: {e}")
        _flush_error_log(error_log, logger)
        return EXIT_FATAL
    except TransactionError as e:
        logger.error(f"transaction: {e}")
        _flush_error_log(error_log, logger)
        return EXIT_FATAL
    except DatabaseConnectError as e:
        logger.error(f"database: {e}")
        return EXIT_FATAL
    except psycopg2.Error as e:
        # connection lost outside a row INSERT (category read, BEGIN)
        logger.error(f"database: {str(e).strip()}")
        _flush_error_log(error_log, logger)
        return EXIT_FATAL

    elapsed = time.perf_counter() - start
    _flush_error_log(error_log, logger)

    summary_line = render_summary_line(report, elapsed)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])
    return exit_code
