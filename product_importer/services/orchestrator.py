from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from ..config.loader import TableNames
from ..db.products import ProductInsertError, insert_product
from ..db.transaction import Transaction, transaction
from ..excel.headers import MissingColumnsError, build_header_map, require_fields
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.import_report import ImportReport
from ..models.records import RowError, ValidatedRecord
from .categories import CategoryResolver, NoCategoriesError
from .extraction import extract_record
from .progress import ProgressTracker
from .validation import display_row_number, validate_row

logger = logging.getLogger(__name__)

"""Import service: turns header-labelled rows into committed products.

One call = one import = one transaction:

1. header map + required column check (fatal, nothing inserted)
2. BEGIN
3. category snapshot (fatal if empty)
4. extract + validate every row in order -> validated records / row errors
5. INSERT each validated record in its own savepoint; a failed INSERT becomes
   a row error and the batch continues
6. decide: all failed -> ROLLBACK; some failed -> COMMIT the good rows but
   still report failure; none failed -> COMMIT and report success

Step 6 keeps the partial-commit policy: ImportFailedError is raised even when
rows were committed. Check `error.report.committed` before retrying, or the
committed rows are inserted twice.
"""

__all__ = [
    "ProcessingError",
    "ImportFailedError",
    "import_products",
]


class ProcessingError(Exception):
    """Base exception for batch-level import failures."""
    pass


class ImportFailedError(ProcessingError):
    """At least one row failed. `report.committed` says whether good rows were kept."""

    def __init__(self, report: ImportReport) -> None:
        self.report = report
        super().__init__(report.message)


def _join_errors(errors: Sequence[RowError]) -> str:
    return "; ".join(str(err) for err in errors)


def _record_fatal(
    error_log: ErrorLogBuffer | None, file_name: str, sheet_name: str, error_type: str, message: str
) -> None:
    if error_log is not None:
        error_log.append(
            ErrorRecord.create(file=file_name, sheet=sheet_name, row=-1, error_type=error_type, message=message)
        )


def import_products(
    cursor: Any,
    rows: Sequence[Mapping[str, Any]],
    headers: Sequence[str],
    *,
    tables: TableNames | None = None,
    error_log: ErrorLogBuffer | None = None,
    file_name: str = "<memory>",
    sheet_name: str = "Products",
) -> ImportReport:
    """Validate and insert product rows under a single transaction.

    Args:
        cursor: DB-API cursor on an autocommit connection (transaction
            boundaries are issued explicitly)
        rows: data rows in sheet order, header as written -> cell value
        headers: raw header cells in column order
        tables: target table names
        error_log: buffer receiving one ErrorRecord per row / fatal error
        file_name: source file label for the error log
        sheet_name: source sheet label for the error log

    Returns:
        Success report (every row inserted and committed)

    Raises:
        MissingColumnsError: a required field is absent from the header
        NoCategoriesError: category table is empty
        TransactionError: BEGIN / COMMIT / ROLLBACK / SAVEPOINT failed
        ImportFailedError: one or more row errors; see `report.committed`
    """
    tables = tables or TableNames()

    header_map = build_header_map(headers)
    logger.debug("column mapping: %s", header_map)
    try:
        require_fields(header_map)
    except MissingColumnsError as e:
        _record_fatal(error_log, file_name, sheet_name, "MISSING_COLUMNS", str(e))
        raise

    with transaction(cursor) as tx:
        try:
            resolver = CategoryResolver.load(cursor, table=tables.category)
        except NoCategoriesError as e:
            _record_fatal(error_log, file_name, sheet_name, "NO_CATEGORIES", str(e))
            raise

        validated, errors = _validate_rows(rows, header_map, resolver)
        inserted = _insert_rows(tx, cursor, validated, errors, tables.products)

        logger.info("Processing complete. Processed: %d, Errors: %d", inserted, len(errors))

        if errors and inserted == 0:
            tx.rollback()
            report = ImportReport(
                success=False,
                processed_count=0,
                errors=tuple(errors),
                message=f"No valid products found. Errors: {_join_errors(errors)}",
                committed=False,
                total_rows=len(rows),
            )
        elif errors:
            tx.commit()
            report = ImportReport(
                success=False,
                processed_count=inserted,
                errors=tuple(errors),
                message=f"Uploaded {inserted} products with {len(errors)} errors: {_join_errors(errors)}",
                committed=True,
                total_rows=len(rows),
            )
        else:
            tx.commit()
            report = ImportReport(
                success=True,
                processed_count=inserted,
                message=f"Successfully uploaded {inserted} products",
                committed=True,
                total_rows=len(rows),
            )

    if error_log is not None:
        error_log.extend(ErrorRecord.from_row_error(file_name, sheet_name, err) for err in report.errors)

    if not report.success:
        if report.committed:
            logger.warning("partial import committed: %d inserted, %d failed", inserted, len(errors))
        else:
            logger.warning("import rolled back: all %d rows failed", len(errors))
        raise ImportFailedError(report)
    return report


def _validate_rows(
    rows: Sequence[Mapping[str, Any]],
    header_map: Mapping[str, str],
    resolver: CategoryResolver,
) -> tuple[list[ValidatedRecord], list[RowError]]:
    """Extract + validate in sheet order; exactly one outcome per row."""
    validated: list[ValidatedRecord] = []
    errors: list[RowError] = []
    with ProgressTracker(len(rows), description="Validating rows") as progress:
        for index, row in enumerate(rows):
            row_number = display_row_number(index)
            record = extract_record(row, header_map)
            logger.debug(
                "row %d: name=%s category=%s price=%s stock=%s",
                row_number,
                record.product_name,
                record.category_name,
                record.price,
                record.stock,
            )
            outcome = validate_row(record, row_number, resolver)
            if isinstance(outcome, RowError):
                errors.append(outcome)
            else:
                validated.append(outcome)
            progress.advance()
    return validated, errors


def _insert_rows(
    tx: Transaction,
    cursor: Any,
    records: Sequence[ValidatedRecord],
    errors: list[RowError],
    table: str,
) -> int:
    """INSERT validated records one by one; failures are appended to `errors`."""
    inserted = 0
    with ProgressTracker(len(records), description="Inserting products") as progress:
        for record in records:
            try:
                with tx.savepoint():
                    insert_product(cursor, record, table=table)
            except ProductInsertError as e:
                logger.warning("row %d: database error: %s", record.row_number, e)
                errors.append(RowError(record.row_number, f"Database error: {e}", "DATABASE_INSERT_ERROR"))
            else:
                inserted += 1
            progress.advance()
            progress.set_postfix(inserted=inserted, failed=len(errors))
    return inserted
