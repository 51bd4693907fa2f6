"""Domain models for the Excel -> PostgreSQL product importer."""

from .error_record import ErrorRecord
from .import_report import ImportReport
from .records import Category, ExtractedRecord, RowError, RowOutcome, ValidatedRecord

__all__ = [
    # Row pipeline
    "Category",
    "ExtractedRecord",
    "ValidatedRecord",
    "RowError",
    "RowOutcome",
    # Results
    "ImportReport",
    "ErrorRecord",
]
