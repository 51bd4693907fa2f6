from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .records import RowError

"""ErrorRecord model for the JSON Lines error log.

Every row error of an import, plus sheet-level failures (row=-1), is written
as one ErrorRecord. The record shape is pinned by
product_importer/config/error_log_schema.json; no extra keys are allowed.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Excel filename being imported
        sheet: Sheet name within the file
        row: Display row number. -1 for sheet-level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Validation or database message
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int  # -1 when not attributable to a row
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_row_error(file: str, sheet: str, error: RowError) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            sheet=sheet,
            row=error.row_number,
            error_type=error.error_type,
            message=error.message,
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no extra keys)."""
        return json.dumps(asdict(self), ensure_ascii=False)
