from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .records import RowError

"""ImportReport: terminal artifact of one product import.

The report is built once by the import service and never mutated. The outer
layer (CLI today, possibly an HTTP handler) renders it via to_dict().
"""

__all__ = [
    "ImportReport",
]


@dataclass(frozen=True)
class ImportReport:
    """Outcome of a single import.

    `success` is True only when every row was inserted. `committed` tells a
    partially committed import (success=False, committed=True) apart from one
    where nothing was written (success=False, committed=False).
    """
    success: bool
    processed_count: int  # rows actually inserted
    errors: tuple[RowError, ...] = ()
    message: str = ""
    committed: bool = False
    total_rows: int = 0  # data rows handed to the import

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict for JSON rendering by the outer layer."""
        return {
            "success": self.success,
            "processed": self.processed_count,
            "errors": [
                {"row_number": err.row_number, "message": err.message}
                for err in self.errors
            ],
            "message": self.message,
        }
