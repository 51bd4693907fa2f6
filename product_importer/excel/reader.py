from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

"""Excel reader for product uploads.

Responsibilities (everything before the import core runs):
- accept only .xlsx files under the configured size limit
- locate the sheet named exactly as configured ("Products", case-sensitive)
- use the first row as header, data rows from the second row on
- turn every data row into {header as written: cell value}, NaN -> None
"""

__all__ = [
    "DEFAULT_SHEET_NAME",
    "DEFAULT_MAX_FILE_BYTES",
    "SheetError",
    "SheetData",
    "read_products_sheet",
    "normalize_sheet",
]

DEFAULT_SHEET_NAME = "Products"
DEFAULT_MAX_FILE_BYTES = 5 * 1024 * 1024


class SheetError(Exception):
    """Raised when the file or the products sheet cannot be used at all."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]  # header cells as written (untrimmed)
    rows: list[dict[str, Any]]


def read_products_sheet(
    path: Path,
    sheet_name: str = DEFAULT_SHEET_NAME,
    max_file_bytes: int | None = DEFAULT_MAX_FILE_BYTES,
) -> SheetData:
    """Read the products sheet of an uploaded workbook.

    Raises:
        SheetError: wrong extension, missing/oversized file, unreadable
            workbook, missing sheet, or a sheet without data rows.
    """
    if path.suffix.lower() != ".xlsx":
        raise SheetError("Only .xlsx files are allowed!")
    if not path.is_file():
        raise SheetError(f"file not found: {path}")
    size = path.stat().st_size
    if max_file_bytes is not None and size > max_file_bytes:
        raise SheetError(f"file too large: {size} bytes (limit {max_file_bytes} bytes)")

    try:
        with pd.ExcelFile(path, engine="openpyxl") as xls:
            sheet_names = [str(name) for name in xls.sheet_names]
            if sheet_name not in sheet_names:
                raise SheetError(
                    f'Excel file must contain a sheet named exactly "{sheet_name}" (case-sensitive)'
                )
            # header=None: the header row is split off in normalize_sheet
            df = xls.parse(sheet_name, header=None)
    except SheetError:
        raise
    except Exception as e:
        raise SheetError(f"Error processing Excel file: {e}") from e

    return normalize_sheet(df, sheet_name)


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Split a raw (header=None) DataFrame into header and data rows.

    Steps:
    1. Validate the sheet has a header row
    2. Header = first row; blank header cells drop their column, repeated
       header text gets a numeric suffix so the first column keeps the name
    3. Skip rows where every cell is empty
    4. Validate at least one data row remains
    """
    if df.shape[0] < 1:
        raise SheetError(f"{sheet_name} sheet is empty or has invalid structure")

    header_cells = df.iloc[0].tolist()
    kept: list[tuple[int, str]] = []
    seen: dict[str, int] = {}
    for idx, cell in enumerate(header_cells):
        if pd.isna(cell):
            continue
        name = str(cell)
        # repeated header text: later columns become name_1, name_2, ...
        if name in seen:
            n = seen[name]
            while f"{name}_{n}" in seen:
                n += 1
            seen[name] = n + 1
            name = f"{name}_{n}"
        seen[name] = 1
        kept.append((idx, name))
    if not kept:
        raise SheetError(f"{sheet_name} sheet is empty or has invalid structure")
    columns = [name for _, name in kept]

    rows: list[dict[str, Any]] = []
    for _, raw in df.iloc[1:].iterrows():
        values = raw.tolist()
        if all(pd.isna(v) for v in values):
            continue
        row_dict: dict[str, Any] = {}
        for idx, col in kept:
            val = values[idx]
            row_dict[col] = None if pd.isna(val) else val
        rows.append(row_dict)

    if not rows:
        raise SheetError(f"No data found in {sheet_name} sheet")

    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)
