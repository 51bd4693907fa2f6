from __future__ import annotations

from collections.abc import Iterable, Mapping

"""Header normalization for uploaded product sheets.

Operators type headers by hand, so " Product_Name", "PRICE " and "price" must
all land on the same field. Normalization is trim + lowercase and nothing
else (no punctuation stripping, no synonyms).
"""

__all__ = [
    "REQUIRED_FIELDS",
    "MissingColumnsError",
    "normalize_header",
    "build_header_map",
    "find_missing_fields",
    "require_fields",
]

REQUIRED_FIELDS: tuple[str, ...] = ("product_name", "category_name", "price", "stock")


class MissingColumnsError(Exception):
    """Raised when the sheet header lacks one or more required fields."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"Missing required columns: {', '.join(self.missing)}. "
            "Please ensure your Excel has these exact columns (spaces are trimmed)."
        )


def normalize_header(header: object) -> str:
    return str(header).strip().lower()


def build_header_map(headers: Iterable[str]) -> dict[str, str]:
    """Map normalized field key -> header exactly as written in the sheet.

    When two headers normalize to the same key the first column wins.
    """
    header_map: dict[str, str] = {}
    for raw in headers:
        key = normalize_header(raw)
        if key not in header_map:
            header_map[key] = raw
    return header_map


def find_missing_fields(
    header_map: Mapping[str, str], required: Iterable[str] = REQUIRED_FIELDS
) -> list[str]:
    return [field for field in required if field not in header_map]


def require_fields(header_map: Mapping[str, str], required: Iterable[str] = REQUIRED_FIELDS) -> None:
    missing = find_missing_fields(header_map, required)
    if missing:
        raise MissingColumnsError(missing)
