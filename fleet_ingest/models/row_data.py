from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model for the ingest pipeline.

RowData represents a single non-blank data row after sheet normalization.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single row after normalization.

    row_index is the position of the row in the grid with the header row
    excluded, so the first data row is 1. Blank rows that were dropped still
    consume an index.
    """
    row_index: int
    values: dict[str, Any]  # header -> value (空セルは含まない)

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.values
