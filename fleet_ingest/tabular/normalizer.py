from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pandas as pd

from ..models.row_data import RowData
from .reader import RawGrid

"""Sheet normalizer: RawGrid -> (HeaderSet, RowData list).

1行目をヘッダ行 (小文字化・trim) として扱い、2行目以降をデータ行とする。
完全に空の行は警告なしでスキップする。
"""

__all__ = [
    "SheetData",
    "is_empty_cell",
    "normalize_header",
    "normalize_grid",
]


@dataclass(frozen=True)
class SheetData:
    headers: tuple[str, ...]
    rows: list[RowData]  # 正規化済 (ヘッダ→値)


def is_empty_cell(value: Any) -> bool:
    """True for None, NaN/NaT and strings that are empty after trimming."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def normalize_header(value: Any) -> str:
    if is_empty_cell(value):
        return ""
    return str(value).strip().lower()


def normalize_grid(grid: RawGrid) -> SheetData:
    """Normalize a raw grid using the first row as header.

    Steps:
    1. An empty grid yields no headers and no rows
    2. Header from the first row (trimmed, lower-cased)
    3. Each later row becomes header -> value, skipping empty cells and
       columns whose header is blank
    4. Rows left with no values are dropped (row_index still advances)
    """
    if not grid:
        return SheetData(headers=(), rows=[])
    headers = tuple(normalize_header(c) for c in grid[0])
    rows: list[RowData] = []
    for row_index, raw in enumerate(grid[1:], start=1):
        values: dict[str, Any] = {}
        for header, cell in zip(headers, raw):
            if not header or is_empty_cell(cell):
                continue
            values[header] = cell.strip() if isinstance(cell, str) else cell
        if not values:
            continue
        rows.append(RowData(row_index=row_index, values=values))
    return SheetData(headers=headers, rows=rows)
