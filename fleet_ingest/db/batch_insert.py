from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

"""DB batch insert via psycopg2.extras.execute_values.

The caller owns the connection and the transaction boundary; this module only
builds the INSERT and wraps driver failures in BatchInsertError.
"""

try:  # pragma: no cover - optional until psycopg2 present at runtime
    from psycopg2.extras import execute_values
except ImportError:  # pragma: no cover
    execute_values = None  # type: ignore

__all__ = [
    "BatchInsertError",
    "BatchMetrics",
    "InsertResult",
    "batch_insert",
]


class BatchInsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing for one batch_insert call (all pages)."""
    table: str
    batch_size: int
    elapsed_seconds: float


@dataclass(frozen=True)
class InsertResult:
    inserted_rows: int
    returned_values: list[tuple[Any, ...]] | None = None


def _insert_sql(table: str, columns: Sequence[str], returning: str | None) -> str:
    cols_sql = ",".join(f'"{c}"' for c in columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s"
    if returning:
        sql += f' RETURNING "{returning}"'
    return sql


def batch_insert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    returning: str | None = None,
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> InsertResult:
    """Insert ``rows`` into ``table`` in pages of ``page_size``.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: 対象テーブル名 (呼び出し側で固定値を渡す)
    columns: 挿入列
    rows: 行シーケンス (columns と同順)
    returning: RETURNING 句に使う列名 (例: "id")。None なら付与しない
    page_size: execute_values の page_size
    metrics_callback: receives BatchMetrics once the insert finished (also on
        failure). Not invoked for an empty ``rows``.
    """
    if execute_values is None:
        raise BatchInsertError("psycopg2 not available")

    rows_list = list(rows)
    if not rows_list:
        return InsertResult(inserted_rows=0, returned_values=[] if returning else None)

    sql = _insert_sql(table, columns, returning)
    started = time.perf_counter()
    try:
        # fetch=True だと全ページ分の RETURNING 行を集めて返す
        returned = execute_values(cursor, sql, rows_list, page_size=page_size, fetch=bool(returning))
    except Exception as e:
        raise BatchInsertError(f"insert into {table} failed: {e}") from e
    finally:
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    table=table,
                    batch_size=len(rows_list),
                    elapsed_seconds=time.perf_counter() - started,
                )
            )

    if not returning:
        return InsertResult(inserted_rows=len(rows_list))
    return InsertResult(inserted_rows=len(rows_list), returned_values=list(returned or []))
