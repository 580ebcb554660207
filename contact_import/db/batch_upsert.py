from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

"""DB batch upsert.

psycopg2.extras.execute_values で INSERT ... ON CONFLICT DO UPDATE を一括実行。
Transaction boundaries belong to the caller (repository); this module only
builds and runs the statement and wraps driver errors in BatchUpsertError.
"""

__all__ = [
    "BatchMetrics",
    "BatchUpsertError",
    "UpsertResult",
    "batch_upsert",
    "build_upsert_sql",
]


class BatchUpsertError(Exception):
    pass


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of one batch upsert call."""
    batch_size: int
    elapsed_seconds: float
    start_time: float
    end_time: float


@dataclass(frozen=True)
class UpsertResult:
    written_rows: int


def _quote(column: str) -> str:
    return f'"{column}"'


def build_upsert_sql(
    table: str,
    columns: Sequence[str],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
) -> str:
    """Build the execute_values statement (single ``VALUES %s`` placeholder)."""
    if not conflict_columns:
        raise BatchUpsertError("conflict columns must not be empty")
    unknown = [c for c in (*conflict_columns, *update_columns) if c not in columns]
    if unknown:
        raise BatchUpsertError(f"columns not in insert list: {unknown}")

    cols_sql = ",".join(_quote(c) for c in columns)
    conflict_sql = ",".join(_quote(c) for c in conflict_columns)
    sql = f"INSERT INTO {table} ({cols_sql}) VALUES %s ON CONFLICT ({conflict_sql})"
    if update_columns:
        assignments = ",".join(f"{_quote(c)} = EXCLUDED.{_quote(c)}" for c in update_columns)
        sql += f" DO UPDATE SET {assignments}"
    else:
        sql += " DO NOTHING"
    return sql


def batch_upsert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    conflict_columns: Sequence[str],
    update_columns: Sequence[str],
    page_size: int = 1000,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> UpsertResult:
    """Insert rows, updating ``update_columns`` when ``conflict_columns`` collide.

    Parameters
    ----------
    cursor: psycopg2 cursor (inside a caller-managed transaction)
    table: 対象テーブル名 (サニタイズ済み想定)
    columns: 挿入列
    rows: 行シーケンス (columns と同順)
    conflict_columns: ON CONFLICT 対象 (一意インデックスと一致させる)
    update_columns: 競合時に EXCLUDED から上書きする列
    page_size: execute_values の page_size
    metrics_callback: receives BatchMetrics; not invoked for empty input
    """
    rows_list = list(rows)
    if not rows_list:
        return UpsertResult(written_rows=0)

    sql = build_upsert_sql(table, columns, conflict_columns, update_columns)

    start_time = time.time()
    try:
        execute_values(cursor, sql, rows_list, page_size=page_size)
    except Exception as e:
        raise BatchUpsertError(str(e)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    return UpsertResult(written_rows=len(rows_list))
