from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from typing import Any

from ..models.contact import IDENTITY_FIELDS, CandidateContact, Contact, ContactPage
from .batch_upsert import BatchMetrics, BatchUpsertError, batch_upsert

"""PostgreSQL implementation of ContactRepository (psycopg2).

Every write runs in its own transaction: COMMIT on success, ROLLBACK and
re-raise on failure, so a failed bulk upsert leaves no partial rows behind.
"""

logger = logging.getLogger(__name__)

INSERT_COLUMNS: tuple[str, ...] = (
    "owner_id",
    "name",
    "tax_id",
    "phone",
    "region",
    "contact_person",
    "email",
)
SELECT_COLUMNS = ("id",) + INSERT_COLUMNS

_TABLE_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def _row_to_contact(row: Sequence[Any]) -> Contact:
    data = dict(zip(SELECT_COLUMNS, row))
    data["id"] = str(data["id"])
    data["owner_id"] = str(data["owner_id"])
    return Contact(**data)


class PostgresContactRepository:
    def __init__(
        self,
        connection: Any,
        table: str = "contacts",
        *,
        unique_per_owner: bool = False,
        page_size: int = 1000,
    ) -> None:
        if not _TABLE_NAME.fullmatch(table):
            raise ValueError(f"invalid table name: {table}")
        self.connection = connection
        self.table = table
        self.unique_per_owner = unique_per_owner
        self.page_size = page_size

    @property
    def unique_columns(self) -> tuple[str, ...]:
        if self.unique_per_owner:
            return ("owner_id",) + IDENTITY_FIELDS
        return IDENTITY_FIELDS

    def ensure_schema(self) -> None:
        """Create the contacts table and its unique index if missing."""
        unique_sql = ",".join(self.unique_columns)
        statements = [
            f"""CREATE TABLE IF NOT EXISTS {self.table} (
                id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
                owner_id text NOT NULL,
                name text NOT NULL,
                tax_id varchar(12) NOT NULL,
                phone varchar(16) NOT NULL,
                region text,
                contact_person text,
                email text
            )""",
            f"CREATE UNIQUE INDEX IF NOT EXISTS {self.table}_identity_uq "
            f"ON {self.table} ({unique_sql})",
            f"CREATE INDEX IF NOT EXISTS {self.table}_owner_idx ON {self.table} (owner_id)",
        ]
        self._run_write(lambda cur: [cur.execute(s) for s in statements])

    def _run_write(self, work: Any) -> Any:
        cursor = self.connection.cursor()
        try:
            result = work(cursor)
            self.connection.commit()
            return result
        except Exception:
            self.connection.rollback()
            raise
        finally:
            cursor.close()

    def create(self, candidate: CandidateContact) -> Contact:
        if candidate.owner_id is None:
            raise ValueError("owner_id is required")
        cols_sql = ",".join(INSERT_COLUMNS)
        placeholders = ",".join(["%s"] * len(INSERT_COLUMNS))
        sql = (
            f"INSERT INTO {self.table} ({cols_sql}) VALUES ({placeholders}) "
            f"RETURNING {','.join(SELECT_COLUMNS)}"
        )
        values = tuple(getattr(candidate, c) for c in INSERT_COLUMNS)

        def work(cur: Any) -> Contact:
            cur.execute(sql, values)
            return _row_to_contact(cur.fetchone())

        return self._run_write(work)

    def bulk_upsert(
        self,
        records: Sequence[CandidateContact],
        conflict_fields: Sequence[str],
        update_fields: Sequence[str],
    ) -> None:
        if any(r.owner_id is None for r in records):
            raise BatchUpsertError("owner_id is required for every record")
        rows = [tuple(getattr(r, c) for c in INSERT_COLUMNS) for r in records]

        def on_metrics(metrics: BatchMetrics) -> None:
            logger.debug(
                f"upsert table={self.table} rows={metrics.batch_size} "
                f"elapsed={metrics.elapsed_seconds:.3f}s"
            )

        self._run_write(
            lambda cur: batch_upsert(
                cur,
                self.table,
                INSERT_COLUMNS,
                rows,
                conflict_columns=conflict_fields,
                update_columns=update_fields,
                page_size=self.page_size,
                metrics_callback=on_metrics,
            )
        )

    def find_by_id(self, contact_id: str, owner_id: str) -> Contact | None:
        sql = (
            f"SELECT {','.join(SELECT_COLUMNS)} FROM {self.table} "
            "WHERE id::text = %s AND owner_id = %s"
        )
        cursor = self.connection.cursor()
        try:
            cursor.execute(sql, (contact_id, owner_id))
            row = cursor.fetchone()
        finally:
            cursor.close()
        return _row_to_contact(row) if row is not None else None

    def _where(self, owner_id: str, search: str | None) -> tuple[str, list[Any]]:
        clause = "owner_id = %s"
        params: list[Any] = [owner_id]
        if search:
            clause += (
                " AND (name ILIKE %s OR tax_id ILIKE %s OR phone ILIKE %s"
                " OR contact_person ILIKE %s)"
            )
            params.extend([f"%{search}%"] * 4)
        return clause, params

    def paginate(
        self, owner_id: str, page: int, limit: int, search: str | None = None
    ) -> ContactPage:
        where, params = self._where(owner_id, search)
        cursor = self.connection.cursor()
        try:
            cursor.execute(f"SELECT count(*) FROM {self.table} WHERE {where}", params)
            total = cursor.fetchone()[0]
            cursor.execute(
                f"SELECT {','.join(SELECT_COLUMNS)} FROM {self.table} WHERE {where} "
                "ORDER BY name, id LIMIT %s OFFSET %s",
                [*params, limit, (page - 1) * limit],
            )
            items = [_row_to_contact(r) for r in cursor.fetchall()]
        finally:
            cursor.close()
        return ContactPage(items=items, total=total, page=page, limit=limit)

    def count(self, owner_id: str | None = None) -> int:
        cursor = self.connection.cursor()
        try:
            if owner_id is None:
                cursor.execute(f"SELECT count(*) FROM {self.table}")
            else:
                cursor.execute(f"SELECT count(*) FROM {self.table} WHERE owner_id = %s", (owner_id,))
            return cursor.fetchone()[0]
        finally:
            cursor.close()
