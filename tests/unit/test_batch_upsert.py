from __future__ import annotations

import pytest

from contact_import.db.batch_upsert import (
    BatchUpsertError,
    UpsertResult,
    batch_upsert,
    build_upsert_sql,
)

COLUMNS = ["owner_id", "name", "tax_id", "phone", "region", "contact_person", "email"]
CONFLICT = ["name", "tax_id", "phone"]
UPDATE = ["region", "contact_person", "email"]


class DummyCursor:
    def __init__(self) -> None:
        self.queries: list[str] = []
        self.rows: list = []
        self.page_size: int | None = None


# execute_values is patched inside the module so no real psycopg2 connection is needed
@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import contact_import.db.batch_upsert as bu

    def fake_execute_values(cursor, sql, rows, page_size=1000, template=None):
        cursor.queries.append(sql)
        cursor.rows.extend(rows)
        cursor.page_size = page_size

    monkeypatch.setattr(bu, "execute_values", fake_execute_values)
    return fake_execute_values


def test_build_upsert_sql():
    sql = build_upsert_sql("contacts", COLUMNS, CONFLICT, UPDATE)
    assert sql.startswith('INSERT INTO contacts ("owner_id","name","tax_id","phone"')
    assert "VALUES %s" in sql
    assert 'ON CONFLICT ("name","tax_id","phone")' in sql
    assert (
        'DO UPDATE SET "region" = EXCLUDED."region","contact_person" = EXCLUDED."contact_person",'
        '"email" = EXCLUDED."email"'
    ) in sql
    assert '"owner_id" = EXCLUDED' not in sql


def test_build_upsert_sql_without_update_columns_does_nothing():
    sql = build_upsert_sql("contacts", COLUMNS, CONFLICT, [])
    assert sql.endswith("DO NOTHING")


def test_build_upsert_sql_rejects_unknown_columns():
    with pytest.raises(BatchUpsertError):
        build_upsert_sql("contacts", ["name"], ["name", "inn"], [])
    with pytest.raises(BatchUpsertError):
        build_upsert_sql("contacts", ["name"], [], [])


def test_batch_upsert_basic():
    cur = DummyCursor()
    rows = [("u1", "Acme", "7701020304", "+79991234567", None, None, None)]
    res = batch_upsert(cur, "contacts", COLUMNS, rows, CONFLICT, UPDATE, page_size=500)
    assert res == UpsertResult(written_rows=1)
    assert len(cur.queries) == 1
    assert cur.rows == rows
    assert cur.page_size == 500


def test_batch_upsert_empty_rows_is_noop():
    cur = DummyCursor()
    captured = []
    res = batch_upsert(cur, "contacts", COLUMNS, [], CONFLICT, UPDATE, metrics_callback=captured.append)
    assert res.written_rows == 0
    assert cur.queries == []
    assert captured == []


def test_batch_upsert_metrics_callback():
    cur = DummyCursor()
    captured = []
    rows = [("u1", "A", "7701020304", "+79991234567", None, None, None)] * 2
    batch_upsert(cur, "contacts", COLUMNS, rows, CONFLICT, UPDATE, metrics_callback=captured.append)
    assert len(captured) == 1
    metrics = captured[0]
    assert metrics.batch_size == 2
    assert metrics.elapsed_seconds >= 0
    assert metrics.end_time >= metrics.start_time


def test_batch_upsert_wraps_driver_errors(monkeypatch):
    import contact_import.db.batch_upsert as bu

    def failing(cursor, sql, rows, page_size=1000, template=None):
        raise RuntimeError("value too long for type character varying(12)")

    monkeypatch.setattr(bu, "execute_values", failing)
    captured = []
    with pytest.raises(BatchUpsertError, match="value too long"):
        batch_upsert(
            DummyCursor(),
            "contacts",
            COLUMNS,
            [("u1", "A", "7701020304", "+79991234567", None, None, None)],
            CONFLICT,
            UPDATE,
            metrics_callback=captured.append,
        )
    # timing is still reported for the failed call
    assert len(captured) == 1
