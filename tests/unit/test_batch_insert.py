from __future__ import annotations

import pytest

from herd_import.db.batch_insert import BatchInsertError, InsertResult, batch_insert


class DummyCursor:
    def __init__(self) -> None:
        self.queries: list[str] = []
        self.rows: list[list] = []
        self.page_size: int | None = None

# We monkeypatch execute_values symbol inside module to avoid needing
# a live database for logic test

@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import herd_import.db.batch_insert as bi
    def fake_execute_values(cursor, sql, rows, page_size=1000):  # noqa: D401
        cursor.queries.append(sql)
        cursor.rows.extend(rows)
        cursor.page_size = page_size
    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return fake_execute_values


def test_batch_insert_basic():
    cur = DummyCursor()
    res = batch_insert(
        cur, table="animals", columns=["id", "tag_number"], rows=[("1", "A1"), ("2", "A2")]
    )
    assert isinstance(res, InsertResult)
    assert res.inserted_rows == 2
    assert cur.queries == ['INSERT INTO "animals" ("id","tag_number") VALUES %s']
    assert cur.rows == [("1", "A1"), ("2", "A2")]


def test_batch_insert_page_size_passed_through():
    cur = DummyCursor()
    batch_insert(cur, table="fields", columns=["id"], rows=[("1",)], page_size=250)
    assert cur.page_size == 250


def test_batch_insert_empty_rows():
    cur = DummyCursor()
    res = batch_insert(cur, table="animals", columns=["id"], rows=[])
    assert res.inserted_rows == 0
    assert cur.queries == []


def test_batch_insert_accepts_generator():
    cur = DummyCursor()
    res = batch_insert(cur, table="events", columns=["id"], rows=((str(i),) for i in range(3)))
    assert res.inserted_rows == 3


def test_batch_insert_wraps_driver_error(monkeypatch):
    import herd_import.db.batch_insert as bi
    def boom(cursor, sql, rows, page_size=1000):
        raise RuntimeError('duplicate key value violates unique constraint "animals_tag_number_key"')
    monkeypatch.setattr(bi, "execute_values", boom)
    with pytest.raises(BatchInsertError, match="animals_tag_number_key"):
        batch_insert(DummyCursor(), table="animals", columns=["id"], rows=[("1",)])


def test_batch_insert_with_metrics_callback():
    cur = DummyCursor()
    captured_metrics = []

    res = batch_insert(
        cur,
        table="animals",
        columns=["id", "tag_number"],
        rows=[("1", "A1"), ("2", "A2")],
        metrics_callback=captured_metrics.append,
    )

    assert res.inserted_rows == 2
    assert len(captured_metrics) == 1
    metrics = captured_metrics[0]
    assert metrics.batch_size == 2
    assert metrics.elapsed_seconds >= 0
    assert metrics.end_time >= metrics.start_time
    assert metrics.elapsed_seconds == metrics.end_time - metrics.start_time


def test_metrics_callback_runs_on_failure(monkeypatch):
    import herd_import.db.batch_insert as bi
    def boom(cursor, sql, rows, page_size=1000):
        raise RuntimeError("fail")
    monkeypatch.setattr(bi, "execute_values", boom)
    captured_metrics = []
    with pytest.raises(BatchInsertError):
        batch_insert(DummyCursor(), table="t", columns=["c"], rows=[(1,)], metrics_callback=captured_metrics.append)
    assert len(captured_metrics) == 1


def test_batch_insert_empty_rows_with_metrics():
    captured_metrics = []
    batch_insert(DummyCursor(), table="animals", columns=["id"], rows=[], metrics_callback=captured_metrics.append)
    # No metrics should be captured for empty rows (no execute_values call)
    assert captured_metrics == []
