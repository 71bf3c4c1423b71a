from __future__ import annotations

import psycopg
import pytest

from fakes import FakeConnection, make_metadata
from insert_writer.db.sql_types import SqlType
from insert_writer.errors import WriteDataError
from insert_writer.records.coercion import record_of
from insert_writer.writer.collectors import MemoryCollector
from insert_writer.writer.executor import DATA_MISMATCH_REASON, BatchExecutor
from insert_writer.writer.statements import InsertStatementBuilder


@pytest.fixture()
def collector() -> MemoryCollector:
    return MemoryCollector()


@pytest.fixture()
def executor(people_metadata, collector: MemoryCollector) -> BatchExecutor:
    builder = InsertStatementBuilder.for_table("people", ["id", "name"], people_metadata)
    return BatchExecutor(builder, collector)


def test_batch_commits_all_rows_in_one_transaction(executor: BatchExecutor, fake_conn: FakeConnection) -> None:
    res = executor.execute_batch(fake_conn, [record_of([1, "a"]), record_of([2, "b"])])

    assert (res.written, res.dirty, res.fell_back) == (2, 0, False)
    assert fake_conn.commits == 1
    assert fake_conn.rollbacks == 0
    # one execute, autocommit off, both statements in it
    assert len(fake_conn.executions) == 1
    autocommit, sql = fake_conn.executions[0]
    assert autocommit is False
    assert sql.count("insert into people") == 2
    assert len(fake_conn.committed) == 2


def test_batch_failure_rolls_back_and_replays_every_row(executor: BatchExecutor, collector: MemoryCollector) -> None:
    """One bad row: nothing from the batch survives the rollback, every row is retried once."""
    conn = FakeConnection(fail_when=("'bad'",))
    records = [record_of([1, "a"]), record_of([2, "bad"]), record_of([3, "c"])]

    res = executor.execute_batch(conn, records)

    assert res.fell_back is True
    assert (res.written, res.dirty) == (2, 1)
    assert res.written + res.dirty == len(records)      # no record skipped or double counted
    assert conn.rollbacks == 1
    assert conn.committed == [
        "insert into people(id,name) values(1,'a')",
        "insert into people(id,name) values(3,'c')",
    ]
    assert [d.record for d in collector.records] == [records[1]]
    assert isinstance(collector.records[0].reason, psycopg.Error)
    # replay happened under autocommit, one statement per row
    assert [a for a, _ in conn.executions[1:]] == [True, True, True]


def test_conversion_error_while_building_batch_falls_back(collector: MemoryCollector) -> None:
    """A value that cannot be rendered aborts the batch attempt, then only that row goes dirty."""
    meta = make_metadata(("id", SqlType.INTEGER), ("born_on", SqlType.DATE))
    ex = BatchExecutor(InsertStatementBuilder.for_table("people", ["id", "born_on"], meta), collector)
    conn = FakeConnection()

    res = ex.execute_batch(conn, [record_of([1, "2020-01-01"]), record_of([2, "soon"])])

    assert res.fell_back is True
    assert (res.written, res.dirty) == (1, 1)
    assert conn.rollbacks == 1
    assert collector.records[0].record.get_column(1).raw == "soon"


def test_row_by_row_zero_rowcount_is_dirty_once(executor: BatchExecutor, collector: MemoryCollector) -> None:
    conn = FakeConnection(zero_rows_when=("'ghost'",))

    res = executor.execute_row_by_row(conn, [record_of([1, "ghost"]), record_of([2, "b"])])

    assert (res.written, res.dirty) == (1, 1)
    assert len(collector.records) == 1
    assert collector.records[0].reason == DATA_MISMATCH_REASON
    assert "data mismatch" in collector.records[0].reason_detail


def test_row_by_row_keeps_going_after_failures(executor: BatchExecutor, collector: MemoryCollector) -> None:
    conn = FakeConnection(fail_when=("'x'",))
    records = [record_of([i, "x" if i % 2 else "ok"]) for i in range(6)]

    res = executor.execute_row_by_row(conn, records)

    assert (res.written, res.dirty) == (3, 3)
    assert conn.autocommit is True
    assert conn.commits == 0


def test_empty_batch_touches_nothing(executor: BatchExecutor, fake_conn: FakeConnection) -> None:
    res = executor.execute_batch(fake_conn, [])
    assert (res.written, res.dirty) == (0, 0)
    assert fake_conn.executions == []


def test_failed_rollback_is_fatal(executor: BatchExecutor) -> None:
    conn = FakeConnection(fail_when=("'a'",))
    conn.fail_rollback = True
    with pytest.raises(WriteDataError):
        executor.execute_batch(conn, [record_of([1, "a"])])


def test_unexpected_error_is_fatal(people_metadata) -> None:
    """Collector blowing up is not a row problem: it ends the flush as a `WriteDataError`."""

    class BrokenCollector:
        def collect(self, record, reason) -> None:
            raise RuntimeError("disk full")

    ex = BatchExecutor(InsertStatementBuilder.for_table("people", ["id", "name"], people_metadata), BrokenCollector())
    conn = FakeConnection(fail_when=("'a'",))
    with pytest.raises(WriteDataError) as e:
        ex.execute_row_by_row(conn, [record_of([1, "a"])])
    assert isinstance(e.value.__cause__, RuntimeError)


def test_commit_failure_after_execute_falls_back(executor: BatchExecutor, collector: MemoryCollector) -> None:
    """Every statement ran but the commit was refused: roll back, then each row commits on its own."""
    conn = FakeConnection()
    conn.fail_commit = True
    records = [record_of([1, "a"]), record_of([2, "b"])]

    res = executor.execute_batch(conn, records)

    assert res.fell_back is True
    assert (res.written, res.dirty) == (2, 0)
    assert conn.rollbacks == 1
    assert conn.commits == 0
    assert conn.committed == [
        "insert into people(id,name) values(1,'a')",
        "insert into people(id,name) values(2,'b')",
    ]
    assert collector.records == []
