from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import psycopg

from insert_writer.errors import ConversionError, UnsupportedTypeError, WriteDataError, WriterError
from insert_writer.records.types import DirtyRecord, InsertedRow, Record

from .collectors import DirtyRecordCollector
from .statements import InsertStatementBuilder

logger = logging.getLogger(__name__)

DATA_MISMATCH_REASON = "data mismatch: insert affected no rows, check that the field types match the columns"

# Row-level problems: recovered by falling back (batch) or by reporting the row dirty (row-by-row).
# Anything else is fatal.
_ROW_ERRORS = (psycopg.Error, ConversionError, UnsupportedTypeError)


@dataclass
class FlushResult:
    """What one flush of the write buffer did."""
    written: int = 0
    dirty: int = 0
    fell_back: bool = False     # batch commit failed and the rows were replayed one by one


class BatchExecutor:
    """
    Commits buffered records to the destination.

    `execute_batch` sends the whole buffer as one transaction; if anything in it fails the
    transaction is rolled back and the same records go through `execute_row_by_row`, where
    each row succeeds or is reported dirty on its own.
    """

    def __init__(self, builder: InsertStatementBuilder, collector: DirtyRecordCollector) -> None:
        self.builder = builder
        self.collector = collector

    def execute_batch(self, conn: Any, records: Sequence[Record]) -> FlushResult:
        """
        All-or-nothing commit of `records`, downgrading to row-by-row on any row-level error.
        Raises `WriteDataError` on anything unexpected, or if the rollback itself fails.
        """
        if not records:
            return FlushResult()

        try:
            conn.autocommit = False
            # queue every statement first: a render failure aborts before anything is sent.
            statements = [self.builder.build(r) for r in records]
            with conn.cursor() as cur:
                cur.execute(";\n".join(statements))
            conn.commit()
            return FlushResult(written=len(records))

        except _ROW_ERRORS as e:
            logger.warning(
                "rolling back batch of %d records, retrying one row at a time. because: %s",
                len(records),
                e,
            )
            try:
                conn.rollback()
            except psycopg.Error as rollback_err:
                raise WriteDataError(f"rollback of failed batch failed: {rollback_err}") from rollback_err

        except WriterError:
            raise
        except Exception as e:
            raise WriteDataError(f"unexpected error during batch insert: {e!r}") from e

        result = self.execute_row_by_row(conn, records)
        result.fell_back = True
        return result

    def execute_row_by_row(self, conn: Any, records: Sequence[Record]) -> FlushResult:
        """
        Autocommit each record on its own. Failing rows are handed to the collector and the
        loop moves on; a row's fate never affects the others.
        """
        result = FlushResult()
        if not records:
            return result

        try:
            conn.autocommit = True
            with conn.cursor() as cur:
                for record in records:
                    outcome = self._insert_one(cur, record)
                    if isinstance(outcome, DirtyRecord):
                        self.collector.collect(outcome.record, outcome.reason)
                        result.dirty += 1
                    else:
                        result.written += 1
        except WriterError:
            raise
        except Exception as e:
            raise WriteDataError(f"unexpected error during row-by-row insert: {e!r}") from e

        return result

    def _insert_one(self, cur: Any, record: Record) -> InsertedRow | DirtyRecord:
        """Insert a single record. Row-level failures come back as a `DirtyRecord`, not raised."""
        try:
            cur.execute(self.builder.build(record))
        except _ROW_ERRORS as e:
            logger.debug("row insert failed (source_row=%s): %s", record.source_row, e)
            return DirtyRecord(record=record, reason=e)

        if cur.rowcount == 0:
            return DirtyRecord(record=record, reason=DATA_MISMATCH_REASON)
        return InsertedRow(record=record, rowcount=cur.rowcount)
