from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from insert_writer.config import DEFAULT_BATCH_SIZE, WriterConfig
from insert_writer.db.column_metadata import MetadataResolver, resolve_column_metadata
from insert_writer.errors import ConfigurationError, WriteDataError
from insert_writer.records.types import Record

from .collectors import DirtyRecordCollector
from .executor import BatchExecutor, FlushResult
from .statements import InsertStatementBuilder
from .summary import WriteSummary

logger = logging.getLogger(__name__)


class WriteSession:
    """
    Writes one stream of records into one destination table over one connection.

    Not thread safe and not reusable across connections: run several sessions on separate
    connections for parallelism.
    """

    def __init__(
        self,
        table: str,
        columns: Sequence[str],
        *,
        collector: DirtyRecordCollector,
        batch_size: int = DEFAULT_BATCH_SIZE,
        resolver: MetadataResolver | None = None,
    ) -> None:
        if batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {batch_size}")
        self.table = table
        self.columns = tuple(columns)
        self.collector = collector
        self.batch_size = batch_size
        # default looked up at construction time, not at import.
        self.resolver = resolver if resolver is not None else resolve_column_metadata

    @classmethod
    def from_config(
        cls,
        config: WriterConfig,
        *,
        collector: DirtyRecordCollector,
        resolver: MetadataResolver | None = None,
    ) -> WriteSession:
        return cls(
            config.table,
            config.columns,
            collector=collector,
            batch_size=config.batch_size,
            resolver=resolver,
        )

    def run(self, source: Iterable[Record], conn: Any, expected_column_count: int) -> WriteSummary:
        """
        End-to-end write:
          - resolve the destination column metadata (once),
          - pull records until `source` is exhausted, checking each one's arity,
          - flush every full buffer through the batch executor, then the remainder.

        Raises:
        - `ConfigurationError` when a record's column count differs from `expected_column_count`
          (a setup bug, so the whole session stops rather than reporting the row dirty),
          or when the destination table/columns cannot be resolved.
        - `WriteDataError` wrapping anything else raised while pulling or flushing,
          including a `ConversionError` from the source itself.

        Row-level insert failures do not raise, they go to the collector.
        `conn` is closed exactly once on every exit path.
        """
        buffer: list[Record] = []
        total = written = dirty = batches = fallbacks = 0

        def flush() -> None:
            nonlocal written, dirty, batches, fallbacks
            res: FlushResult = executor.execute_batch(conn, buffer)
            written += res.written
            dirty += res.dirty
            batches += 1
            fallbacks += int(res.fell_back)
            buffer.clear()

        try:
            if expected_column_count != len(self.columns):
                raise ConfigurationError(
                    f"{len(self.columns)} columns configured for {self.table} but "
                    f"{expected_column_count} expected per record"
                )

            metadata = self.resolver(conn, self.table, self.columns)
            builder = InsertStatementBuilder.for_table(self.table, self.columns, metadata)
            executor = BatchExecutor(builder, self.collector)
            logger.info("writing to %s (%d columns, batch_size=%d)", self.table, len(self.columns), self.batch_size)

            for record in source:
                total += 1
                if record.column_number != expected_column_count:
                    raise ConfigurationError(
                        f"column configuration is wrong: the source produced {record.column_number} fields "
                        f"but {expected_column_count} columns are written to {self.table}"
                    )
                buffer.append(record)
                if len(buffer) >= self.batch_size:
                    flush()

            ## -- flush any remainder
            if buffer:
                flush()

        except (ConfigurationError, WriteDataError):
            raise
        except Exception as e:
            raise WriteDataError(f"writing to {self.table} failed: {e!r}") from e
        finally:
            buffer.clear()
            conn.close()

        summary = WriteSummary(
            table_name=self.table,
            total=total,
            written=written,
            dirty=dirty,
            batches=batches,
            fallbacks=fallbacks,
        )
        logger.info("finished %s", summary.render_one_line())
        return summary
