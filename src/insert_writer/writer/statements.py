from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from insert_writer.db.column_metadata import ColumnMetadata
from insert_writer.errors import ConfigurationError
from insert_writer.records.types import Record

from .converter import render_literal


@dataclass(frozen=True)
class InsertStatementBuilder:
    """
    Builds one fully literal `INSERT` per record for a fixed destination table.

    No parameter binding: the statement is plain text so a batch can be sent as a single
    multi-statement string. Values are not escaped, sanitizing them is up to the producer.

    `columns` is the configured column list (used verbatim in the statement);
    `metadata[i]` describes `columns[i]`.
    """
    table: str
    columns: tuple[str, ...]
    metadata: tuple[ColumnMetadata, ...]

    def __post_init__(self) -> None:
        if len(self.columns) != len(self.metadata):
            raise ConfigurationError(
                f"resolved {len(self.metadata)} column metadata entries for "
                f"{len(self.columns)} configured columns of {self.table}"
            )

    @classmethod
    def for_table(cls, table: str, columns: Sequence[str], metadata: Sequence[ColumnMetadata]) -> InsertStatementBuilder:
        return cls(table=table, columns=tuple(columns), metadata=tuple(metadata))

    @property
    def prefix(self) -> str:
        return f"insert into {self.table}({','.join(self.columns)}) values("

    def build(self, record: Record) -> str:
        """
        Render `record` into `insert into <table>(<c1>,...) values(<v1>,...)`.
        Propagates `ConversionError` / `UnsupportedTypeError` from the converter.
        """
        if record.column_number != len(self.metadata):
            raise ConfigurationError(
                f"record has {record.column_number} columns, {self.table} expects {len(self.metadata)}"
            )
        values = ",".join(render_literal(meta, record.get_column(i)) for i, meta in enumerate(self.metadata))
        return f"{self.prefix}{values})"
