from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Sequence

from insert_writer.errors import ConfigurationError


DEFAULT_BATCH_SIZE = 500        # config: increase or decrease.


def get_batch_size() -> int:
    """Batch size from `INSERT_WRITER_BATCH_SIZE`, else `DEFAULT_BATCH_SIZE`."""
    raw = os.getenv("INSERT_WRITER_BATCH_SIZE")
    if raw is None or raw.strip() == "":
        return DEFAULT_BATCH_SIZE
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"INSERT_WRITER_BATCH_SIZE is not an integer: {raw!r}")


def parse_columns(columns: str | Sequence[str]) -> tuple[str, ...]:
    """`"a, b,c"` (or an already split sequence) -> `("a", "b", "c")`, blanks dropped."""
    parts = columns.split(",") if isinstance(columns, str) else list(columns)
    return tuple(p.strip() for p in parts if p and p.strip())


@dataclass(frozen=True)
class WriterConfig:
    """
    What a write session writes to.

    `columns` is the destination column list, in the order the source produces fields.
    Its length is the record arity every session expects.
    """
    table: str
    columns: tuple[str, ...]
    batch_size: int = DEFAULT_BATCH_SIZE

    def __post_init__(self) -> None:
        if not self.table or not self.table.strip():
            raise ConfigurationError("table name is empty")
        if not self.columns:
            raise ConfigurationError(f"no columns configured for {self.table}")

        seen: set[str] = set()
        dups: list[str] = []
        for c in self.columns:
            key = c.lower()         # unquoted identifiers are case-insensitive
            if key in seen:
                dups.append(c)
            seen.add(key)
        if dups:
            raise ConfigurationError(f"duplicate columns configured for {self.table}: {dups}")

        if self.batch_size < 1:
            raise ConfigurationError(f"batch_size must be >= 1, got {self.batch_size}")

    @property
    def column_count(self) -> int:
        return len(self.columns)


def load_config(*, table: str, columns: str | Sequence[str], batch_size: int | None = None) -> WriterConfig:
    """Build a validated `WriterConfig`; `batch_size` falls back to the environment."""
    return WriterConfig(
        table=table.strip(),
        columns=parse_columns(columns),
        batch_size=batch_size if batch_size is not None else get_batch_size(),
    )
