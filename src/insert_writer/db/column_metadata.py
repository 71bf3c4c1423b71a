from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from psycopg import Connection

from insert_writer.errors import ConfigurationError

from .sql_types import pg_type_code


@dataclass(frozen=True, slots=True)
class ColumnMetadata:
    """One destination column's resolved description, drives how its literals are rendered."""
    name: str           # as stored in the catalog
    type_code: int      # `SqlType` value
    type_name: str      # database-reported type name, for diagnostics


class MetadataResolver(Protocol):
    """Resolves ordered metadata for the requested columns of `table`."""
    def __call__(self, conn: Any, table: str, columns: Sequence[str]) -> tuple[ColumnMetadata, ...]: ...


def split_table_name(table: str) -> tuple[str | None, str]:
    """`"schema.table"` -> `("schema", "table")`; a bare name has no schema (`None`)."""
    if "." in table:
        schema, name = table.split(".", 1)
        return schema, name
    return None, table


def _match_column(wanted: str, found: dict[str, tuple[str, str]]) -> tuple[str, str] | None:
    """Exact name first; unquoted identifiers fold to lower case in Postgres, so fall back to that."""
    hit = found.get(wanted)
    if hit is None:
        hit = found.get(wanted.lower())
    return hit


_COLUMNS_QUERY = """
    SELECT column_name, udt_name
    FROM information_schema.columns
    WHERE table_schema = COALESCE(%s, current_schema())
      AND table_name = %s
    ORDER BY ordinal_position
"""


def _fold(name: str | None) -> str | None:
    return None if name is None else name.lower()


def resolve_column_metadata(conn: Connection, table: str, columns: Sequence[str]) -> tuple[ColumnMetadata, ...]:
    """
    Returns metadata for `columns`, in the same order as `columns`.

    Reads `information_schema.columns` (identifiers are bound parameters, never interpolated).
    A bare table name resolves against `current_schema()`. Table and schema names are looked
    up as given first, then lower-cased (unquoted identifiers fold to lower case), same as columns.

    Raises `ConfigurationError` when the table or any requested column does not exist.
    """
    schema, name = split_table_name(table)
    # own transaction block: the connection must be idle again before the writer toggles autocommit.
    with conn.transaction():
        rows = conn.execute(_COLUMNS_QUERY, (schema, name)).fetchall()
        folded = (_fold(schema), _fold(name))
        if not rows and folded != (schema, name):
            rows = conn.execute(_COLUMNS_QUERY, folded).fetchall()

    if not rows:
        raise ConfigurationError(f"destination table not found (or has no columns): {table}")

    found: dict[str, tuple[str, str]] = {r[0]: (r[0], r[1]) for r in rows}

    out: list[ColumnMetadata] = []
    missing: list[str] = []
    for c in columns:
        hit = _match_column(c, found)
        if hit is None:
            missing.append(c)
            continue
        col_name, udt_name = hit
        out.append(ColumnMetadata(name=col_name, type_code=int(pg_type_code(udt_name)), type_name=udt_name))

    if missing:
        raise ConfigurationError(f"columns not found in {table}: {missing}")
    return tuple(out)
