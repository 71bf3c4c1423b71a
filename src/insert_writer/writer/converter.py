from __future__ import annotations

from typing import Callable

from insert_writer.db.column_metadata import ColumnMetadata
from insert_writer.db.sql_types import SqlType
from insert_writer.errors import ConversionError, UnsupportedTypeError
from insert_writer.records.coercion import as_date, as_long, as_string
from insert_writer.records.types import Column

Renderer = Callable[[Column], str]

# What an absent value prints as. Unquoted it is SQL NULL; quoted it is just text.
NO_VALUE = "null"


def _quoted(text: str) -> str:
    # no escaping here: embedded quotes are the value producer's problem.
    return f"'{text}'"


def _or_no_value(text: str | None) -> str:
    return NO_VALUE if text is None else text


## -- renderers, one per family of column types

def _render_character(column: Column) -> str:
    return _quoted(_or_no_value(as_string(column)))


def _render_numeric(column: Column) -> str:
    # verbatim: an empty string stays an empty token, it is not turned into NULL.
    return _or_no_value(as_string(column))


def _render_tinyint(column: Column) -> str:
    v = as_long(column)
    return NO_VALUE if v is None else str(v)


def _render_date(column: Column) -> str:
    # an absent date renders as the quoted text 'null', not the NULL keyword.
    dt = as_date(column)
    return _quoted(NO_VALUE if dt is None else dt.date().isoformat())


def _render_time(column: Column) -> str:
    dt = as_date(column)
    return _quoted(NO_VALUE if dt is None else dt.strftime("%H:%M:%S"))


def _render_timestamp(column: Column) -> str:
    dt = as_date(column)
    return _quoted(NO_VALUE if dt is None else dt.isoformat(sep=" "))


def _render_boolean(column: Column) -> str:
    return _quoted(_or_no_value(as_string(column)))


_RENDERERS: dict[int, Renderer] = {
    **dict.fromkeys(
        (
            SqlType.CHAR,
            SqlType.NCHAR,
            SqlType.CLOB,
            SqlType.NCLOB,
            SqlType.VARCHAR,
            SqlType.LONGVARCHAR,
            SqlType.NVARCHAR,
            SqlType.LONGNVARCHAR,
        ),
        _render_character,
    ),
    **dict.fromkeys(
        (
            SqlType.SMALLINT,
            SqlType.INTEGER,
            SqlType.BIGINT,
            SqlType.NUMERIC,
            SqlType.DECIMAL,
            SqlType.FLOAT,
            SqlType.REAL,
            SqlType.DOUBLE,
        ),
        _render_numeric,
    ),
    # tinyint is a little special in some databases, e.g. mysql's boolean -> tinyint(1)
    SqlType.TINYINT: _render_tinyint,
    SqlType.DATE: _render_date,
    SqlType.TIME: _render_time,
    SqlType.TIMESTAMP: _render_timestamp,
    SqlType.BOOLEAN: _render_boolean,
    SqlType.BIT: _render_boolean,
}


def render_literal(meta: ColumnMetadata, column: Column) -> str:
    """
    Serialize `column` into a SQL literal fragment for the destination column `meta`.

    Raises:
    - `UnsupportedTypeError` if `meta.type_code` has no rendering rule.
    - `ConversionError` (naming the column) if the value cannot be coerced for it.
    """
    renderer = _RENDERERS.get(meta.type_code)
    if renderer is None:
        raise UnsupportedTypeError(column_name=meta.name, type_code=meta.type_code, type_name=meta.type_name)
    try:
        return renderer(column)
    except ConversionError as e:
        if e.column_name is not None:
            raise
        raise ConversionError(f"{meta.type_name}: {e.detail}", column_name=meta.name) from e
