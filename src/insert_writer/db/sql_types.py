from __future__ import annotations

from enum import IntEnum


class SqlType(IntEnum):
    """Vendor-neutral SQL type codes (the `java.sql.Types` / ODBC numbering)."""
    BIT = -7
    TINYINT = -6
    SMALLINT = 5
    INTEGER = 4
    BIGINT = -5
    FLOAT = 6
    REAL = 7
    DOUBLE = 8
    NUMERIC = 2
    DECIMAL = 3
    CHAR = 1
    VARCHAR = 12
    LONGVARCHAR = -1
    DATE = 91
    TIME = 92
    TIMESTAMP = 93
    BINARY = -2
    VARBINARY = -3
    LONGVARBINARY = -4
    NULL = 0
    OTHER = 1111
    ARRAY = 2003
    BLOB = 2004
    CLOB = 2005
    BOOLEAN = 16
    NCHAR = -15
    NVARCHAR = -9
    LONGNVARCHAR = -16
    NCLOB = 2011
    SQLXML = 2009


# Postgres `udt_name` -> type code, following what the pgjdbc driver reports
# (e.g. `bool` is BIT, `text` is VARCHAR, tz-aware types collapse onto TIME/TIMESTAMP).
_PG_TYPE_CODES: dict[str, SqlType] = {
    "int2": SqlType.SMALLINT,
    "int4": SqlType.INTEGER,
    "int8": SqlType.BIGINT,
    "oid": SqlType.BIGINT,
    "numeric": SqlType.NUMERIC,
    "float4": SqlType.REAL,
    "float8": SqlType.DOUBLE,
    "money": SqlType.DOUBLE,
    "bpchar": SqlType.CHAR,
    "char": SqlType.CHAR,
    "varchar": SqlType.VARCHAR,
    "text": SqlType.VARCHAR,
    "name": SqlType.VARCHAR,
    "date": SqlType.DATE,
    "time": SqlType.TIME,
    "timetz": SqlType.TIME,
    "timestamp": SqlType.TIMESTAMP,
    "timestamptz": SqlType.TIMESTAMP,
    "bool": SqlType.BIT,
    "bytea": SqlType.BINARY,
    "xml": SqlType.SQLXML,
}


def pg_type_code(udt_name: str) -> SqlType:
    """Type code for a Postgres type name. Arrays (`_int4`, ...) and anything unknown are OTHER/ARRAY."""
    if udt_name.startswith("_"):
        return SqlType.ARRAY
    return _PG_TYPE_CODES.get(udt_name, SqlType.OTHER)
