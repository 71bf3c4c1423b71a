from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from insert_writer.errors import ConversionError

from .types import Column, ColumnKind, Record


# signed 64-bit range, values outside it are refused rather than wrapped.
_LONG_MIN = -(2**63)
_LONG_MAX = 2**63 - 1

_DATETIME_OUT_FORMAT = "%Y-%m-%d %H:%M:%S"
_EPOCH_DATE = date(1970, 1, 1)
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _fail(column: Column, target: str) -> ConversionError:
    return ConversionError(f"cannot convert {column.kind.value} value {column.raw!r} to {target}")


## -- building columns / records

def column_of(value: Any) -> Column:
    """
    Wrap a plain Python value into a `Column`, inferring its kind.
    Raises `ConversionError` on a type there is no kind for.
    """
    if value is None:
        return Column(ColumnKind.null)
    if isinstance(value, Column):
        return value
    # `bool` before `int`: bool is an int subclass.
    if isinstance(value, bool):
        return Column(ColumnKind.bool, value)
    if isinstance(value, int):
        return Column(ColumnKind.long, value)
    if isinstance(value, (float, Decimal)):
        return Column(ColumnKind.double, value)
    if isinstance(value, str):
        return Column(ColumnKind.string, value)
    if isinstance(value, datetime):
        return Column(ColumnKind.date, value)
    if isinstance(value, date):
        return Column(ColumnKind.date, datetime.combine(value, time()))
    if isinstance(value, (bytes, bytearray)):
        return Column(ColumnKind.bytes, bytes(value))
    raise ConversionError(f"no column kind for python type {type(value).__name__}")


def record_of(values: Iterable[Any], *, source_row: int | None = None) -> Record:
    """Build a `Record` from plain values, see `column_of`."""
    return Record(columns=tuple(column_of(v) for v in values), source_row=source_row)


## -- coercions. `None` in, `None` out: an absent value stays absent.

def as_string(column: Column) -> str | None:
    """String form of the value."""
    v = column.raw
    if v is None:
        return None
    kind = column.kind
    if kind is ColumnKind.string:
        return v
    if kind is ColumnKind.long:
        return str(v)
    if kind is ColumnKind.double:
        # `repr` keeps floats round-trippable (`0.1` -> "0.1", not "0.1000000000000000055...")
        return repr(v) if isinstance(v, float) else str(v)
    if kind is ColumnKind.bool:
        return "true" if v else "false"
    if kind is ColumnKind.date:
        return v.strftime(_DATETIME_OUT_FORMAT)
    if kind is ColumnKind.bytes:
        try:
            return v.decode("utf-8")
        except UnicodeDecodeError:
            raise _fail(column, "string")
    raise _fail(column, "string")


def _check_long(column: Column, n: int) -> int:
    if n < _LONG_MIN or n > _LONG_MAX:
        raise ConversionError(f"value {column.raw!r} overflows a 64-bit integer")
    return n


def as_long(column: Column) -> int | None:
    """
    Integer form of the value. Fractions are truncated toward zero.
    Dates become epoch milliseconds; a naive date-time is taken as UTC.
    Raises on non numeric text, NaN/infinity, and anything outside the 64-bit range.
    """
    v = column.raw
    if v is None:
        return None
    kind = column.kind
    if kind is ColumnKind.long:
        return _check_long(column, v)
    if kind is ColumnKind.bool:
        return 1 if v else 0
    if kind is ColumnKind.double:
        if isinstance(v, float) and not math.isfinite(v):
            raise _fail(column, "long")
        if isinstance(v, Decimal) and not v.is_finite():
            raise _fail(column, "long")
        return _check_long(column, int(v))
    if kind is ColumnKind.string:
        s = v.strip()
        try:
            return _check_long(column, int(s))
        except ValueError:
            pass
        try:
            d = Decimal(s)
        except InvalidOperation:
            raise _fail(column, "long")
        if not d.is_finite():
            raise _fail(column, "long")
        return _check_long(column, int(d))
    if kind is ColumnKind.date:
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return (v - _EPOCH) // timedelta(milliseconds=1)
    raise _fail(column, "long")


def as_double(column: Column) -> float | None:
    """Floating point form of the value. `bool`, `date` and `bytes` do not convert."""
    v = column.raw
    if v is None:
        return None
    kind = column.kind
    if kind in (ColumnKind.double, ColumnKind.long):
        return float(v)
    if kind is ColumnKind.string:
        try:
            return float(v.strip())
        except ValueError:
            raise _fail(column, "double")
    raise _fail(column, "double")


def as_bool(column: Column) -> bool | None:
    """Boolean form. Text accepts only `true`/`false` (any case); numbers are `!= 0`."""
    v = column.raw
    if v is None:
        return None
    kind = column.kind
    if kind is ColumnKind.bool:
        return v
    if kind in (ColumnKind.long, ColumnKind.double):
        return v != 0
    if kind is ColumnKind.string:
        s = v.strip().lower()
        if s == "true":
            return True
        if s == "false":
            return False
    raise _fail(column, "bool")


def _parse_datetime_text(column: Column, text: str) -> datetime:
    """
    Accepts the ISO forms:
    - `2026-02-10`
    - `2026-02-10 12:34:56`, `2026-02-10T12:34:56.123456+02:00`, trailing `Z`
    - `12:34:56` (time only, placed on 1970-01-01)
    """
    s = text.strip()
    if not s:
        raise _fail(column, "date")
    s = s.replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(s)
    except ValueError:
        pass
    try:
        return datetime.combine(_EPOCH_DATE, time.fromisoformat(s))
    except ValueError:
        raise _fail(column, "date")


def as_date(column: Column) -> datetime | None:
    """
    Calendar date-time form of the value.

    `long` values are epoch milliseconds (UTC). `double`, `bool` and `bytes` do not convert.
    """
    v = column.raw
    if v is None:
        return None
    kind = column.kind
    if kind is ColumnKind.date:
        return v
    if kind is ColumnKind.long:
        try:
            return _EPOCH + timedelta(milliseconds=v)
        except OverflowError:
            raise _fail(column, "date")
    if kind is ColumnKind.string:
        return _parse_datetime_text(column, v)
    raise _fail(column, "date")
