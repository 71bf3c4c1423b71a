from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ColumnKind(str, Enum):
    """Which representation a `Column`'s raw value is held in."""
    null = "null"
    long = "long"
    double = "double"       # `float` or `Decimal`
    string = "string"
    date = "date"           # always a `datetime`
    bool = "bool"
    bytes = "bytes"


@dataclass(frozen=True, slots=True)
class Column:
    """
    One generic field value.

    `raw` is `None` for an absent value; a null column may still carry a non-null `kind`
    (e.g. a string field the source left empty).
    """
    kind: ColumnKind
    raw: Any = None

    @property
    def is_null(self) -> bool:
        return self.raw is None


@dataclass(frozen=True, slots=True)
class Record:
    """An ordered, fixed-length row of `Column` values as produced by the upstream source."""
    columns: tuple[Column, ...]
    source_row: int | None = None   # 1-based lineage pointer, when the source knows it

    @property
    def column_number(self) -> int:
        return len(self.columns)

    def get_column(self, i: int) -> Column:
        return self.columns[i]

    def to_payload(self) -> list[dict[str, Any]]:
        """JSON-friendly view of the columns (used when persisting dirty records)."""
        return [{"kind": c.kind.value, "value": c.raw} for c in self.columns]


@dataclass(frozen=True, slots=True)
class InsertedRow:
    """A record that the destination accepted."""
    record: Record
    rowcount: int


@dataclass(frozen=True, slots=True)
class DirtyRecord:
    """A record the destination refused, with why. Never retried."""
    record: Record
    reason: str | Exception

    @property
    def reason_detail(self) -> str:
        return str(self.reason)
