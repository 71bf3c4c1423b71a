from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, TextIO

from insert_writer.records.types import DirtyRecord, Record

logger = logging.getLogger(__name__)


class DirtyRecordCollector(Protocol):
    """
    Sink for records the destination refused. Fire and forget: no return value,
    and it must not hold up the write path.
    """
    def collect(self, record: Record, reason: str | Exception) -> None: ...


class MemoryCollector:
    """Keeps every dirty record in a list (tests, small runs)."""

    def __init__(self) -> None:
        self.records: list[DirtyRecord] = []

    @property
    def count(self) -> int:
        return len(self.records)

    def collect(self, record: Record, reason: str | Exception) -> None:
        logger.debug("dirty record (source_row=%s): %s", record.source_row, reason)
        self.records.append(DirtyRecord(record=record, reason=reason))


def _dirty_payload(record: Record, reason: str | Exception) -> dict[str, Any]:
    """Shape of one persisted dirty record."""
    return {
        "source_row": record.source_row,
        "reason_code": type(reason).__name__ if isinstance(reason, Exception) else "data_mismatch",
        "reason_detail": str(reason),
        "raw_payload": record.to_payload(),
    }


class JsonlCollector:
    """
    Appends one JSON object per dirty record to `path`.

    Non JSON-native values (dates, decimals, bytes) are written with `str()`.
    Use as a context manager, or call `close()`.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.count = 0
        self._fh: TextIO = path.open("a", encoding="utf-8")

    def collect(self, record: Record, reason: str | Exception) -> None:
        logger.debug("dirty record (source_row=%s): %s", record.source_row, reason)
        self._fh.write(json.dumps(_dirty_payload(record, reason), default=str) + "\n")
        self.count += 1

    def close(self) -> None:
        self._fh.close()

    def __enter__(self) -> JsonlCollector:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
