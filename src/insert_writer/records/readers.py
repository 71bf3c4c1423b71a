from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Iterator

from .coercion import record_of
from .types import Column, ColumnKind, Record


def stream_csv_records(path: Path) -> Iterator[Record]:
    """
    Yields one `Record` per CSV data row, every cell kept verbatim as a string column.

    The header row and blank lines are skipped. `source_row` is 1-based for the first data row;
    a skipped blank line still takes a number, as in the JSONL reader.
    Empty cells stay `""` (not `None`): what the destination makes of them is the writer's call.
    """
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        next(reader, None)      # header
        for i, row in enumerate(reader, start=1):
            if not row:
                continue
            yield Record(columns=tuple(Column(ColumnKind.string, cell) for cell in row), source_row=i)


def stream_jsonl_records(path: Path) -> Iterator[Record]:
    """
    Yields one `Record` per JSONL line. Each line must be a JSON array; column kinds are
    inferred from the decoded values (`null`, numbers, strings, booleans).

    `source_row` is 1-based by physical line number (blank lines skipped but still counted).
    """
    with path.open("r", encoding="utf-8") as f:
        for i, line in enumerate(f, start=1):
            s = line.strip()
            if not s:
                continue
            obj = json.loads(s)
            if not isinstance(obj, list):
                raise ValueError(f"JSONL line {i} is not an array")
            yield record_of(obj, source_row=i)


def stream_records(path: Path) -> Iterator[Record]:
    """Pick a reader by file suffix: `.jsonl` / `.ndjson` are JSON lines, anything else is CSV."""
    if path.suffix.lower() in (".jsonl", ".ndjson"):
        return stream_jsonl_records(path)
    return stream_csv_records(path)
