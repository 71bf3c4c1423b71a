from __future__ import annotations

import argparse
import logging
from contextlib import ExitStack
from pathlib import Path

from insert_writer.config import load_config
from insert_writer.db.connect import connect
from insert_writer.records.readers import stream_records
from insert_writer.writer.collectors import DirtyRecordCollector, JsonlCollector, MemoryCollector
from insert_writer.writer.session import WriteSession


def main(argv: list[str] | None = None) -> int:
    """
    A CLI for writing a file of records into one Postgres table.

    The `cmd` options are:
    ## load:
    Streams records from `--input` into `--table`, in batches with per-row fallback.
    - `--input` as the path to the data (`.csv` with a header row, or `.jsonl` of JSON arrays),
    - `--table` as the destination table (optionally `schema.table`),
    - `--columns` as the comma separated destination columns, in the file's field order.

    Rows the table refuses are written to `--dirty-out` (JSONL) when given.
    A results summary prints in the terminal upon completion.

    ### Example load usage:
    - `insert-writer load --input data/people.csv --table people --columns id,name,born_on`

    The destination DSN is read from `INSERT_WRITER_DSN`.
    """
    p = argparse.ArgumentParser(prog="insert-writer")
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    sub = p.add_subparsers(dest="cmd", required=True)

    # load cmd
    load = sub.add_parser("load", help="Write a file of records into a table (collecting dirty rows).")
    load.add_argument("--input", required=True, help="Path to input file (CSV or JSONL).")
    load.add_argument("--table", required=True, help="Destination table.")
    load.add_argument("--columns", required=True, help="Comma separated destination columns.")
    load.add_argument("--batch-size", type=int, default=None, help="Records per batch commit.")
    load.add_argument("--dirty-out", default=None, help="Append dirty records to this JSONL file.")

    args = p.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "load":
        config = load_config(table=args.table, columns=args.columns, batch_size=args.batch_size)

        with ExitStack() as stack:
            collector: DirtyRecordCollector
            if args.dirty_out:
                collector = stack.enter_context(JsonlCollector(Path(args.dirty_out)))
            else:
                collector = MemoryCollector()

            session = WriteSession.from_config(config, collector=collector)
            # the session closes the connection itself.
            summary = session.run(stream_records(Path(args.input)), connect(), config.column_count)

        print(summary.render_one_line())
        return 0

    return 2
