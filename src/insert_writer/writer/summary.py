from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class WriteSummary:
    """Counts recorded for one write session."""
    table_name: str
    total: int          # records pulled from the source
    written: int
    dirty: int
    batches: int        # flushes of the write buffer
    fallbacks: int      # flushes that were replayed row by row

    def render_one_line(self) -> str:
        """How the summary is formatted for the terminal."""
        return (
            f"{self.table_name}: total={self.total} written={self.written} dirty={self.dirty} "
            f"batches={self.batches} fallbacks={self.fallbacks}"
        )
