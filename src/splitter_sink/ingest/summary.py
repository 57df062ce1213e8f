from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LoadSummary:
    """Counts recorded for one file load."""
    table_name: str
    input_path: str
    operation: str
    total: int          # records read
    applied: int        # operations submitted

    def render_one_line(self) -> str:
        """How the summary is formatted for the terminal."""
        return f"{self.table_name}: total={self.total} applied={self.applied} operation={self.operation}"
