from __future__ import annotations

from pathlib import Path
from typing import Iterator



def stream_line_records(path: Path) -> Iterator[tuple[int, bytes]]:
    """
    Yields `(line_no, record)` with each line's raw bytes as one record.

    `line_no` is 1-based by physical line number (stable pointer into the file).
    The line terminator (`\\n` or `\\r\\n`) is stripped, everything else is untouched
    (trailing delimiters included). A blank line is an empty record, not a gap.
    Bytes are not decoded here, the mapper owns the encoding.
    """
    with path.open("rb") as f:
        for i, line in enumerate(f, start=1):
            yield i, line.rstrip(b"\r\n")
