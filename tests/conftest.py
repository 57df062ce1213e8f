from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from loguru import logger


def _find_repo_root(start: Path) -> Path:
    marker = "pyproject.toml"
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if(p / marker).exists():
            return p
    raise RuntimeError(f"Could not find repo root from: {start}")


@pytest.fixture(scope="session")
def repo_root() -> Path:
    """The absolute path to the repo root (finds by walking up to `pyproject.toml`)."""
    # walking starts from the callers location (`tests/conftest.py`)
    return _find_repo_root(Path(__file__))


@pytest.fixture()
def warnings_log() -> Iterator[list[str]]:
    """
    Collects loguru WARNING+ messages emitted during a test.
    Each entry is `"<LEVEL>|<message>"`.
    """
    messages: list[str] = []
    handler_id = logger.add(
        lambda m: messages.append(m.rstrip("\n")),
        level="WARNING",
        format="{level}|{message}",
    )
    yield messages
    logger.remove(handler_id)
