"""Test configuration."""

from pathlib import Path
from typing import List

import pytest

from thread_grouper_mcp.config import get_settings

BASE_DIR = Path(__file__).parent

HEADER = ["2024-03-11 10:15:42", "Full thread dump Java HotSpot(TM) 64-Bit Server VM:"]
NO_LOCKS = ["   Locked ownable synchronizers:", "\t- None"]


def thread_block(name: str, thread_id: str, state: str, frames: List[str], locks: List[str] = NO_LOCKS) -> List[str]:
    """One thread block, including the separator line that precedes it."""
    lines = ["", f'"{name}" - Thread {thread_id}', f"   java.lang.Thread.State: {state}"]
    lines.extend("\t" + f for f in frames)
    lines.append("")
    lines.extend(locks)
    return lines


def dump_lines(*blocks: List[str]) -> List[str]:
    lines = list(HEADER)
    for block in blocks:
        lines.extend(block)
    lines.append("")
    return lines


@pytest.fixture
def sample_dump_path() -> Path:
    return BASE_DIR / "sample_thread_dump.txt"


@pytest.fixture
def sample_dump_path_2() -> Path:
    return BASE_DIR / "sample_thread_dump_2.txt"


@pytest.fixture
def write_dump(tmp_path):
    def _write(lines: List[str], name: str = "dump.txt") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch):
    monkeypatch.delenv("THREAD_GROUPER_MAX_FILE_BYTES", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
