"""Shared fixtures for pollwatch tests."""

import os
import queue
from pathlib import Path

import pytest

BASE_MTIME = 1_700_000_000.0
BASE_MTIME_NS = 1_700_000_000 * 1_000_000_000


def write_file(path: Path, size: int, mtime: float = BASE_MTIME) -> Path:
    """Create ``path`` with ``size`` bytes and a fixed modification time."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"x" * size)
    os.utime(path, (mtime, mtime))
    return path


def next_batch(batches: "queue.Queue", timeout: float = 5.0, *, nonempty: bool = True):
    """Pull batches off the queue until one has events (or any, if not ``nonempty``)."""
    while True:
        batch = batches.get(timeout=timeout)
        if batch or not nonempty:
            return batch


@pytest.fixture
def watched_dir(tmp_path):
    """Directory with a.txt (100 bytes) and b.txt (200 bytes)."""
    root = tmp_path / "watched"
    root.mkdir()
    write_file(root / "a.txt", 100)
    write_file(root / "b.txt", 200)
    return root


def drop_file(path: Path, size: int, mtime: float = BASE_MTIME) -> Path:
    """Write a file next to ``path`` and move it into place in one step.

    Keeps a polling thread from observing a half-written file.
    """
    staging = path.parent.parent / f".staging-{path.name}"
    write_file(staging, size, mtime)
    os.replace(staging, path)
    return path
