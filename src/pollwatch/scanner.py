"""Filesystem capabilities consumed by the snapshot and diff code."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator, Tuple, Union

PathLike = Union[str, Path]


def list_files(root: PathLike, *, recursive: bool) -> Iterator[str]:
    """Yield the paths of regular files under ``root``.

    Paths are returned as strings built from ``root`` so they stay stable
    as snapshot keys between scans. Directories that disappear or cannot be
    read while walking are skipped.
    """

    if recursive:
        for dirpath, _dirnames, filenames in os.walk(root):
            for name in filenames:
                path = os.path.join(dirpath, name)
                if os.path.isfile(path):
                    yield path
        return

    with os.scandir(root) as entries:
        for entry in entries:
            try:
                is_file = entry.is_file()
            except OSError:
                continue
            if is_file:
                yield entry.path


def file_size(path: PathLike) -> int:
    """Length of the file, read through an open handle."""

    with open(path, "rb") as handle:
        return os.fstat(handle.fileno()).st_size


def last_modified(path: PathLike) -> int:
    """Modification time in nanoseconds."""

    return os.stat(path).st_mtime_ns


def file_exists(path: PathLike) -> bool:
    return os.path.isfile(path)


def stat_file(path: PathLike) -> Tuple[int, int]:
    """Size and modification time (ns) from a single ``stat`` call."""

    result = os.stat(path)
    return result.st_size, result.st_mtime_ns
