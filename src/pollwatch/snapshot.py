"""In-memory record of the files a watcher has last seen."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from . import scanner
from .events import FileRecord
from .filters import PathFilter

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Mapping of path to :class:`FileRecord` owned by a single watcher run.

    Only the worker loop touches a store, so it carries no locking. Callers
    that remove entries while walking the store must iterate over
    :meth:`paths`, which returns a copy of the current keys.
    """

    def __init__(self) -> None:
        self._records: Dict[str, FileRecord] = {}

    @classmethod
    def build(
        cls,
        root: Union[str, Path],
        *,
        recursive: bool,
        path_filter: PathFilter,
    ) -> "SnapshotStore":
        """Take the baseline snapshot of every accepted file under ``root``."""

        store = cls()
        for path in scanner.list_files(root, recursive=recursive):
            if not path_filter.accepts(path):
                continue
            try:
                record = FileRecord(
                    path=path,
                    size=scanner.file_size(path),
                    mtime_ns=scanner.last_modified(path),
                )
            except OSError as exc:
                logger.debug("Skipping %s in baseline: %s", path, exc)
                continue
            store.add(record)

        logger.debug("Baseline snapshot of %s holds %s files", root, len(store))
        return store

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, path: object) -> bool:
        return path in self._records

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(list(self._records.values()))

    def get(self, path: str) -> Optional[FileRecord]:
        return self._records.get(path)

    def add(self, record: FileRecord) -> None:
        self._records[record.path] = record

    def remove(self, path: str) -> FileRecord:
        return self._records.pop(path)

    def paths(self) -> List[str]:
        return list(self._records)
