"""Reconciles a fresh directory scan against the snapshot store."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import AbstractSet, List, Optional, Union

from . import scanner
from .events import ChangeEvent, FileRecord, WatchEvent
from .filters import PathFilter
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)


class DiffEngine:
    """Computes one tick's events and applies them to a :class:`SnapshotStore`.

    Three passes run in a fixed order, each only when its kind is enabled in
    ``events``: created, deleted, then modified. Later passes see the
    mutations made by earlier ones. Paths added by the created pass are left
    alone by the other two until the next tick, so a path shows up at most
    once per tick even while it is still being written.

    Per-file read failures (a file removed between the directory listing and
    the stat) are not errors: the file is left out of the batch and the
    deleted pass reconciles it on this or a later tick.
    """

    def __init__(
        self,
        root: Union[str, Path],
        *,
        recursive: bool = False,
        path_filter: Optional[PathFilter] = None,
        events: WatchEvent = WatchEvent.ALL,
    ):
        self._root = root
        self._recursive = recursive
        self._filter = path_filter if path_filter is not None else PathFilter()
        self._events = events

    def run(self, store: SnapshotStore) -> List[ChangeEvent]:
        """Run every enabled pass and return the batch in pass order."""

        events: List[ChangeEvent] = []
        if WatchEvent.CREATED in self._events:
            events.extend(self.detect_created(store))
        created = frozenset(event.path for event in events)
        if WatchEvent.DELETED in self._events:
            events.extend(self.detect_deleted(store, skip=created))
        if self._events & WatchEvent.MODIFIED:
            events.extend(self.detect_modified(store, skip=created))
        return events

    def detect_created(self, store: SnapshotStore) -> List[ChangeEvent]:
        events: List[ChangeEvent] = []
        try:
            paths = list(scanner.list_files(self._root, recursive=self._recursive))
        except OSError as exc:
            logger.warning("Unable to list %s; skipping created pass: %s", self._root, exc)
            return events

        for path in paths:
            if path in store or not self._filter.accepts(path):
                continue
            try:
                record = FileRecord(
                    path=path,
                    size=scanner.file_size(path),
                    mtime_ns=scanner.last_modified(path),
                )
            except OSError as exc:
                logger.debug("Could not read new file %s: %s", path, exc)
                continue

            events.append(ChangeEvent.of(WatchEvent.CREATED, record))
            store.add(record)

        return events

    def detect_deleted(self, store: SnapshotStore, skip: AbstractSet[str] = frozenset()) -> List[ChangeEvent]:
        events: List[ChangeEvent] = []
        # paths() is a copy, so removing entries cannot skip or repeat any
        for path in store.paths():
            if path in skip or scanner.file_exists(path):
                continue
            record = store.remove(path)
            events.append(ChangeEvent.of(WatchEvent.DELETED, record))
        return events

    def detect_modified(self, store: SnapshotStore, skip: AbstractSet[str] = frozenset()) -> List[ChangeEvent]:
        """Report at most one modification per file.

        The timestamp is compared first. When it changed, a DATE_MODIFIED
        event is emitted and the size comparison is skipped for that file
        this tick; the stored size is still refreshed from the same stat so
        the change is not reported again as SIZE_MODIFIED on the next tick.
        """

        check_date = WatchEvent.DATE_MODIFIED in self._events
        check_size = WatchEvent.SIZE_MODIFIED in self._events
        events: List[ChangeEvent] = []

        for path in store.paths():
            if path in skip:
                continue
            record = store.get(path)
            if record is None:
                continue

            if check_date:
                try:
                    size, mtime_ns = scanner.stat_file(path)
                except OSError as exc:
                    logger.debug("Could not stat %s: %s", path, exc)
                    continue
                if mtime_ns != record.mtime_ns:
                    record.mtime_ns = mtime_ns
                    record.size = size
                    events.append(ChangeEvent.of(WatchEvent.DATE_MODIFIED, record))
                    continue

            if check_size:
                try:
                    size = scanner.file_size(path)
                except OSError as exc:
                    logger.debug("Could not read size of %s: %s", path, exc)
                    continue
                if size != record.size:
                    record.size = size
                    events.append(ChangeEvent.of(WatchEvent.SIZE_MODIFIED, record))

        return events
