"""Polling watcher lifecycle: baseline, tick loop, dispatch and shutdown."""
from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from .callbacks import Batch, BatchCallback
from .config import ConfigError, WatchConfig
from .diff import DiffEngine
from .errors import CallbackError, PollWatchError
from .events import ChangeEvent, WatchEvent
from .snapshot import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class WatcherStats:
    """Counters for the current (or last) run."""

    cycles: int = 0
    events_emitted: int = 0


class PollingWatcher:
    """Polls a directory and hands each tick's changes to the callbacks.

    Due to polling, a rename cannot be tracked: it always shows up as a
    ``DELETED`` event for the old path and a ``CREATED`` event for the new
    one, on the tick that observes it.

    One background thread per running watcher does all scanning, diffing and
    callback invocation. A callback may be a plain function or a coroutine
    function; either way the next interval only starts once it has returned.

    Example::

        def on_change(events):
            for event in events:
                print(event.kind, event.path)

        watcher = PollingWatcher(WatchConfig("incoming", interval_ms=60000), on_change)
        watcher.start()
        ...
        watcher.stop()
    """

    def __init__(self, config: WatchConfig, callback: Optional[BatchCallback] = None):
        self._config = config
        self._filter = config.build_filter()
        self._engine = DiffEngine(
            config.root_path,
            recursive=config.recursive,
            path_filter=self._filter,
            events=config.events,
        )
        self._stop_event: Optional[threading.Event] = None
        self._worker: Optional[threading.Thread] = None
        self._error: Optional[BaseException] = None
        self._stats = WatcherStats()

        self._callbacks: List[BatchCallback] = []
        if callback is not None:
            self.subscribe(callback)

    @property
    def config(self) -> WatchConfig:
        return self._config

    @property
    def stats(self) -> WatcherStats:
        return self._stats

    @property
    def error(self) -> Optional[BaseException]:
        """The failure that ended the last run, if any."""

        return self._error

    @property
    def is_running(self) -> bool:
        return self._worker is not None and self._worker.is_alive()

    def subscribe(self, callback: BatchCallback) -> None:
        """Register another consumer; only allowed while stopped."""

        if self.is_running:
            raise PollWatchError("Callbacks cannot be added while the watcher is running")
        if not callable(callback):
            raise TypeError(f"Callback must be callable, got {type(callback).__name__}")
        self._callbacks.append(callback)

    def start(self) -> None:
        """Take the baseline snapshot and start polling in the background.

        Does nothing if the watcher is already running. Raises
        :class:`ConfigError` if the root is not an existing directory.
        """

        if self.is_running:
            return
        # a previous run may have ended on its own after a callback failure
        self._worker = None

        root = self._config.root_path
        if not root.is_dir():
            raise ConfigError(f"Watched root is not a directory: {root}")

        store = SnapshotStore.build(root, recursive=self._config.recursive, path_filter=self._filter)
        self._stop_event = threading.Event()
        self._error = None
        self._stats = WatcherStats()
        self._worker = threading.Thread(
            target=self._run,
            args=(store, self._stop_event),
            name=f"pollwatch-{root.name or root}",
            daemon=True,
        )
        logger.info(
            "Starting watcher for %s (%s files, interval=%sms)",
            root,
            len(store),
            self._config.interval_ms,
        )
        self._worker.start()

    def stop(self) -> None:
        """Signal the loop to exit and wait until it has.

        Safe to call when not running. No callback runs after this returns,
        unless it is called from inside a callback, in which case the loop
        exits once that callback returns.
        """

        worker = self._worker
        if worker is None:
            return

        if self._stop_event is not None:
            self._stop_event.set()
        if worker is threading.current_thread():
            return
        worker.join()
        self._finish()

    close = stop

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the loop exits or ``timeout`` elapses.

        Returns True if the loop has exited. From inside a callback the loop
        cannot have exited yet, so this returns False without blocking.
        """

        worker = self._worker
        if worker is None:
            return True
        if worker is threading.current_thread():
            return False
        worker.join(timeout)
        if worker.is_alive():
            return False
        self._finish()
        return True

    def __enter__(self) -> "PollingWatcher":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _finish(self) -> None:
        self._worker = None
        self._stop_event = None
        error = self._error
        if error is None:
            return
        if isinstance(error, PollWatchError):
            raise error
        raise PollWatchError(f"Watcher loop for {self._config.root_path} failed: {error}") from error

    def _run(self, store: SnapshotStore, stop_event: threading.Event) -> None:
        root = self._config.root_path
        loop: Optional[asyncio.AbstractEventLoop] = None
        try:
            if self._config.emit_initial:
                initial = [ChangeEvent.of(WatchEvent.NONE, record) for record in store]
                loop = self._dispatch(initial, loop)

            while not stop_event.is_set():
                if stop_event.wait(self._config.interval):
                    break

                events = self._engine.run(store)
                self._stats.cycles += 1
                self._stats.events_emitted += len(events)
                logger.debug("Tick %s for %s produced %s events", self._stats.cycles, root, len(events))
                loop = self._dispatch(events, loop)
        except Exception as exc:
            self._error = exc
            logger.exception("Watcher for %s stopped on error", root)
        finally:
            if loop is not None:
                loop.close()
            logger.info(
                "Watcher for %s stopped after %s cycles, %s events",
                root,
                self._stats.cycles,
                self._stats.events_emitted,
            )

    def _dispatch(
        self,
        events: Batch,
        loop: Optional[asyncio.AbstractEventLoop],
    ) -> Optional[asyncio.AbstractEventLoop]:
        for callback in self._callbacks:
            try:
                result = callback(list(events))
                if inspect.isawaitable(result):
                    if loop is None:
                        loop = asyncio.new_event_loop()
                    loop.run_until_complete(result)
            except Exception as exc:
                name = getattr(callback, "__name__", repr(callback))
                raise CallbackError(f"Callback {name} failed: {exc}") from exc
        return loop
