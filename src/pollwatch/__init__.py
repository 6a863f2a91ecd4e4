"""Polling-based directory watcher."""
from __future__ import annotations

from .config import AppConfig, CallbackConfig, ConfigError, WatchConfig, load_config
from .diff import DiffEngine
from .errors import CallbackError, PollWatchError
from .events import ChangeEvent, FileRecord, WatchEvent
from .filters import PathFilter
from .watcher import PollingWatcher, WatcherStats

__all__ = [
    "AppConfig",
    "CallbackConfig",
    "CallbackError",
    "ChangeEvent",
    "ConfigError",
    "DiffEngine",
    "FileRecord",
    "PathFilter",
    "PollWatchError",
    "PollingWatcher",
    "WatchConfig",
    "WatchEvent",
    "WatcherStats",
    "load_config",
]
