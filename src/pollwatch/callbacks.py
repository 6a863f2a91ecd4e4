"""Consumer callbacks that can be referenced from configuration."""
from __future__ import annotations

import importlib
import logging
from collections import Counter
from types import ModuleType
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .config import CallbackConfig, ConfigError
from .events import ChangeEvent, WatchEvent

logger = logging.getLogger(__name__)

Batch = List[ChangeEvent]
BatchCallback = Callable[[Batch], Union[None, Awaitable[None]]]
ConfiguredCallback = Callable[[Batch, Dict[str, Any]], Union[None, Awaitable[None]]]


def load_callback(config: CallbackConfig) -> BatchCallback:
    """Import ``config.module`` and bind ``config.function`` to its options."""

    module = _import_module(config.module)
    try:
        function = getattr(module, config.function)
    except AttributeError as exc:
        raise ConfigError(f"Could not find callback '{config.function}' in {config.module}") from exc

    if not callable(function):
        raise ConfigError(f"Callback '{config.function}' in {config.module} is not callable")

    options = dict(config.options or {})
    configured: ConfiguredCallback = function

    def callback(events: Batch) -> Union[None, Awaitable[None]]:
        return configured(events, options)

    callback.__name__ = f"{config.module}.{config.function}"
    return callback


def log_events(events: Batch, options: Dict[str, Any]) -> None:
    """Log one line per event in the batch."""

    level = _level(options)
    if not events:
        if options.get("log_empty", False):
            logger.log(level, "No changes detected")
        return

    message = options.get("message", "Filesystem change")
    for event in events:
        logger.log(level, "%s: %s", message, describe_event(event))


def summarize_events(events: Batch, options: Dict[str, Any]) -> None:
    """Log a single line counting the batch's events per kind."""

    level = _level(options)
    counts = Counter(event.kind for event in events)
    if not counts:
        logger.log(level, "No changes detected")
        return

    summary = ", ".join(f"{_kind_name(kind)}: {counts[kind]}" for kind in sorted(counts))
    logger.log(level, "%s changes (%s)", len(events), summary)


def describe_event(event: ChangeEvent) -> str:
    return f"type={_kind_name(event.kind)}, path={event.path}, size={event.size}, mtime={event.mtime}"


def _kind_name(kind: WatchEvent) -> str:
    if kind == WatchEvent.NONE:
        return "initial"
    return (kind.name or str(int(kind))).lower()


def _level(options: Dict[str, Any]) -> int:
    level_name = str(options.get("level", "INFO")).upper()
    level: Optional[int] = getattr(logging, level_name, None)
    if not isinstance(level, int):
        logger.warning("Unknown log level %r; using INFO", options.get("level"))
        return logging.INFO
    return level


def _import_module(module_path: str) -> ModuleType:
    try:
        return importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigError(f"Unable to import callback module '{module_path}'") from exc
