"""Watcher configuration and YAML loading utilities."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml  # type: ignore

from .errors import PollWatchError
from .events import WatchEvent
from .filters import PathFilter, PatternLike

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 10000


class ConfigError(PollWatchError):
    """Raised when the watcher configuration is missing or invalid."""


@dataclass(frozen=True)
class WatchConfig:
    """Options describing what to watch and how often.

    Captured once at construction and never changed afterwards. ``None``
    (or zero) for ``interval_ms`` and ``None`` (or ``WatchEvent.NONE``) for
    ``events`` fall back to the documented defaults; anything else invalid
    raises :class:`ConfigError`.
    """

    root_path: Path
    recursive: bool = False
    interval_ms: Optional[int] = DEFAULT_INTERVAL_MS
    events: Optional[WatchEvent] = WatchEvent.ALL
    filters: Tuple[PatternLike, ...] = ()
    filters_inverted: bool = False
    emit_initial: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.root_path, (str, Path)):
            raise ConfigError("root_path must be a path or string")
        object.__setattr__(self, "root_path", Path(self.root_path))
        object.__setattr__(self, "interval_ms", _check_interval(self.interval_ms))
        object.__setattr__(self, "events", _check_events(self.events))

        filters = self.filters
        if isinstance(filters, (str, re.Pattern)):
            filters = (filters,)
        object.__setattr__(self, "filters", tuple(filters or ()))
        self.build_filter()

    @property
    def interval(self) -> float:
        """Polling interval in seconds."""

        return self.interval_ms / 1000.0

    def build_filter(self) -> PathFilter:
        try:
            return PathFilter(self.filters, inverted=self.filters_inverted)
        except (re.error, TypeError) as exc:
            raise ConfigError(f"Invalid filter pattern: {exc}") from exc


@dataclass
class CallbackConfig:
    """Consumer callback resolved by import path from the configuration file."""

    module: str
    function: str
    options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class AppConfig:
    """Top-level configuration structure."""

    watch: WatchConfig
    callback: Optional[CallbackConfig] = None


def load_config(path: Path) -> AppConfig:
    """Load and validate the YAML configuration file."""

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML configuration: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    watch_cfg = _parse_watch_config(data.get("watch"), config_path=path)
    callback_cfg = _parse_callback_config(data.get("callback"))

    return AppConfig(watch=watch_cfg, callback=callback_cfg)


def _parse_watch_config(raw: Any, *, config_path: Path) -> WatchConfig:
    if not isinstance(raw, dict):
        raise ConfigError("'watch' section must be a mapping")

    root_path_raw = raw.get("root_path")
    if not isinstance(root_path_raw, str):
        raise ConfigError("watch.root_path must be a string")

    root_path = Path(root_path_raw)
    if not root_path.is_absolute():
        root_path = (config_path.parent / root_path).resolve()

    recursive = _ensure_bool(raw.get("recursive", False), "watch.recursive")
    filters_inverted = _ensure_bool(raw.get("filters_inverted", False), "watch.filters_inverted")
    emit_initial = _ensure_bool(raw.get("emit_initial", False), "watch.emit_initial")

    interval_raw = raw.get("interval_ms", DEFAULT_INTERVAL_MS)
    if interval_raw is not None and (isinstance(interval_raw, bool) or not isinstance(interval_raw, int)):
        raise ConfigError("watch.interval_ms must be an integer number of milliseconds")

    events_raw = raw.get("events")
    events: Optional[WatchEvent] = None
    if events_raw is not None:
        try:
            events = WatchEvent.parse(events_raw)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"watch.events is invalid: {exc}") from exc

    filters = _ensure_str_list(raw.get("filters", []), "watch.filters")

    config = WatchConfig(
        root_path=root_path,
        recursive=recursive,
        interval_ms=interval_raw,
        events=events,
        filters=tuple(filters),
        filters_inverted=filters_inverted,
        emit_initial=emit_initial,
    )
    logger.info(
        "Loaded watch config for %s (interval=%sms, events=%s, %s filters)",
        config.root_path,
        config.interval_ms,
        config.events,
        len(config.filters),
    )
    return config


def _parse_callback_config(raw: Any) -> Optional[CallbackConfig]:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ConfigError("'callback' section must be a mapping")

    module = raw.get("module")
    function = raw.get("function")
    options = raw.get("options", {})
    if not isinstance(module, str) or not isinstance(function, str):
        raise ConfigError("callback must include 'module' and 'function' strings")
    if options is None:
        options = {}
    if not isinstance(options, dict):
        raise ConfigError("callback.options must be a mapping if provided")

    return CallbackConfig(module=module, function=function, options=options)


def _check_interval(value: Any) -> int:
    if value is None or (isinstance(value, int) and not isinstance(value, bool) and value == 0):
        return DEFAULT_INTERVAL_MS
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"interval_ms must be a positive integer, got {value!r}")
    if value < 0:
        raise ConfigError(f"interval_ms must be positive, got {value}")
    return value


def _check_events(value: Any) -> WatchEvent:
    if value is None:
        return WatchEvent.ALL
    try:
        mask = WatchEvent.parse(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid event mask: {exc}") from exc
    if int(mask) & ~int(WatchEvent.ALL):
        raise ConfigError(f"Event mask {int(mask)} has bits outside {int(WatchEvent.ALL)}")
    if mask == WatchEvent.NONE:
        return WatchEvent.ALL
    return mask


def _ensure_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"{field_name} must be a boolean")
    return value


def _ensure_str_list(value: Any, field_name: str) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise ConfigError(f"{field_name} must be a list of strings")
    items: List[str] = []
    for elem in value:
        if not isinstance(elem, str):
            raise ConfigError(f"{field_name} must contain only strings")
        items.append(elem)
    return items
