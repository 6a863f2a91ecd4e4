"""Event models shared across watcher components."""
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntFlag
from typing import Any, Iterable, Union


class WatchEvent(IntFlag):
    """Kinds of filesystem changes reported by the watcher.

    Used as a bitmask when configuring which passes run, and as a single
    value on each emitted event. ``NONE`` only appears on the initial
    snapshot batch.
    """

    NONE = 0
    CREATED = 1
    DELETED = 2
    DATE_MODIFIED = 4
    SIZE_MODIFIED = 8

    MODIFIED = DATE_MODIFIED | SIZE_MODIFIED
    ALL = CREATED | DELETED | MODIFIED

    @classmethod
    def parse(cls, value: Union[int, str, Iterable[Any]]) -> "WatchEvent":
        """Build a mask from an int, a flag name, or a list of either."""

        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid event mask: {value!r}")
        if isinstance(value, int):
            if value < 0:
                raise ValueError(f"Event mask must not be negative, got {value}")
            return cls(value)
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_")
            try:
                return cls[key]
            except KeyError:
                allowed = ", ".join(member.name.lower() for member in _NAMED_FLAGS)
                raise ValueError(f"Unknown event kind '{value}' (expected one of: {allowed})") from None

        mask = cls.NONE
        for item in value:
            mask |= cls.parse(item)
        return mask


_NAMED_FLAGS = (
    WatchEvent.NONE,
    WatchEvent.CREATED,
    WatchEvent.DELETED,
    WatchEvent.DATE_MODIFIED,
    WatchEvent.SIZE_MODIFIED,
    WatchEvent.MODIFIED,
    WatchEvent.ALL,
)


@dataclass
class FileRecord:
    """Last observed state of a single file.

    The modification time is kept in integer nanoseconds so that changes
    finer than a float timestamp can represent are still seen.
    """

    path: str
    size: int
    mtime_ns: int

    @property
    def mtime(self) -> float:
        """Modification time in seconds since the epoch."""

        return self.mtime_ns / 1_000_000_000

    def copy(self) -> "FileRecord":
        return replace(self)


@dataclass(frozen=True)
class ChangeEvent:
    """A single change observed in the watched directory tree."""

    kind: WatchEvent
    record: FileRecord

    @property
    def path(self) -> str:
        return self.record.path

    @property
    def size(self) -> int:
        return self.record.size

    @property
    def mtime(self) -> float:
        return self.record.mtime

    @classmethod
    def of(cls, kind: WatchEvent, record: FileRecord) -> "ChangeEvent":
        """Capture ``record`` as it is right now."""

        return cls(kind=kind, record=record.copy())
