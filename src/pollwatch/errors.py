"""Exception hierarchy shared by the watcher components."""
from __future__ import annotations


class PollWatchError(Exception):
    """Base class for errors raised by pollwatch."""


class CallbackError(PollWatchError):
    """Raised to the watcher's owner when a consumer callback failed."""
