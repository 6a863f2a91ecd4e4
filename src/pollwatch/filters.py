"""Path filtering with regular-expression allow and deny lists."""
from __future__ import annotations

import re
from typing import Iterable, Pattern, Tuple, Union

PatternLike = Union[str, Pattern[str]]


class PathFilter:
    """Decides whether a discovered path is in scope.

    With no patterns every path is accepted. Otherwise a path "matches" when
    any pattern is found anywhere in it (``re.search``); the result is the
    match itself for an allow-list, or its negation when ``inverted`` turns
    the patterns into a deny-list.
    """

    def __init__(self, patterns: Iterable[PatternLike] = (), *, inverted: bool = False):
        self._patterns: Tuple[Pattern[str], ...] = tuple(_compile(p) for p in patterns)
        self._inverted = inverted

    @property
    def patterns(self) -> Tuple[Pattern[str], ...]:
        return self._patterns

    @property
    def inverted(self) -> bool:
        return self._inverted

    def accepts(self, path: str) -> bool:
        if not self._patterns:
            return True

        matched_any = any(pattern.search(path) for pattern in self._patterns)
        return not matched_any if self._inverted else matched_any

    __call__ = accepts

    def __repr__(self) -> str:
        mode = "deny" if self._inverted else "allow"
        return f"PathFilter({[p.pattern for p in self._patterns]!r}, mode={mode})"


def _compile(pattern: PatternLike) -> Pattern[str]:
    if isinstance(pattern, re.Pattern):
        return pattern
    if not isinstance(pattern, str):
        raise TypeError(f"Filter patterns must be strings or compiled regexes, got {type(pattern).__name__}")
    return re.compile(pattern)
