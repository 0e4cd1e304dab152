from __future__ import annotations
"""Include/exclude glob filtering of keys and file paths."""
import fnmatch
import re
from enum import Enum
from typing import Iterable, Optional


class GlobSet:
    """Immutable set of glob patterns matched against keys.

    ``*`` also matches ``/`` and a ``**/`` segment may match no directory at
    all, so ``**/*.jpg`` matches both ``a.jpg`` and ``x/y/a.jpg``.
    """

    __slots__ = ("_patterns", "_regex")

    def __init__(self, patterns: Iterable[str]):
        self._patterns = tuple(patterns)
        if not self._patterns:
            raise ValueError("GlobSet requires at least one pattern")
        variants: list[str] = []
        for pattern in self._patterns:
            variants.append(fnmatch.translate(pattern))
            if "**/" in pattern:
                variants.append(fnmatch.translate(pattern.replace("**/", "")))
        self._regex = re.compile("|".join(f"(?:{variant})" for variant in variants))

    @classmethod
    def build(cls, patterns: Optional[Iterable[str]]) -> Optional["GlobSet"]:
        if not patterns:
            return None
        patterns = [pattern for pattern in patterns if pattern]
        return cls(patterns) if patterns else None

    @property
    def patterns(self) -> tuple[str, ...]:
        return self._patterns

    def matches(self, value: str) -> bool:
        return self._regex.match(value) is not None

    def __repr__(self) -> str:
        return f"GlobSet({list(self._patterns)!r})"


class Inex(Enum):
    INCLUDE = "include"
    # Passed the include gate but matched an exclude, reported to the user.
    EXCLUDE_IN_EXCLUDE = "exclude_in_exclude"
    # Not in the include list, never reported.
    EXCLUDE_NOT_IN_INCLUDE = "exclude_not_in_include"


def classify_inex(key: str, includes: Optional[GlobSet], excludes: Optional[GlobSet]) -> Inex:
    if includes is not None and not includes.matches(key):
        return Inex.EXCLUDE_NOT_IN_INCLUDE
    if excludes is not None and excludes.matches(key):
        return Inex.EXCLUDE_IN_EXCLUDE
    return Inex.INCLUDE


def is_included(key: str, includes: Optional[GlobSet], excludes: Optional[GlobSet]) -> bool:
    return classify_inex(key, includes, excludes) is Inex.INCLUDE
