"""Include/exclude filters deciding which build outputs are processed.

A filter admits a path when at least one ``include`` pattern matches it and
no ``exclude`` pattern does. Patterns are path predicates: anything with a
``test(path) -> bool`` method. Plain strings and compiled regular
expressions are searched anywhere in the path (``re.search``), so anchor
them explicitly when a full match is wanted.
"""

from __future__ import annotations

import fnmatch
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@runtime_checkable
class PathPredicate(Protocol):
    def test(self, path: str) -> bool: ...


class RegexPredicate:
    """Regular expression searched anywhere in the path."""

    def __init__(self, pattern: str | re.Pattern[str]) -> None:
        self.regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    def test(self, path: str) -> bool:
        return self.regex.search(path) is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegexPredicate):
            return NotImplemented
        return self.regex == other.regex

    def __hash__(self) -> int:
        return hash(self.regex)

    def __repr__(self) -> str:
        return f"RegexPredicate({self.regex.pattern!r})"


class GlobPredicate:
    """Shell-style wildcard matched against the whole path (case-sensitive)."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern

    def test(self, path: str) -> bool:
        return fnmatch.fnmatchcase(path, self.pattern)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GlobPredicate):
            return NotImplemented
        return self.pattern == other.pattern

    def __hash__(self) -> int:
        return hash(self.pattern)

    def __repr__(self) -> str:
        return f"GlobPredicate({self.pattern!r})"


class LiteralSetPredicate:
    """Exact path names."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = frozenset(names)

    def test(self, path: str) -> bool:
        return path in self.names

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LiteralSetPredicate):
            return NotImplemented
        return self.names == other.names

    def __hash__(self) -> int:
        return hash(self.names)

    def __repr__(self) -> str:
        return f"LiteralSetPredicate({sorted(self.names)!r})"


def glob(pattern: str) -> GlobPredicate:
    return GlobPredicate(pattern)


def literal(*names: str) -> LiteralSetPredicate:
    return LiteralSetPredicate(names)


@dataclass(frozen=True)
class MatchFilter:
    """Normalized filter.

    ``exclude=None`` means "exclude nothing"; an empty tuple behaves the same.
    """

    include: tuple[PathPredicate, ...]
    exclude: tuple[PathPredicate, ...] | None = None


def as_predicate(value: Any) -> PathPredicate:
    """Turn a raw pattern into a path predicate.

    Raises:
        ConfigurationError: If the value cannot be used as a pattern.
    """
    if isinstance(value, (str, re.Pattern)):
        return RegexPredicate(value)
    if isinstance(value, PathPredicate) and callable(value.test):
        return value
    raise ConfigurationError(f"Unsupported pattern: {value!r}")


def as_predicates(value: Any) -> tuple[PathPredicate, ...]:
    """Normalize a single pattern or a sequence of patterns to a tuple."""
    if isinstance(value, (list, tuple, set, frozenset)):
        return tuple(as_predicate(item) for item in value)
    return (as_predicate(value),)


def _include_predicates(value: Any) -> tuple[PathPredicate, ...]:
    if value is None:
        return ()
    items = value if isinstance(value, (list, tuple, set, frozenset)) else [value]
    predicates: list[PathPredicate] = []
    for item in items:
        try:
            predicates.append(as_predicate(item))
        except (ConfigurationError, re.error) as e:
            logger.warning("Ignoring include pattern %r: %s", item, e)
    return tuple(predicates)


def _exclude_predicates(value: Any) -> tuple[PathPredicate, ...] | None:
    # Any boolean disables exclusion, matching the historical option format.
    if value is None or isinstance(value, bool):
        return None
    try:
        return as_predicates(value)
    except (ConfigurationError, re.error) as e:
        logger.warning("Invalid exclude %r, excluding nothing: %s", value, e)
        return None


def as_filter(raw: MatchFilter | Mapping[str, Any]) -> MatchFilter:
    """Normalize a raw ``{"include": ..., "exclude": ...}`` mapping.

    Never raises: unusable include patterns are dropped (a filter left with
    no include pattern admits nothing) and an unusable exclude value is
    treated as "exclude nothing".
    """
    if isinstance(raw, MatchFilter):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Invalid filter %r, admitting nothing", raw)
        return MatchFilter(include=())
    return MatchFilter(
        include=_include_predicates(raw.get("include")),
        exclude=_exclude_predicates(raw.get("exclude", False)),
    )


def matches(path: str, match_filter: MatchFilter | Mapping[str, Any]) -> bool:
    """Return True if ``path`` passes the include/exclude filter."""
    match_filter = as_filter(match_filter)

    if not any(_test(predicate, path) for predicate in match_filter.include):
        return False

    if match_filter.exclude is None:
        return True

    return not any(_test(predicate, path) for predicate in match_filter.exclude)


def _test(predicate: PathPredicate, path: str) -> bool:
    """Run one predicate; a predicate that raises counts as no match."""
    try:
        return bool(predicate.test(path))
    except Exception as e:
        logger.warning("Pattern %r failed on %r, treating as no match: %s", predicate, path, e)
        return False
