"""Capture-list resolution and matching logic (core domain)."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from sneaker.core.errors import ConfigurationError

WILDCARD = "*"


def qualified_type_name(cls: type) -> str:
    """Return ``module.QualName`` for a class, or the bare name for builtins."""

    module = getattr(cls, "__module__", None)
    if not module or module == "builtins":
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def exception_lineage(cls: type) -> Tuple[str, ...]:
    """Return qualified names of ``cls`` and its exception supertypes.

    The lineage is resolved once when an event is captured so matching never
    needs the live class again.
    """

    return tuple(
        qualified_type_name(base)
        for base in cls.__mro__
        if isinstance(base, type) and issubclass(base, BaseException)
    )


def build_capture_list(entries: Iterable[object]) -> Tuple[str, ...]:
    """Normalize configured capture entries into pattern strings.

    Entries may be exception classes (resolved to their qualified name) or
    strings. Blank strings are dropped and duplicates collapsed.
    """

    patterns: List[str] = []
    for entry in entries:
        if isinstance(entry, type) and issubclass(entry, BaseException):
            pattern = qualified_type_name(entry)
        elif isinstance(entry, str):
            pattern = entry.strip()
        else:
            raise ConfigurationError(f"Unsupported capture entry: {entry!r}")
        if pattern and pattern not in patterns:
            patterns.append(pattern)
    return tuple(patterns)


def _pattern_matches(pattern: str, qualified_name: str) -> bool:
    if pattern == qualified_name:
        return True
    # Dot-less patterns name a class regardless of the module defining it.
    if "." not in pattern:
        return qualified_name.rpartition(".")[2] == pattern
    return False


def matches_capture_list(lineage: Sequence[str], patterns: Sequence[str]) -> bool:
    """Return True when any pattern names the event type or one of its supertypes."""

    if WILDCARD in patterns:
        return True
    return any(_pattern_matches(pattern, name) for pattern in patterns for name in lineage)
