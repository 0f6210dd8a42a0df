"""Run-scoped registry of red/black sample pairs."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from eqverify.core.errors import InvalidOverrideError
from eqverify.core.typeshape import type_key


@dataclass(frozen=True)
class Pair:
    """Two deliberately non-equal sample values for one type.

    ``pending`` names the types still being generated that this pair had to
    stub out to break a cycle. Such a placeholder pair is usable by the type
    that is in progress but is never cached.
    """

    red: Any
    black: Any
    pending: frozenset[Any] = frozenset()

    @property
    def placeholder(self) -> bool:
        return bool(self.pending)

    def settle(self, key: Any) -> Pair:
        """Drop ``key`` from ``pending`` once its generation has finished."""
        if key not in self.pending:
            return self
        return Pair(self.red, self.black, self.pending - {key})


def _values_differ(red: Any, black: Any) -> bool:
    try:
        return not bool(red == black)
    except Exception:
        return red is not black


class ValueCache:
    """Mapping from type identity to a cached ``Pair``.

    Overrides are installed before any generation happens and always take
    precedence. Generated pairs are stored once and reused for the whole run.
    """

    def __init__(self, overrides: Mapping[Any, tuple[Any, Any]] | None = None):
        self._overrides: dict[Any, Pair] = {}
        self._generated: dict[Any, Pair] = {}
        self._in_progress: list[Any] = []
        self._hits = 0
        self._misses = 0
        for type_id, (red, black) in (overrides or {}).items():
            self.add_override(type_id, red, black)

    def add_override(self, type_id: Any, red: Any, black: Any) -> None:
        """Register a user-supplied pair.
        Raises:
            InvalidOverrideError: If ``red`` and ``black`` are equal.
        """
        if not _values_differ(red, black):
            raise InvalidOverrideError(type_id, "red and black values are equal")
        self._overrides[type_key(type_id)] = Pair(red, black)

    def has_override(self, type_id: Any) -> bool:
        return type_key(type_id) in self._overrides

    def lookup(self, type_id: Any) -> Pair | None:
        """Override first, then previously generated pair."""
        key = type_key(type_id)
        pair = self._overrides.get(key) or self._generated.get(key)
        if pair is None:
            self._misses += 1
        else:
            self._hits += 1
        return pair

    def store(self, type_id: Any, pair: Pair) -> Pair:
        """Cache a generated pair; placeholders are returned but not kept."""
        if pair.placeholder:
            return pair
        key = type_key(type_id)
        if key in self._overrides:
            return self._overrides[key]
        return self._generated.setdefault(key, pair)

    def is_generating(self, type_id: Any) -> bool:
        return type_key(type_id) in self._in_progress

    @contextmanager
    def generating(self, type_id: Any) -> Iterator[None]:
        """Mark ``type_id`` as in progress for the duration of the block."""
        key = type_key(type_id)
        self._in_progress.append(key)
        try:
            yield
        finally:
            self._in_progress.pop()

    @property
    def in_progress(self) -> tuple[Any, ...]:
        return tuple(self._in_progress)

    def __contains__(self, type_id: Any) -> bool:
        key = type_key(type_id)
        return key in self._overrides or key in self._generated

    def __len__(self) -> int:
        return len(self._generated.keys() | self._overrides.keys())

    def stats(self) -> dict[str, int]:
        return {
            "overrides": len(self._overrides),
            "generated": len(self._generated),
            "hits": self._hits,
            "misses": self._misses,
        }


__all__ = ["Pair", "ValueCache"]
