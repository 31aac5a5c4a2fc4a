"""In-memory index mapping each live key to its value offset in the log.

Backed by a plain ``dict``, which keeps insertion order, leaves an existing
key in place when its value is reassigned and removes keys in O(1) average
time without disturbing the order of the rest.

Complexities (average case):
    • lookup   – O(1)
    • insert   – O(1)
    • remove   – O(1)
    • iterate  – O(n), over a snapshot
"""
from __future__ import annotations

from collections.abc import Iterator
from typing import Optional

__all__ = ["Index"]


class Index:
    """Insertion-ordered ``key -> offset`` map."""

    def __init__(self):
        self._offsets: dict[bytes, int] = {}

    # ---------------------------------------------------------------------
    # Mutation API
    # ---------------------------------------------------------------------
    def insert_or_update(self, key: bytes, offset: int) -> None:
        """Point *key* at *offset*; a known key keeps its iteration position."""
        self._offsets[key] = offset

    def remove(self, key: bytes) -> None:
        self._offsets.pop(key, None)

    def clear(self) -> None:
        self._offsets.clear()

    # ---------------------------------------------------------------------
    # Query API
    # ---------------------------------------------------------------------
    def lookup(self, key: bytes) -> Optional[int]:
        return self._offsets.get(key)

    def contains(self, key: bytes) -> bool:
        return key in self._offsets

    __contains__ = contains

    def __len__(self) -> int:
        return len(self._offsets)

    # ------------------------------------------------------------------
    # Iteration helpers (insertion order)
    # ------------------------------------------------------------------
    def iterate(self) -> Iterator[tuple[bytes, int]]:
        # snapshot: callers may put/delete while walking
        return iter(list(self._offsets.items()))

    __iter__ = iterate
