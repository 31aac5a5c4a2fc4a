"""Exceptions raised by the engine.

Only lookup misses get their own type. File-system failures surface as the
plain ``OSError`` raised by the underlying call.
"""
from __future__ import annotations

__all__ = ["KeyNotFoundError"]


class KeyNotFoundError(KeyError):
    """Raised by :meth:`pylogkv.DB.get` when the key is not in the index."""

    def __init__(self, key: bytes):
        super().__init__(key)
        self.key = key
