"""High-level DB interface tying the log file and the index together.

Write path: append the record to the log, *then* point the index at the new
value offset. A failed append therefore never leaves an index entry behind.
Read path: index lookup, then one positional read. ``has`` and ``delete``
touch the index only; deleted and overwritten records stay in the file
forever (there is no compaction).

Deletes are not written to the log. When an existing file is reopened with
``rebuild=True`` the index is rebuilt from every record present, so keys
deleted in an earlier session come back. A torn trailing record is
terminated on open so new appends start a fresh line.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from .errors import KeyNotFoundError
from .index import Index
from .logfile import LogFile

__all__ = ["DB", "open"]

logger = logging.getLogger(__name__)


class DB:
    """Key-value store backed by a single append-only log file."""

    def __init__(
        self,
        path: str | Path,
        truncate: bool = False,
        *,
        rebuild: bool = True,
        sync: bool = False,
    ):
        self._log = LogFile(path, truncate, sync=sync)
        self._index = Index()
        if not truncate:
            try:
                if rebuild:
                    self._rebuild()
                # a torn tail stays unindexed for this session but must not swallow new appends
                self._log.seal()
            except BaseException:
                self._log.close()
                raise

    # ------------------------------------------------------------------
    # Lifecycle 🔧
    # ------------------------------------------------------------------
    def close(self) -> None:
        self._log.close()

    def __enter__(self) -> "DB":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def path(self) -> Path:
        return self._log.path

    @property
    def size(self) -> int:
        """Bytes on disk, live and orphaned records alike."""
        return self._log.size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get(self, key: bytes) -> bytes:
        """Return the current value; raises KeyNotFoundError, lets OSError through."""
        offset = self._index.lookup(key)
        if offset is None:
            raise KeyNotFoundError(key)
        return self._log.read_value_at(offset)

    def has(self, key: bytes) -> bool:
        return self._index.contains(key)

    __contains__ = has

    def put(self, key: bytes, value: bytes) -> None:
        """Append the record, then point the index at it."""
        offset = self._log.append(key, value)
        self._index.insert_or_update(key, offset)

    def delete(self, key: bytes) -> None:
        """Forget *key*; its bytes stay in the log. No-op if absent."""
        self._index.remove(key)

    def __len__(self) -> int:
        return len(self._index)

    # ------------------------------------------------------------------
    # Iteration (insertion order, restartable)
    # ------------------------------------------------------------------
    def items(self) -> Iterator[tuple[bytes, bytes]]:
        """Yield ``(key, value)`` pairs as the index stood when iteration began."""
        for key, offset in self._index.iterate():
            yield key, self._log.read_value_at(offset)

    __iter__ = items

    def keys(self) -> Iterator[bytes]:
        for key, _ in self._index.iterate():
            yield key

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _rebuild(self) -> None:
        """Repopulate the index from the records already in the log."""
        self._index.clear()
        records = 0
        for key, offset in self._log.scan():
            self._index.insert_or_update(key, offset)
            records += 1
        logger.debug(
            "rebuilt index for %s: %d records, %d live keys",
            self._log.path, records, len(self._index),
        )


def open(path: str | Path, truncate: bool = False, **options) -> DB:
    """Open (creating if needed) the log at *path*. See :class:`DB` for options."""
    return DB(path, truncate, **options)
