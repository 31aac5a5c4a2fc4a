"""Append-only log file holding every record ever written.

The on-disk format is one record per line with no header or footer:

    ┌──────────────────────────────────────────┐
    │ <key> "," <value> "\\n"                   │
    │ <key> "," <value> "\\n"                   │
    │               …                          │
    └──────────────────────────────────────────┘

Neither key nor value may contain ``,`` or ``\\n``. This is *not* checked here:
a key with a comma is mis-split on rescan, a value with a newline is cut short
on read.

Writes go through a buffered append handle that is flushed on every record.
Reads never share a cursor with anything: each read is an ``os.pread`` at an
explicit offset on a separate read-only descriptor.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

__all__ = ["LogFile"]

logger = logging.getLogger(__name__)

_SEP = b","
_EOL = b"\n"
_READ_CHUNK = 4096  # bytes per pread while looking for _EOL


class LogFile:
    """Single append-only record file.

    Parameters
    ----------
    path: str | Path
        Location of the log. Created if missing.
    truncate: bool
        Discard any existing content.
    sync: bool
        ``os.fsync`` after every append, not just flush to the OS.
    """

    def __init__(self, path: str | Path, truncate: bool = False, *, sync: bool = False) -> None:
        self.path = Path(path)
        self._sync = sync
        # writer first: it creates (and optionally truncates) the file
        self._writer: Optional[BinaryIO] = open(self.path, "wb" if truncate else "ab")
        try:
            self._fd: int = os.open(self.path, os.O_RDONLY)
        except OSError:
            self._writer.close()
            raise
        logger.debug("opened log %s (truncate=%s, size=%d)", self.path, truncate, self.size)

    # ------------------------------------------------------------------
    # Lifecycle 💾
    # ------------------------------------------------------------------
    @property
    def closed(self) -> bool:
        return self._writer is None

    def close(self) -> None:
        if self._writer is None:
            return
        try:
            self._writer.close()
        finally:
            self._writer = None
            os.close(self._fd)
            self._fd = -1
        logger.debug("closed log %s", self.path)

    @property
    def size(self) -> int:
        """Current end-of-log position in bytes."""
        return self._w().tell()

    # ------------------------------------------------------------------
    # Append API ✏️
    # ------------------------------------------------------------------
    def append(self, key: bytes, value: bytes) -> int:
        """Write one record and return the offset of its value's first byte."""
        w = self._w()
        # whole record built first: a bad key/value raises before anything is buffered
        rec = key + _SEP + value + _EOL
        offset = w.tell() + len(key) + len(_SEP)
        w.write(rec)
        self._commit(w)
        return offset

    def seal(self) -> bool:
        """Terminate a torn trailing record so the next append starts a fresh line.

        Returns True if a terminator had to be written.
        """
        w = self._w()
        end = w.tell()
        if end == 0 or os.pread(self._fd, 1, end - 1) == _EOL:
            return False
        logger.warning("%s: terminating incomplete trailing record at end of log (%d bytes)", self.path, end)
        w.write(_EOL)
        self._commit(w)
        return True

    # ------------------------------------------------------------------
    # Positional reads 🔍
    # ------------------------------------------------------------------
    def read_value_at(self, offset: int) -> bytes:
        """Return the bytes from *offset* up to (excluding) the next newline."""
        self._w()
        chunks: list[bytes] = []
        pos = offset
        while True:
            chunk = os.pread(self._fd, _READ_CHUNK, pos)
            if not chunk:
                break
            end = chunk.find(_EOL)
            if end != -1:
                chunks.append(chunk[:end])
                break
            chunks.append(chunk)
            pos += len(chunk)
        return b"".join(chunks)

    # ------------------------------------------------------------------
    # Scan helper (used by index rebuild)
    # ------------------------------------------------------------------
    def scan(self) -> Iterator[tuple[bytes, int]]:
        """Yield ``(key, value_offset)`` for every complete record, in file order."""
        w = self._w()
        w.flush()
        with open(self.path, "rb") as fp:
            line_start = 0
            for line in fp:
                next_start = line_start + len(line)
                if not line.endswith(_EOL):
                    logger.warning(
                        "%s: ignoring incomplete trailing record at offset %d (%d bytes)",
                        self.path, line_start, len(line),
                    )
                    break
                sep = line.find(_SEP)
                if sep == -1:
                    logger.warning("%s: skipping record without separator at offset %d", self.path, line_start)
                else:
                    yield line[:sep], line_start + sep + 1
                line_start = next_start

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _commit(self, w: BinaryIO) -> None:
        w.flush()
        if self._sync:
            os.fsync(w.fileno())

    def _w(self) -> BinaryIO:
        if self._writer is None:
            raise ValueError(f"I/O operation on closed log {self.path}")
        return self._writer
