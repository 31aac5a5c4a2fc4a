"""PyLogKV: a minimal embedded key-value store on a single append-only log.

Records are appended as ``key,value\\n`` lines and located through an
in-memory index of value offsets. Use :func:`pylogkv.open` to get a
:class:`pylogkv.DB`.
"""

from __future__ import annotations

__all__ = [
    "DB",
    "KeyNotFoundError",
    "open",
]

from .db import DB, open
from .errors import KeyNotFoundError
