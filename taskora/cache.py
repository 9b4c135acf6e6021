"""In-process cache of decoded bucket lists.

One ``NoteCache`` lives for one session and is handed to the repository
explicitly. Entries are keyed by the persistent-store key of the bucket and
hold the exact list object that was last loaded or saved, so repeated reads
return the same reference until a write or invalidation.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from taskora.metrics import CACHE_OPERATIONS

logger = logging.getLogger(__name__)


class NoteCache:
    """Write-through, read-through per-key cache with no implicit eviction."""

    def __init__(self) -> None:
        self._entries: dict[str, list[Any]] = {}
        self._hits = 0
        self._misses = 0

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Cache operations
    # ------------------------------------------------------------------

    def get(self, key: str) -> Optional[list[Any]]:
        """Return the cached list, or None on miss."""
        value = self._entries.get(key)
        if value is not None:
            self._hits += 1
            CACHE_OPERATIONS.labels(operation="hit").inc()
            return value
        self._misses += 1
        CACHE_OPERATIONS.labels(operation="miss").inc()
        logger.debug("CACHE_MISS: %s", key)
        return None

    def put(self, key: str, value: list[Any]) -> None:
        """Store ``value`` as the authoritative cached copy for ``key``."""
        self._entries[key] = value

    def invalidate(self, key: str) -> None:
        """Drop one entry so the next read goes back to the store."""
        if self._entries.pop(key, None) is not None:
            CACHE_OPERATIONS.labels(operation="invalidate").inc()

    def clear(self) -> int:
        """Drop every entry and reset counters. Returns count of cleared keys."""
        cleared = len(self._entries)
        self._entries.clear()
        self._hits = 0
        self._misses = 0
        CACHE_OPERATIONS.labels(operation="clear").inc()
        logger.info("Cache cleared (%d entries)", cleared)
        return cleared

    def stats(self) -> dict[str, Any]:
        """Return cache statistics."""
        total = self._hits + self._misses
        hit_rate = self._hits / total if total > 0 else 0.0
        return {
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(hit_rate, 4),
            "total_keys": len(self._entries),
        }
