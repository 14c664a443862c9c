"""Version-keyed cache of detection results with in-flight deduplication.

Each document identity owns a single slot holding the records for exactly
one version. Lookups succeed only on an exact version match. Concurrent
requests for the same ``(key, version)`` share one computation.

Example usage:
    cache = ResultCache()

    records = await cache.get_or_compute(uri, version, lambda: detect_async(doc))

    # Drop results for a closed document
    cache.delete(uri)

All access happens on one event loop, so no locking is needed.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from .indexer_logging import LogCategory, get_category_logger
from .models import DetectionRecord

logger = get_category_logger(LogCategory.CACHE)

Records = list[DetectionRecord]


@dataclass
class CacheEntry:
    """Cached detection result with metadata.

    Attributes:
        version: Document version the records were computed for.
        records: The cached records.
        created_at: Timestamp when entry was created.
        access_count: Number of times this entry has been returned.
    """

    version: int
    records: Records
    created_at: float
    access_count: int = 0


class ResultCache:
    """Single-slot-per-document cache with fan-in of pending computations."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}
        self._pending: dict[tuple[str, int], asyncio.Future[Records]] = {}

        # Statistics
        self._hits = 0
        self._misses = 0
        self._fan_ins = 0

    def get(self, key: str, version: int) -> Records | None:
        """Cached records for exactly this version, or None."""
        entry = self._entries.get(key)
        if entry is None or entry.version != version:
            self._misses += 1
            return None

        entry.access_count += 1
        self._hits += 1
        return entry.records

    def set(self, key: str, version: int, records: Records) -> None:
        """Store records, discarding any other version held for the key."""
        self._entries[key] = CacheEntry(version, records, time.time())

    def delete(self, key: str) -> None:
        """Forget a document's entry and any computation still in flight.

        Callers already awaiting a dropped computation still get its
        result; it is just not stored.
        """
        self._entries.pop(key, None)
        for pending_key in [k for k in self._pending if k[0] == key]:
            del self._pending[pending_key]

    def clear(self) -> None:
        self._entries.clear()
        self._pending.clear()

    def invalidate(self) -> int:
        """Drop every settled entry, leaving in-flight computations alone.

        Returns:
            Number of entries invalidated.
        """
        count = len(self._entries)
        self._entries.clear()
        return count

    async def get_or_compute(
        self,
        key: str,
        version: int,
        compute: Callable[[], Awaitable[Records]],
    ) -> Records:
        """Return cached records or compute them once for all callers.

        Args:
            key: Document identity.
            version: Document version the records must belong to.
            compute: Zero-argument callable returning an awaitable of records.
                Invoked at most once per ``(key, version)`` while in flight.

        Returns:
            The records. Concurrent callers receive the same list object.
        """
        cached = self.get(key, version)
        if cached is not None:
            logger.debug(f"Cache hit for {key}@{version}")
            return cached

        pending_key = (key, version)
        future = self._pending.get(pending_key)
        if future is None:
            logger.debug(f"Cache miss for {key}@{version}, computing")
            future = asyncio.ensure_future(compute())
            self._pending[pending_key] = future
            future.add_done_callback(
                lambda done: self._settle(pending_key, done)
            )
        else:
            self._fan_ins += 1
            logger.debug(f"Joining in-flight computation for {key}@{version}")

        # One caller being cancelled must not cancel the shared computation
        return await asyncio.shield(future)

    def _settle(self, pending_key: tuple[str, int], future: asyncio.Future[Records]) -> None:
        # Dropped by delete() or clear() while running
        if self._pending.get(pending_key) is not future:
            return
        del self._pending[pending_key]

        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.debug(f"Computation for {pending_key[0]}@{pending_key[1]} failed: {error}")
            return

        key, version = pending_key
        entry = self._entries.get(key)
        if entry is not None and entry.version > version:
            # A newer version settled first
            return
        self.set(key, version, future.result())

    def has_pending(self, key: str, version: int | None = None) -> bool:
        """Whether a computation is in flight for the key (and version)."""
        if version is not None:
            return (key, version) in self._pending
        return any(k[0] == key for k in self._pending)

    @property
    def size(self) -> int:
        return len(self._entries)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics.

        Returns:
            Dictionary with cache performance metrics:
            - entries: Current number of entries
            - pending: Computations in flight
            - hits: Number of cache hits
            - misses: Number of cache misses
            - fan_ins: Requests that joined an in-flight computation
            - hit_ratio: Ratio of hits to total lookups
        """
        total = self._hits + self._misses
        return {
            "entries": len(self._entries),
            "pending": len(self._pending),
            "hits": self._hits,
            "misses": self._misses,
            "fan_ins": self._fan_ins,
            "hit_ratio": self._hits / total if total > 0 else 0.0,
        }

    def clear_stats(self) -> None:
        """Reset hit/miss statistics."""
        self._hits = 0
        self._misses = 0
        self._fan_ins = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


__all__ = ["CacheEntry", "ResultCache"]
