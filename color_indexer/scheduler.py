"""Debounced, version-checked refresh of detection results.

A refresh captures the document version when it is scheduled and checks it
again after every suspension point (debounce sleep, lock wait, computation,
chunk yield). If the document moved on, the refresh stops without applying
anything further; the refresh scheduled for the newer version does the work.
Refreshes of the same document are serialized, different documents proceed
independently.
"""

import asyncio
import inspect
import itertools
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .cache import ResultCache
from .document import Document, DocumentSnapshot, snapshot
from .indexer_logging import LogCategory, get_category_logger
from .models import DetectionRecord

logger = get_category_logger(LogCategory.SCHEDULER)

ComputeFn = Callable[[DocumentSnapshot], Awaitable[list[DetectionRecord]]]
# apply(uri, chunk, chunk_index); chunk_index 0 starts a fresh result set
ApplyFn = Callable[[str, Sequence[DetectionRecord], int], Awaitable[None] | None]


class RefreshStatus(Enum):
    """How a refresh ended."""

    APPLIED = "applied"
    STALE = "stale"  # Document version changed mid-flight
    SUPERSEDED = "superseded"  # A newer refresh was scheduled or cancel() called
    SKIPPED = "skipped"  # Document not eligible


@dataclass
class RefreshOutcome:
    """Result of one refresh request."""

    status: RefreshStatus
    version: int
    records: list[DetectionRecord] = field(default_factory=list)
    applied: int = 0


class RefreshScheduler:
    """Runs detection for documents and hands results to a consumer in chunks."""

    def __init__(
        self,
        cache: ResultCache,
        compute: ComputeFn,
        apply: ApplyFn,
        debounce_seconds: float = 0.05,
        chunk_size: int = 200,
        yield_seconds: float = 0.0,
        should_refresh: Callable[[Document], bool] | None = None,
    ):
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")
        self.cache = cache
        self.compute = compute
        self.apply = apply
        self.debounce_seconds = debounce_seconds
        self.chunk_size = chunk_size
        self.yield_seconds = yield_seconds
        self.should_refresh = should_refresh

        self._generations: dict[str, int] = {}
        # Shared across documents so a forgotten document never reuses a number
        self._generation_counter = itertools.count(1)
        self._locks: dict[str, asyncio.Lock] = {}
        self._stats = {status: 0 for status in RefreshStatus}

    async def refresh(self, document: Document) -> RefreshOutcome:
        """Schedule a refresh and wait for it to finish or be abandoned."""
        key = document.uri
        version = document.version
        if self.should_refresh is not None and not self.should_refresh(document):
            return self._finish(key, RefreshOutcome(RefreshStatus.SKIPPED, version))

        generation = self._next_generation(key)

        if self.debounce_seconds > 0:
            await asyncio.sleep(self.debounce_seconds)
        if self._generations.get(key) != generation:
            return self._finish(key, RefreshOutcome(RefreshStatus.SUPERSEDED, version))

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            status = self._check(document, version, generation)
            if status is not None:
                return self._finish(key, RefreshOutcome(status, version))

            captured = snapshot(document)
            records = await self.cache.get_or_compute(
                key, version, lambda: self.compute(captured)
            )

            status = self._check(document, version, generation)
            if status is not None:
                return self._finish(key, RefreshOutcome(status, version, records))

            return await self._apply_chunks(document, version, generation, records)

    async def _apply_chunks(
        self,
        document: Document,
        version: int,
        generation: int,
        records: list[DetectionRecord],
    ) -> RefreshOutcome:
        key = document.uri
        applied = 0

        if not records:
            await self._call_apply(key, [], 0)
            return self._finish(key, RefreshOutcome(RefreshStatus.APPLIED, version, records))

        for index, start in enumerate(range(0, len(records), self.chunk_size)):
            if index > 0:
                await asyncio.sleep(self.yield_seconds)
                status = self._check(document, version, generation)
                if status is not None:
                    return self._finish(key, RefreshOutcome(status, version, records, applied))

            chunk = records[start : start + self.chunk_size]
            await self._call_apply(key, chunk, index)
            applied += len(chunk)

        return self._finish(
            key, RefreshOutcome(RefreshStatus.APPLIED, version, records, applied)
        )

    async def _call_apply(
        self, key: str, chunk: Sequence[DetectionRecord], index: int
    ) -> None:
        result = self.apply(key, chunk, index)
        if inspect.isawaitable(result):
            await result

    def _check(
        self, document: Document, version: int, generation: int
    ) -> RefreshStatus | None:
        """Why the refresh has to stop, or None if it may continue."""
        if document.version != version:
            return RefreshStatus.STALE
        if self._generations.get(document.uri) != generation:
            return RefreshStatus.SUPERSEDED
        return None

    def _next_generation(self, key: str) -> int:
        generation = next(self._generation_counter)
        self._generations[key] = generation
        return generation

    def _finish(self, key: str, outcome: RefreshOutcome) -> RefreshOutcome:
        self._stats[outcome.status] += 1
        if outcome.status in (RefreshStatus.STALE, RefreshStatus.SUPERSEDED):
            logger.debug(
                f"Refresh of {key}@{outcome.version} abandoned: {outcome.status.value}"
            )
        return outcome

    def cancel(self, key: str) -> None:
        """Abandon every scheduled or running refresh of a document."""
        if key in self._generations:
            self._generations[key] = next(self._generation_counter)

    def forget(self, key: str) -> None:
        """Cancel refreshes and drop per-document state for a closed document."""
        self._generations.pop(key, None)
        self.cache.delete(key)
        lock = self._locks.get(key)
        if lock is not None and not lock.locked():
            del self._locks[key]

    def get_stats(self) -> dict[str, Any]:
        """Get refresh statistics per outcome."""
        stats: dict[str, Any] = {status.value: count for status, count in self._stats.items()}
        stats["documents"] = len(self._generations)
        return stats
