"""Bounded, time-expiring cache of analysis results keyed by the exact input text."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Callable

    from src.models.analysis_result import AnalysisResult

logger = structlog.get_logger(__name__)

DEFAULT_CAPACITY = 100
DEFAULT_TTL_SECONDS = 300.0


@dataclass(frozen=True)
class CacheEntry:
    """A cached result and the monotonic time it was stored."""

    result: AnalysisResult
    created_at: float


class ResultCache:
    """LRU cache with a per-entry time-to-live.

    A stale entry found by ``get`` is evicted and reported as a miss. All
    access goes through one lock; cached results are immutable so they can
    be handed out without copying.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            msg = "capacity must be >= 1"
            raise ValueError(msg)
        self.capacity = capacity
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0
        self.evictions = 0
        self.expirations = 0

    def get(self, text: str) -> AnalysisResult | None:
        """Return the cached result for ``text``, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(text)
            if entry is None:
                self.misses += 1
                return None
            if self._clock() - entry.created_at > self.ttl:
                del self._entries[text]
                self.expirations += 1
                self.misses += 1
                logger.debug("cache_entry_expired", text_length=len(text))
                return None
            self._entries.move_to_end(text)
            self.hits += 1
            return entry.result

    def put(self, text: str, result: AnalysisResult) -> None:
        """Store a result, evicting the least recently used entry when full."""
        with self._lock:
            if text in self._entries:
                self._entries.move_to_end(text)
            self._entries[text] = CacheEntry(result=result, created_at=self._clock())
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)
                self.evictions += 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, text: object) -> bool:
        with self._lock:
            return text in self._entries

    def stats(self) -> dict[str, int | float]:
        """Return cache statistics."""
        with self._lock:
            return {
                "size": len(self._entries),
                "capacity": self.capacity,
                "ttl_seconds": self.ttl,
                "hits": self.hits,
                "misses": self.misses,
                "evictions": self.evictions,
                "expirations": self.expirations,
            }
