"""scholarscope.cache
~~~~~~~~~~~~~~~~~~~~
Time-boxed in-memory caches shared across requests.

One :class:`TTLCache` instance exists per cache kind (profile snapshot,
bibliometric author, search result, ...) and is injected into the components
that use it. Expiry is lazy: an entry is dropped when a read finds it stale.
Writes are last-write-wins; two requests racing on the same missing key may
both compute it.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheEntry(Generic[T]):
    value: T
    stored_at: float


class TTLCache:
    """A dict with per-entry timestamps and a fixed time-to-live."""

    def __init__(self, name: str, ttl: float, *, clock: Callable[[], float] = time.monotonic):
        self.name = name
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry] = {}
        # Guards the dict only; never held while a value is computed
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return default
            if now - entry.stored_at < self.ttl:
                return entry.value
            del self._entries[key]
        logger.debug(f"{self.name} cache entry expired: {key}")
        return default

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = CacheEntry(value=value, stored_at=self._clock())

    def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], T],
        *,
        should_store: Optional[Callable[[T], bool]] = None,
    ) -> T:
        """Return the fresh cached value for ``key`` or compute and store it.

        ``should_store`` lets callers skip caching degraded results.
        """
        cached = self.get(key, _MISSING)
        if cached is not _MISSING:
            logger.debug(f"{self.name} cache hit: {key}")
            return cached

        value = compute()
        if should_store is None or should_store(value):
            self.set(key, value)
        return value

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
