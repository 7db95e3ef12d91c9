"""In-memory TTL cache owned by a service instance."""

import logging
import time
from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

logger = logging.getLogger(__name__)

V = TypeVar("V")


class TTLCache(Generic[V]):
    """Simple in-memory cache with a freshness window and a size cap.

    Entries older than ``ttl_seconds`` are treated as missing and dropped on
    access. When the cache is full the oldest entry is evicted. Writes are
    last-writer-wins.

    Usage::

        cache = TTLCache(ttl_seconds=3600)
        cache.set("seo tools-us-en", analysis)
        hit = cache.get("seo tools-us-en")
    """

    def __init__(
        self,
        ttl_seconds: float = 3600,
        max_size: int = 1000,
        clock: Callable[[], float] = time.time,
    ):
        self._store: dict[str, tuple[float, V]] = {}
        self._ttl_seconds = ttl_seconds
        self._max_size = max_size
        self._clock = clock

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, key: str) -> Optional[V]:
        entry = self._store.get(key)
        if entry is None:
            return None
        ts, value = entry
        if self._clock() - ts < self._ttl_seconds:
            return value
        logger.debug("Cache entry expired: %s", key)
        del self._store[key]
        return None

    def set(self, key: str, value: V) -> None:
        if key not in self._store and len(self._store) >= self._max_size:
            oldest_key = min(self._store, key=lambda k: self._store[k][0])
            del self._store[oldest_key]
        self._store[key] = (self._clock(), value)

    def evict(self, key: str) -> bool:
        """Remove an entry. Returns True if something was removed."""
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        self._store.clear()

    def items(self) -> Iterator[tuple[str, V]]:
        """Iterate over fresh entries, dropping expired ones."""
        now = self._clock()
        expired = [k for k, (ts, _) in self._store.items() if now - ts >= self._ttl_seconds]
        for key in expired:
            del self._store[key]
        for key, (_, value) in list(self._store.items()):
            yield key, value

    def values(self) -> list[V]:
        return [value for _, value in self.items()]

    def __contains__(self, key: Any) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._store)
