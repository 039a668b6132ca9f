"""
orochi/core/cache.py
═══════════════════════════════════════════════════════════════════════════
Bounded in-memory cache.
  • Hard capacity → when an insert would exceed it, the WHOLE map is cleared
    first, then the new entry goes in (no LRU bookkeeping)
  • Map mutations and snapshot reads are protected by a threading lock
    → atomic replace, never partial
  • get_or_insert_with() awaits the producer OUTSIDE the lock
    → concurrent misses for one key may both fetch, last write wins
  • A producer that raises never reaches insert() → failures are not cached
═══════════════════════════════════════════════════════════════════════════
"""

import logging
import threading
from typing import Any, Awaitable, Callable, Generic, Hashable, Optional, TypeVar

log = logging.getLogger("cache")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING = object()


class BoundedCache(Generic[K, V]):
    """Fixed-capacity mapping shared by every request-handling task."""

    def __init__(self, capacity: int, name: str = "cache") -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._name     = name
        self._store: dict[K, V] = {}
        self._lock     = threading.Lock()
        self._hits      = 0
        self._misses    = 0
        self._evictions = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._store

    def _lookup(self, key: K) -> tuple[bool, Optional[V]]:
        with self._lock:
            value = self._store.get(key, _MISSING)
            if value is _MISSING:
                self._misses += 1
                return False, None
            self._hits += 1
            return True, value

    def get(self, key: K) -> Optional[V]:
        """Snapshot read. Returns None if the key is absent."""
        return self._lookup(key)[1]

    def insert(self, key: K, value: V) -> None:
        """
        Insert or overwrite. Clears everything first when already full,
        even if `key` itself is one of the entries being dropped.
        """
        with self._lock:
            if len(self._store) >= self._capacity:
                dropped = len(self._store)
                self._store.clear()
                self._evictions += 1
                log.debug(f"{self._name}: full ({dropped}/{self._capacity}), flushed")
            self._store[key] = value

    def remove(self, key: K) -> None:
        with self._lock:
            self._store.pop(key, None)

    def take(self, key: K) -> Optional[V]:
        """Remove the entry and hand back its value, if there was one."""
        with self._lock:
            return self._store.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    async def get_or_insert_with(self, key: K, fetch: Callable[[], Awaitable[V]]) -> V:
        """
        Cached value for `key`, or the result of `await fetch()` stored under it.
        Not single-flight: the check and the insert are separate lock sections.
        """
        found, cached = self._lookup(key)
        if found:
            return cached

        value = await fetch()
        self.insert(key, value)
        return value

    def summary(self) -> dict[str, Any]:
        """Metadata only, exposed in /health."""
        with self._lock:
            return {
                "size":      len(self._store),
                "capacity":  self._capacity,
                "hits":      self._hits,
                "misses":    self._misses,
                "evictions": self._evictions,
            }
