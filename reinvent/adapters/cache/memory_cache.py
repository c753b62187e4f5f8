# reinvent/adapters/cache/memory_cache.py
"""
reinvent/adapters/cache/memory_cache.py
---------------------------------------

In-process TTL cache for generated results, one namespace per operation kind.

Implementation notes
====================
- Every namespace has a fixed TTL chosen at construction.
- Expired entries are evicted lazily on read (and by `purge_expired`).
- A lock guards each namespace so a get/set pair never observes a half-written
  entry, even under a threaded server.
- Values are stored whole and replaced whole; callers must not mutate them.
- Nothing is persisted: a restart empties the cache.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

import structlog

logger = structlog.get_logger()


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


class TTLCacheNamespace:
    def __init__(self, name: str, ttl: float, clock: Callable[[], float] = time.monotonic):
        if ttl <= 0:
            raise ValueError(f"TTL for cache namespace '{name}' must be positive.")
        self.name = name
        self.ttl = float(ttl)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at <= self._clock():
                del self._entries[key]
                entry = None

            if entry is None:
                self.misses += 1
                logger.debug("cache_miss", namespace=self.name, key=key)
                return None

            self.hits += 1
            logger.debug("cache_hit", namespace=self.name, key=key)
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        lifetime = self.ttl if ttl is None else float(ttl)
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=self._clock() + lifetime)

    def purge_expired(self) -> int:
        """Drops every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def stats(self) -> Dict[str, float]:
        self.purge_expired()
        with self._lock:
            return {
                "count": len(self._entries),
                "hits": self.hits,
                "misses": self.misses,
                "ttl_seconds": self.ttl,
            }

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = 0
            self.misses = 0


class ResultCache:
    """
    Process-wide cache owned by the DI container.

    Namespaces are fixed at construction; asking for an unknown namespace is a
    programming error and raises KeyError.
    """

    def __init__(self, ttls: Mapping[str, float], clock: Callable[[], float] = time.monotonic):
        self._namespaces: Dict[str, TTLCacheNamespace] = {
            name: TTLCacheNamespace(name, ttl, clock) for name, ttl in ttls.items()
        }

    def namespace(self, name: str) -> TTLCacheNamespace:
        return self._namespaces[getattr(name, "value", name)]

    def stats(self) -> Dict[str, Dict[str, float]]:
        return {name: ns.stats() for name, ns in self._namespaces.items()}

    def clear(self) -> None:
        for ns in self._namespaces.values():
            ns.clear()
        logger.info("cache_cleared", namespaces=list(self._namespaces))
