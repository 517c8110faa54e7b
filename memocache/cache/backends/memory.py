"""
memocache - Memory Cache Backend

In-memory cache implementation with LRU eviction and TTL support.
Safe for concurrent coroutines and suitable for single-process deployments.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from datetime import timedelta
from typing import Any

from ..interface import MISSING, CacheInterface, ttl_seconds

logger = logging.getLogger(__name__)


class MemoryCacheBackend(CacheInterface):
    """
    In-memory cache backend with LRU eviction.

    Features:
    - LRU eviction when max_size is reached
    - Per-key TTL support
    - O(1) get/put/remove operations
    """

    name = "memory"

    def __init__(
        self,
        max_size: int = 10000,
        default_ttl: float = 0,
        namespace: str = "memocache",
    ):
        """
        Initialize memory cache backend.

        Args:
            max_size: Maximum number of entries (LRU eviction when exceeded)
            default_ttl: Default TTL in seconds (0 = no expiry)
            namespace: Cache key namespace/prefix
        """
        if max_size < 1:
            raise ValueError("max_size must be positive")

        self.max_size = max_size
        self.default_ttl = default_ttl
        self.namespace = namespace

        # Cache storage: key -> (value, expiry_time)
        self._cache: OrderedDict[str, tuple[Any, float | None]] = OrderedDict()

        # Stats
        self._hits = 0
        self._misses = 0
        self._puts = 0
        self._removals = 0
        self._evictions = 0

        self._lock = asyncio.Lock()

    def _make_key(self, key: str) -> str:
        """Create namespaced cache key."""
        return f"{self.namespace}:{key}"

    @staticmethod
    def _is_expired(expiry: float | None) -> bool:
        if expiry is None:
            return False
        return time.monotonic() >= expiry

    async def get(self, key: str) -> Any:
        """Retrieve value from cache."""
        async with self._lock:
            cache_key = self._make_key(key)

            entry = self._cache.get(cache_key)
            if entry is None:
                self._misses += 1
                return MISSING

            value, expiry = entry
            if self._is_expired(expiry):
                del self._cache[cache_key]
                self._misses += 1
                return MISSING

            # Mark as recently used
            self._cache.move_to_end(cache_key)
            self._hits += 1
            return value

    async def put(
        self,
        key: str,
        value: Any,
        ttl: timedelta | None = None,
    ) -> None:
        """Store value in cache."""
        seconds = ttl_seconds(ttl, self.default_ttl)
        expiry = time.monotonic() + seconds if seconds is not None else None

        async with self._lock:
            cache_key = self._make_key(key)

            # Evict if at capacity and key is new
            if cache_key not in self._cache and len(self._cache) >= self.max_size:
                evicted_key, _ = self._cache.popitem(last=False)
                self._evictions += 1
                logger.debug("Evicted key from memory cache: %s", evicted_key)

            self._cache[cache_key] = (value, expiry)
            self._cache.move_to_end(cache_key)
            self._puts += 1

    async def remove(self, key: str) -> None:
        """Remove key from cache."""
        async with self._lock:
            if self._cache.pop(self._make_key(key), None) is not None:
                self._removals += 1

    async def clear(self) -> None:
        """Clear all entries from cache."""
        async with self._lock:
            size = len(self._cache)
            self._cache.clear()
        logger.info("Cleared %d entries from memory cache namespace '%s'", size, self.namespace)

    async def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        async with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                "backend": self.name,
                "size": len(self._cache),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(hit_rate, 2),
                "puts": self._puts,
                "removals": self._removals,
                "evictions": self._evictions,
                "namespace": self.namespace,
            }

    async def close(self) -> None:
        """Close cache and release resources."""
        # Data stays in-process; nothing to release
        logger.debug("Memory cache backend closed for namespace '%s'", self.namespace)
