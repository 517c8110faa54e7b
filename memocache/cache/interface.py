"""
memocache - Cache Backend Interface

Defines the abstract interface that all cache backends must implement.
"""

from abc import ABC, abstractmethod
from datetime import timedelta
from enum import Enum
from typing import Any, Final


class _Missing(Enum):
    """Marker type for absent cache entries."""

    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


# Returned by CacheInterface.get() when a key is absent or expired
MISSING: Final = _Missing.MISSING


class CacheInterface(ABC):
    """
    Abstract base class for cache backends.

    Contract:
    - get() returns MISSING for an absent key, so a cached None is a hit;
      failures raise BackendUnavailableError and are never reported as a miss
    - put() overwrites any existing entry; ttl=None applies the backend's
      default retention
    - remove() of a missing key is a no-op
    - Each operation is atomic from the caller's perspective
    """

    name: str = "backend"

    @abstractmethod
    async def get(self, key: str) -> Any:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key

        Returns:
            Cached value if found and not expired, MISSING otherwise

        Raises:
            BackendUnavailableError: If the backend cannot be read
        """

    @abstractmethod
    async def put(
        self,
        key: str,
        value: Any,
        ttl: timedelta | None = None,
    ) -> None:
        """
        Store a value in the cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Time-to-live (None = backend default, zero or negative = no expiry)

        Raises:
            BackendUnavailableError: If the value cannot be stored
        """

    @abstractmethod
    async def remove(self, key: str) -> None:
        """
        Remove a key from the cache. Removing a missing key succeeds.

        Raises:
            BackendUnavailableError: If the backend cannot be written
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove every entry owned by this backend."""

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with cache statistics (hits, misses, size, etc.)
        """

    async def close(self) -> None:
        """
        Close the cache backend and release resources.

        Should be called during graceful shutdown.
        """
        return None


def ttl_seconds(ttl: timedelta | None, default_ttl: float) -> float | None:
    """
    Normalize a TTL to seconds.

    - None -> default_ttl
    - zero or negative -> no expiry (None)
    - positive -> seconds
    """
    seconds = default_ttl if ttl is None else ttl.total_seconds()
    return seconds if seconds > 0 else None
