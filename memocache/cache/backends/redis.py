"""
memocache - Redis Cache Backend

Asynchronous Redis cache implementation with:
- JSON serialization for values
- Per-key TTL support (millisecond precision)
- Namespace prefixing for safe multi-tenant usage

Requires: redis>=5.0 with asyncio support

Example:
    cache = RedisCacheBackend(redis_url="redis://localhost:6379", namespace="app")
    await cache.put("greeting", {"msg": "hello"}, ttl=timedelta(minutes=1))
    val = await cache.get("greeting")
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ...errors import BackendUnavailableError
from ..interface import MISSING, CacheInterface, ttl_seconds
from ..serialization import decode_value, encode_value

logger = logging.getLogger(__name__)


class RedisCacheBackend(CacheInterface):
    """
    Redis cache backend with JSON serialization and TTL.

    Notes:
    - Keys are prefixed with the configured namespace to avoid collisions.
    - Values are stored as UTF-8 JSON.
    - TTL is applied via Redis PX milliseconds (None -> default_ttl, 0 -> no expiry).
    - Connection and command failures raise BackendUnavailableError.
    """

    name = "redis"

    def __init__(
        self,
        redis_url: str | None = None,
        namespace: str = "memocache",
        default_ttl: float = 0,
        max_connections: int = 10,
        socket_timeout: float = 5,
        client: Redis | None = None,
    ) -> None:
        """
        Initialize Redis cache backend.

        Args:
            redis_url: Connection URL, e.g., redis://localhost:6379/0 or rediss:// for TLS
            namespace: Prefix for all keys
            default_ttl: Default TTL in seconds (0 => no expiry)
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
            client: Pre-built client (takes precedence over redis_url)
        """
        if client is None and not redis_url:
            raise ValueError("redis_url is required")

        self.namespace = namespace.strip() or "memocache"
        self.default_ttl = max(0.0, float(default_ttl))
        self._hits = 0
        self._misses = 0
        self._puts = 0
        self._removals = 0

        # Lazy connection; connects on first command
        self._client = client or Redis.from_url(
            url=redis_url,
            decode_responses=False,
            max_connections=max_connections,
            socket_timeout=socket_timeout,
        )

    def _make_key(self, key: str) -> str:
        """Create namespaced key."""
        return f"{self.namespace}:{key}"

    def _failure(self, operation: str, key: str | None, error: Exception) -> BackendUnavailableError:
        logger.error(
            "Redis %s failed: %s",
            operation,
            error,
            extra={"key": key, "namespace": self.namespace, "error": str(error)},
            exc_info=True,
        )
        return BackendUnavailableError(
            self.name,
            operation,
            str(error) or type(error).__name__,
            details={"key": key, "namespace": self.namespace, "error_type": type(error).__name__},
        )

    async def get(self, key: str) -> Any:
        """Retrieve a value by key."""
        try:
            data = await self._client.get(self._make_key(key))
        except (RedisError, OSError) as e:
            raise self._failure("get", key, e) from e

        if data is None:
            self._misses += 1
            return MISSING

        self._hits += 1
        return decode_value(data, self.name)

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Store a value with optional TTL."""
        payload = encode_value(value, self.name)
        seconds = ttl_seconds(ttl, self.default_ttl)
        px = max(1, int(seconds * 1000)) if seconds is not None else None

        try:
            await self._client.set(name=self._make_key(key), value=payload, px=px)
        except (RedisError, OSError) as e:
            raise self._failure("put", key, e) from e
        self._puts += 1

    async def remove(self, key: str) -> None:
        """Delete a single key."""
        try:
            deleted = await self._client.delete(self._make_key(key))
        except (RedisError, OSError) as e:
            raise self._failure("remove", key, e) from e
        self._removals += int(deleted)

    async def clear(self) -> None:
        """
        Clear all entries under the namespace.

        Implementation: SCAN match "<namespace>:*" and DEL in batches.
        """
        pattern = f"{self.namespace}:*"
        cursor = 0
        total_deleted = 0
        batch_size = 1000

        try:
            while True:
                cursor, keys = await self._client.scan(cursor=cursor, match=pattern, count=batch_size)
                if keys:
                    total_deleted += await self._client.delete(*keys)
                if cursor == 0:
                    break
        except (RedisError, OSError) as e:
            raise self._failure("clear", None, e) from e

        self._removals += total_deleted
        logger.info("Cleared %d keys from namespace '%s'", total_deleted, self.namespace)

    async def get_stats(self) -> dict[str, Any]:
        """Return cache statistics and basic Redis info."""
        total_requests = self._hits + self._misses
        stats: dict[str, Any] = {
            "backend": self.name,
            "namespace": self.namespace,
            "default_ttl": self.default_ttl,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round((self._hits / total_requests) * 100, 2) if total_requests else 0.0,
            "puts": self._puts,
            "removals": self._removals,
            "connected": False,
        }

        try:
            stats["connected"] = bool(await self._client.ping())
            info = await self._client.info(section="server")
            stats["redis_version"] = info.get("redis_version")
        except (RedisError, OSError) as e:
            # INFO may be restricted; keep minimal stats
            logger.warning("Failed to get Redis INFO: %s", e, extra={"error": str(e)})

        return stats

    async def close(self) -> None:
        """Close the Redis client and release resources."""
        try:
            await self._client.aclose()
            logger.info("Closed Redis cache backend for namespace '%s'", self.namespace)
        finally:
            await self._client.connection_pool.disconnect()
