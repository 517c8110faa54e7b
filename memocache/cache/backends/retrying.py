"""
memocache - Retrying Backend Adapter

Wraps another backend and retries operations that fail with a retryable
BackendUnavailableError. Errors that survive every attempt still propagate.
"""

from datetime import timedelta
from typing import Any

from ...resilience.retry import RetryConfig, with_retry
from ..interface import CacheInterface


class RetryingBackend(CacheInterface):
    """Backend adapter adding exponential-backoff retries to another backend."""

    def __init__(self, backend: CacheInterface, config: RetryConfig | None = None):
        self.backend = backend
        self.config = config or RetryConfig()
        self.name = f"retrying({backend.name})"

    async def get(self, key: str) -> Any:
        return await with_retry(self.backend.get, key, config=self.config)

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        await with_retry(self.backend.put, key, value, ttl, config=self.config)

    async def remove(self, key: str) -> None:
        await with_retry(self.backend.remove, key, config=self.config)

    async def clear(self) -> None:
        await with_retry(self.backend.clear, config=self.config)

    async def get_stats(self) -> dict[str, Any]:
        stats = await self.backend.get_stats()
        stats["max_retries"] = self.config.max_retries
        return stats

    async def close(self) -> None:
        await self.backend.close()
