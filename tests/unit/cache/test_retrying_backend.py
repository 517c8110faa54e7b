"""
memocache - Retrying Backend Tests

Tests that transient backend failures are retried and permanent ones are not.
"""

from datetime import timedelta
from typing import Any

import pytest

from memocache.cache import MISSING
from memocache.cache.backends.memory import MemoryCacheBackend
from memocache.cache.backends.retrying import RetryingBackend
from memocache.errors import BackendUnavailableError
from memocache.resilience import RetryConfig

FAST_RETRIES = RetryConfig(max_retries=2, base_delay=0.001, max_delay=0.01, jitter=False)


class FlakyBackend(MemoryCacheBackend):
    """Memory backend failing its first N calls with the given error."""

    name = "flaky"

    def __init__(self, failures: int, retryable: bool = True):
        super().__init__()
        self.failures = failures
        self.retryable = retryable
        self.calls = 0

    def _maybe_fail(self, operation: str) -> None:
        self.calls += 1
        if self.calls <= self.failures:
            raise BackendUnavailableError(self.name, operation, "connection reset", retryable=self.retryable)

    async def get(self, key: str) -> Any | None:
        self._maybe_fail("get")
        return await super().get(key)

    async def put(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        self._maybe_fail("put")
        await super().put(key, value, ttl)


class TestRetryingBackend:
    """Test suite for RetryingBackend."""

    async def test_retries_transient_failures(self) -> None:
        inner = FlakyBackend(failures=2)
        backend = RetryingBackend(inner, FAST_RETRIES)

        await backend.put("key", "value")

        assert inner.calls == 3
        assert await backend.get("key") == "value"

    async def test_gives_up_after_max_retries(self) -> None:
        inner = FlakyBackend(failures=10)
        backend = RetryingBackend(inner, FAST_RETRIES)

        with pytest.raises(BackendUnavailableError):
            await backend.get("key")

        assert inner.calls == 3

    async def test_does_not_retry_permanent_failures(self) -> None:
        inner = FlakyBackend(failures=1, retryable=False)
        backend = RetryingBackend(inner, FAST_RETRIES)

        with pytest.raises(BackendUnavailableError):
            await backend.put("key", "value")

        assert inner.calls == 1

    async def test_name_and_stats(self) -> None:
        backend = RetryingBackend(MemoryCacheBackend(), FAST_RETRIES)

        stats = await backend.get_stats()

        assert backend.name == "retrying(memory)"
        assert stats["backend"] == "memory"
        assert stats["max_retries"] == 2

    async def test_remove_and_clear_are_delegated(self) -> None:
        inner = MemoryCacheBackend()
        backend = RetryingBackend(inner)
        await inner.put("a", 1)
        await inner.put("b", 2)

        await backend.remove("a")
        assert await inner.get("a") is MISSING

        await backend.clear()
        assert await inner.get("b") is MISSING
