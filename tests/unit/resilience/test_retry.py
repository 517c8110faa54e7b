"""
memocache - Retry Logic Tests
"""

from unittest.mock import AsyncMock

import pytest

from memocache.errors import BackendUnavailableError, KeyRenderingError
from memocache.resilience import RetryConfig, exponential_backoff, with_retry


class TestRetryConfig:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_retries": -1},
            {"base_delay": 0},
            {"base_delay": 1.0, "max_delay": 0.5},
            {"exponential_base": 0.5},
            {"jitter_factor": 1.5},
        ],
    )
    def test_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            RetryConfig(**kwargs)


class TestExponentialBackoff:
    def test_grows_exponentially_without_jitter(self) -> None:
        config = RetryConfig(base_delay=0.1, max_delay=10, jitter=False)

        assert exponential_backoff(0, config) == pytest.approx(0.1)
        assert exponential_backoff(1, config) == pytest.approx(0.2)
        assert exponential_backoff(3, config) == pytest.approx(0.8)

    def test_capped_at_max_delay(self) -> None:
        config = RetryConfig(base_delay=1, max_delay=2, jitter=False)

        assert exponential_backoff(10, config) == 2

    def test_jitter_stays_within_factor(self) -> None:
        config = RetryConfig(base_delay=1, max_delay=1, jitter=True, jitter_factor=0.1)

        for _ in range(20):
            assert 0.9 <= exponential_backoff(0, config) <= 1.1


class TestWithRetry:
    async def test_returns_first_success(self) -> None:
        func = AsyncMock(return_value="ok")

        assert await with_retry(func, "a", config=RetryConfig(base_delay=0.001)) == "ok"
        func.assert_awaited_once_with("a")

    async def test_calls_on_retry_callback(self) -> None:
        error = BackendUnavailableError("redis", "get", "timeout")
        func = AsyncMock(side_effect=[error, "ok"])
        seen: list[int] = []

        result = await with_retry(
            func,
            config=RetryConfig(base_delay=0.001, jitter=False),
            on_retry=lambda attempt, e: seen.append(attempt),
        )

        assert result == "ok"
        assert seen == [1]

    async def test_non_retryable_errors_propagate_immediately(self) -> None:
        func = AsyncMock(side_effect=KeyRenderingError(object(), "no rendering"))

        with pytest.raises(KeyRenderingError):
            await with_retry(func, config=RetryConfig(base_delay=0.001))

        assert func.await_count == 1
