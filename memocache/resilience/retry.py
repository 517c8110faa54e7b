"""
memocache - Retry Logic with Exponential Backoff

Retry utilities with exponential backoff and jitter for transient backend
failures. Used only by backend adapters; the caching core never retries.
"""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..errors import is_retryable_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """
    Configuration for retry behavior.

    Attributes:
        max_retries: Maximum number of retry attempts (default: 3)
        base_delay: Initial delay in seconds (default: 0.05)
        max_delay: Maximum delay in seconds (default: 2.0)
        exponential_base: Exponential backoff base (default: 2.0)
        jitter: Add random jitter so retrying clients spread out (default: True)
        jitter_factor: Jitter randomization factor 0-1 (default: 0.1)
    """

    max_retries: int = 3
    base_delay: float = 0.05
    max_delay: float = 2.0
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_factor: float = 0.1

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be positive")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if self.exponential_base < 1.0:
            raise ValueError("exponential_base must be >= 1.0")
        if not 0 <= self.jitter_factor <= 1:
            raise ValueError("jitter_factor must be between 0 and 1")


def exponential_backoff(attempt: int, config: RetryConfig) -> float:
    """
    Calculate exponential backoff delay with optional jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds

    Example:
        >>> exponential_backoff(0, RetryConfig(jitter=False))
        0.05
        >>> exponential_backoff(2, RetryConfig(jitter=False))
        0.2
    """
    delay = min(config.base_delay * (config.exponential_base**attempt), config.max_delay)

    if config.jitter and config.jitter_factor > 0:
        jitter_amount = delay * config.jitter_factor
        delay = max(0.0, delay + random.uniform(-jitter_amount, jitter_amount))

    return delay


async def with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    config: RetryConfig | None = None,
    on_retry: Callable[[int, Exception], None] | None = None,
    **kwargs: Any,
) -> T:
    """
    Execute an async function with retry logic.

    Only errors classified retryable by is_retryable_error() are retried;
    anything else propagates immediately.

    Args:
        func: Async function to execute
        *args: Positional arguments for func
        config: Retry configuration (uses defaults if None)
        on_retry: Optional callback called on each retry (attempt, error)
        **kwargs: Keyword arguments for func

    Returns:
        Result of successful function execution

    Raises:
        Last exception if all retries exhausted
    """
    if config is None:
        config = RetryConfig()

    func_name = getattr(func, "__name__", repr(func))
    attempt = 0
    while True:
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            if not is_retryable_error(e):
                raise

            if attempt >= config.max_retries:
                logger.error(
                    "All %d retries exhausted",
                    config.max_retries,
                    extra={"function": func_name, "error": str(e), "error_type": type(e).__name__},
                )
                raise

            delay = exponential_backoff(attempt, config)
            logger.warning(
                "Retry attempt %d/%d after %.2fs",
                attempt + 1,
                config.max_retries,
                delay,
                extra={
                    "attempt": attempt + 1,
                    "max_retries": config.max_retries,
                    "delay_seconds": delay,
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "function": func_name,
                },
            )

            if on_retry:
                on_retry(attempt + 1, e)

            attempt += 1
            await asyncio.sleep(delay)
            continue

        if attempt > 0:
            logger.info(
                "Retry succeeded after %d attempts",
                attempt,
                extra={"attempt": attempt, "function": func_name},
            )
        return result
