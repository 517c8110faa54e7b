"""
memocache - Resilience Module

Retry with exponential backoff for backend adapters.
"""

from .retry import RetryConfig, exponential_backoff, with_retry

__all__ = [
    "RetryConfig",
    "exponential_backoff",
    "with_retry",
]
