"""
memocache - Cache Backends

Exports available cache backend implementations.

Redis backend is lazy-loaded via factory.py to avoid import overhead.
"""

from .memory import MemoryCacheBackend
from .retrying import RetryingBackend
from .sqlite import SQLiteCacheBackend

__all__ = [
    "MemoryCacheBackend",
    "RetryingBackend",
    "SQLiteCacheBackend",
]
