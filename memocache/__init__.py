"""
memocache - Caching Abstraction Layer

Uniform async API for storing, retrieving and expiring values across
interchangeable cache backends, plus memoization keyed by a callable's
call site and arguments.

Usage:
    from memocache import Cache, CacheConfiguration, MemoryCacheBackend

    cache = Cache(CacheConfiguration(backend=MemoryCacheBackend()))
    await cache.put("greeting", "en", value="hello", ttl=60)
    value = await cache.get("greeting", "en")
"""

__version__ = "1.0.0"

from .cache.backends import MemoryCacheBackend, RetryingBackend, SQLiteCacheBackend
from .cache.interface import MISSING, CacheInterface
from .configuration import CacheConfiguration
from .errors import (
    BackendUnavailableError,
    CacheError,
    ConfigurationError,
    ErrorCode,
    KeyRenderingError,
    MemocacheError,
    SanitizationViolationError,
    StaticTypeOmissionError,
)
from .execution import ExecutionPolicy
from .flags import Flags, flags_scope
from .keys import (
    MEMCACHED_KEY_CONSTRAINTS,
    CallSite,
    HashingSanitizer,
    IdentitySanitizer,
    KeyBuilder,
    KeyConstraints,
    KeyDerivationPolicy,
    KeySanitizer,
    ReplaceAndTruncateSanitizer,
    derive_key,
)
from .cache.factory import build_configuration, close_all_backends, create_backend
from .memoize import memoize
from .observability import configure_logging
from .operations import Cache

__all__ = [
    # Facade
    "Cache",
    "CacheConfiguration",
    "memoize",
    # Backends
    "CacheInterface",
    "MISSING",
    "MemoryCacheBackend",
    "RetryingBackend",
    "SQLiteCacheBackend",
    # Factory
    "build_configuration",
    "create_backend",
    "close_all_backends",
    # Policies
    "ExecutionPolicy",
    "Flags",
    "flags_scope",
    "KeyDerivationPolicy",
    # Keys
    "CallSite",
    "KeyBuilder",
    "derive_key",
    "KeyConstraints",
    "KeySanitizer",
    "IdentitySanitizer",
    "ReplaceAndTruncateSanitizer",
    "HashingSanitizer",
    "MEMCACHED_KEY_CONSTRAINTS",
    # Errors
    "ErrorCode",
    "MemocacheError",
    "ConfigurationError",
    "CacheError",
    "BackendUnavailableError",
    "KeyRenderingError",
    "SanitizationViolationError",
    "StaticTypeOmissionError",
    # Logging
    "configure_logging",
]
