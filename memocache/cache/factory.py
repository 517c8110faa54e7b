"""
memocache - Backend Factory

Canonical factory for creating cache backends and configurations from
settings.

Key points:
- Select the backend with MEMOCACHE_BACKEND=memory|redis|sqlite
  (defaults to memory, or redis when MEMOCACHE_REDIS_URL is set)
- Named instances are registered so one process shares one backend per name
- All settings are typed and validated via Pydantic models

Examples:
    from memocache.cache.factory import build_configuration, create_backend

    # Uses env-configured backend (memory by default)
    backend = create_backend()

    # Or explicitly supply settings (e.g., for tests)
    from memocache.config import BackendSettings, CacheBackend
    disk = create_backend(BackendSettings(backend=CacheBackend.SQLITE), name="disk")

    # Full configuration (backend + sanitizer + flags + policies)
    config = build_configuration()
"""

from __future__ import annotations

import logging

from ..config import BackendSettings, CacheBackend, MemocacheSettings, SanitizerKind, SanitizerSettings, get_settings
from ..configuration import CacheConfiguration
from ..errors import BackendUnavailableError, ConfigurationError
from ..execution import DEFAULT_EXECUTION, ExecutionPolicy
from ..flags import Flags
from ..keys.sanitizer import (
    HashingSanitizer,
    IdentitySanitizer,
    KeyConstraints,
    KeySanitizer,
    ReplaceAndTruncateSanitizer,
)
from ..resilience.retry import RetryConfig
from .backends.memory import MemoryCacheBackend
from .backends.retrying import RetryingBackend
from .backends.sqlite import SQLiteCacheBackend
from .interface import CacheInterface

logger = logging.getLogger(__name__)

# Global backend instances registry
_backend_instances: dict[str, CacheInterface] = {}


def _create_redis_backend(settings: BackendSettings) -> CacheInterface:
    """Construct a redis backend, importing the client lazily."""
    if not settings.redis_url:
        raise ConfigurationError(
            "MEMOCACHE_REDIS_URL must be set when MEMOCACHE_BACKEND=redis",
            details={"env": "MEMOCACHE_REDIS_URL", "backend": "redis"},
        )

    # Lazy import to avoid connecting machinery when memory is used
    from .backends.redis import RedisCacheBackend

    return RedisCacheBackend(
        redis_url=settings.redis_url,
        namespace=settings.namespace,
        default_ttl=settings.default_ttl_seconds,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
    )


def _build_backend(settings: BackendSettings) -> CacheInterface:
    backend: CacheInterface
    if settings.backend == CacheBackend.MEMORY:
        backend = MemoryCacheBackend(
            max_size=settings.max_size,
            default_ttl=settings.default_ttl_seconds,
            namespace=settings.namespace,
        )
    elif settings.backend == CacheBackend.REDIS:
        backend = _create_redis_backend(settings)
    elif settings.backend == CacheBackend.SQLITE:
        backend = SQLiteCacheBackend(
            db_path=settings.sqlite_path,
            namespace=settings.namespace,
            default_ttl=settings.default_ttl_seconds,
        )
    else:
        raise ConfigurationError(
            f"Unknown cache backend: {settings.backend}",
            details={"backend": str(settings.backend), "supported": [b.value for b in CacheBackend]},
        )

    if settings.retry_attempts > 0:
        backend = RetryingBackend(backend, RetryConfig(max_retries=settings.retry_attempts))
    return backend


def create_backend(
    settings: BackendSettings | None = None,
    name: str = "default",
) -> CacheInterface:
    """
    Create a cache backend instance based on settings.

    Args:
        settings: Backend settings (uses global settings if not provided)
        name: Instance name (for multiple backend instances)

    Returns:
        Configured backend instance

    Raises:
        ConfigurationError: If settings are invalid or the backend cannot be built
    """
    if name in _backend_instances:
        logger.debug("Returning existing backend instance: %s", name)
        return _backend_instances[name]

    if settings is None:
        settings = get_settings().backend

    logger.info(
        "Creating backend instance '%s' with backend: %s",
        name,
        settings.backend.value,
        extra={"cache_name": name, "backend": settings.backend.value},
    )

    try:
        backend = _build_backend(settings)
    except ConfigurationError:
        raise
    except (BackendUnavailableError, ImportError, OSError, ValueError) as e:
        logger.error(
            "Error creating backend instance '%s': %s",
            name,
            e,
            extra={"cache_name": name, "backend": settings.backend.value, "error": str(e)},
            exc_info=True,
        )
        raise ConfigurationError(
            f"Failed to create backend instance '{name}': {e}",
            details={"cache_name": name, "backend": settings.backend.value, "error": str(e)},
        ) from e

    _backend_instances[name] = backend
    return backend


def create_sanitizer(settings: SanitizerSettings) -> KeySanitizer:
    """Build the key sanitizer described by settings."""
    if settings.kind == SanitizerKind.NONE:
        return IdentitySanitizer()

    constraints = KeyConstraints(max_key_length=settings.max_key_length)
    if settings.kind == SanitizerKind.REPLACE:
        return ReplaceAndTruncateSanitizer(constraints, replacement=settings.replacement)
    return HashingSanitizer(constraints, algorithm=settings.hash_algorithm)


def build_configuration(
    settings: MemocacheSettings | None = None,
    name: str = "default",
) -> CacheConfiguration:
    """
    Build an immutable CacheConfiguration from settings.

    Args:
        settings: Root settings (uses global settings if not provided)
        name: Backend instance name

    Returns:
        CacheConfiguration ready to pass to Cache
    """
    if settings is None:
        settings = get_settings()

    execution = DEFAULT_EXECUTION
    if settings.execution.max_workers is not None:
        execution = ExecutionPolicy.bounded(settings.execution.max_workers)
    if settings.execution.inline:
        execution = ExecutionPolicy(executor=execution.executor, inline=True)

    return CacheConfiguration(
        backend=create_backend(settings.backend, name=name),
        execution=execution,
        key_policy=settings.keys.policy,
        default_flags=Flags(
            reads_enabled=settings.flags.reads_enabled,
            writes_enabled=settings.flags.writes_enabled,
        ),
        key_separator=settings.keys.separator,
        key_prefix=settings.keys.prefix,
        sanitizer=create_sanitizer(settings.sanitizer),
    )


def get_backend(name: str = "default") -> CacheInterface:
    """
    Get an existing backend instance by name, creating it from global settings if needed.
    """
    if name not in _backend_instances:
        logger.debug("Backend instance '%s' not found, creating new instance", name)
        return create_backend(name=name)
    return _backend_instances[name]


async def close_all_backends() -> None:
    """
    Close all backend instances and release resources.

    Should be called during graceful shutdown.
    """
    if not _backend_instances:
        logger.debug("No backend instances to close")
        return

    logger.info("Closing %d backend instance(s)...", len(_backend_instances))

    for name, backend in list(_backend_instances.items()):
        try:
            await backend.close()
            logger.info("Closed backend instance: %s", name)
        except Exception as e:
            # Keep closing the remaining backends
            logger.error(
                "Error closing backend instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    _backend_instances.clear()
    logger.info("All backend instances closed")


def reset_backend_factory() -> None:
    """
    Clear all instance references without closing them.

    Warning: Only use this in testing contexts.
    """
    count = len(_backend_instances)
    _backend_instances.clear()
    logger.debug("Reset backend factory, cleared %d instance reference(s)", count)


def list_backend_instances() -> list[str]:
    """List all registered backend instance names."""
    return list(_backend_instances.keys())
