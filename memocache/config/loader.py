"""
memocache - Settings Loader

Loads and validates settings from environment variables and .env files.
Provides a singleton settings instance for the process.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import MemocacheSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "MEMOCACHE_"

_settings_instance: MemocacheSettings | None = None


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def _env_bool(name: str, default: str) -> bool:
    return (_env(name, default) or default).strip().lower() in ("1", "true", "yes", "on")


def load_settings(
    env_file: str | None = None,
    reload: bool = False,
) -> MemocacheSettings:
    """
    Load settings from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in current directory)
        reload: Force reload even if settings already loaded

    Returns:
        Validated MemocacheSettings instance

    Raises:
        ConfigurationError: If settings are invalid
    """
    global _settings_instance

    if _settings_instance is not None and not reload:
        return _settings_instance

    env_path = Path(env_file) if env_file else Path.cwd() / ".env"
    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        load_dotenv(env_path, override=True)
    else:
        logger.debug("No .env file found, using environment variables only")

    # Auto-detect backend: Redis if a URL is set, else memory
    redis_url = _env("REDIS_URL")
    default_backend = "redis" if redis_url else "memory"

    settings_dict = {
        "log_level": (_env("LOG_LEVEL", "INFO") or "INFO").upper(),
        "backend": {
            "backend": _env("BACKEND", default_backend),
            "default_ttl_seconds": _env("DEFAULT_TTL_SECONDS", "0"),
            "max_size": _env("MAX_SIZE", "10000"),
            "namespace": _env("NAMESPACE", "memocache"),
            "redis_url": redis_url,
            "redis_max_connections": _env("REDIS_MAX_CONNECTIONS", "10"),
            "redis_socket_timeout": _env("REDIS_SOCKET_TIMEOUT", "5"),
            "sqlite_path": _env("SQLITE_PATH", "./data/memocache.db"),
            "retry_attempts": _env("RETRY_ATTEMPTS", "0"),
        },
        "sanitizer": {
            "kind": _env("SANITIZER", "none"),
            "max_key_length": _env("MAX_KEY_LENGTH", "250"),
            "replacement": _env("KEY_REPLACEMENT", "_"),
            "hash_algorithm": _env("HASH_ALGORITHM", "sha256"),
        },
        "keys": {
            "policy": _env("KEY_POLICY", "identity"),
            "separator": _env("KEY_SEPARATOR", ":"),
            "prefix": _env("KEY_PREFIX") or None,
        },
        "flags": {
            "reads_enabled": _env_bool("READS_ENABLED", "true"),
            "writes_enabled": _env_bool("WRITES_ENABLED", "true"),
        },
        "execution": {
            "max_workers": _env("MAX_WORKERS") or None,
            "inline": _env_bool("INLINE_EXECUTION", "false"),
        },
    }

    try:
        _settings_instance = MemocacheSettings.model_validate(settings_dict)
    except ValidationError as e:
        logger.error(
            "Settings validation failed: %s",
            e,
            extra={"validation_errors": e.errors(include_url=False)},
        )
        raise ConfigurationError(
            "Settings validation failed. Check your MEMOCACHE_* environment variables.",
            details={"validation_errors": e.errors(include_url=False, include_context=False)},
        ) from e

    logger.info(
        "Settings loaded (backend: %s)",
        _settings_instance.backend.backend.value,
        extra={"cache_backend": _settings_instance.backend.backend.value},
    )
    return _settings_instance


def get_settings() -> MemocacheSettings:
    """
    Get the current settings instance, loading it on first access.

    Returns:
        Current MemocacheSettings instance
    """
    if _settings_instance is None:
        return load_settings()
    return _settings_instance


def reload_settings(env_file: str | None = None) -> MemocacheSettings:
    """
    Force reload settings.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded MemocacheSettings instance
    """
    return load_settings(env_file=env_file, reload=True)
