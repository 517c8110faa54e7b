"""
memocache - Configuration Schemas

Typed settings models using Pydantic for validation.
Settings describe how to build a CacheConfiguration; they are loaded from
environment variables by loader.py or constructed directly.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..keys.callsite import KeyDerivationPolicy
from ..keys.sanitizer import HASH_ALGORITHMS


class CacheBackend(str, Enum):
    """Supported cache backends."""

    MEMORY = "memory"
    REDIS = "redis"
    SQLITE = "sqlite"


class SanitizerKind(str, Enum):
    """Supported key sanitizer strategies."""

    NONE = "none"
    REPLACE = "replace"
    HASH = "hash"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BackendSettings(BaseModel):
    """Backend selection and backend-specific settings."""

    backend: CacheBackend = Field(default=CacheBackend.MEMORY, description="Cache backend to use")
    default_ttl_seconds: float = Field(default=0, ge=0, description="Backend default TTL in seconds (0 = no expiry)")
    max_size: int = Field(default=10000, ge=1, description="Max cache entries (memory backend)")
    namespace: str = Field(default="memocache", min_length=1, description="Cache key namespace/prefix")

    # Redis-specific settings (only used when backend=redis)
    redis_url: str | None = Field(default=None, validate_default=True, description="Redis connection URL")
    redis_max_connections: int = Field(default=10, ge=1, description="Redis connection pool size")
    redis_socket_timeout: float = Field(default=5, gt=0, description="Redis socket timeout in seconds")

    # SQLite-specific settings (only used when backend=sqlite)
    sqlite_path: str = Field(default="./data/memocache.db", description="SQLite cache database file")

    # Adapter retries (0 = no retries)
    retry_attempts: int = Field(default=0, ge=0, description="Retries for transient backend failures")

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str | None, info: Any) -> str | None:
        """Ensure redis_url is provided when backend is redis."""
        if info.data.get("backend") == CacheBackend.REDIS and not v:
            raise ValueError("redis_url is required when cache backend is 'redis'")
        return v


class SanitizerSettings(BaseModel):
    """Key sanitization settings."""

    kind: SanitizerKind = Field(default=SanitizerKind.NONE, description="Sanitizer strategy")
    max_key_length: int = Field(default=250, ge=1, description="Maximum key length accepted by the backend")
    replacement: str = Field(default="_", min_length=1, max_length=1, description="Placeholder for disallowed chars")
    hash_algorithm: str = Field(default="sha256", description="Digest used by the hashing sanitizer")

    @field_validator("hash_algorithm")
    @classmethod
    def validate_algorithm(cls, v: str) -> str:
        """Ensure the hash algorithm is supported."""
        if v.lower() not in HASH_ALGORITHMS:
            raise ValueError(f"hash_algorithm must be one of: {', '.join(HASH_ALGORITHMS)}")
        return v.lower()


class KeySettings(BaseModel):
    """Key construction settings."""

    policy: KeyDerivationPolicy = Field(default=KeyDerivationPolicy.IDENTITY, description="Call-site key policy")
    separator: str = Field(default=":", min_length=1, description="Separator between key parts")
    prefix: str | None = Field(default=None, description="Prefix prepended to multi-part keys")


class FlagSettings(BaseModel):
    """Default read/write flags."""

    reads_enabled: bool = Field(default=True, description="Allow cache reads by default")
    writes_enabled: bool = Field(default=True, description="Allow cache writes by default")


class ExecutionSettings(BaseModel):
    """Where synchronous computations run."""

    max_workers: int | None = Field(default=None, ge=1, description="Bounded pool size (None = shared default pool)")
    inline: bool = Field(default=False, description="Run synchronous computations on the event loop thread")


class MemocacheSettings(BaseModel):
    """Root settings for memocache."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    backend: BackendSettings = Field(default_factory=BackendSettings)
    sanitizer: SanitizerSettings = Field(default_factory=SanitizerSettings)
    keys: KeySettings = Field(default_factory=KeySettings)
    flags: FlagSettings = Field(default_factory=FlagSettings)
    execution: ExecutionSettings = Field(default_factory=ExecutionSettings)

    model_config = ConfigDict(frozen=True)
