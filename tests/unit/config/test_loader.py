"""
memocache - Settings Loader Tests

Tests environment-driven settings and their validation.
"""

import pytest

from memocache.config import (
    CacheBackend,
    LogLevel,
    MemocacheSettings,
    SanitizerKind,
    get_settings,
    load_settings,
    reload_settings,
)
from memocache.config.schemas import BackendSettings, SanitizerSettings
from memocache.errors import ConfigurationError
from memocache.keys import KeyDerivationPolicy


class TestLoadSettings:
    def test_defaults(self, empty_env_file: str) -> None:
        settings = load_settings(env_file=empty_env_file)

        assert settings.backend.backend == CacheBackend.MEMORY
        assert settings.backend.default_ttl_seconds == 0
        assert settings.sanitizer.kind == SanitizerKind.NONE
        assert settings.keys.policy == KeyDerivationPolicy.IDENTITY
        assert settings.keys.separator == ":"
        assert settings.keys.prefix is None
        assert settings.flags.reads_enabled is True
        assert settings.flags.writes_enabled is True
        assert settings.execution.max_workers is None
        assert settings.log_level == LogLevel.INFO

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch, empty_env_file: str) -> None:
        monkeypatch.setenv("MEMOCACHE_BACKEND", "sqlite")
        monkeypatch.setenv("MEMOCACHE_SQLITE_PATH", "/tmp/cache.db")
        monkeypatch.setenv("MEMOCACHE_DEFAULT_TTL_SECONDS", "300")
        monkeypatch.setenv("MEMOCACHE_SANITIZER", "hash")
        monkeypatch.setenv("MEMOCACHE_HASH_ALGORITHM", "SHA1")
        monkeypatch.setenv("MEMOCACHE_KEY_POLICY", "identity_with_constructor_args")
        monkeypatch.setenv("MEMOCACHE_KEY_PREFIX", "app")
        monkeypatch.setenv("MEMOCACHE_READS_ENABLED", "false")
        monkeypatch.setenv("MEMOCACHE_MAX_WORKERS", "4")
        monkeypatch.setenv("MEMOCACHE_LOG_LEVEL", "debug")

        settings = load_settings(env_file=empty_env_file)

        assert settings.backend.backend == CacheBackend.SQLITE
        assert settings.backend.sqlite_path == "/tmp/cache.db"
        assert settings.backend.default_ttl_seconds == 300
        assert settings.sanitizer.kind == SanitizerKind.HASH
        assert settings.sanitizer.hash_algorithm == "sha1"
        assert settings.keys.policy == KeyDerivationPolicy.IDENTITY_WITH_CONSTRUCTOR_ARGS
        assert settings.keys.prefix == "app"
        assert settings.flags.reads_enabled is False
        assert settings.execution.max_workers == 4
        assert settings.log_level == LogLevel.DEBUG

    def test_redis_url_selects_redis(self, monkeypatch: pytest.MonkeyPatch, empty_env_file: str) -> None:
        monkeypatch.setenv("MEMOCACHE_REDIS_URL", "redis://localhost:6379/0")

        settings = load_settings(env_file=empty_env_file)

        assert settings.backend.backend == CacheBackend.REDIS

    def test_env_file_overrides_environment(self, monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
        monkeypatch.setenv("MEMOCACHE_NAMESPACE", "from-env")
        env_file = tmp_path / ".env"
        env_file.write_text("MEMOCACHE_NAMESPACE=from-file\n")

        settings = load_settings(env_file=str(env_file))

        assert settings.backend.namespace == "from-file"

    def test_invalid_value_raises_configuration_error(self, monkeypatch: pytest.MonkeyPatch, empty_env_file: str) -> None:
        monkeypatch.setenv("MEMOCACHE_BACKEND", "memcached")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(env_file=empty_env_file)

        assert exc_info.value.details["validation_errors"]

    def test_settings_are_cached(self, monkeypatch: pytest.MonkeyPatch, empty_env_file: str) -> None:
        first = load_settings(env_file=empty_env_file)
        monkeypatch.setenv("MEMOCACHE_NAMESPACE", "changed")

        assert get_settings() is first
        assert reload_settings(env_file=empty_env_file).backend.namespace == "changed"

    def test_settings_are_immutable(self, empty_env_file: str) -> None:
        settings = load_settings(env_file=empty_env_file)

        with pytest.raises(ValueError):
            settings.log_level = LogLevel.DEBUG  # type: ignore[misc]


class TestSchemas:
    def test_redis_backend_requires_url(self) -> None:
        with pytest.raises(ValueError, match="redis_url"):
            BackendSettings(backend=CacheBackend.REDIS)

    def test_unknown_hash_algorithm(self) -> None:
        with pytest.raises(ValueError):
            SanitizerSettings(hash_algorithm="crc32")

    def test_replacement_is_single_character(self) -> None:
        with pytest.raises(ValueError):
            SanitizerSettings(replacement="--")

    def test_direct_construction(self) -> None:
        settings = MemocacheSettings(backend=BackendSettings(max_size=5))

        assert settings.backend.max_size == 5
