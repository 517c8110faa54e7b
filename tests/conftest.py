"""
memocache - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import os
from collections.abc import Iterator

import pytest

from memocache import Cache, CacheConfiguration, MemoryCacheBackend
from memocache.cache.factory import reset_backend_factory
from memocache.config import loader
from memocache.execution import ExecutionPolicy


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Clear MEMOCACHE_* variables, cached settings and registered backends around each test."""
    for name in list(os.environ):
        if name.startswith(loader.ENV_PREFIX):
            monkeypatch.delenv(name)
    monkeypatch.setattr(loader, "_settings_instance", None)
    reset_backend_factory()
    yield
    reset_backend_factory()


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def empty_env_file(tmp_path) -> str:
    """Path of an empty .env file, so tests never pick up a developer's .env."""
    path = tmp_path / ".env"
    path.write_text("")
    return str(path)


@pytest.fixture
def memory_backend() -> MemoryCacheBackend:
    """Fresh memory backend."""
    return MemoryCacheBackend(max_size=100, namespace="test")


@pytest.fixture
def cache(memory_backend: MemoryCacheBackend) -> Cache:
    """Cache facade over a fresh memory backend, running sync computations inline."""
    return Cache(CacheConfiguration(backend=memory_backend, execution=ExecutionPolicy(inline=True)))
