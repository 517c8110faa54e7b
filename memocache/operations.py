"""
memocache - Caching Operations

The public facade over a CacheConfiguration:

- get / put / remove / remove_all
- compute_with_caching: read-through, write-through around a computation
- memoize: compute_with_caching keyed by the decorated callable's call site

Every operation is a coroutine. Keys are built (and fail on unrenderable
parts) before the backend is touched, then passed through the configured
sanitizer. Backend failures propagate; they are never treated as a miss.

Usage:
    cache = Cache(CacheConfiguration(backend=MemoryCacheBackend()))

    await cache.put("user", 42, value=user, ttl=timedelta(minutes=5))
    user = await cache.get("user", 42)

    profile = await cache.compute_with_caching("profile", 42, compute=load_profile)

    @cache.memoize(ttl=60)
    async def fetch_user(user_id: int) -> User: ...
"""

from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable, Coroutine, Sequence
from datetime import timedelta
from typing import Any, TypeVar

from pydantic import ConfigDict, TypeAdapter, ValidationError
from pydantic.errors import PydanticSchemaGenerationError

from .cache.interface import MISSING
from .configuration import CacheConfiguration
from .errors import BackendUnavailableError
from .flags import Flags, resolve_flags
from .keys.callsite import KeyDerivationPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

TTL = timedelta | float | int


@functools.lru_cache(maxsize=256)
def result_adapter(result_type: Any) -> TypeAdapter[Any]:
    """Validator for values read back from a backend, built once per result type."""
    try:
        return TypeAdapter(result_type)
    except PydanticSchemaGenerationError:
        # Plain classes unknown to pydantic are checked with isinstance
        return TypeAdapter(result_type, config=ConfigDict(arbitrary_types_allowed=True))


def normalize_ttl(ttl: TTL | None) -> timedelta | None:
    """Accept a timedelta or a number of seconds."""
    if ttl is None or isinstance(ttl, timedelta):
        return ttl
    if isinstance(ttl, bool) or not isinstance(ttl, (int, float)):
        raise TypeError(f"ttl must be a timedelta or a number of seconds, got {type(ttl).__name__}")
    return timedelta(seconds=ttl)


class Cache:
    """
    Caching facade bound to one immutable CacheConfiguration.

    The configuration is shared read-only state; the facade itself only
    tracks in-flight computations so they can finish after a caller stops
    waiting.
    """

    def __init__(self, config: CacheConfiguration):
        self.config = config
        self.key_builder = config.key_builder
        self._pending: set[asyncio.Task[Any]] = set()

    @property
    def backend_name(self) -> str:
        return self.config.backend.name

    # ------------ Keys ------------

    def key_for(self, *parts: Any) -> str:
        """Canonical key for a multi-part key (before sanitization)."""
        return self.key_builder.build(parts)

    def _backend_key(self, canonical_key: str) -> str:
        return self.config.sanitizer.sanitize(canonical_key)

    # ------------ Basic operations ------------

    async def get(
        self,
        *parts: Any,
        flags: Flags | None = None,
        result_type: Any = None,
    ) -> Any | None:
        """
        Look up a value.

        Args:
            *parts: Key parts, joined with the configured separator
            flags: Per-call flags; reads disabled means always None
            result_type: Optional type the cached value is validated against

        Returns:
            Cached value, or None when absent or reads are disabled
        """
        key = self.key_for(*parts)
        active = resolve_flags(flags, self.config.default_flags)
        adapter = result_adapter(result_type) if result_type is not None else None
        value = await self._read(key, active, adapter)
        return None if value is MISSING else value

    async def put(
        self,
        *parts: Any,
        value: Any,
        ttl: TTL | None = None,
        flags: Flags | None = None,
    ) -> None:
        """
        Store a value, unless writes are disabled.

        Args:
            *parts: Key parts, joined with the configured separator
            value: Value to store
            ttl: Time-to-live (timedelta or seconds); None = backend default
            flags: Per-call flags
        """
        key = self.key_for(*parts)
        active = resolve_flags(flags, self.config.default_flags)
        await self._write(key, value, normalize_ttl(ttl), active)

    async def remove(self, *parts: Any) -> None:
        """Remove a key. Not affected by flags; removing a missing key succeeds."""
        key = self.key_for(*parts)
        await self.config.backend.remove(self._backend_key(key))
        logger.debug("Removed cache key", extra={"key": key, "backend": self.backend_name})

    async def remove_all(self) -> None:
        """Remove every entry from the backend."""
        await self.config.backend.clear()

    # ------------ Read-through ------------

    async def compute_with_caching(
        self,
        *parts: Any,
        compute: Callable[[], T | Awaitable[T]],
        ttl: TTL | None = None,
        flags: Flags | None = None,
        result_type: Any = None,
    ) -> T:
        """
        Return the cached value for a key, or compute, store and return it.

        There is no deduplication between concurrent callers: two callers
        missing on the same key both compute and both write (last write wins).
        The lookup, computation and write run in their own task, so they still
        complete if the caller is cancelled while waiting.

        Args:
            *parts: Key parts, joined with the configured separator
            compute: Zero-argument callable (sync or async) producing the value
            ttl: Time-to-live for the stored value
            flags: Per-call flags
            result_type: Optional type the cached value is validated against

        Returns:
            Cached or freshly computed value

        Raises:
            KeyRenderingError: If a key part cannot be rendered
            BackendUnavailableError: If the backend read or write fails
        """
        key = self.key_for(*parts)
        return await self.run_cached(
            key,
            compute,
            ttl=normalize_ttl(ttl),
            flags=resolve_flags(flags, self.config.default_flags),
            adapter=result_adapter(result_type) if result_type is not None else None,
        )

    def memoize(
        self,
        ttl: TTL | None = None,
        *,
        param_groups: Sequence[Sequence[str]] | None = None,
        key_policy: KeyDerivationPolicy | None = None,
    ) -> Callable[[Callable[..., Any]], Any]:
        """
        Decorator caching a callable's results under keys derived from its call site.

        See memocache.memoize.memoize for details.
        """
        from .memoize import memoize

        return memoize(self, ttl, param_groups=param_groups, key_policy=key_policy)

    async def run_cached(
        self,
        key: str,
        compute: Callable[..., Any],
        args: tuple[Any, ...] = (),
        kwargs: dict[str, Any] | None = None,
        *,
        ttl: timedelta | None,
        flags: Flags,
        adapter: TypeAdapter[Any] | None,
    ) -> Any:
        """Read-through for an already-built canonical key."""
        return await self._detached(self._read_through(key, compute, args, kwargs or {}, ttl, flags, adapter))

    async def wait_for_pending(self) -> None:
        """Wait until every in-flight computation (including abandoned ones) has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ------------ Internals ------------

    async def _read(self, key: str, flags: Flags, adapter: TypeAdapter[Any] | None) -> Any:
        """Return the cached value, or MISSING on a miss or when reads are disabled."""
        if not flags.reads_enabled:
            logger.debug("Cache read skipped (reads disabled)", extra={"key": key})
            return MISSING

        value = await self.config.backend.get(self._backend_key(key))
        if value is MISSING:
            logger.debug("Cache miss", extra={"key": key, "backend": self.backend_name})
            return MISSING

        logger.debug("Cache hit", extra={"key": key, "backend": self.backend_name})
        if adapter is None:
            return value

        try:
            return adapter.validate_python(value)
        except ValidationError as e:
            raise BackendUnavailableError(
                self.backend_name,
                "get",
                "cached value does not match the declared result type",
                details={"key": key, "errors": e.errors(include_url=False, include_context=False)},
                retryable=False,
            ) from e

    async def _write(self, key: str, value: Any, ttl: timedelta | None, flags: Flags) -> None:
        if not flags.writes_enabled:
            logger.debug("Cache write skipped (writes disabled)", extra={"key": key})
            return

        await self.config.backend.put(self._backend_key(key), value, ttl)
        logger.debug(
            "Cache write",
            extra={"key": key, "backend": self.backend_name, "ttl": ttl.total_seconds() if ttl else None},
        )

    async def _read_through(
        self,
        key: str,
        compute: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        ttl: timedelta | None,
        flags: Flags,
        adapter: TypeAdapter[Any] | None,
    ) -> Any:
        cached = await self._read(key, flags, adapter)
        if cached is not MISSING:
            return cached

        value = await self.config.execution.run(compute, *args, **kwargs)
        await self._write(key, value, ttl, flags)
        return value

    async def _detached(self, coro: Coroutine[Any, Any, T]) -> T:
        """Await a coroutine in its own task, shielded from the caller's cancellation."""
        task = asyncio.ensure_future(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            task.add_done_callback(_log_abandoned_failure)
            raise


def _log_abandoned_failure(task: asyncio.Task[Any]) -> None:
    """Report failures of computations nobody is waiting for anymore."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.warning(
            "Caching task failed after its caller stopped waiting: %s",
            error,
            extra={"error": str(error), "error_type": type(error).__name__},
        )
