"""
memocache - Memoization

Decorator caching a callable's results under a key derived from its call
site and arguments.

The call site (module, enclosing class, name, parameter groups) is captured
once, when the callable is decorated. Each call binds its arguments, applies
defaults and renders them into the key, e.g.::

    app.users.UserRepo.find(42, True)

The decorated callable must declare its result type: the return annotation is
what values read back from the backend are validated against (turning JSON
read from Redis back into models, for example). A missing annotation fails at
decoration time with StaticTypeOmissionError.

Decorated callables always become coroutine functions. Synchronous callables
run on the configuration's execution policy.
"""

from __future__ import annotations

import functools
import inspect
import typing
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from .errors import StaticTypeOmissionError
from .flags import resolve_flags
from .keys.callsite import CallSite, KeyDerivationPolicy, derive_key

if TYPE_CHECKING:
    from .operations import TTL, Cache


class _ResultType:
    """Declared result type of a memoized callable, resolved on first use."""

    def __init__(self, func: Callable[..., Any]):
        self.func = func
        self._adapter: TypeAdapter[Any] | None = None

    def adapter(self) -> TypeAdapter[Any]:
        if self._adapter is None:
            from .operations import result_adapter

            try:
                hints = typing.get_type_hints(self.func)
            except (NameError, TypeError) as e:
                raise StaticTypeOmissionError(
                    self.func.__qualname__,
                    reason=f"return annotation could not be resolved: {e}",
                ) from e
            self._adapter = result_adapter(hints["return"])
        return self._adapter


def memoize(
    cache: Cache,
    ttl: TTL | None = None,
    *,
    param_groups: Sequence[Sequence[str]] | None = None,
    key_policy: KeyDerivationPolicy | None = None,
) -> Callable[[Callable[..., Any]], Any]:
    """
    Decorator caching results of the decorated callable in cache.

    Args:
        cache: Cache facade results are stored through
        ttl: Time-to-live for stored results (timedelta or seconds)
        param_groups: Explicit grouping of parameter names into key groups
        key_policy: Overrides the configuration's key derivation policy

    Returns:
        Decorator producing a coroutine function with ``call_site``,
        ``key_for(*args, **kwargs)`` and ``invalidate(*args, **kwargs)``

    Raises:
        StaticTypeOmissionError: If the callable has no return annotation

    Example:
        >>> @memoize(cache, ttl=300)
        ... async def fetch_user(user_id: int) -> User:
        ...     return await db.load_user(user_id)
    """
    from .operations import normalize_ttl

    stored_ttl = normalize_ttl(ttl)

    def decorator(target: Any) -> Any:
        # Accept @memoize stacked above @classmethod / @staticmethod
        if isinstance(target, (classmethod, staticmethod)):
            return type(target)(decorator(target.__func__))

        func: Callable[..., Any] = target
        signature = inspect.signature(func)
        if signature.return_annotation is inspect.Signature.empty:
            raise StaticTypeOmissionError(func.__qualname__)

        call_site = CallSite.for_callable(func, param_groups)
        result_type = _ResultType(func)

        def key_for(*args: Any, **kwargs: Any) -> str:
            """Canonical key of the call with these arguments (before sanitization)."""
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()
            arguments = dict(bound.arguments)
            instance = arguments.pop(call_site.receiver) if call_site.receiver else None
            policy = key_policy if key_policy is not None else cache.config.key_policy
            return cache.key_builder.qualify(derive_key(call_site, arguments, policy, instance))

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            key = key_for(*args, **kwargs)
            return await cache.run_cached(
                key,
                func,
                args,
                kwargs,
                ttl=stored_ttl,
                flags=resolve_flags(None, cache.config.default_flags),
                adapter=result_type.adapter(),
            )

        async def invalidate(*args: Any, **kwargs: Any) -> None:
            """Remove the cached result of the call with these arguments."""
            key = key_for(*args, **kwargs)
            await cache.config.backend.remove(cache.config.sanitizer.sanitize(key))

        wrapper.call_site = call_site  # type: ignore[attr-defined]
        wrapper.key_for = key_for  # type: ignore[attr-defined]
        wrapper.invalidate = invalidate  # type: ignore[attr-defined]
        return wrapper

    return decorator
