"""
memocache - Flags

Per-invocation switches that bypass cache reads and/or writes.

Flags are resolved per operation, in order:
1. flags passed explicitly to the operation
2. the innermost active flags_scope() block
3. the configuration's default flags
"""

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass


@dataclass(frozen=True)
class Flags:
    """
    Read/write bypass switches.

    Attributes:
        reads_enabled: If False, backend reads are skipped and every lookup misses
        writes_enabled: If False, computed values are returned but not stored
    """

    reads_enabled: bool = True
    writes_enabled: bool = True


DEFAULT_FLAGS = Flags()

_flags_ctx: contextvars.ContextVar[Flags | None] = contextvars.ContextVar("memocache_flags", default=None)


@contextmanager
def flags_scope(flags: Flags) -> Iterator[Flags]:
    """
    Apply flags to every caching operation in the block, including memoized calls.

    Scopes nest; the innermost wins. The scope follows the current context, so
    it applies to awaited coroutines but not to unrelated concurrent tasks.

    Example:
        >>> with flags_scope(Flags(reads_enabled=False)):
        ...     fresh = await fetch_user(42)  # recomputed, then written back
    """
    token = _flags_ctx.set(flags)
    try:
        yield flags
    finally:
        _flags_ctx.reset(token)


def current_flags() -> Flags | None:
    """Flags of the innermost active flags_scope(), if any."""
    return _flags_ctx.get()


def resolve_flags(explicit: Flags | None, default: Flags) -> Flags:
    """Pick the flags governing one operation."""
    if explicit is not None:
        return explicit
    scoped = _flags_ctx.get()
    return scoped if scoped is not None else default
