"""
memocache - Execution Policy

Decides where synchronous computations run, so slow blocking work never
stalls the event loop:

- default: the event loop's shared default thread pool
- bounded: a dedicated pool with a fixed number of workers
- inline: directly on the event loop thread (for cheap computations)

Coroutine functions always run on the event loop.
"""

import asyncio
import contextvars
import functools
import inspect
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ExecutionPolicy:
    """
    Attributes:
        executor: Pool for synchronous computations (None = loop default pool)
        inline: Run synchronous computations on the event loop thread instead
    """

    executor: Executor | None = None
    inline: bool = False

    @classmethod
    def bounded(cls, max_workers: int, thread_name_prefix: str = "memocache") -> "ExecutionPolicy":
        """Policy backed by a dedicated pool of at most max_workers threads."""
        return cls(executor=ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=thread_name_prefix))

    async def run(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """
        Run a computation and return its result.

        Coroutine functions are awaited on the loop. Synchronous callables run
        in the configured pool (with the caller's context), or inline; if they
        return an awaitable it is awaited.
        """
        if inspect.iscoroutinefunction(func):
            return await func(*args, **kwargs)

        if self.inline:
            result = func(*args, **kwargs)
        else:
            loop = asyncio.get_running_loop()
            ctx = contextvars.copy_context()
            call = functools.partial(ctx.run, func, *args, **kwargs)
            result = await loop.run_in_executor(self.executor, call)

        if inspect.isawaitable(result):
            return await result
        return result

    def shutdown(self, wait: bool = True) -> None:
        """Shut down a dedicated pool. The loop's default pool is left alone."""
        if self.executor is not None:
            self.executor.shutdown(wait=wait)


DEFAULT_EXECUTION = ExecutionPolicy()
