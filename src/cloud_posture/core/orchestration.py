"""
Concurrency primitives shared by every check: once-only completion and
bounded, order-preserving fan-out
"""

import asyncio
import inspect
import threading
from typing import Any, Callable, Iterable, List

from .errors import CompletionError


class Completion:
    """Wraps a completion callback so it can fire exactly once"""

    def __init__(self, callback: Callable[..., Any]):
        self._callback = callback
        self._fired = False
        self._lock = threading.Lock()

    @property
    def fired(self) -> bool:
        return self._fired

    def fire(self, *args) -> Any:
        with self._lock:
            if self._fired:
                raise CompletionError("Completion callback already invoked")
            self._fired = True
        return self._callback(*args)


async def call_worker(worker: Callable[..., Any], *args) -> Any:
    """Call a sync or async worker and return its result"""
    result = worker(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


async def bounded_gather(items: Iterable[Any], worker: Callable[[Any], Any],
                         limit: int, return_exceptions: bool = False) -> List[Any]:
    """Run ``worker`` over ``items`` with at most ``limit`` in flight.

    Results come back in the order of ``items``, not completion order. With
    ``return_exceptions`` every worker runs to completion and a raised
    exception takes the place of its result.
    """
    if limit < 1:
        raise ValueError(f"Fan-out limit must be at least 1, got {limit}")

    semaphore = asyncio.Semaphore(limit)

    async def run_one(item):
        async with semaphore:
            return await call_worker(worker, item)

    return list(await asyncio.gather(*(run_one(item) for item in items),
                                     return_exceptions=return_exceptions))
