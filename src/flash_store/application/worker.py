"""Offloading of blocking engine calls to the default thread pool.

A worker thread cannot be interrupted. When the awaiting task is cancelled
the call still runs to completion, so calls that hand back a resource
(a cursor holding a read transaction) go through run_blocking_owned, which
releases the orphaned result once the thread is done with it.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Any, Callable, TypeVar

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any) -> T:
    """Run a blocking callable in the loop's default executor and await it."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, functools.partial(func, *args))


async def run_blocking_owned(
    func: Callable[..., T], *args: Any, release: Callable[[T], Any]
) -> T:
    """Run a blocking callable whose result must be released by its owner.

    If the awaiting task is cancelled before the call finishes, the result
    is passed to release() as soon as the worker thread returns it.

    Args:
        func: Blocking callable producing the resource.
        *args: Positional arguments for func.
        release: Called with an orphaned result.
    """
    loop = asyncio.get_running_loop()
    future = loop.run_in_executor(None, functools.partial(func, *args))
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        future.add_done_callback(functools.partial(_release_orphan, release))
        raise


def _release_orphan(release: Callable[[Any], Any], future: asyncio.Future) -> None:
    if future.cancelled() or future.exception() is not None:
        return
    release(future.result())
