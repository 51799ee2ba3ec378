"""
Utility functions for letterboxd-sync.

This module provides small helpers shared by the sync components:
    - unique: Order-preserving de-duplication
    - gather_cancelling: asyncio.gather that cancels siblings on failure

Usage:
    from letterboxd_sync.utils import gather_cancelling, unique
"""

import asyncio
from typing import Any, Awaitable, Hashable, Iterable, TypeVar

T = TypeVar("T", bound=Hashable)


def unique(items: Iterable[T]) -> list[T]:
    """
    Remove duplicates while keeping first-seen order.

    Example:
        unique(["b", "a", "b"])  # ["b", "a"]
    """
    return list(dict.fromkeys(items))


async def gather_cancelling(*aws: Awaitable[Any]) -> list[Any]:
    """
    Run awaitables concurrently and return their results in order.

    Unlike plain asyncio.gather(), the first exception cancels every
    awaitable that is still running and waits for them to finish before
    it is re-raised. No task is left running in the background after a
    failure.

    Args:
        *aws: Coroutines or futures to run.

    Returns:
        List of results, in the order the awaitables were given.

    Raises:
        The first exception raised by any awaitable.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
