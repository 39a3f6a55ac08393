from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class FetchCancelled(Exception):
    """Raised inside a fetch chain once its token has fired."""


class CancellationToken:
    """Cooperative cancellation shared by every chain of one catalog fetch."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise FetchCancelled()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` but abort it as soon as the token fires."""

        if self._event.is_set():
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise FetchCancelled()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not waiter.done():
                waiter.cancel()
            if not task.done():
                task.cancel()
        if not task.done() or task.cancelled():
            raise FetchCancelled()
        if self._event.is_set():
            # Completed in the same tick the token fired; results are stale.
            task.exception()
            raise FetchCancelled()
        return task.result()
