"""Single-fulfillment deferred result.

Vendor layers report completion through callbacks, sometimes from their own
threads. :class:`AsyncResult` turns one such completion into one awaitable
and refuses to be resolved twice.
"""

from __future__ import annotations

import asyncio
import enum
import threading
from collections.abc import Callable, Generator
from typing import Any, Generic, TypeVar

from pyiap.exceptions import ResultAlreadyResolvedError

T = TypeVar("T")


class ResultState(enum.StrEnum):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


class AsyncResult(Generic[T]):
    """A deferred value that transitions exactly once.

    ``PENDING -> FULFILLED | REJECTED``. Resolving an already resolved
    result raises :class:`ResultAlreadyResolvedError` in the caller, even
    when the first resolution has not yet reached the event loop.

    Usage::

        result: AsyncResult[ProductsQueryResult] = AsyncResult()
        storefront.retrieve_products_info(ids, result.completion())
        query = await result
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future[T] = self._loop.create_future()
        self._lock = threading.Lock()
        self._state = ResultState.PENDING

    @property
    def state(self) -> ResultState:
        return self._state

    def _transition(self, state: ResultState) -> None:
        with self._lock:
            if self._state is not ResultState.PENDING:
                raise ResultAlreadyResolvedError(f"result already {self._state.value}; cannot become {state.value}")
            self._state = state

    def _deliver(self, fn: Callable[..., None], arg: Any) -> None:
        if self._future.done():
            # Only reachable when the awaiting side was cancelled.
            return
        fn(arg)

    def _schedule(self, fn: Callable[..., None], arg: Any) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._deliver(fn, arg)
        else:
            self._loop.call_soon_threadsafe(self._deliver, fn, arg)

    def fulfill(self, value: T) -> None:
        self._transition(ResultState.FULFILLED)
        self._schedule(self._future.set_result, value)

    def reject(self, error: BaseException) -> None:
        self._transition(ResultState.REJECTED)
        self._schedule(self._future.set_exception, error)

    def completion(self) -> Callable[[T], None]:
        """Callback that fulfills this result with whatever it is called with."""
        return self.fulfill

    def __await__(self) -> Generator[Any, None, T]:
        return self._future.__await__()
