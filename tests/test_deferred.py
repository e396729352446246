from __future__ import annotations

import asyncio
import threading

import pytest

from pyiap.deferred import AsyncResult, ResultState
from pyiap.exceptions import ResultAlreadyResolvedError


@pytest.mark.asyncio
async def test_fulfill_resolves_awaiter() -> None:
    result: AsyncResult[int] = AsyncResult()
    assert result.state is ResultState.PENDING

    result.fulfill(42)

    assert result.state is ResultState.FULFILLED
    assert await result == 42


@pytest.mark.asyncio
async def test_reject_raises_in_awaiter() -> None:
    result: AsyncResult[int] = AsyncResult()
    result.reject(ValueError("boom"))

    assert result.state is ResultState.REJECTED
    with pytest.raises(ValueError, match="boom"):
        await result


@pytest.mark.asyncio
async def test_second_resolution_fails_loudly() -> None:
    result: AsyncResult[str] = AsyncResult()
    result.fulfill("first")

    with pytest.raises(ResultAlreadyResolvedError):
        result.fulfill("second")
    with pytest.raises(ResultAlreadyResolvedError):
        result.reject(RuntimeError("late"))

    assert await result == "first"


@pytest.mark.asyncio
async def test_completion_callback_from_another_thread() -> None:
    result: AsyncResult[str] = AsyncResult()
    callback = result.completion()

    thread = threading.Thread(target=callback, args=("from-thread",))
    thread.start()
    value = await asyncio.wait_for(result, 1.0)
    thread.join()

    assert value == "from-thread"


@pytest.mark.asyncio
async def test_double_resolution_from_threads_only_one_wins() -> None:
    result: AsyncResult[int] = AsyncResult()
    errors: list[BaseException] = []
    barrier = threading.Barrier(2)

    def _resolve(value: int) -> None:
        barrier.wait()
        try:
            result.fulfill(value)
        except ResultAlreadyResolvedError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_resolve, args=(n,)) for n in (1, 2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    value = await asyncio.wait_for(result, 1.0)
    assert value in (1, 2)
    assert len(errors) == 1
