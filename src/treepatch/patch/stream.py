"""Bounded buffering between pipeline stages."""

import asyncio
import contextlib
from dataclasses import dataclass
from typing import AsyncIterable, AsyncIterator, TypeVar

T = TypeVar("T")

_DONE = object()
_CANCELLED = object()


@dataclass
class _Failure:
    error: Exception


async def buffered(source: AsyncIterable[T], high_water_mark: int) -> AsyncIterator[T]:
    """
    Pull from source in a background task, holding at most high_water_mark items.

    The producer is suspended while the buffer is full, so a slow consumer
    applies backpressure to the upstream stage. An exception raised by the
    source is re-raised to the consumer after the items produced before it.

    Args:
        source: Upstream stage
        high_water_mark: Buffer capacity, at least 1

    Yields:
        Items of source in order
    """
    if high_water_mark < 1:
        raise ValueError(f"high_water_mark must be at least 1, got {high_water_mark}")

    queue: asyncio.Queue = asyncio.Queue(maxsize=high_water_mark)

    async def produce() -> None:
        try:
            try:
                async for item in source:
                    await queue.put(item)
            except Exception as e:
                await queue.put(_Failure(e))
            else:
                await queue.put(_DONE)
        except asyncio.CancelledError:
            # wake a consumer waiting on an empty queue
            with contextlib.suppress(asyncio.QueueFull):
                queue.put_nowait(_CANCELLED)
            raise

    task = asyncio.create_task(produce())
    try:
        while True:
            if queue.empty() and task.done():
                # the producer ended without a marker, only cancellation does that
                task.result()
                break
            item = await queue.get()
            if item is _DONE:
                break
            if item is _CANCELLED:
                await task
            if isinstance(item, _Failure):
                raise item.error
            yield item
        await task
    finally:
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


async def drain(stream: AsyncIterable) -> int:
    """Consume a stream to completion and return how many items it yielded."""
    count = 0
    async for _ in stream:
        count += 1
    return count
