# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# SPDX-License-Identifier: Apache-2.0

"""Async channel used to stream action chunks to a consumer."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar('T')


class Channel(Generic[T]):
    """A queue that can be consumed with `async for` until it is closed.

    A producer calls `send()` for each chunk and hands the awaitable that
    produces the final result to `set_close_future()`. Iteration ends once
    that awaitable completes and every queued chunk has been consumed; the
    final result is then available on `closed`.

        channel = Channel[int]()
        channel.set_close_future(produce(channel.send))
        async for chunk in channel:
            ...
        result = await channel.closed
    """

    def __init__(self, timeout: float | None = None) -> None:
        """Create a channel.

        Args:
            timeout: Seconds to wait for the next chunk; `None` waits forever.

        Raises:
            ValueError: If the timeout is negative.
        """
        if timeout is not None and timeout < 0:
            raise ValueError('Timeout must be non-negative')

        self.queue: asyncio.Queue[T] = asyncio.Queue()
        self.closed: asyncio.Future = asyncio.Future()
        self._close_future: asyncio.Future | None = None
        self._timeout = timeout

    def __aiter__(self) -> AsyncIterator[T]:
        return self

    async def __anext__(self) -> T:
        if not self.queue.empty():
            return self.queue.get_nowait()

        pop_task = asyncio.ensure_future(self.queue.get())
        if self._close_future is None:
            return await asyncio.wait_for(pop_task, timeout=self._timeout)

        finished, pending = await asyncio.wait(
            [pop_task, self._close_future],
            return_when=asyncio.FIRST_COMPLETED,
            timeout=self._timeout,
        )
        if not finished:
            pop_task.cancel()
            raise TimeoutError('Timed out waiting for the next chunk')

        if pop_task in finished:
            return pop_task.result()

        pop_task.cancel()
        if not self.queue.empty():
            return self.queue.get_nowait()
        raise StopAsyncIteration

    def send(self, value: T) -> None:
        """Queues a chunk for the consumer."""
        self.queue.put_nowait(value)

    def set_close_future(self, future: asyncio.Future | object) -> None:
        """Closes the channel when `future` (or coroutine) completes.

        Raises:
            ValueError: If `future` is None.
        """
        if future is None:
            raise ValueError('Cannot set a None future')

        self._close_future = asyncio.ensure_future(future)
        self._close_future.add_done_callback(self._on_close)

    def _on_close(self, future: asyncio.Future) -> None:
        if self.closed.done():
            return
        if future.cancelled():
            self.closed.cancel()
        elif future.exception() is not None:
            self.closed.set_exception(future.exception())
        else:
            self.closed.set_result(future.result())
