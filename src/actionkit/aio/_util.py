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

"""Small asyncio helpers."""

import asyncio
import inspect
from collections.abc import AsyncIterable, Callable, Coroutine, Iterable
from typing import Any, TypeVar

T = TypeVar('T')


def ensure_async(fn: Callable[..., Any]) -> Callable[..., Coroutine[Any, Any, Any]]:
    """Returns `fn` if it is a coroutine function, else an async wrapper."""
    if inspect.iscoroutinefunction(fn):
        return fn

    async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
        result = fn(*args, **kwargs)
        if inspect.isawaitable(result):
            return await result
        return result

    return async_wrapper


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Runs a coroutine to completion from synchronous code.

    Raises:
        RuntimeError: If called while an event loop is running in this thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    coro.close()
    raise RuntimeError('run_sync() cannot be called from a running event loop; use await instead')


def iter_over_async(ait: AsyncIterable[T], loop: asyncio.AbstractEventLoop) -> Iterable[T]:
    """Iterates an async iterable from synchronous code on `loop`."""
    iterator = ait.__aiter__()

    async def get_next() -> tuple[bool, T | None]:
        try:
            return False, await iterator.__anext__()
        except StopAsyncIteration:
            return True, None

    while True:
        done, item = loop.run_until_complete(get_next())
        if done:
            break
        yield item
