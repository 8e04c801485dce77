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

"""The `Action` class: a named, traced, typed unit of work.

An action wraps a plain Python function, synchronous or asynchronous, that
takes zero, one (`input`) or two (`input`, `ctx`) arguments. Everything a
plugin contributes (models, embedders, retrievers, indexers, evaluators) and
every user flow or tool is an action.

When an action is created its input and output JSON schemas are derived from
the function's type hints with pydantic's `TypeAdapter` and stored in the
action metadata under `inputSchema` / `outputSchema`.

Running an action:

*   `run()` executes synchronously.
*   `arun()` executes asynchronously; synchronous functions are wrapped.
*   `arun_raw()` validates raw (JSON) input against the input type first.
*   `stream()` returns an async iterator of chunks plus a future of the final
    `ActionResponse`.

Each execution opens an OpenTelemetry span and returns the span's trace id in
the `ActionResponse`. Functions that accept a second argument receive an
`ActionRunContext`; calling `ctx.send_chunk()` delivers a chunk to the caller's
`on_chunk` callback when streaming.
"""

import asyncio
import inspect
from collections.abc import AsyncIterator, Callable
from contextvars import ContextVar
from functools import cached_property
from typing import Any

from pydantic import TypeAdapter

from actionkit.aio import Channel, ensure_async, run_sync
from actionkit.core.error import ActionKitError
from actionkit.core.tracing import tracer

from ._tracing import record_input_metadata, record_output_metadata, save_parent_path
from ._util import extract_action_args_and_types, noop_streaming_callback
from .types import ActionKind, ActionMetadataKey, ActionResponse

StreamingCallback = Callable[[Any], None]

_action_context: ContextVar[dict[str, Any] | None] = ContextVar('actionkit_context', default=None)


class ActionRunContext:
    """Per-execution context handed to action functions.

    Attributes:
        context: Arbitrary caller-provided data (e.g. auth info from a server
            plugin).
        is_streaming: True when the caller supplied an `on_chunk` callback.
    """

    def __init__(
        self,
        on_chunk: StreamingCallback | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self._on_chunk = on_chunk if on_chunk is not None else noop_streaming_callback
        self._context = context if context is not None else {}

    @property
    def context(self) -> dict[str, Any]:
        return self._context

    @cached_property
    def is_streaming(self) -> bool:
        return self._on_chunk is not noop_streaming_callback

    def send_chunk(self, chunk: Any) -> None:
        """Sends a chunk to the caller's streaming callback."""
        self._on_chunk(chunk)

    @staticmethod
    def current_context() -> dict[str, Any] | None:
        """Returns the caller context of the action currently running, if any."""
        return _action_context.get()


class Action:
    """A strongly-typed, traced callable registered under a kind and name.

    Attributes:
        kind: The action kind (model, tool, flow, ...).
        name: Unique name within the kind, usually `plugin/local-name`.
        description: Optional human-readable description.
        metadata: Free-form metadata; includes the input/output JSON schemas.
        input_schema: JSON schema of the input argument.
        output_schema: JSON schema of the return value.
    """

    def __init__(
        self,
        kind: ActionKind,
        name: str,
        fn: Callable[..., Any],
        metadata_fn: Callable[..., Any] | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
        span_metadata: dict[str, Any] | None = None,
    ) -> None:
        """Create an action.

        Args:
            kind: The kind of action.
            name: Name of the action.
            fn: The function to run.
            metadata_fn: Function whose signature is used for schema
                inference instead of `fn`'s.
            description: Optional description.
            metadata: Optional metadata dictionary.
            span_metadata: Extra attributes recorded on every span.

        Raises:
            TypeError: If the function takes more than two arguments.
        """
        self._kind = kind
        self._name = name
        self._fn = fn
        self._description = description
        self._metadata = dict(metadata) if metadata else {}
        self._span_metadata = span_metadata
        self._is_async = inspect.iscoroutinefunction(fn)

        args, arg_types, return_type = extract_action_args_and_types(metadata_fn or fn)
        if len(args) > 2:
            raise TypeError(f'can only have up to 2 args: {args}')
        self._n_args = len(args)
        self._init_schemas(arg_types, return_type)

    @property
    def kind(self) -> ActionKind:
        return self._kind

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str | None:
        return self._description

    @property
    def metadata(self) -> dict[str, Any]:
        return self._metadata

    @property
    def input_type(self) -> TypeAdapter | None:
        return self._input_type

    @property
    def input_schema(self) -> dict[str, Any]:
        return self._input_schema

    @property
    def output_schema(self) -> dict[str, Any]:
        return self._output_schema

    @property
    def is_async(self) -> bool:
        return self._is_async

    def run(
        self,
        input: Any = None,
        on_chunk: StreamingCallback | None = None,
        context: dict[str, Any] | None = None,
    ) -> ActionResponse:
        """Runs the action synchronously.

        Asynchronous action functions are driven to completion on a new event
        loop, so this must not be called from inside a running loop.

        Raises:
            ActionKitError: If the action function raises.
        """
        ctx = self._make_context(on_chunk, context)
        if self._is_async:
            return run_sync(self._traced_async(input, ctx))
        return self._traced_sync(input, ctx)

    async def arun(
        self,
        input: Any = None,
        on_chunk: StreamingCallback | None = None,
        context: dict[str, Any] | None = None,
    ) -> ActionResponse:
        """Runs the action asynchronously.

        Raises:
            ActionKitError: If the action function raises.
        """
        return await self._traced_async(input, self._make_context(on_chunk, context))

    async def arun_raw(
        self,
        raw_input: Any,
        on_chunk: StreamingCallback | None = None,
        context: dict[str, Any] | None = None,
    ) -> ActionResponse:
        """Validates `raw_input` against the input type, then runs the action.

        Raises:
            pydantic.ValidationError: If the input does not match the schema.
            ActionKitError: If the action function raises.
        """
        value = self._input_type.validate_python(raw_input) if self._input_type is not None else raw_input
        return await self.arun(input=value, on_chunk=on_chunk, context=context)

    def stream(
        self,
        input: Any = None,
        context: dict[str, Any] | None = None,
        timeout: float | None = None,
        raw: bool = False,
    ) -> tuple[AsyncIterator[Any], asyncio.Future]:
        """Starts the action and returns its chunk stream and final result.

        Must be called from a running event loop.

        Args:
            input: Input of the action.
            context: Optional caller context.
            timeout: Seconds to wait for each chunk.
            raw: Validate `input` as raw JSON first (see `arun_raw`).

        Returns:
            A `(chunks, result)` tuple. `result` resolves to the final
            response value (not the `ActionResponse` envelope).
        """
        channel: Channel[Any] = Channel(timeout=timeout)
        runner = self.arun_raw if raw else self.arun
        channel.set_close_future(runner(input, on_chunk=channel.send, context=context))

        result: asyncio.Future = asyncio.get_running_loop().create_future()

        def _resolve(closed: asyncio.Future) -> None:
            if result.done():
                return
            if closed.cancelled():
                result.cancel()
            elif closed.exception() is not None:
                result.set_exception(closed.exception())
            else:
                result.set_result(closed.result().response)

        channel.closed.add_done_callback(_resolve)
        return channel, result

    def _make_context(self, on_chunk: StreamingCallback | None, context: dict[str, Any] | None) -> ActionRunContext:
        if context:
            _action_context.set(context)
        return ActionRunContext(on_chunk=on_chunk, context=_action_context.get())

    def _init_schemas(self, arg_types: list[Any], return_type: Any) -> None:
        if arg_types:
            self._input_type = TypeAdapter(arg_types[0])
            self._input_schema = self._input_type.json_schema()
        else:
            self._input_type = None
            self._input_schema = TypeAdapter(Any).json_schema()
        self._metadata[ActionMetadataKey.INPUT_KEY] = self._input_schema

        if return_type is inspect.Signature.empty:
            return_type = Any
        try:
            self._output_schema = TypeAdapter(return_type).json_schema()
        except Exception:
            # Types pydantic cannot describe (e.g. arbitrary classes).
            self._output_schema = {}
        self._metadata[ActionMetadataKey.OUTPUT_KEY] = self._output_schema

    def _call_args(self, input: Any, ctx: ActionRunContext) -> tuple[Any, ...]:
        return (input, ctx)[: self._n_args]

    def _wrap_error(self, e: Exception, trace_id: str) -> ActionKitError:
        return ActionKitError(
            cause=e.cause if isinstance(e, ActionKitError) and e.cause else e,
            status=e.status if isinstance(e, ActionKitError) else None,
            message=f'Error while running action {self._name}',
            trace_id=trace_id,
        )

    async def _traced_async(self, input: Any, ctx: ActionRunContext) -> ActionResponse:
        afn = ensure_async(self._fn)
        with save_parent_path(), tracer.start_as_current_span(self._name) as span:
            trace_id = format(span.get_span_context().trace_id, '032x')
            record_input_metadata(span, self._kind, self._name, self._span_metadata, input)
            try:
                output = await afn(*self._call_args(input, ctx))
            except Exception as e:
                raise self._wrap_error(e, trace_id) from e
            record_output_metadata(span, output)
            return ActionResponse(response=output, trace_id=trace_id)

    def _traced_sync(self, input: Any, ctx: ActionRunContext) -> ActionResponse:
        with save_parent_path(), tracer.start_as_current_span(self._name) as span:
            trace_id = format(span.get_span_context().trace_id, '032x')
            record_input_metadata(span, self._kind, self._name, self._span_metadata, input)
            try:
                output = self._fn(*self._call_args(input, ctx))
            except Exception as e:
                raise self._wrap_error(e, trace_id) from e
            record_output_metadata(span, output)
            return ActionResponse(response=output, trace_id=trace_id)
