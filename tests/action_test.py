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

"""Tests for actions: schemas, execution, streaming and errors."""

import pytest
from pydantic import BaseModel, ValidationError

from actionkit.core.action import (
    Action,
    ActionKind,
    ActionMetadataKey,
    ActionRunContext,
    create_action_key,
    parse_action_key,
    parse_plugin_name_from_action_name,
)
from actionkit.core.error import ActionKitError


class Topic(BaseModel):
    name: str


def test_action_key_round_trip() -> None:
    """A key built from kind and name parses back to both."""
    key = create_action_key(ActionKind.MODEL, 'deepseek/deepseek-chat')

    assert key == '/model/deepseek/deepseek-chat'
    assert parse_action_key(key) == (ActionKind.MODEL, 'deepseek/deepseek-chat')


@pytest.mark.parametrize('key', ['', 'model', '/model', '//name', '/bogus/name'])
def test_parse_action_key_rejects_malformed_keys(key: str) -> None:
    """Malformed keys and unknown kinds raise ValueError."""
    with pytest.raises(ValueError):
        parse_action_key(key)


def test_parse_plugin_name_from_action_name() -> None:
    """Only namespaced names carry a plugin name."""
    assert parse_plugin_name_from_action_name('openai/gpt-4o') == 'openai'
    assert parse_plugin_name_from_action_name('myFlow') is None


def test_action_records_schemas_in_metadata() -> None:
    """Input and output schemas come from the function annotations."""

    def greet(topic: Topic) -> str:
        return f'hi {topic.name}'

    action = Action(kind=ActionKind.FLOW, name='greet', fn=greet)

    assert action.input_schema['properties']['name']['type'] == 'string'
    assert action.output_schema == {'type': 'string'}
    assert action.metadata[ActionMetadataKey.INPUT_KEY] == action.input_schema
    assert action.metadata[ActionMetadataKey.OUTPUT_KEY] == action.output_schema


def test_action_rejects_more_than_two_arguments() -> None:
    """Action functions take at most input and context."""
    with pytest.raises(TypeError):
        Action(kind=ActionKind.TOOL, name='bad', fn=lambda a, b, c: None)


def test_run_sync_function() -> None:
    """run() returns the output with the trace id of its span."""
    action = Action(kind=ActionKind.TOOL, name='double', fn=lambda x: x * 2)

    response = action.run(21)

    assert response.response == 42
    assert len(response.trace_id) == 32


def test_run_async_function_synchronously() -> None:
    """run() drives async functions to completion."""

    async def shout(text: str) -> str:
        return text.upper()

    assert Action(kind=ActionKind.TOOL, name='shout', fn=shout).run('hey').response == 'HEY'


@pytest.mark.asyncio
async def test_arun_zero_argument_function() -> None:
    """Functions without parameters ignore the input."""
    action = Action(kind=ActionKind.FLOW, name='constant', fn=lambda: 'value')

    assert (await action.arun('ignored')).response == 'value'


@pytest.mark.asyncio
async def test_arun_raw_validates_input() -> None:
    """arun_raw() turns raw JSON into the declared input type."""

    async def greet(topic: Topic) -> str:
        return f'hi {topic.name}'

    action = Action(kind=ActionKind.FLOW, name='greet', fn=greet)

    assert (await action.arun_raw({'name': 'cats'})).response == 'hi cats'
    with pytest.raises(ValidationError):
        await action.arun_raw({'wrong': 'field'})


@pytest.mark.asyncio
async def test_errors_are_wrapped_with_trace_id() -> None:
    """A failing function surfaces as ActionKitError carrying the cause."""

    def fail(x: int) -> int:
        raise ValueError('boom')

    action = Action(kind=ActionKind.TOOL, name='fail', fn=fail)

    with pytest.raises(ActionKitError) as exc_info:
        await action.arun(1)

    error = exc_info.value
    assert isinstance(error.cause, ValueError)
    assert error.status == 'INTERNAL'
    assert error.trace_id is not None
    assert 'Error while running action fail' in str(error)


@pytest.mark.asyncio
async def test_error_status_of_inner_actionkit_error_is_kept() -> None:
    """The status of an ActionKitError raised by the function is preserved."""

    def reject(x: int) -> int:
        raise ActionKitError(status='INVALID_ARGUMENT', message='no')

    with pytest.raises(ActionKitError) as exc_info:
        await Action(kind=ActionKind.TOOL, name='reject', fn=reject).arun(1)

    assert exc_info.value.status == 'INVALID_ARGUMENT'


@pytest.mark.asyncio
async def test_context_reaches_function() -> None:
    """A two-argument function receives the caller context."""

    def whoami(_: None, ctx: ActionRunContext) -> str:
        return ctx.context['user']

    action = Action(kind=ActionKind.FLOW, name='whoami', fn=whoami)

    assert (await action.arun(None, context={'user': 'ada'})).response == 'ada'


@pytest.mark.asyncio
async def test_nested_action_inherits_caller_context() -> None:
    """An action run from inside another sees the outer caller context."""
    inner = Action(kind=ActionKind.TOOL, name='inner', fn=lambda: ActionRunContext.current_context())

    async def outer() -> dict:
        return (await inner.arun()).response

    action = Action(kind=ActionKind.FLOW, name='outer', fn=outer)

    assert (await action.arun(None, context={'user': 'ada'})).response == {'user': 'ada'}


@pytest.mark.asyncio
async def test_on_chunk_receives_chunks() -> None:
    """send_chunk() forwards to the caller's callback."""
    chunks = []

    async def count(n: int, ctx: ActionRunContext) -> int:
        assert ctx.is_streaming
        for i in range(n):
            ctx.send_chunk(i)
        return n

    action = Action(kind=ActionKind.FLOW, name='count', fn=count)
    response = await action.arun(3, on_chunk=chunks.append)

    assert chunks == [0, 1, 2]
    assert response.response == 3


@pytest.mark.asyncio
async def test_stream_yields_chunks_then_result() -> None:
    """stream() returns the chunk iterator and a future of the output."""

    async def spell(word: str, ctx: ActionRunContext) -> str:
        for letter in word:
            ctx.send_chunk(letter)
        return word

    action = Action(kind=ActionKind.FLOW, name='spell', fn=spell)
    chunks, result = action.stream('abc')

    assert [c async for c in chunks] == ['a', 'b', 'c']
    assert await result == 'abc'


@pytest.mark.asyncio
async def test_stream_propagates_failure_to_result() -> None:
    """A failing streamed action ends the stream and fails the result."""

    async def broken(_: str, ctx: ActionRunContext) -> str:
        ctx.send_chunk('partial')
        raise RuntimeError('stream broke')

    chunks, result = Action(kind=ActionKind.FLOW, name='broken', fn=broken).stream('x')

    assert [c async for c in chunks] == ['partial']
    with pytest.raises(ActionKitError):
        await result
