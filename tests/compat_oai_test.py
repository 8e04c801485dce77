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

"""Tests for the OpenAI-compatible model, converters and plugin."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from actionkit.core.action import ActionKind, ActionRunContext
from actionkit.core.typing import (
    FinishReason,
    GenerateRequest,
    GenerationCommonConfig,
    Media,
    MediaPart,
    Message,
    OutputConfig,
    Role,
    TextPart,
    ToolDefinition,
    ToolRequest,
    ToolRequestPart,
    ToolResponse,
    ToolResponsePart,
)
from actionkit.plugins.compat_oai import (
    CompatOAIModel,
    CompatOAIPlugin,
    CompatOAIPluginOptions,
    MessageConverter,
    create_client,
)
from actionkit.plugins.compat_oai.converters import to_finish_reason, to_usage

OPTIONS = CompatOAIPluginOptions(api_key='test-key', base_url='https://llm.example.com/v1')


def _completion(content: str, finish_reason: str = 'stop') -> SimpleNamespace:
    message = SimpleNamespace(role='assistant', content=content, tool_calls=None)
    return SimpleNamespace(
        choices=[SimpleNamespace(message=message, finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=5, total_tokens=8),
    )


def _chunk(content: str | None = None, tool_calls=None, finish_reason: str | None = None) -> SimpleNamespace:
    delta = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(usage=None, choices=[SimpleNamespace(delta=delta, finish_reason=finish_reason)])


def _stream_of(*chunks):
    async def stream():
        for chunk in chunks:
            yield chunk

    return stream()


def _model_with(create: AsyncMock) -> CompatOAIModel:
    client = MagicMock()
    client.chat.completions.create = create
    return CompatOAIModel('chat-model', OPTIONS, client=client)


def test_text_message_to_openai() -> None:
    """Text parts are joined into a single content string."""
    message = Message(role=Role.MODEL, content=[TextPart(text='Hello, '), TextPart(text='world')])

    assert MessageConverter.to_openai(message) == [{'role': 'assistant', 'content': 'Hello, world'}]


def test_media_message_to_openai() -> None:
    """Media switches content to a list of typed parts."""
    message = Message(
        role=Role.USER,
        content=[TextPart(text='What is this?'), MediaPart(media=Media(url='https://img.example.com/cat.png'))],
    )

    [converted] = MessageConverter.to_openai(message)

    assert converted['content'] == [
        {'type': 'text', 'text': 'What is this?'},
        {'type': 'image_url', 'image_url': {'url': 'https://img.example.com/cat.png'}},
    ]


def test_tool_parts_to_openai() -> None:
    """Tool requests become tool_calls and each response its own message."""
    request = Message(
        role=Role.MODEL,
        content=[ToolRequestPart(tool_request=ToolRequest(ref='c1', name='weather', input={'city': 'Paris'}))],
    )
    response = Message(
        role=Role.TOOL,
        content=[
            ToolResponsePart(tool_response=ToolResponse(ref='c1', name='weather', output={'temp': 21})),
            ToolResponsePart(tool_response=ToolResponse(ref='c2', name='weather', output='sunny')),
        ],
    )

    [call] = MessageConverter.to_openai(request)
    results = MessageConverter.to_openai(response)

    assert call['role'] == 'assistant'
    assert call['tool_calls'][0]['id'] == 'c1'
    assert json.loads(call['tool_calls'][0]['function']['arguments']) == {'city': 'Paris'}
    assert results == [
        {'role': 'tool', 'tool_call_id': 'c1', 'content': '{"temp": 21}'},
        {'role': 'tool', 'tool_call_id': 'c2', 'content': 'sunny'},
    ]


def test_tool_calls_to_actionkit() -> None:
    """Tool call arguments are decoded from JSON and kept next to any text."""
    tool_call = SimpleNamespace(id='c1', function=SimpleNamespace(name='weather', arguments='{"city": "Oslo"}'))
    message = SimpleNamespace(role='assistant', content=None, tool_calls=[tool_call])

    converted = MessageConverter.to_actionkit(message)

    assert converted.role == Role.MODEL
    assert converted.tool_requests[0].input == {'city': 'Oslo'}

    mixed = MessageConverter.to_actionkit(
        SimpleNamespace(role='assistant', content='Checking the weather.', tool_calls=[tool_call])
    )

    assert mixed.text == 'Checking the weather.'
    assert [t.name for t in mixed.tool_requests] == ['weather']


def test_empty_message_to_actionkit() -> None:
    with pytest.raises(ValueError, match='Unable to determine content part'):
        MessageConverter.to_actionkit(SimpleNamespace(role='assistant', content=None, tool_calls=None))


def test_undecodable_arguments_are_kept() -> None:
    part = MessageConverter.tool_call_part('c1', 'f', '{"broken', parse_args=True)

    assert part.root.tool_request.input == '{"broken'


def test_finish_reason_and_usage() -> None:
    """Provider finish reasons and usage map onto ActionKit types."""
    assert to_finish_reason('length') == FinishReason.LENGTH
    assert to_finish_reason('tool_calls') == FinishReason.STOP
    assert to_finish_reason('content_filter') == FinishReason.BLOCKED
    assert to_finish_reason('something-new') == FinishReason.OTHER
    assert to_finish_reason(None) == FinishReason.UNKNOWN
    assert to_usage(None) is None
    assert to_usage(SimpleNamespace(prompt_tokens=1, completion_tokens=2, total_tokens=3)).total_tokens == 3


def test_get_messages(sample_request: GenerateRequest) -> None:
    model = CompatOAIModel('chat-model', OPTIONS, client=MagicMock())

    messages = model._get_messages(sample_request.messages)

    assert messages == [
        {'role': 'system', 'content': 'You are an assistant'},
        {'role': 'user', 'content': 'Hello, world!'},
    ]


def test_common_config_is_renamed() -> None:
    """Common config fields are renamed and unsupported ones dropped."""
    model = CompatOAIModel('chat-model', OPTIONS, client=MagicMock())
    config = GenerationCommonConfig(
        temperature=0.2, max_output_tokens=100, top_k=3, stop_sequences=['END'], version='chat-model-002'
    )

    assert model._get_config(config) == {
        'temperature': 0.2,
        'max_tokens': 100,
        'stop': ['END'],
        'model': 'chat-model-002',
    }


def test_dict_config_passes_provider_parameters() -> None:
    """Unknown keys of a dict config reach the provider unchanged."""
    model = CompatOAIModel('chat-model', OPTIONS, client=MagicMock())

    assert model._get_config({'maxOutputTokens': 5, 'seed': 1, 'logprobs': True}) == {
        'max_tokens': 5,
        'seed': 1,
        'logprobs': True,
    }


def test_request_config(sample_request: GenerateRequest) -> None:
    """Tools and JSON output are added to the request parameters."""
    model = CompatOAIModel('chat-model', OPTIONS, client=MagicMock())
    request = sample_request.model_copy(
        update={
            'tools': [ToolDefinition(name='weather', description='Current weather')],
            'output': OutputConfig(format='json'),
        }
    )

    params = model._get_openai_request_config(request)

    assert params['model'] == 'chat-model'
    assert params['tools'][0]['function']['parameters'] == {'type': 'object', 'properties': {}}
    assert params['response_format'] == {'type': 'json_object'}


def test_json_schema_output_is_strict() -> None:
    model = CompatOAIModel('chat-model', OPTIONS, client=MagicMock())
    schema = {'title': 'Pet', 'type': 'object', 'properties': {'name': {'type': 'string'}}}

    response_format = model._get_response_format(OutputConfig(format='json', schema_=schema))

    assert response_format['type'] == 'json_schema'
    assert response_format['json_schema']['name'] == 'Pet'
    assert response_format['json_schema']['schema']['additionalProperties'] is False
    assert 'additionalProperties' not in schema


@pytest.mark.asyncio
async def test_generate(sample_request: GenerateRequest) -> None:
    """A non-streaming call returns the first choice."""
    create = AsyncMock(return_value=_completion('Hello, user!'))
    model = _model_with(create)

    response = await model.generate(sample_request)

    create.assert_awaited_once()
    assert response.message.role == Role.MODEL
    assert response.text == 'Hello, user!'
    assert response.finish_reason == FinishReason.STOP
    assert response.usage.output_tokens == 5


@pytest.mark.asyncio
async def test_generate_stream(sample_request: GenerateRequest) -> None:
    """Streamed text is forwarded as chunks and joined in the response."""
    usage = SimpleNamespace(
        usage=SimpleNamespace(prompt_tokens=3, completion_tokens=2, total_tokens=5),
        choices=[],
    )
    create = AsyncMock(return_value=_stream_of(_chunk('Hel'), _chunk('lo'), _chunk(finish_reason='stop'), usage))
    model = _model_with(create)
    chunks = []

    response = await model.generate(sample_request, ActionRunContext(on_chunk=chunks.append))

    assert create.await_args.kwargs['stream'] is True
    assert create.await_args.kwargs['stream_options'] == {'include_usage': True}
    assert [c.text for c in chunks] == ['Hel', 'lo']
    assert response.text == 'Hello'
    assert response.finish_reason == FinishReason.STOP
    assert response.usage.output_tokens == 2


@pytest.mark.asyncio
async def test_generate_stream_tool_calls(sample_request: GenerateRequest) -> None:
    """Streamed tool call fragments are accumulated per index."""
    first = SimpleNamespace(index=0, id='c1', function=SimpleNamespace(name='weather', arguments='{"city": '))
    second = SimpleNamespace(index=0, id=None, function=SimpleNamespace(name=None, arguments='"Rome"}'))
    create = AsyncMock(
        return_value=_stream_of(
            _chunk(tool_calls=[first]), _chunk(tool_calls=[second]), _chunk(finish_reason='tool_calls')
        )
    )
    model = _model_with(create)
    chunks = []

    response = await model.generate(sample_request, ActionRunContext(on_chunk=chunks.append))

    assert len(chunks) == 2
    [tool_request] = response.message.tool_requests
    assert tool_request.ref == 'c1'
    assert tool_request.name == 'weather'
    assert tool_request.input == {'city': 'Rome'}


@pytest.mark.asyncio
async def test_model_action(sample_request: GenerateRequest) -> None:
    """The model action carries model info and runs through the client."""
    model = _model_with(AsyncMock(return_value=_completion('hi')))

    action = model.to_action('acme/chat-model')
    result = await action.arun(sample_request)

    assert action.kind == ActionKind.MODEL
    assert action.metadata['model']['label'] == 'chat-model'
    assert result.response.text == 'hi'


def test_options_builder() -> None:
    """The builder validates credentials and can be reopened."""
    options = CompatOAIPluginOptions.builder().api_key('k').base_url('https://x.example.com/v1').timeout(5).build()

    assert options.timeout == 5
    assert options.to_builder().organization('org').build().organization == 'org'
    with pytest.raises(ValueError, match='API key is required'):
        CompatOAIPluginOptions.builder().base_url('https://x.example.com/v1').build()
    with pytest.raises(ValueError, match='Base URL is required'):
        CompatOAIPluginOptions.builder().api_key('k').build()


def test_create_client() -> None:
    client = create_client(OPTIONS)

    assert client.api_key == 'test-key'
    assert str(client.base_url).startswith('https://llm.example.com/v1')


def test_plugin_builder_requires_name_and_models() -> None:
    with pytest.raises(ValueError, match='pluginName must be set'):
        CompatOAIPlugin.builder().add_model('m1')
    with pytest.raises(ValueError, match='pluginName is required'):
        CompatOAIPlugin.builder().build()
    with pytest.raises(ValueError, match='At least one model'):
        CompatOAIPlugin.builder().plugin_name('together').api_key('k').base_url('https://x/v1').build()


@pytest.mark.asyncio
async def test_plugin_registers_models() -> None:
    """Every added model becomes a namespaced model action."""
    plugin = (
        CompatOAIPlugin.builder()
        .plugin_name('together')
        .options(OPTIONS)
        .add_model('m1', label='Model One')
        .add_models('m2', 'm3')
        .build()
    )

    actions = await plugin.init()
    listed = await plugin.list_actions()

    assert [a.name for a in actions] == ['together/m1', 'together/m2', 'together/m3']
    assert actions[0].metadata['model']['label'] == 'Model One'
    assert actions[1].metadata['model']['label'] == 'together m2'
    assert [m.name for m in listed] == ['together/m1', 'together/m2', 'together/m3']
    assert plugin.options is OPTIONS
