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

"""Model backed by an OpenAI-compatible chat-completions API."""

from __future__ import annotations

import copy
from functools import cached_property
from typing import Any

from openai import AsyncOpenAI
from openai.lib._pydantic import _ensure_strict_json_schema

from actionkit.blocks.model import model_info, model_metadata
from actionkit.core.action import Action, ActionKind, ActionRunContext
from actionkit.core.logging import get_logger
from actionkit.core.typing import (
    GenerateRequest,
    GenerateResponse,
    GenerateResponseChunk,
    GenerationCommonConfig,
    Message,
    OutputConfig,
    Role,
    ToolDefinition,
)
from actionkit.plugins.compat_oai.converters import MessageConverter, to_finish_reason, to_usage
from actionkit.plugins.compat_oai.options import CompatOAIPluginOptions
from actionkit.plugins.compat_oai.typing import OpenAIConfig

logger = get_logger(__name__)

# GenerationCommonConfig fields (and their wire aliases) renamed for OpenAI.
_COMMON_TO_OPENAI = {
    'max_output_tokens': 'max_tokens',
    'maxOutputTokens': 'max_tokens',
    'stop_sequences': 'stop',
    'stopSequences': 'stop',
    'topP': 'top_p',
    'version': 'model',
}
_UNSUPPORTED = {'top_k', 'topK'}


def create_client(options: CompatOAIPluginOptions) -> AsyncOpenAI:
    """Creates an async OpenAI client for `options`."""
    return AsyncOpenAI(
        api_key=options.token_provider or options.api_key,
        base_url=options.base_url,
        organization=options.organization,
        timeout=options.timeout,
        default_query=options.query_params or None,
    )


class CompatOAIModel:
    """Calls one model of an OpenAI-compatible API.

    Attributes:
        model_id: Model id sent to the API, without plugin prefix.
        label: Display label.
    """

    def __init__(
        self,
        model_id: str,
        options: CompatOAIPluginOptions,
        label: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model_id = model_id
        self.label = label or model_id
        self._options = options
        self._client = client

    @cached_property
    def client(self) -> AsyncOpenAI:
        return self._client if self._client is not None else create_client(self._options)

    def to_action(self, name: str) -> Action:
        """Wraps the model in a `model` action registered as `name`."""
        return Action(
            kind=ActionKind.MODEL,
            name=name,
            fn=self.generate,
            metadata=model_metadata(model_info(self.label), OpenAIConfig),
        )

    async def generate(self, request: GenerateRequest, ctx: ActionRunContext | None = None) -> GenerateResponse:
        """Runs a chat completion, streaming chunks when the caller streams."""
        params = self._get_openai_request_config(request)
        streaming = ctx is not None and ctx.is_streaming
        logger.debug('Calling chat completions', model=self.model_id, streaming=streaming)
        if streaming:
            return await self._generate_stream(request, params, ctx)

        response = await self.client.chat.completions.create(**params)
        choice = response.choices[0]
        return GenerateResponse(
            request=request,
            message=MessageConverter.to_actionkit(choice.message),
            finish_reason=to_finish_reason(choice.finish_reason),
            usage=to_usage(response.usage),
        )

    async def _generate_stream(
        self, request: GenerateRequest, params: dict[str, Any], ctx: ActionRunContext
    ) -> GenerateResponse:
        stream = await self.client.chat.completions.create(
            **params, stream=True, stream_options={'include_usage': True}
        )

        text: list[str] = []
        tool_calls: dict[int, dict[str, Any]] = {}
        finish_reason = None
        usage = None
        async for chunk in stream:
            if getattr(chunk, 'usage', None) is not None:
                usage = chunk.usage
            if not chunk.choices:
                continue
            choice = chunk.choices[0]
            finish_reason = choice.finish_reason or finish_reason
            delta = choice.delta

            if delta.content:
                text.append(delta.content)
                ctx.send_chunk(
                    GenerateResponseChunk(role=Role.MODEL, content=[MessageConverter.text_part(delta.content)])
                )

            if delta.tool_calls:
                content = []
                for tool_call in delta.tool_calls:
                    # Arguments arrive in fragments keyed by the call index.
                    acc = tool_calls.setdefault(tool_call.index, {'id': None, 'name': '', 'arguments': ''})
                    if tool_call.id:
                        acc['id'] = tool_call.id
                    fragment = ''
                    if tool_call.function is not None:
                        acc['name'] += tool_call.function.name or ''
                        fragment = tool_call.function.arguments or ''
                        acc['arguments'] += fragment
                    content.append(MessageConverter.tool_call_part(acc['id'], acc['name'], fragment))
                ctx.send_chunk(GenerateResponseChunk(role=Role.MODEL, content=content))

        content = []
        if text:
            content.append(MessageConverter.text_part(''.join(text)))
        for acc in tool_calls.values():
            content.append(MessageConverter.tool_call_part(acc['id'], acc['name'], acc['arguments'], parse_args=True))

        return GenerateResponse(
            request=request,
            message=Message(role=Role.MODEL, content=content),
            finish_reason=to_finish_reason(finish_reason),
            usage=to_usage(usage),
        )

    def _get_messages(self, messages: list[Message]) -> list[dict]:
        openai_messages = []
        for message in messages:
            openai_messages.extend(MessageConverter.to_openai(message))
        return openai_messages

    def _get_tools_definition(self, tools: list[ToolDefinition]) -> list[dict]:
        return [
            {
                'type': 'function',
                'function': {
                    'name': tool.name,
                    'description': tool.description,
                    'parameters': tool.input_schema or {'type': 'object', 'properties': {}},
                },
            }
            for tool in tools
        ]

    def _get_response_format(self, output: OutputConfig) -> dict:
        """Returns the `response_format` for the requested output.

        A JSON schema selects structured outputs, plain JSON selects JSON
        mode, anything else selects text.
        """
        if output.format == 'json':
            if output.schema_:
                schema = copy.deepcopy(output.schema_)
                _ensure_strict_json_schema(schema, path=(), root=schema)
                return {
                    'type': 'json_schema',
                    'json_schema': {
                        'name': output.schema_.get('title', 'Response'),
                        'schema': schema,
                        'strict': True,
                    },
                }
            return {'type': 'json_object'}
        return {'type': 'text'}

    def _get_config(self, config: GenerationCommonConfig | dict[str, Any] | None) -> dict[str, Any]:
        if config is None:
            return {}
        if isinstance(config, GenerationCommonConfig):
            raw = config.model_dump(exclude_none=True)
        elif isinstance(config, dict):
            raw = dict(config)
        else:
            raw = config.model_dump(exclude_none=True)

        normalized = {_COMMON_TO_OPENAI.get(k, k): v for k, v in raw.items() if k not in _UNSUPPORTED}
        return OpenAIConfig.model_validate(normalized).model_dump(exclude_none=True)

    def _get_openai_request_config(self, request: GenerateRequest) -> dict[str, Any]:
        openai_config: dict[str, Any] = {
            'messages': self._get_messages(request.messages),
            'model': self.model_id,
        }
        if request.tools:
            openai_config['tools'] = self._get_tools_definition(request.tools)
        if request.output:
            openai_config['response_format'] = self._get_response_format(request.output)
        config = self._get_config(request.config)
        if config.get('model') is None:
            config.pop('model', None)
        openai_config.update(config)
        return openai_config
