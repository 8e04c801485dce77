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

"""Chat model served by an Ollama server."""

from __future__ import annotations

from typing import Any

import ollama as ollama_api

from actionkit.blocks.model import get_basic_usage_stats, model_info, model_metadata
from actionkit.core.action import Action, ActionKind, ActionRunContext
from actionkit.core.error import ActionKitError
from actionkit.core.logging import get_logger
from actionkit.core.typing import (
    DocumentData,
    FinishReason,
    GenerateRequest,
    GenerateResponse,
    GenerateResponseChunk,
    GenerationCommonConfig,
    GenerationUsage,
    MediaPart,
    Message,
    Part,
    Role,
    Supports,
    TextPart,
    ToolResponsePart,
)

logger = get_logger(__name__)

# Request config keys, in wire or python spelling, mapped to Ollama options.
_CONFIG_TO_OPTIONS = {
    'temperature': 'temperature',
    'maxOutputTokens': 'num_predict',
    'max_output_tokens': 'num_predict',
    'topP': 'top_p',
    'top_p': 'top_p',
    'topK': 'top_k',
    'top_k': 'top_k',
    'seed': 'seed',
    'stopSequences': 'stop',
    'stop_sequences': 'stop',
    'repeatPenalty': 'repeat_penalty',
    'repeat_penalty': 'repeat_penalty',
}

_MEDIA_MODELS = ('llava', 'bakllava')


def ollama_supports(model_name: str) -> Supports:
    """Capabilities of an Ollama model; only LLaVA variants accept images."""
    return Supports(
        multiturn=True,
        media=any(m in model_name for m in _MEDIA_MODELS),
        tools=False,
        system_role=True,
        output=['text', 'json'],
    )


class OllamaModel:
    """Calls `/api/chat` of an Ollama server for one model."""

    def __init__(self, client: ollama_api.AsyncClient, model_name: str) -> None:
        self.client = client
        self.model_name = model_name

    def to_action(self, name: str) -> Action:
        info = model_info(f'Ollama {self.model_name}', supports=ollama_supports(self.model_name))
        return Action(
            kind=ActionKind.MODEL,
            name=name,
            fn=self.generate,
            metadata=model_metadata(info, GenerationCommonConfig),
        )

    async def generate(self, request: GenerateRequest, ctx: ActionRunContext | None = None) -> GenerateResponse:
        """Generate a response from Ollama.

        Args:
            request: The request to generate a response for.
            ctx: Run context; chunks are streamed when the caller streams.

        Returns:
            The generated response.

        Raises:
            ActionKitError: If the server answers with an error.
        """
        streaming = ctx is not None and ctx.is_streaming
        kwargs: dict[str, Any] = {
            'model': self.model_name,
            'messages': self.build_chat_messages(request),
            'stream': streaming,
        }
        options = self.build_request_options(request.config)
        if options:
            kwargs['options'] = options
        fmt = self._format(request)
        if fmt:
            kwargs['format'] = fmt

        try:
            if streaming:
                text, done, api_response = await self._chat_streaming(kwargs, ctx)
            else:
                api_response = await self.client.chat(**kwargs)
                text, done = api_response.message.content, api_response.done
        except ollama_api.ResponseError as e:
            raise ActionKitError(
                status='INTERNAL',
                message=f'Ollama API error: {e.status_code} - {e.error}',
                cause=e,
            ) from e

        content = [Part(root=TextPart(text=text))] if text else []
        message = Message(role=Role.MODEL, content=content)
        return GenerateResponse(
            request=request,
            message=message,
            finish_reason=FinishReason.STOP if done else FinishReason.OTHER,
            usage=self.get_usage_info(get_basic_usage_stats(request.messages, message), api_response),
        )

    async def _chat_streaming(
        self, kwargs: dict[str, Any], ctx: ActionRunContext
    ) -> tuple[str, bool, ollama_api.ChatResponse | None]:
        text: list[str] = []
        last = None
        async for chunk in await self.client.chat(**kwargs):
            last = chunk
            if chunk.done:
                break
            piece = chunk.message.content if chunk.message else None
            if piece:
                text.append(piece)
                ctx.send_chunk(
                    GenerateResponseChunk(role=Role.MODEL, index=0, content=[Part(root=TextPart(text=piece))])
                )
        return ''.join(text), bool(last and last.done), last

    @staticmethod
    def build_request_options(config: GenerationCommonConfig | dict[str, Any] | None) -> dict[str, Any]:
        """Translates generation config into Ollama `options`."""
        if config is None:
            return {}
        if isinstance(config, GenerationCommonConfig):
            config = config.model_dump(exclude_none=True)
        return {
            _CONFIG_TO_OPTIONS[key]: value
            for key, value in config.items()
            if key in _CONFIG_TO_OPTIONS and value is not None
        }

    @staticmethod
    def _format(request: GenerateRequest) -> str | dict[str, Any] | None:
        # Ollama accepts either the 'json' literal or a JSON schema.
        if request.output is None or request.output.format != 'json':
            return None
        return request.output.schema_ or 'json'

    @classmethod
    def build_chat_messages(cls, request: GenerateRequest) -> list[dict[str, Any]]:
        """Converts request messages to Ollama chat messages.

        Documents attached to the request are prepended as numbered context
        to the first user message.
        """
        context = _context_prefix(request.docs)
        messages = []
        for message in request.messages:
            text = ''
            images = []
            if context and message.role == Role.USER:
                text, context = context, None
            for part in message.content:
                root = part.root
                if isinstance(root, TextPart):
                    text += root.text
                elif isinstance(root, ToolResponsePart):
                    text += str(root.tool_response.output)
                elif isinstance(root, MediaPart):
                    url = root.media.url
                    # Ollama takes raw base64 image data.
                    images.append(url.split(',', 1)[1] if url.startswith('data:') and ',' in url else url)
            item: dict[str, Any] = {'role': cls._to_ollama_role(message.role), 'content': text}
            if images:
                item['images'] = images
            messages.append(item)
        return messages

    @staticmethod
    def _to_ollama_role(role: Role | str) -> str:
        match role:
            case Role.SYSTEM:
                return 'system'
            case Role.MODEL:
                return 'assistant'
            case _:
                # Ollama has no tool role.
                return 'user'

    @staticmethod
    def get_usage_info(
        basic_generation_usage: GenerationUsage,
        api_response: ollama_api.ChatResponse | None,
    ) -> GenerationUsage:
        if api_response is not None:
            basic_generation_usage.input_tokens = api_response.prompt_eval_count or 0
            basic_generation_usage.output_tokens = api_response.eval_count or 0
            basic_generation_usage.total_tokens = (
                basic_generation_usage.input_tokens + basic_generation_usage.output_tokens
            )
        return basic_generation_usage


def _context_prefix(docs: list[DocumentData] | None) -> str | None:
    if not docs:
        return None
    prefix = 'Context:\n\n'
    for i, doc in enumerate(docs, start=1):
        prefix += f'[{i}] {doc.text}\n\n'
    return prefix
