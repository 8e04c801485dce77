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

"""OpenAI image generation models (DALL-E, GPT Image)."""

from __future__ import annotations

from functools import cached_property
from typing import Any

from openai import AsyncOpenAI

from actionkit.blocks.model import model_metadata
from actionkit.core.action import Action, ActionKind, ActionRunContext
from actionkit.core.typing import (
    FinishReason,
    GenerateRequest,
    GenerateResponse,
    GenerationCommonConfig,
    Media,
    MediaPart,
    Message,
    ModelInfo,
    Part,
    Role,
    Supports,
)
from actionkit.plugins.compat_oai import CompatOAIPluginOptions, create_client

IMAGE_MODEL_SUPPORTS = Supports(media=False, output=['media'], multiturn=False, system_role=False, tools=False)

# Text-generation settings that have no meaning for image generation.
_TEXT_ONLY_KEYS = (
    'temperature',
    'max_output_tokens',
    'maxOutputTokens',
    'stop_sequences',
    'stopSequences',
    'top_k',
    'topK',
    'top_p',
    'topP',
)


def _prompt_text(request: GenerateRequest) -> str:
    for message in reversed(request.messages):
        if message.role == Role.USER and message.text:
            return message.text
    return ''.join(m.text for m in request.messages)


def to_image_generate_params(model_id: str, request: GenerateRequest) -> dict[str, Any]:
    """Builds `client.images.generate()` parameters from a generate request.

    Config keys other than the text-generation ones (size, quality, style,
    n, ...) are passed through.
    """
    if isinstance(request.config, GenerationCommonConfig):
        config = request.config.model_dump(exclude_none=True)
    else:
        config = dict(request.config or {})

    params: dict[str, Any] = {
        'model': config.pop('version', None) or model_id,
        'prompt': _prompt_text(request),
    }
    # GPT Image models always return base64 and reject `response_format`.
    if not params['model'].startswith('gpt-image'):
        params['response_format'] = config.pop('response_format', 'b64_json')
    for key in _TEXT_ONLY_KEYS:
        config.pop(key, None)
    params.update(config)
    return {k: v for k, v in params.items() if v is not None}


def to_generate_response(result: Any) -> GenerateResponse:
    """Turns every generated image into a media part."""
    content: list[Part] = []
    for image in result.data or []:
        url = image.url
        if not url and image.b64_json:
            url = f'data:image/png;base64,{image.b64_json}'
        if url:
            content.append(Part(root=MediaPart(media=Media(content_type='image/png', url=url))))
    return GenerateResponse(message=Message(role=Role.MODEL, content=content), finish_reason=FinishReason.STOP)


class OpenAIImageModel:
    """Generates images from the text of the last user message."""

    def __init__(self, model_id: str, options: CompatOAIPluginOptions, client: AsyncOpenAI | None = None) -> None:
        self.model_id = model_id
        self._options = options
        self._client = client

    @cached_property
    def client(self) -> AsyncOpenAI:
        return self._client if self._client is not None else create_client(self._options)

    def to_action(self, name: str) -> Action:
        info = ModelInfo(label=f'OpenAI {self.model_id}', supports=IMAGE_MODEL_SUPPORTS)
        return Action(kind=ActionKind.MODEL, name=name, fn=self.generate, metadata=model_metadata(info))

    async def generate(self, request: GenerateRequest, ctx: ActionRunContext | None = None) -> GenerateResponse:
        result = await self.client.images.generate(**to_image_generate_params(self.model_id, request))
        response = to_generate_response(result)
        response.request = request
        return response
