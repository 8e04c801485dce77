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

"""Model action helpers."""

from collections.abc import Callable
from typing import Any

from pydantic import BaseModel

from actionkit.core.action import ActionKind, ActionMetadata
from actionkit.core.schema import to_json_schema
from actionkit.core.typing import (
    GenerateRequest,
    GenerateResponse,
    GenerationUsage,
    Message,
    ModelInfo,
    Part,
    Supports,
)

ModelFn = Callable[[GenerateRequest, Any], GenerateResponse]

# Capabilities of a plain chat-completions text model.
TEXT_MODEL_SUPPORTS = Supports(
    multiturn=True,
    media=False,
    tools=True,
    system_role=True,
    output=['text', 'json'],
)


def model_info(label: str, supports: Supports | None = None, versions: list[str] | None = None) -> ModelInfo:
    """Builds a `ModelInfo` with the default text-model capabilities."""
    return ModelInfo(label=label, supports=supports or TEXT_MODEL_SUPPORTS, versions=versions)


def model_action_metadata(
    name: str,
    info: ModelInfo | dict[str, Any] | None = None,
    config_schema: type[BaseModel] | dict[str, Any] | None = None,
) -> ActionMetadata:
    """Describes a model action for `Plugin.list_actions()`."""
    if isinstance(info, ModelInfo):
        info = info.model_dump(exclude_none=True, by_alias=True)
    return ActionMetadata(
        kind=ActionKind.MODEL,
        name=name,
        input_json_schema=to_json_schema(GenerateRequest),
        output_json_schema=to_json_schema(GenerateResponse),
        metadata={'model': {**(info or {}), 'customOptions': to_json_schema(config_schema)}},
    )


def model_metadata(info: ModelInfo, config_schema: type[BaseModel] | None = None) -> dict[str, Any]:
    """Returns the `metadata` dict stored on a registered model action."""
    return {
        'model': {
            **info.model_dump(exclude_none=True, by_alias=True),
            'customOptions': to_json_schema(config_schema),
        }
    }


def text_from_content(content: list[Part]) -> str:
    return ''.join(p.root.text for p in content if getattr(p.root, 'text', None) is not None)


def text_from_message(msg: Message) -> str:
    return text_from_content(msg.content)


def get_basic_usage_stats(input_: list[Message], response: Message) -> GenerationUsage:
    """Counts characters and images of the request and response messages.

    Used when a provider does not report token usage.
    """
    request_parts = [p for m in input_ for p in m.content]
    input_chars, input_images = _count_parts(request_parts)
    output_chars, output_images = _count_parts(response.content)
    return GenerationUsage(
        input_characters=input_chars,
        input_images=input_images,
        output_characters=output_chars,
        output_images=output_images,
    )


def _count_parts(parts: list[Part]) -> tuple[int, int]:
    characters = 0
    images = 0
    for part in parts:
        text = getattr(part.root, 'text', None)
        if text:
            characters += len(text)
        media = getattr(part.root, 'media', None)
        if media is not None:
            content_type = media.content_type or ''
            if content_type.startswith('image') or media.url.startswith('data:image'):
                images += 1
    return characters, images