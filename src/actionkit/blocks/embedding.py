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

"""Embedder action helpers."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from actionkit.core.action import Action, ActionKind, ActionMetadata
from actionkit.core.error import ActionKitError
from actionkit.core.registry import Registry
from actionkit.core.schema import to_json_schema
from actionkit.core.typing import DocumentData, EmbedRequest, EmbedResponse, Embedding


class EmbedderSupports(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    input: list[str] | None = None
    multilingual: bool | None = None


class EmbedderOptions(BaseModel):
    """Descriptive options of an embedder action."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True, arbitrary_types_allowed=True)

    label: str | None = None
    dimensions: int | None = None
    supports: EmbedderSupports | None = None
    config_schema: Any | None = Field(default=None, alias='configSchema')


def embedder_metadata(options: EmbedderOptions | None = None) -> dict[str, Any]:
    """Returns the `metadata` dict stored on a registered embedder action."""
    options = options if options is not None else EmbedderOptions()
    embedder: dict[str, Any] = {'dimensions': options.dimensions}
    if options.label:
        embedder['label'] = options.label
    if options.supports:
        embedder['supports'] = options.supports.model_dump(exclude_none=True, by_alias=True)
    embedder['customOptions'] = to_json_schema(options.config_schema)
    return {'embedder': embedder}


def embedder_action_metadata(name: str, options: EmbedderOptions | None = None) -> ActionMetadata:
    return ActionMetadata(
        kind=ActionKind.EMBEDDER,
        name=name,
        input_json_schema=to_json_schema(EmbedRequest),
        output_json_schema=to_json_schema(EmbedResponse),
        metadata=embedder_metadata(options),
    )


async def resolve_embedder(registry: Registry, name: str) -> Action:
    """Resolves an embedder action, initializing its plugin if needed.

    Raises:
        ActionKitError: With status NOT_FOUND if no such embedder exists.
    """
    action = await registry.resolve_action(ActionKind.EMBEDDER, name)
    if action is None:
        raise ActionKitError(status='NOT_FOUND', message=f'Embedder not found: {name}')
    return action


async def embed_documents(
    embedder: Action, documents: list[DocumentData], options: dict[str, Any] | None = None
) -> list[Embedding]:
    """Runs `embedder` over `documents` and returns one embedding per vector."""
    response = (await embedder.arun(EmbedRequest(input=documents, options=options))).response
    return EmbedResponse.model_validate(response).embeddings
