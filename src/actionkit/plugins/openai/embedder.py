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

"""OpenAI embedding models."""

from __future__ import annotations

from functools import cached_property
from typing import Any

from openai import AsyncOpenAI

from actionkit.blocks.embedding import EmbedderOptions, EmbedderSupports, embedder_metadata
from actionkit.core.action import Action, ActionKind
from actionkit.core.typing import EmbedRequest, EmbedResponse, Embedding
from actionkit.plugins.compat_oai import CompatOAIPluginOptions, create_client

EMBEDDING_DIMENSIONS = {
    'text-embedding-3-small': 1536,
    'text-embedding-3-large': 3072,
    'text-embedding-ada-002': 1536,
}


class OpenAIEmbedder:
    """Embeds document text with the OpenAI embeddings API."""

    def __init__(self, model_id: str, options: CompatOAIPluginOptions, client: AsyncOpenAI | None = None) -> None:
        self.model_id = model_id
        self._options = options
        self._client = client

    @cached_property
    def client(self) -> AsyncOpenAI:
        return self._client if self._client is not None else create_client(self._options)

    def to_action(self, name: str) -> Action:
        options = EmbedderOptions(
            label=f'OpenAI {self.model_id}',
            dimensions=EMBEDDING_DIMENSIONS.get(self.model_id),
            supports=EmbedderSupports(input=['text']),
        )
        return Action(kind=ActionKind.EMBEDDER, name=name, fn=self.embed, metadata=embedder_metadata(options))

    async def embed(self, request: EmbedRequest) -> EmbedResponse:
        """Returns one embedding per input document.

        `request.options` may carry `dimensions`, `encoding_format` and `user`.
        """
        params: dict[str, Any] = dict(request.options or {})
        response = await self.client.embeddings.create(
            model=self.model_id,
            input=[doc.text for doc in request.input],
            **params,
        )
        return EmbedResponse(embeddings=[Embedding(embedding=item.embedding) for item in response.data])
