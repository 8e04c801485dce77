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

"""OpenAI plugin: chat models, embedders and image models."""

from __future__ import annotations

from actionkit.blocks.embedding import embedder_action_metadata
from actionkit.blocks.model import model_action_metadata
from actionkit.core.action import Action, ActionMetadata
from actionkit.core.logging import get_logger
from actionkit.core.registry import Registry
from actionkit.core.typing import ModelInfo
from actionkit.plugins.compat_oai import CompatOAIModel, CompatOAIPluginOptions, ExtensibleProviderPlugin
from actionkit.plugins.openai.embedder import OpenAIEmbedder
from actionkit.plugins.openai.image import IMAGE_MODEL_SUPPORTS, OpenAIImageModel

logger = get_logger(__name__)

OPENAI_PLUGIN_NAME = 'openai'


class OpenAI(ExtensibleProviderPlugin):
    """OpenAI models, embedders and image generators.

    Example:
        ```python
        ai = ActionKit(plugins=[OpenAI.create().custom_embedding_model('text-embedding-4')])
        embeddings = await ai.embed('openai/text-embedding-3-small', ['hello'])
        ```
    """

    name = OPENAI_PLUGIN_NAME
    LABEL = 'OpenAI'
    API_KEY_ENV = 'OPENAI_API_KEY'
    BASE_URL = 'https://api.openai.com/v1'
    SUPPORTED_MODELS = [
        'gpt-5.2',
        'gpt-5.1',
        'gpt-5',
        'gpt-4o',
        'gpt-4o-mini',
        'gpt-4-turbo',
        'gpt-4-turbo-preview',
        'gpt-4',
        'gpt-4-32k',
        'gpt-3.5-turbo',
        'gpt-3.5-turbo-16k',
        'o1-preview',
        'o1-mini',
    ]
    SUPPORTED_EMBEDDING_MODELS = ['text-embedding-3-small', 'text-embedding-3-large', 'text-embedding-ada-002']
    SUPPORTED_IMAGE_MODELS = ['dall-e-3', 'dall-e-2', 'gpt-image-1']

    def __init__(self, api_key: str | None = None, options: CompatOAIPluginOptions | None = None) -> None:
        super().__init__(api_key=api_key, options=options)
        self._custom_embedding_models: list[str] = []
        self._custom_image_models: list[str] = []

    @property
    def embedding_model_ids(self) -> list[str]:
        return [*self.SUPPORTED_EMBEDDING_MODELS, *self._custom_embedding_models]

    @property
    def image_model_ids(self) -> list[str]:
        return [*self.SUPPORTED_IMAGE_MODELS, *self._custom_image_models]

    def custom_embedding_model(self, model_id: str) -> OpenAI:
        self._custom_embedding_models.append(model_id)
        logger.debug('Added custom embedding model to be registered', model=model_id)
        return self

    def custom_image_model(self, model_id: str) -> OpenAI:
        self._custom_image_models.append(model_id)
        logger.debug('Added custom image model to be registered', model=model_id)
        return self

    async def init(self, registry: Registry | None = None) -> list[Action]:
        models = [
            CompatOAIModel(m, self.options, label=self._label(m)).to_action(f'{self.name}/{m}') for m in self.model_ids
        ]
        embedders = [OpenAIEmbedder(m, self.options).to_action(f'{self.name}/{m}') for m in self.embedding_model_ids]
        image_models = [OpenAIImageModel(m, self.options).to_action(f'{self.name}/{m}') for m in self.image_model_ids]
        await logger.ainfo(
            f'OpenAI plugin initialized with {len(models)} models, {len(embedders)} embedders, '
            f'and {len(image_models)} image models'
        )
        return [*models, *embedders, *image_models]

    async def list_actions(self) -> list[ActionMetadata]:
        embedders = [embedder_action_metadata(f'{self.name}/{m}') for m in self.embedding_model_ids]
        image_models = [
            model_action_metadata(
                f'{self.name}/{m}', info=ModelInfo(label=f'OpenAI {m}', supports=IMAGE_MODEL_SUPPORTS)
            )
            for m in self.image_model_ids
        ]
        return [*await super().list_actions(), *embedders, *image_models]
