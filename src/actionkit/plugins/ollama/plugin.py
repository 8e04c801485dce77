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

"""Ollama plugin for ActionKit."""

from __future__ import annotations

from functools import cached_property

import ollama as ollama_api

from actionkit.blocks.model import model_action_metadata, model_info
from actionkit.core.action import Action, ActionMetadata
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin
from actionkit.core.registry import Registry
from actionkit.core.typing import GenerationCommonConfig
from actionkit.plugins.ollama.models import OllamaModel, ollama_supports
from actionkit.plugins.ollama.options import OllamaPluginOptions

OLLAMA_PLUGIN_NAME = 'ollama'
logger = get_logger(__name__)


def ollama_name(name: str) -> str:
    return f'{OLLAMA_PLUGIN_NAME}/{name}'


class Ollama(Plugin):
    """Ollama plugin for ActionKit.

    Registers locally pulled Ollama models. No API key is needed; the server
    address comes from the options or `OLLAMA_HOST`.
    """

    name = OLLAMA_PLUGIN_NAME

    def __init__(self, options: OllamaPluginOptions | None = None) -> None:
        self.options = options if options is not None else OllamaPluginOptions()

    @classmethod
    def create(cls, base_url: str | None = None) -> Ollama:
        return cls(OllamaPluginOptions.builder().base_url(base_url).build())

    @classmethod
    def with_models(cls, *models: str) -> Ollama:
        """Creates a plugin that registers only `models`."""
        return cls(OllamaPluginOptions.builder().models(*models).build())

    @cached_property
    def client(self) -> ollama_api.AsyncClient:
        return ollama_api.AsyncClient(host=self.options.base_url, timeout=self.options.timeout)

    async def init(self, registry: Registry | None = None) -> list[Action]:
        actions = []
        for model_name in self.options.models:
            actions.append(OllamaModel(self.client, model_name).to_action(ollama_name(model_name)))
            logger.debug('Created Ollama model', model=model_name)
        await logger.ainfo(
            f'Ollama plugin initialized with {len(self.options.models)} models at {self.options.base_url}'
        )
        return actions

    async def list_actions(self) -> list[ActionMetadata]:
        return [
            model_action_metadata(
                ollama_name(m),
                info=model_info(f'Ollama {m}', supports=ollama_supports(m)),
                config_schema=GenerationCommonConfig,
            )
            for m in self.options.models
        ]
