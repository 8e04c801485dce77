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

"""Generic plugin for any OpenAI-compatible API.

Example:
    ```python
    plugin = (
        CompatOAIPlugin.builder()
        .plugin_name('together')
        .api_key(os.environ['TOGETHER_API_KEY'])
        .base_url('https://api.together.xyz/v1')
        .add_models('meta-llama/Llama-3-70b-chat-hf')
        .build()
    )
    ```
"""

from __future__ import annotations

from dataclasses import dataclass, field

from actionkit.blocks.model import model_action_metadata, model_info
from actionkit.core.action import Action, ActionMetadata
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin
from actionkit.core.registry import Registry
from actionkit.plugins.compat_oai.model import CompatOAIModel
from actionkit.plugins.compat_oai.options import DEFAULT_TIMEOUT, CompatOAIPluginOptions
from actionkit.plugins.compat_oai.typing import OpenAIConfig

logger = get_logger(__name__)


@dataclass(frozen=True)
class ModelDefinition:
    """A model a `CompatOAIPlugin` registers.

    `label` defaults to `"{prefix} {model_id}"`.
    """

    prefix: str
    model_id: str
    label: str = field(default='')

    def __post_init__(self) -> None:
        if not self.label:
            object.__setattr__(self, 'label', f'{self.prefix} {self.model_id}')

    @property
    def full_name(self) -> str:
        return f'{self.prefix}/{self.model_id}'


class CompatOAIPlugin(Plugin):
    """Registers a fixed list of models of one OpenAI-compatible API."""

    def __init__(self, name: str, options: CompatOAIPluginOptions, models: list[ModelDefinition]) -> None:
        self.name = name
        self.options = options
        self.models = list(models)

    @staticmethod
    def builder() -> CompatOAIPluginBuilder:
        return CompatOAIPluginBuilder()

    async def init(self, registry: Registry | None = None) -> list[Action]:
        actions = []
        for definition in self.models:
            model = CompatOAIModel(definition.model_id, self.options, label=definition.label)
            actions.append(model.to_action(definition.full_name))
            logger.debug('Created model', model=definition.full_name)
        await logger.ainfo(f'{self.name} plugin initialized with {len(self.models)} models')
        return actions

    async def list_actions(self) -> list[ActionMetadata]:
        return [
            model_action_metadata(d.full_name, info=model_info(d.label), config_schema=OpenAIConfig)
            for d in self.models
        ]


class CompatOAIPluginBuilder:
    """Fluent builder of `CompatOAIPlugin`."""

    def __init__(self) -> None:
        self._plugin_name: str | None = None
        self._options: CompatOAIPluginOptions | None = None
        self._api_key: str | None = None
        self._base_url: str | None = None
        self._organization: str | None = None
        self._timeout = DEFAULT_TIMEOUT
        self._models: list[ModelDefinition] = []

    def plugin_name(self, plugin_name: str) -> CompatOAIPluginBuilder:
        self._plugin_name = plugin_name
        return self

    def options(self, options: CompatOAIPluginOptions) -> CompatOAIPluginBuilder:
        """Uses prebuilt options; the shorthand setters are then ignored."""
        self._options = options
        return self

    def api_key(self, api_key: str) -> CompatOAIPluginBuilder:
        self._api_key = api_key
        return self

    def base_url(self, base_url: str) -> CompatOAIPluginBuilder:
        self._base_url = base_url
        return self

    def organization(self, organization: str) -> CompatOAIPluginBuilder:
        self._organization = organization
        return self

    def timeout(self, timeout: int) -> CompatOAIPluginBuilder:
        self._timeout = timeout
        return self

    def add_model(self, model_id: str, label: str | None = None) -> CompatOAIPluginBuilder:
        """Adds a model under the plugin's namespace.

        Raises:
            ValueError: If `plugin_name()` has not been called yet.
        """
        if self._plugin_name is None:
            raise ValueError('pluginName must be set before adding models')
        self._models.append(ModelDefinition(self._plugin_name, model_id, label or ''))
        return self

    def add_models(self, *model_ids: str) -> CompatOAIPluginBuilder:
        for model_id in model_ids:
            self.add_model(model_id)
        return self

    def build(self) -> CompatOAIPlugin:
        """Validates and returns the plugin.

        Raises:
            ValueError: If the name, a model, the API key or the base URL is
                missing.
        """
        if not self._plugin_name:
            raise ValueError('pluginName is required')
        if not self._models:
            raise ValueError('At least one model must be added')
        options = self._options or (
            CompatOAIPluginOptions.builder()
            .api_key(self._api_key)
            .base_url(self._base_url)
            .organization(self._organization)
            .timeout(self._timeout)
            .build()
        )
        return CompatOAIPlugin(self._plugin_name, options, self._models)
