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

"""Base class of plugins for hosted OpenAI-compatible providers.

A provider plugin only declares its namespace, display label, API key
environment variable, base URL and model list; credentials resolution and
model registration are shared.
"""

from __future__ import annotations

import os
from typing import ClassVar

from actionkit.blocks.model import model_action_metadata, model_info
from actionkit.core.action import Action, ActionMetadata
from actionkit.core.error import ActionKitError
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin
from actionkit.core.registry import Registry
from actionkit.plugins.compat_oai.model import CompatOAIModel
from actionkit.plugins.compat_oai.options import CompatOAIPluginOptions
from actionkit.plugins.compat_oai.typing import OpenAIConfig

logger = get_logger(__name__)


def resolve_api_key(api_key: str | None, env_var: str, label: str) -> str:
    """Returns `api_key`, else the value of `env_var`.

    Raises:
        ActionKitError: With status INVALID_ARGUMENT if neither is set.
    """
    resolved = api_key or os.getenv(env_var)
    if not resolved:
        raise ActionKitError(
            status='INVALID_ARGUMENT',
            message=f'{label} API key is required. Set {env_var} environment variable or provide it in options.',
        )
    return resolved


class CompatOAIProviderPlugin(Plugin):
    """Registers `SUPPORTED_MODELS` of a hosted OpenAI-compatible provider.

    Subclasses set the class attributes below. Credentials are resolved when
    the plugin is constructed, so a missing key fails immediately.
    """

    name: ClassVar[str]
    LABEL: ClassVar[str]
    API_KEY_ENV: ClassVar[str]
    BASE_URL: ClassVar[str]
    SUPPORTED_MODELS: ClassVar[list[str]]

    def __init__(self, api_key: str | None = None, options: CompatOAIPluginOptions | None = None) -> None:
        """Create the plugin.

        Args:
            api_key: API key; defaults to the provider's environment variable.
            options: Complete connection options; overrides `api_key`.

        Raises:
            ActionKitError: If no API key is available.
        """
        if options is None:
            options = (
                CompatOAIPluginOptions.builder()
                .api_key(resolve_api_key(api_key, self.API_KEY_ENV, self.LABEL))
                .base_url(self.BASE_URL)
                .build()
            )
        self.options = options
        self._custom_models: list[str] = []

    @classmethod
    def create(cls, api_key: str | None = None) -> CompatOAIProviderPlugin:
        return cls(api_key=api_key)

    @property
    def model_ids(self) -> list[str]:
        return [*self.SUPPORTED_MODELS, *self._custom_models]

    def _label(self, model_id: str) -> str:
        return f'{self.LABEL} {model_id}'

    async def init(self, registry: Registry | None = None) -> list[Action]:
        actions = []
        for model_id in self.model_ids:
            model = CompatOAIModel(model_id, self.options, label=self._label(model_id))
            actions.append(model.to_action(f'{self.name}/{model_id}'))
        await logger.ainfo(f'{self.LABEL} plugin initialized with {len(actions)} models')
        return actions

    async def list_actions(self) -> list[ActionMetadata]:
        return [
            model_action_metadata(f'{self.name}/{m}', info=model_info(self._label(m)), config_schema=OpenAIConfig)
            for m in self.model_ids
        ]


class ExtensibleProviderPlugin(CompatOAIProviderPlugin):
    """A provider plugin that accepts models outside `SUPPORTED_MODELS`."""

    def custom_model(self, model_id: str) -> ExtensibleProviderPlugin:
        """Registers an additional model id; returns the plugin for chaining."""
        self._custom_models.append(model_id)
        logger.debug('Added custom model to be registered', plugin=self.name, model=model_id)
        return self
