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

"""Azure AI Foundry plugin.

Serves the models deployed to an Azure AI Foundry project or an Azure OpenAI
resource through their OpenAI-compatible endpoints. Authentication uses an
API key or, without one, an Entra ID token from an Azure credential.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar

from azure.identity import DefaultAzureCredential, get_bearer_token_provider

from actionkit.blocks.model import model_action_metadata, model_info
from actionkit.core.action import Action, ActionMetadata
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin
from actionkit.core.registry import Registry
from actionkit.plugins.azure_foundry.options import AzureFoundryPluginOptions
from actionkit.plugins.compat_oai import CompatOAIModel, CompatOAIPluginOptions, OpenAIConfig

logger = get_logger(__name__)

AZURE_FOUNDRY_PLUGIN_NAME = 'azure-foundry'
TOKEN_SCOPE = 'https://cognitiveservices.azure.com/.default'
PLACEHOLDER_API_KEY = 'placeholder'

TokenProvider = Callable[[], Awaitable[str]]


def entra_token_provider(credential: Any) -> TokenProvider:
    """Wraps an Azure credential as a coroutine function returning bearer tokens.

    Tokens are cached by `get_bearer_token_provider` and refreshed before they
    expire. The credential is called from a worker thread. When no token can
    be acquired the placeholder key is sent and Azure answers 401.
    """
    get_token = get_bearer_token_provider(credential, TOKEN_SCOPE)

    async def token_provider() -> str:
        try:
            return await asyncio.to_thread(get_token)
        except Exception as e:
            await logger.awarning('Failed to get Azure token, using placeholder API key', error=str(e))
            return PLACEHOLDER_API_KEY

    return token_provider


class AzureFoundry(Plugin):
    """Azure AI Foundry plugin for ActionKit.

    Example:
        >>> ai = ActionKit(plugins=[AzureFoundry.create(endpoint='https://my-project.openai.azure.com')])
    """

    name = AZURE_FOUNDRY_PLUGIN_NAME
    LABEL: ClassVar[str] = 'Azure Foundry'

    SUPPORTED_MODELS: ClassVar[list[str]] = [
        'gpt-5',
        'gpt-5-mini',
        'gpt-5-turbo',
        'o1',
        'o3-mini-high',
        'o3-mini-medium',
        'o3-mini-low',
        'gpt-4o',
        'gpt-4o-mini',
        'gpt-4-turbo',
        'gpt-4',
        'gpt-35-turbo',
        'mai-ds-r1',
        'grok-4',
        'grok-4-fast-reasoning',
        'grok-4-fast-non-reasoning',
        'grok-3',
        'grok-3-mini',
        'llama-3-3-70b-instruct',
        'llama-4-maverick-17b-128e-instruct-fp8',
        'deepseek-v3-0324',
        'deepseek-v3-1',
        'deepseek-r1-0528',
        'gpt-oss-120b',
        'claude-opus-4-5',
        'claude-opus-4-1',
        'claude-sonnet-4-5',
        'claude-haiku-4-5',
    ]

    def __init__(self, options: AzureFoundryPluginOptions | None = None) -> None:
        """Create the plugin.

        Args:
            options: Connection options; when omitted, the endpoint and API
                key are read from the environment.

        Raises:
            ValueError: If no endpoint is configured.
        """
        self.options = options if options is not None else AzureFoundryPluginOptions.builder().build()
        self._custom_models: list[str] = []
        if self.options.deployment:
            self._custom_models.append(self.options.deployment)

    @classmethod
    def create(cls, endpoint: str | None = None, api_key: str | None = None) -> AzureFoundry:
        builder = AzureFoundryPluginOptions.builder()
        if endpoint:
            builder.endpoint(endpoint)
        if api_key:
            builder.api_key(api_key)
        return cls(builder.build())

    @property
    def model_ids(self) -> list[str]:
        return [*self.SUPPORTED_MODELS, *self._custom_models]

    def custom_model(self, model_id: str) -> AzureFoundry:
        """Registers an additional deployment name; returns the plugin for chaining."""
        self._custom_models.append(model_id)
        logger.debug('Added custom model to be registered', plugin=self.name, model=model_id)
        return self

    async def init(self, registry: Registry | None = None) -> list[Action]:
        api_key, token_provider = self._credentials()
        actions = []
        for model_id in self.model_ids:
            options = self._model_options(model_id, api_key, token_provider)
            model = CompatOAIModel(model_id, options, label=self._label(model_id))
            actions.append(model.to_action(f'{self.name}/{model_id}'))
        await logger.ainfo(f'{self.LABEL} plugin initialized with {len(actions)} models')
        return actions

    async def list_actions(self) -> list[ActionMetadata]:
        return [
            model_action_metadata(f'{self.name}/{m}', info=model_info(self._label(m)), config_schema=OpenAIConfig)
            for m in self.model_ids
        ]

    def _label(self, model_id: str) -> str:
        return f'{self.LABEL} {model_id}'

    def _model_options(
        self, model_id: str, api_key: str, token_provider: TokenProvider | None = None
    ) -> CompatOAIPluginOptions:
        query_params = {'api-version': self.options.api_version}
        if self.options.is_azure_openai_endpoint:
            base_url = self.options.get_deployment_base_url(model_id)
            logger.debug('Azure OpenAI model', model=model_id, base_url=base_url)
        else:
            base_url = self.options.get_base_url()
        return CompatOAIPluginOptions(
            api_key=api_key,
            base_url=base_url,
            timeout=self.options.timeout,
            query_params=query_params,
            token_provider=token_provider,
        )

    def _credentials(self) -> tuple[str, TokenProvider | None]:
        """Returns the static API key and, without one, an Entra ID token provider."""
        if self.options.api_key:
            return self.options.api_key, None
        credential: Any = self.options.credential or DefaultAzureCredential()
        return PLACEHOLDER_API_KEY, entra_token_provider(credential)
