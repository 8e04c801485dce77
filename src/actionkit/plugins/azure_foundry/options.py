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

"""Options of the Azure AI Foundry plugin."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

DEFAULT_API_VERSION = '2024-10-01-preview'
DEFAULT_TIMEOUT = 60

ENDPOINT_ENV = 'AZURE_AI_FOUNDRY_ENDPOINT'
API_KEY_ENV = 'AZURE_AI_FOUNDRY_API_KEY'

_AZURE_OPENAI_HOSTS = ('openai.azure.com', 'cognitiveservices.azure.com')


class AzureFoundryPluginOptions(BaseModel):
    """Endpoint and credentials of an Azure AI Foundry or Azure OpenAI resource.

    Attributes:
        endpoint: Resource endpoint; defaults to `AZURE_AI_FOUNDRY_ENDPOINT`.
        api_key: API key; defaults to `AZURE_AI_FOUNDRY_API_KEY`. Without a
            key, a token is requested from `credential`.
        credential: An `azure.core.credentials.TokenCredential`;
            `DefaultAzureCredential` is used when neither a key nor a
            credential is given.
        deployment: Optional deployment name registered as an extra model.
        api_version: Value of the `api-version` query parameter.
        timeout: Request timeout in seconds.
    """

    model_config = ConfigDict(frozen=True, extra='forbid', arbitrary_types_allowed=True)

    endpoint: str
    api_key: str | None = None
    credential: Any | None = None
    deployment: str | None = None
    api_version: str = DEFAULT_API_VERSION
    timeout: int = DEFAULT_TIMEOUT

    @model_validator(mode='before')
    @classmethod
    def _from_environment(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get('endpoint'):
            data['endpoint'] = os.getenv(ENDPOINT_ENV)
            if not data['endpoint']:
                raise ValueError(
                    'Azure AI Foundry endpoint is required. '
                    f'Set it via builder or {ENDPOINT_ENV} environment variable.'
                )
        if data.get('api_key') is None:
            data['api_key'] = os.getenv(API_KEY_ENV)
        if data.get('api_version') is None:
            data.pop('api_version', None)
        return data

    @property
    def is_azure_openai_endpoint(self) -> bool:
        """True for Azure OpenAI Service endpoints, false for Foundry ones."""
        return any(host in self.endpoint for host in _AZURE_OPENAI_HOSTS)

    def get_base_url(self) -> str:
        """Returns the OpenAI-compatible base URL of the endpoint.

        Azure OpenAI endpoints get `openai/deployments`, Foundry endpoints
        get `inference/v1`, unless the endpoint already has such a path.
        """
        url = self.endpoint if self.endpoint.endswith('/') else f'{self.endpoint}/'
        if '/inference' in self.endpoint or '/openai' in self.endpoint:
            return url
        return f'{url}openai/deployments' if self.is_azure_openai_endpoint else f'{url}inference/v1'

    def get_deployment_base_url(self, deployment: str) -> str:
        """Returns the Azure OpenAI base URL of one deployment."""
        url = self.endpoint if self.endpoint.endswith('/') else f'{self.endpoint}/'
        if '/openai' in self.endpoint:
            return url
        return f'{url}openai/deployments/{deployment}'

    @staticmethod
    def builder() -> AzureFoundryPluginOptionsBuilder:
        return AzureFoundryPluginOptionsBuilder()


class AzureFoundryPluginOptionsBuilder:
    """Fluent builder of `AzureFoundryPluginOptions`."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def endpoint(self, endpoint: str) -> AzureFoundryPluginOptionsBuilder:
        self._values['endpoint'] = endpoint
        return self

    def api_key(self, api_key: str) -> AzureFoundryPluginOptionsBuilder:
        self._values['api_key'] = api_key
        return self

    def credential(self, credential: Any) -> AzureFoundryPluginOptionsBuilder:
        self._values['credential'] = credential
        return self

    def deployment(self, deployment: str) -> AzureFoundryPluginOptionsBuilder:
        self._values['deployment'] = deployment
        return self

    def api_version(self, api_version: str) -> AzureFoundryPluginOptionsBuilder:
        self._values['api_version'] = api_version
        return self

    def timeout(self, timeout: int) -> AzureFoundryPluginOptionsBuilder:
        self._values['timeout'] = timeout
        return self

    def build(self) -> AzureFoundryPluginOptions:
        """Validates and returns the options.

        Raises:
            ValueError: If no endpoint is configured.
        """
        return AzureFoundryPluginOptions(**self._values)
