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

"""Tests for the Azure AI Foundry plugin."""

import os
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from actionkit.plugins.azure_foundry import AzureFoundry, AzureFoundryPluginOptions
from actionkit.plugins.azure_foundry.options import DEFAULT_API_VERSION
from actionkit.plugins.azure_foundry.plugin import PLACEHOLDER_API_KEY, TOKEN_SCOPE
from actionkit.plugins.compat_oai import create_client

FOUNDRY_ENDPOINT = 'https://my-project.services.ai.azure.com'
AZURE_OPENAI_ENDPOINT = 'https://my-resource.openai.azure.com'


def _options(endpoint: str = FOUNDRY_ENDPOINT, **values) -> AzureFoundryPluginOptions:
    builder = AzureFoundryPluginOptions.builder().endpoint(endpoint)
    for key, value in values.items():
        getattr(builder, key)(value)
    return builder.build()


def test_endpoint_is_required() -> None:
    with patch.dict(os.environ, {}, clear=True):
        with pytest.raises(ValueError, match='AZURE_AI_FOUNDRY_ENDPOINT'):
            AzureFoundryPluginOptions.builder().build()


def test_options_from_environment() -> None:
    """Endpoint and key fall back to the environment."""
    env = {'AZURE_AI_FOUNDRY_ENDPOINT': FOUNDRY_ENDPOINT, 'AZURE_AI_FOUNDRY_API_KEY': 'env-key'}
    with patch.dict(os.environ, env, clear=True):
        plugin = AzureFoundry()

    assert plugin.options.endpoint == FOUNDRY_ENDPOINT
    assert plugin.options.api_key == 'env-key'
    assert plugin.options.api_version == DEFAULT_API_VERSION


@pytest.mark.parametrize(
    'endpoint, base_url',
    [
        (FOUNDRY_ENDPOINT, f'{FOUNDRY_ENDPOINT}/inference/v1'),
        (f'{FOUNDRY_ENDPOINT}/', f'{FOUNDRY_ENDPOINT}/inference/v1'),
        (AZURE_OPENAI_ENDPOINT, f'{AZURE_OPENAI_ENDPOINT}/openai/deployments'),
        ('https://other.cognitiveservices.azure.com', 'https://other.cognitiveservices.azure.com/openai/deployments'),
        (f'{FOUNDRY_ENDPOINT}/models/inference', f'{FOUNDRY_ENDPOINT}/models/inference/'),
    ],
)
def test_base_url(endpoint: str, base_url: str) -> None:
    """Foundry endpoints get inference/v1 and Azure OpenAI ones openai/deployments."""
    assert _options(endpoint, api_key='k').get_base_url() == base_url


def test_model_options_for_azure_openai() -> None:
    """Azure OpenAI models are addressed per deployment with an api-version."""
    plugin = AzureFoundry(_options(AZURE_OPENAI_ENDPOINT, api_key='k', api_version='2025-01-01'))

    options = plugin._model_options('gpt-4o', 'k')

    assert options.base_url == f'{AZURE_OPENAI_ENDPOINT}/openai/deployments/gpt-4o'
    assert options.query_params == {'api-version': '2025-01-01'}


def test_model_options_for_foundry() -> None:
    plugin = AzureFoundry(_options(api_key='k', timeout=10))

    options = plugin._model_options('grok-3', 'k')

    assert options.base_url == f'{FOUNDRY_ENDPOINT}/inference/v1'
    assert options.timeout == 10


class ExpiringCredential:
    """Issues tokens that are already expired, so every use asks again."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.scopes: list[tuple[str, ...]] = []

    def get_token(self, *scopes: str, **kwargs) -> SimpleNamespace:
        if self.fail:
            raise RuntimeError('no credentials')
        self.scopes.append(scopes)
        return SimpleNamespace(token=f'entra-token-{len(self.scopes)}', expires_on=0)


@pytest.mark.asyncio
async def test_token_provider_refreshes_tokens() -> None:
    """Without an API key every request gets a token fresh from the credential."""
    credential = ExpiringCredential()
    with patch.dict(os.environ, {}, clear=True):
        plugin = AzureFoundry(_options(credential=credential))

    api_key, token_provider = plugin._credentials()

    assert api_key == PLACEHOLDER_API_KEY
    assert await token_provider() == 'entra-token-1'
    assert await token_provider() == 'entra-token-2'
    assert credential.scopes == [(TOKEN_SCOPE,), (TOKEN_SCOPE,)]


@pytest.mark.asyncio
async def test_placeholder_key_when_token_fails() -> None:
    with patch.dict(os.environ, {}, clear=True):
        plugin = AzureFoundry(_options(credential=ExpiringCredential(fail=True)))

    _, token_provider = plugin._credentials()

    assert await token_provider() == PLACEHOLDER_API_KEY


def test_api_key_needs_no_token_provider() -> None:
    plugin = AzureFoundry(_options(api_key='k'))

    assert plugin._credentials() == ('k', None)


def test_models_send_the_token_provider_to_the_client() -> None:
    """Each model's client asks the token provider instead of a fixed key."""
    credential = ExpiringCredential()
    with patch.dict(os.environ, {}, clear=True):
        plugin = AzureFoundry(_options(AZURE_OPENAI_ENDPOINT, credential=credential))

    api_key, token_provider = plugin._credentials()
    options = plugin._model_options('gpt-4o', api_key, token_provider)
    with patch('actionkit.plugins.compat_oai.model.AsyncOpenAI') as client_class:
        create_client(options)

    assert client_class.call_args.kwargs['api_key'] is token_provider


@pytest.mark.asyncio
async def test_deployment_and_custom_models_are_registered() -> None:
    plugin = AzureFoundry(_options(api_key='k', deployment='my-deployment')).custom_model('my-phi')

    actions = await plugin.init()
    listed = await plugin.list_actions()

    names = [a.name for a in actions]
    assert len(names) == len(AzureFoundry.SUPPORTED_MODELS) + 2
    assert names[-2:] == ['azure-foundry/my-deployment', 'azure-foundry/my-phi']
    assert actions[0].metadata['model']['label'] == f'Azure Foundry {AzureFoundry.SUPPORTED_MODELS[0]}'
    assert [m.name for m in listed] == names


def test_create() -> None:
    with patch.dict(os.environ, {}, clear=True):
        plugin = AzureFoundry.create(endpoint=AZURE_OPENAI_ENDPOINT, api_key='k')

    assert plugin.options.is_azure_openai_endpoint
    assert plugin.options.api_key == 'k'
