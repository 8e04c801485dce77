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

"""Connection options shared by every OpenAI-compatible plugin."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TIMEOUT = 60


class CompatOAIPluginOptions(BaseModel):
    """Credentials and endpoint of an OpenAI-compatible API.

    Attributes:
        api_key: API key sent as bearer token.
        base_url: Base URL of the chat-completions API.
        organization: Optional OpenAI organization id.
        timeout: Request timeout in seconds.
        query_params: Query parameters added to every request (Azure's
            `api-version`, for example).
        token_provider: Coroutine function returning a fresh bearer token;
            called before every request in place of the static `api_key`.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    api_key: str
    base_url: str
    organization: str | None = None
    timeout: int = DEFAULT_TIMEOUT
    query_params: dict[str, str] = Field(default_factory=dict)
    token_provider: Callable[[], Awaitable[str]] | None = Field(default=None, exclude=True)

    @field_validator('api_key')
    @classmethod
    def _require_api_key(cls, value: str) -> str:
        if not value:
            raise ValueError('API key is required. Provide it in options.')
        return value

    @field_validator('base_url')
    @classmethod
    def _require_base_url(cls, value: str) -> str:
        if not value:
            raise ValueError('Base URL is required. Provide it in options.')
        return value

    @staticmethod
    def builder() -> CompatOAIPluginOptionsBuilder:
        return CompatOAIPluginOptionsBuilder()

    def to_builder(self) -> CompatOAIPluginOptionsBuilder:
        """Returns a builder preloaded with these options."""
        return (
            CompatOAIPluginOptionsBuilder()
            .api_key(self.api_key)
            .base_url(self.base_url)
            .organization(self.organization)
            .timeout(self.timeout)
            .query_params(dict(self.query_params))
            .token_provider(self.token_provider)
        )


class CompatOAIPluginOptionsBuilder:
    """Fluent builder of `CompatOAIPluginOptions`.

    >>> CompatOAIPluginOptions.builder().api_key('k').base_url('https://x/v1').build().timeout
    60
    """

    def __init__(self) -> None:
        self._api_key: str | None = None
        self._base_url: str | None = None
        self._organization: str | None = None
        self._timeout = DEFAULT_TIMEOUT
        self._query_params: dict[str, str] = {}
        self._token_provider: Callable[[], Awaitable[str]] | None = None

    def api_key(self, api_key: str | None) -> CompatOAIPluginOptionsBuilder:
        self._api_key = api_key
        return self

    def base_url(self, base_url: str | None) -> CompatOAIPluginOptionsBuilder:
        self._base_url = base_url
        return self

    def organization(self, organization: str | None) -> CompatOAIPluginOptionsBuilder:
        self._organization = organization
        return self

    def timeout(self, timeout: int) -> CompatOAIPluginOptionsBuilder:
        self._timeout = timeout
        return self

    def query_params(self, query_params: dict[str, str] | None) -> CompatOAIPluginOptionsBuilder:
        self._query_params = dict(query_params or {})
        return self

    def token_provider(self, token_provider: Callable[[], Awaitable[str]] | None) -> CompatOAIPluginOptionsBuilder:
        self._token_provider = token_provider
        return self

    def build(self) -> CompatOAIPluginOptions:
        """Validates and returns the options.

        Raises:
            ValueError: If the API key or base URL is missing or empty.
        """
        return CompatOAIPluginOptions(
            api_key=self._api_key or '',
            base_url=self._base_url or '',
            organization=self._organization,
            timeout=self._timeout,
            query_params=self._query_params,
            token_provider=self._token_provider,
        )
