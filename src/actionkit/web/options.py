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

"""Options shared by the HTTP server plugins."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PORT = 8080
DEFAULT_HOST = '0.0.0.0'
DEFAULT_BASE_PATH = '/api/flows'


class ServerPluginOptions(BaseModel):
    """Where and how a server plugin listens.

    Attributes:
        port: TCP port to bind.
        host: Interface to bind.
        base_path: Path prefix of the flow routes.
        context_path: Prefix applied to every route, including `/health`.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    port: int = Field(default=DEFAULT_PORT, ge=0, le=65535)
    host: str = DEFAULT_HOST
    base_path: str = DEFAULT_BASE_PATH
    context_path: str = ''

    @property
    def flows_path(self) -> str:
        return f'{normalize_path(self.context_path)}{normalize_path(self.base_path)}'

    @property
    def health_path(self) -> str:
        return f'{normalize_path(self.context_path)}/health'

    @staticmethod
    def builder() -> ServerPluginOptionsBuilder:
        return ServerPluginOptionsBuilder()


class ServerPluginOptionsBuilder:
    """Fluent builder for `ServerPluginOptions`."""

    def __init__(self) -> None:
        self._values: dict[str, object] = {}

    def port(self, port: int) -> ServerPluginOptionsBuilder:
        self._values['port'] = port
        return self

    def host(self, host: str) -> ServerPluginOptionsBuilder:
        self._values['host'] = host
        return self

    def base_path(self, base_path: str) -> ServerPluginOptionsBuilder:
        self._values['base_path'] = base_path
        return self

    def context_path(self, context_path: str) -> ServerPluginOptionsBuilder:
        self._values['context_path'] = context_path
        return self

    def build(self) -> ServerPluginOptions:
        return ServerPluginOptions(**self._values)


def normalize_path(path: str) -> str:
    """Returns `path` with one leading slash and no trailing slash.

    >>> normalize_path('api/flows/')
    '/api/flows'
    >>> normalize_path('')
    ''
    """
    path = path.strip('/')
    return f'/{path}' if path else ''
