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

"""Options of the Ollama plugin."""

from __future__ import annotations

import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

OLLAMA_HOST_ENV = 'OLLAMA_HOST'
DEFAULT_OLLAMA_SERVER_URL = 'http://localhost:11434'
DEFAULT_TIMEOUT = 300

DEFAULT_MODELS = [
    'llama3.2',
    'llama3.1',
    'llama3',
    'llama2',
    'mistral',
    'mixtral',
    'codellama',
    'phi3',
    'phi',
    'gemma2',
    'gemma',
    'qwen2.5',
    'qwen2',
    'deepseek-coder-v2',
    'command-r',
    'llava',
]


class OllamaPluginOptions(BaseModel):
    """Where the Ollama server runs and which models to register.

    Attributes:
        base_url: Server URL; defaults to `OLLAMA_HOST`, then the local
            default port.
        timeout: Request timeout in seconds. Local models can be slow to load.
        models: Names of the pulled models to register.
    """

    model_config = ConfigDict(frozen=True, extra='forbid')

    base_url: str = DEFAULT_OLLAMA_SERVER_URL
    timeout: int = DEFAULT_TIMEOUT
    models: list[str] = Field(default_factory=lambda: list(DEFAULT_MODELS))

    @model_validator(mode='before')
    @classmethod
    def _base_url_from_environment(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get('base_url'):
            data = {**data, 'base_url': os.getenv(OLLAMA_HOST_ENV) or DEFAULT_OLLAMA_SERVER_URL}
        return data

    @staticmethod
    def builder() -> OllamaPluginOptionsBuilder:
        return OllamaPluginOptionsBuilder()


class OllamaPluginOptionsBuilder:
    def __init__(self) -> None:
        self._values: dict[str, Any] = {}

    def base_url(self, base_url: str | None) -> OllamaPluginOptionsBuilder:
        self._values['base_url'] = base_url
        return self

    def timeout(self, timeout: int) -> OllamaPluginOptionsBuilder:
        self._values['timeout'] = timeout
        return self

    def models(self, *models: str) -> OllamaPluginOptionsBuilder:
        """Replaces the default model list."""
        self._values['models'] = list(models)
        return self

    def add_model(self, model: str) -> OllamaPluginOptionsBuilder:
        """Adds a model to the current (possibly default) list."""
        self._values['models'] = [*self._values.get('models', DEFAULT_MODELS), model]
        return self

    def build(self) -> OllamaPluginOptions:
        return OllamaPluginOptions(**self._values)
