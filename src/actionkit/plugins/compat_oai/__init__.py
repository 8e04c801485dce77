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

"""Plugin for OpenAI-compatible chat-completions APIs."""

from .converters import MessageConverter
from .model import CompatOAIModel, create_client
from .options import CompatOAIPluginOptions, CompatOAIPluginOptionsBuilder
from .plugin import CompatOAIPlugin, CompatOAIPluginBuilder, ModelDefinition
from .provider import CompatOAIProviderPlugin, ExtensibleProviderPlugin, resolve_api_key
from .typing import OpenAIConfig

__all__ = [
    'CompatOAIModel',
    'CompatOAIPlugin',
    'CompatOAIPluginBuilder',
    'CompatOAIPluginOptions',
    'CompatOAIPluginOptionsBuilder',
    'CompatOAIProviderPlugin',
    'ExtensibleProviderPlugin',
    'MessageConverter',
    'ModelDefinition',
    'OpenAIConfig',
    'create_client',
    'resolve_api_key',
]
