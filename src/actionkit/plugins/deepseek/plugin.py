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

"""DeepSeek chat and reasoning models."""

from actionkit.plugins.compat_oai import CompatOAIProviderPlugin

DEEPSEEK_PLUGIN_NAME = 'deepseek'


class DeepSeek(CompatOAIProviderPlugin):
    """DeepSeek chat and reasoner models.

    The API key is read from `DEEPSEEK_API_KEY` when not passed explicitly.
    Only the two listed models are served, so no custom models can be added.
    """

    name = DEEPSEEK_PLUGIN_NAME
    LABEL = 'DeepSeek'
    API_KEY_ENV = 'DEEPSEEK_API_KEY'
    BASE_URL = 'https://api.deepseek.com/v1'
    SUPPORTED_MODELS = [
        'deepseek-chat',
        'deepseek-reasoner',
    ]
