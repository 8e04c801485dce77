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

"""xAI Grok models."""

from actionkit.plugins.compat_oai import ExtensibleProviderPlugin

XAI_PLUGIN_NAME = 'xai'


class XAI(ExtensibleProviderPlugin):
    """Grok models served by xAI."""

    name = XAI_PLUGIN_NAME
    LABEL = 'XAI'
    API_KEY_ENV = 'XAI_API_KEY'
    BASE_URL = 'https://api.x.ai/v1'
    SUPPORTED_MODELS = [
        'grok-4',
        'grok-4-1-fast',
        'grok-4-1-fast-reasoning',
        'grok-4-1-fast-non-reasoning',
        'grok-4-fast-reasoning',
        'grok-4-fast-non-reasoning',
        'grok-code-fast-1',
        'grok-4-0709',
        'grok-3',
        'grok-3-mini',
    ]
