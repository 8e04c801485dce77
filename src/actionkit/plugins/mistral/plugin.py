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

"""Mistral AI models."""

from actionkit.plugins.compat_oai import ExtensibleProviderPlugin

MISTRAL_PLUGIN_NAME = 'mistral'


class Mistral(ExtensibleProviderPlugin):
    """Mistral AI models.

    Example:
        ```python
        ai = ActionKit(plugins=[Mistral.create().custom_model('mistral-tiny')])
        ```
    """

    name = MISTRAL_PLUGIN_NAME
    LABEL = 'Mistral'
    API_KEY_ENV = 'MISTRAL_API_KEY'
    BASE_URL = 'https://api.mistral.ai/v1'
    SUPPORTED_MODELS = [
        'mistral-large-2512',
        'mistral-medium-2508',
        'mistral-small-2506',
        'magistral-medium-2509',
        'magistral-small-2509',
        'ministral-3b-2512',
        'ministral-8b-2512',
        'ministral-14b-2512',
        'pixtral-large-2411',
        'codestral-2508',
        'devstral-2512',
        'open-mistral-nemo',
    ]
