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

"""Cohere Command models."""

from actionkit.plugins.compat_oai import ExtensibleProviderPlugin

COHERE_PLUGIN_NAME = 'cohere'


class Cohere(ExtensibleProviderPlugin):
    name = COHERE_PLUGIN_NAME
    LABEL = 'Cohere'
    API_KEY_ENV = 'COHERE_API_KEY'
    BASE_URL = 'https://api.cohere.ai/compatibility/v1'
    SUPPORTED_MODELS = [
        'command-a-03-2025',
        'command-r7b-12-2024',
        'command-r-08-2024',
        'command-r-plus-08-2024',
    ]
