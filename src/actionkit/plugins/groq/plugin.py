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

"""Groq-hosted models."""

from actionkit.plugins.compat_oai import ExtensibleProviderPlugin

GROQ_PLUGIN_NAME = 'groq'


class Groq(ExtensibleProviderPlugin):
    """Models hosted on Groq's LPU inference service."""

    name = GROQ_PLUGIN_NAME
    LABEL = 'Groq'
    API_KEY_ENV = 'GROQ_API_KEY'
    BASE_URL = 'https://api.groq.com/openai/v1'
    SUPPORTED_MODELS = [
        'llama-3.1-8b-instant',
        'llama-3.3-70b-versatile',
        'meta-llama/llama-guard-4-12b',
        'openai/gpt-oss-120b',
        'openai/gpt-oss-20b',
    ]
