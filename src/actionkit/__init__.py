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

"""ActionKit: one action abstraction over many generative-AI providers.

Example:
    ```python
    from actionkit import ActionKit
    from actionkit.plugins.deepseek import DeepSeek

    ai = ActionKit(plugins=[DeepSeek.create()], model='deepseek/deepseek-chat')
    ```
"""

from actionkit.ai import ActionKit, FlowWrapper
from actionkit.blocks.document import Document
from actionkit.core.action import Action, ActionKind, ActionMetadata, ActionResponse, ActionRunContext
from actionkit.core.error import ActionKitError, UserFacingError
from actionkit.core.plugin import Plugin, ServerPlugin
from actionkit.core.registry import Registry
from actionkit.core.typing import (
    DocumentData,
    GenerateRequest,
    GenerateResponse,
    GenerateResponseChunk,
    GenerationCommonConfig,
    Message,
    ModelInfo,
    Part,
    Role,
    TextPart,
)

__version__ = '0.1.0'

__all__ = [
    'Action',
    'ActionKind',
    'ActionKit',
    'ActionKitError',
    'ActionMetadata',
    'ActionResponse',
    'ActionRunContext',
    'Document',
    'DocumentData',
    'FlowWrapper',
    'GenerateRequest',
    'GenerateResponse',
    'GenerateResponseChunk',
    'GenerationCommonConfig',
    'Message',
    'ModelInfo',
    'Part',
    'Plugin',
    'Registry',
    'Role',
    'ServerPlugin',
    'TextPart',
    'UserFacingError',
    '__version__',
]
