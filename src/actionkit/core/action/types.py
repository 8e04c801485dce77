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

"""Types describing actions: kinds, metadata and responses."""

from __future__ import annotations

import sys
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

if sys.version_info < (3, 11):
    from strenum import StrEnum
else:
    from enum import StrEnum

# type ActionName = str
ActionName = str


class ActionKind(StrEnum):
    """Every kind of action the registry can hold."""

    CUSTOM = 'custom'
    EMBEDDER = 'embedder'
    EVALUATOR = 'evaluator'
    FLOW = 'flow'
    INDEXER = 'indexer'
    MODEL = 'model'
    PROMPT = 'prompt'
    RERANKER = 'reranker'
    RETRIEVER = 'retriever'
    TOOL = 'tool'
    UTIL = 'util'


class ActionMetadataKey(StrEnum):
    """Well-known keys of an action's metadata dictionary."""

    INPUT_KEY = 'inputSchema'
    OUTPUT_KEY = 'outputSchema'
    RETURN = 'return'


class ActionResponse(BaseModel):
    """The result of running an action, with the trace id of its span."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    response: Any
    trace_id: str = Field(alias='traceId')


class ActionMetadata(BaseModel):
    """Describes an action without instantiating it.

    Plugins return these from `list_actions()` so callers can discover what a
    plugin offers without paying for initialization.
    """

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    kind: ActionKind
    name: str
    description: str | None = None
    input_json_schema: dict[str, Any] | None = Field(default=None, alias='inputJsonSchema')
    output_json_schema: dict[str, Any] | None = Field(default=None, alias='outputJsonSchema')
    metadata: dict[str, Any] | None = None
