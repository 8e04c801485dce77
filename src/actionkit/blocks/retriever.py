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

"""Retriever and indexer action helpers."""

from typing import Any

from actionkit.core.action import ActionKind, ActionMetadata
from actionkit.core.schema import to_json_schema
from actionkit.core.typing import IndexerRequest, RetrieverRequest, RetrieverResponse


def retriever_action_metadata(name: str, label: str | None = None, config_schema: Any | None = None) -> ActionMetadata:
    return ActionMetadata(
        kind=ActionKind.RETRIEVER,
        name=name,
        input_json_schema=to_json_schema(RetrieverRequest),
        output_json_schema=to_json_schema(RetrieverResponse),
        metadata={'retriever': {'label': label or name, 'customOptions': to_json_schema(config_schema)}},
    )


def indexer_action_metadata(name: str, label: str | None = None, config_schema: Any | None = None) -> ActionMetadata:
    return ActionMetadata(
        kind=ActionKind.INDEXER,
        name=name,
        input_json_schema=to_json_schema(IndexerRequest),
        metadata={'indexer': {'label': label or name, 'customOptions': to_json_schema(config_schema)}},
    )
