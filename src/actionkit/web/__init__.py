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

"""Shared pieces of the HTTP server plugins.

The Starlette and Flask plugins expose the same routes over the flows of a
registry:

| Route                           | Response                              |
|---------------------------------|---------------------------------------|
| `GET  {context}/health`         | `{"status": "ok"}`                    |
| `GET  {context}{base}`          | `{"flows": [...]}`                    |
| `POST {context}{base}/{flow}`   | `{"result": ...}` or an SSE stream    |
"""

from .flows import (
    FLOW_NOT_FOUND,
    REGISTRY_NOT_INITIALIZED,
    error_json,
    find_flow,
    flow_names,
    flow_stream_events,
    format_sse,
    is_streaming_requested,
    parse_flow_body,
    unwrap_flow_input,
)
from .options import ServerPluginOptions, ServerPluginOptionsBuilder

__all__ = [
    'FLOW_NOT_FOUND',
    'REGISTRY_NOT_INITIALIZED',
    'ServerPluginOptions',
    'ServerPluginOptionsBuilder',
    'error_json',
    'find_flow',
    'flow_names',
    'flow_stream_events',
    'format_sse',
    'is_streaming_requested',
    'parse_flow_body',
    'unwrap_flow_input',
]
