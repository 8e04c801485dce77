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

"""JSON schema helpers."""

from typing import Any

from pydantic import TypeAdapter


def to_json_schema(schema: type | dict[str, Any] | None) -> dict[str, Any] | None:
    """Converts a Python type to a JSON schema.

    Dictionaries are assumed to already be JSON schemas and are returned as
    is; `None` stays `None`.

    >>> to_json_schema({'type': 'string'})
    {'type': 'string'}
    """
    if schema is None:
        return None
    if isinstance(schema, dict):
        return schema
    return TypeAdapter(schema).json_schema()
