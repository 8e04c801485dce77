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

"""Serialization helpers that understand pydantic models."""

import json
from typing import Any

from pydantic import BaseModel


def dump_dict(obj: Any) -> Any:
    """Converts pydantic models (also inside lists and dicts) to plain data.

    Models are dumped by alias with `None` fields dropped. Any other value is
    returned unchanged.
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump(exclude_none=True, by_alias=True)
    if isinstance(obj, list):
        return [dump_dict(o) for o in obj]
    if isinstance(obj, dict):
        return {k: dump_dict(v) for k, v in obj.items()}
    return obj


def dump_json(obj: Any, indent: int | None = None) -> str:
    """Dumps an object, or a pydantic model by alias, to a JSON string."""
    if isinstance(obj, BaseModel):
        return obj.model_dump_json(by_alias=True, exclude_none=True, indent=indent)
    return json.dumps(dump_dict(obj), indent=indent, default=str)
