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

"""Span attributes recorded for action executions."""

from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any
from urllib.parse import quote

from opentelemetry.trace import Span

from actionkit.codec import dump_json

_parent_path: ContextVar[str] = ContextVar('actionkit_parent_path', default='')


def build_path(name: str, parent_path: str, kind: str) -> str:
    """Appends an annotated segment for `name` to `parent_path`.

    >>> build_path('chat', '/{myFlow,t:action,s:flow}', 'model')
    '/{myFlow,t:action,s:flow}/{chat,t:action,s:model}'
    """
    return f'{parent_path}/{{{quote(name, safe="")},t:action,s:{kind}}}'


@contextmanager
def save_parent_path() -> Generator[None, None, None]:
    """Restores the parent span path when the block exits."""
    saved = _parent_path.get()
    try:
        yield
    finally:
        _parent_path.set(saved)


def record_input_metadata(
    span: Span,
    kind: str,
    name: str,
    span_metadata: dict[str, Any] | None,
    input: Any | None,
) -> None:
    """Records the action identity, path and input on a span."""
    span.set_attribute('actionkit:type', 'action')
    span.set_attribute('actionkit:metadata:subtype', kind)
    span.set_attribute('actionkit:name', name)
    if input is not None:
        span.set_attribute('actionkit:input', dump_json(input))

    path = build_path(name, _parent_path.get(), kind)
    span.set_attribute('actionkit:path', path)
    _parent_path.set(path)

    for key, value in (span_metadata or {}).items():
        span.set_attribute(key, value)


def record_output_metadata(span: Span, output: Any) -> None:
    """Marks a span successful and records the action output."""
    span.set_attribute('actionkit:state', 'success')
    try:
        span.set_attribute('actionkit:output', dump_json(output))
    except (TypeError, ValueError):
        span.set_attribute('actionkit:output', str(output))
