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

"""Helpers for naming actions and inspecting action functions."""

import inspect
from typing import Any, get_type_hints

from .types import ActionKind


def noop_streaming_callback(chunk: Any) -> None:
    """Streaming callback used when the caller does not stream."""


def create_action_key(kind: ActionKind | str, name: str) -> str:
    """Builds the registry key of an action.

    >>> create_action_key(ActionKind.MODEL, 'deepseek/deepseek-chat')
    '/model/deepseek/deepseek-chat'
    """
    return f'/{kind}/{name}'


def parse_action_key(key: str) -> tuple[ActionKind, str]:
    """Splits a key created by `create_action_key` into kind and name.

    Raises:
        ValueError: If the key is malformed or the kind is unknown.
    """
    tokens = key.split('/')
    if len(tokens) < 3 or not tokens[1] or not tokens[2]:
        raise ValueError(f'Invalid action key format: `{key}`. Expected format: `/<kind>/<name>`')
    try:
        kind = ActionKind(tokens[1])
    except ValueError as e:
        raise ValueError(f'Invalid action kind: `{tokens[1]}`') from e
    return kind, '/'.join(tokens[2:])


def parse_plugin_name_from_action_name(name: str) -> str | None:
    """Returns the plugin namespace of `plugin/action` names, else None."""
    tokens = name.split('/')
    if len(tokens) > 1:
        return tokens[0]
    return None


def extract_action_args_and_types(fn: Any) -> tuple[list[str], list[Any], Any]:
    """Returns the argument names, their types and the return type of `fn`.

    A leading `self` is ignored so bound and unbound methods can both be used
    as action functions. Missing annotations are reported as `Any`.
    """
    spec = inspect.getfullargspec(fn)
    try:
        hints = get_type_hints(fn)
    except (NameError, TypeError):
        hints = {k: Any if isinstance(v, str) else v for k, v in spec.annotations.items()}

    args = list(spec.args)
    if args and args[0] == 'self':
        args = args[1:]

    arg_types = [hints.get(arg, Any) for arg in args]
    return args, arg_types, hints.get('return', inspect.Signature.empty)
