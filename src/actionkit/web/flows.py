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

"""Flow lookup, input unwrapping and streaming shared by the server plugins."""

import json
from collections.abc import AsyncIterator
from typing import Any

from actionkit.codec import dump_dict, dump_json
from actionkit.core.action import Action, ActionKind
from actionkit.core.error import ActionKitError, get_callable_json
from actionkit.core.logging import get_logger
from actionkit.core.registry import Registry

logger = get_logger(__name__)

REGISTRY_NOT_INITIALIZED = 'Registry not initialized'
FLOW_NOT_FOUND = 'Flow not found: {}'


def flow_names(registry: Registry) -> list[str]:
    """Names of the flows registered in `registry`."""
    return [action.name for action in registry.list_actions(ActionKind.FLOW)]


def find_flow(registry: Registry, name: str) -> Action | None:
    return registry.lookup_action(ActionKind.FLOW, name)


def parse_flow_body(raw: bytes) -> Any:
    """Decodes a request body as UTF-8 JSON; an empty body is `None`.

    Raises:
        ValueError: If the body is not UTF-8 or not JSON.
    """
    if not raw:
        return None
    return json.loads(raw.decode('utf-8'))


def unwrap_flow_input(body: Any) -> Any:
    """Returns the flow input carried by a request body.

    Callers may wrap the input as `{"data": input}` or post it as is.

    >>> unwrap_flow_input({'data': 'hi'})
    'hi'
    >>> unwrap_flow_input({'topic': 'cats'})
    {'topic': 'cats'}
    """
    if isinstance(body, dict) and 'data' in body:
        return body['data']
    return body


def is_streaming_requested(accept: str | None, stream: str | None) -> bool:
    """Streaming is requested with `Accept: text/event-stream` or `?stream=true`."""
    return 'text/event-stream' in (accept or '') or stream == 'true'


def error_json(error: Exception) -> dict[str, Any]:
    """The error body returned to HTTP callers.

    A failure inside an action arrives wrapped with the action's trace id;
    the body describes the underlying error so that a `UserFacingError`
    raised by a flow keeps its status and message.
    """
    if isinstance(error, ActionKitError) and error.cause is not None:
        error = error.cause
    return dump_dict(get_callable_json(error))


def format_sse(data: dict[str, Any]) -> str:
    """Formats one Server-Sent Event carrying `data` as JSON."""
    return f'data: {dump_json(data)}\n\n'


async def flow_stream_events(
    action: Action, input: Any, context: dict[str, Any] | None = None
) -> AsyncIterator[dict[str, Any]]:
    """Runs a flow and yields the payload of each event to stream.

    Yields `{"message": chunk}` per chunk, then `{"result": output}`. A
    failure ends the stream with `{"error": ...}`.
    """
    try:
        chunks, result = action.stream(input, context=context, raw=True)
        async for chunk in chunks:
            yield {'message': dump_dict(chunk)}
        yield {'result': dump_dict(await result)}
    except Exception as e:
        await logger.aerror('Error streaming flow', flow=action.name, error=str(e))
        yield {'error': error_json(e)}
