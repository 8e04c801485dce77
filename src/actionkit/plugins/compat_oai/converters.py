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

"""Conversion between ActionKit messages and OpenAI chat messages."""

import json
from typing import Any

from actionkit.core.typing import (
    FinishReason,
    GenerationUsage,
    MediaPart,
    Message,
    Part,
    Role,
    TextPart,
    ToolRequest,
    ToolRequestPart,
    ToolResponsePart,
)

FINISH_REASONS = {
    'stop': FinishReason.STOP,
    'length': FinishReason.LENGTH,
    'tool_calls': FinishReason.STOP,
    'function_call': FinishReason.STOP,
    'content_filter': FinishReason.BLOCKED,
}


class MessageConverter:
    """Converts between `Message` objects and OpenAI-compatible chat message dicts."""

    _openai_role_map = {Role.MODEL: 'assistant'}
    _actionkit_role_map = {'assistant': Role.MODEL}

    @classmethod
    def to_openai(cls, message: Message) -> list[dict]:
        """Converts one message to one or more OpenAI chat messages.

        Text and media parts become a single message; tool requests become an
        assistant message with `tool_calls`; each tool response becomes its
        own `tool` message.
        """
        role = cls._openai_role_map.get(message.role, str(message.role))
        text_parts = []
        media_parts = []
        tool_calls = []
        tool_messages = []

        for part in message.content:
            root = part.root

            if isinstance(root, TextPart):
                text_parts.append(root.text)

            elif isinstance(root, MediaPart):
                media_parts.append({'type': 'image_url', 'image_url': {'url': root.media.url}})

            elif isinstance(root, ToolRequestPart):
                tool_calls.append({
                    'id': root.tool_request.ref,
                    'type': 'function',
                    'function': {
                        'name': root.tool_request.name,
                        'arguments': json.dumps(root.tool_request.input),
                    },
                })

            elif isinstance(root, ToolResponsePart):
                tool_response = root.tool_response
                output = tool_response.output
                tool_messages.append({
                    'role': 'tool',
                    'tool_call_id': tool_response.ref,
                    'content': output if isinstance(output, str) else json.dumps(output),
                })

        result = []

        if media_parts:
            content: list[dict] = [{'type': 'text', 'text': text} for text in text_parts]
            result.append({'role': role, 'content': content + media_parts})
        elif text_parts:
            result.append({'role': role, 'content': ''.join(text_parts)})

        if tool_calls:
            result.append({'role': role, 'tool_calls': tool_calls})

        result.extend(tool_messages)
        return result

    @classmethod
    def to_actionkit(cls, message: Any) -> Message:
        """Converts an OpenAI chat-completion message (or delta) to a `Message`.

        Raises:
            ValueError: If the message has neither content nor tool calls.
        """
        content_text = getattr(message, 'content', None)
        tool_calls = getattr(message, 'tool_calls', None) or []
        content = [cls.text_part(content_text)] if content_text else []
        content.extend(
            cls.tool_call_part(tc.id, tc.function.name, tc.function.arguments, parse_args=True) for tc in tool_calls
        )
        if not content:
            raise ValueError('Unable to determine content part')

        role = getattr(message, 'role', None) or Role.MODEL
        return Message(role=cls._actionkit_role_map.get(role, role), content=content)

    @classmethod
    def text_part(cls, content: str) -> Part:
        return Part(root=TextPart(text=content))

    @classmethod
    def tool_call_part(cls, ref: str | None, name: str, arguments: str, parse_args: bool = False) -> Part:
        """Builds a tool request part.

        Args:
            ref: The tool call id.
            name: The function name.
            arguments: JSON-encoded arguments, possibly a streamed fragment.
            parse_args: Decode `arguments`; undecodable arguments are kept as
                the raw string.
        """
        tool_input: Any = arguments
        if parse_args and arguments:
            try:
                tool_input = json.loads(arguments)
            except json.JSONDecodeError:
                tool_input = arguments
        return Part(root=ToolRequestPart(tool_request=ToolRequest(ref=ref, name=name, input=tool_input)))


def to_usage(usage: Any) -> GenerationUsage | None:
    """Maps an OpenAI `CompletionUsage` to `GenerationUsage`."""
    if usage is None:
        return None
    return GenerationUsage(
        input_tokens=getattr(usage, 'prompt_tokens', None),
        output_tokens=getattr(usage, 'completion_tokens', None),
        total_tokens=getattr(usage, 'total_tokens', None),
    )


def to_finish_reason(reason: str | None) -> FinishReason:
    if reason is None:
        return FinishReason.UNKNOWN
    return FINISH_REASONS.get(reason, FinishReason.OTHER)
