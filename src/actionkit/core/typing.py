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

"""Data model shared by actions, plugins and server adapters.

These pydantic models define the request and response shapes of models,
embedders, retrievers, indexers and evaluators. Field names are snake_case
in Python and camelCase on the wire (`by_alias=True`).
"""

from __future__ import annotations

import sys
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel

if sys.version_info < (3, 11):
    from strenum import StrEnum
else:
    from enum import StrEnum


class Role(StrEnum):
    """Author of a message."""

    USER = 'user'
    MODEL = 'model'
    SYSTEM = 'system'
    TOOL = 'tool'


class FinishReason(StrEnum):
    """Why a model stopped generating."""

    STOP = 'stop'
    LENGTH = 'length'
    BLOCKED = 'blocked'
    INTERRUPTED = 'interrupted'
    OTHER = 'other'
    UNKNOWN = 'unknown'


class Media(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    url: str
    content_type: str | None = Field(default=None, alias='contentType')


class ToolRequest(BaseModel):
    """A model's request to call a tool."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    ref: str | None = None
    name: str
    input: Any | None = None


class ToolResponse(BaseModel):
    """The result of a tool call, sent back to the model."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    ref: str | None = None
    name: str
    output: Any | None = None


class TextPart(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    text: str
    metadata: dict[str, Any] | None = None


class MediaPart(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    media: Media
    metadata: dict[str, Any] | None = None


class ToolRequestPart(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    tool_request: ToolRequest = Field(alias='toolRequest')
    metadata: dict[str, Any] | None = None


class ToolResponsePart(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    tool_response: ToolResponse = Field(alias='toolResponse')
    metadata: dict[str, Any] | None = None


class DataPart(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    data: Any
    metadata: dict[str, Any] | None = None


class Part(RootModel[TextPart | MediaPart | ToolRequestPart | ToolResponsePart | DataPart]):
    """One piece of message or document content.

    >>> Part(text='hello').root
    TextPart(text='hello', metadata=None)
    """

    root: TextPart | MediaPart | ToolRequestPart | ToolResponsePart | DataPart


def _text_of(parts: list[Part]) -> str:
    return ''.join(p.root.text for p in parts if isinstance(p.root, TextPart))


class Message(BaseModel):
    """A chat message."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    role: Role | str
    content: list[Part]
    metadata: dict[str, Any] | None = None

    @property
    def text(self) -> str:
        """Concatenation of every text part."""
        return _text_of(self.content)

    @property
    def tool_requests(self) -> list[ToolRequest]:
        return [p.root.tool_request for p in self.content if isinstance(p.root, ToolRequestPart)]


class GenerationCommonConfig(BaseModel):
    """Generation options most providers understand."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    version: str | None = None
    temperature: float | None = None
    max_output_tokens: int | None = Field(default=None, alias='maxOutputTokens')
    top_k: int | None = Field(default=None, alias='topK')
    top_p: float | None = Field(default=None, alias='topP')
    stop_sequences: list[str] | None = Field(default=None, alias='stopSequences')


class OutputConfig(BaseModel):
    """Requested output format of a generation."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    format: str | None = None
    schema_: dict[str, Any] | None = Field(default=None, alias='schema')
    constrained: bool | None = None
    content_type: str | None = Field(default=None, alias='contentType')


class ToolDefinition(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    name: str
    description: str = ''
    input_schema: dict[str, Any] | None = Field(default=None, alias='inputSchema')
    output_schema: dict[str, Any] | None = Field(default=None, alias='outputSchema')
    metadata: dict[str, Any] | None = None


class DocumentData(BaseModel):
    """A document: content parts plus free-form metadata."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    content: list[Part]
    metadata: dict[str, Any] | None = None

    @property
    def text(self) -> str:
        return _text_of(self.content)


class GenerateRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    messages: list[Message]
    config: GenerationCommonConfig | dict[str, Any] | None = None
    tools: list[ToolDefinition] | None = None
    tool_choice: str | None = Field(default=None, alias='toolChoice')
    output: OutputConfig | None = None
    docs: list[DocumentData] | None = None


class GenerationUsage(BaseModel):
    """Token and media counts reported by a provider."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    input_tokens: int | None = Field(default=None, alias='inputTokens')
    output_tokens: int | None = Field(default=None, alias='outputTokens')
    total_tokens: int | None = Field(default=None, alias='totalTokens')
    input_characters: int | None = Field(default=None, alias='inputCharacters')
    output_characters: int | None = Field(default=None, alias='outputCharacters')
    input_images: int | None = Field(default=None, alias='inputImages')
    output_images: int | None = Field(default=None, alias='outputImages')


class GenerateResponse(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    message: Message | None = None
    finish_reason: FinishReason | None = Field(default=None, alias='finishReason')
    finish_message: str | None = Field(default=None, alias='finishMessage')
    usage: GenerationUsage | None = None
    custom: Any | None = None
    request: GenerateRequest | None = None

    @property
    def text(self) -> str:
        return self.message.text if self.message else ''


class GenerateResponseChunk(BaseModel):
    """A streamed piece of a model response."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    role: Role | str | None = None
    content: list[Part]
    index: int | None = None
    custom: Any | None = None

    @property
    def text(self) -> str:
        return _text_of(self.content)


class Supports(BaseModel):
    """Capabilities of a model."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    multiturn: bool | None = None
    media: bool | None = None
    tools: bool | None = None
    system_role: bool | None = Field(default=None, alias='systemRole')
    output: list[str] | None = None
    tool_choice: bool | None = Field(default=None, alias='toolChoice')
    constrained: str | None = None


class ModelInfo(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    label: str | None = None
    versions: list[str] | None = None
    supports: Supports | None = None


class Embedding(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    embedding: list[float]
    metadata: dict[str, Any] | None = None


class EmbedRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    input: list[DocumentData]
    options: Any | None = None


class EmbedResponse(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    embeddings: list[Embedding]


class RetrieverRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    query: DocumentData
    options: Any | None = None


class RetrieverResponse(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    documents: list[DocumentData]


class IndexerRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    documents: list[DocumentData]
    options: Any | None = None


class EvalStatusEnum(StrEnum):
    UNKNOWN = 'UNKNOWN'
    PASS_ = 'PASS'
    FAIL = 'FAIL'


class Details(BaseModel):
    """Explanation attached to a score."""

    model_config = ConfigDict(extra='allow', populate_by_name=True)

    reasoning: str | None = None


class Score(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    id: str | None = None
    score: float | str | bool | None = None
    status: EvalStatusEnum | None = None
    error: str | None = None
    details: Details | None = None


class BaseEvalDataPoint(BaseModel):
    """One sample of an evaluation dataset."""

    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    input: Any | None = None
    output: Any | None = None
    context: list[Any] | None = None
    reference: Any | None = None
    test_case_id: str | None = Field(default=None, alias='testCaseId')
    trace_ids: list[str] | None = Field(default=None, alias='traceIds')


class EvalFnResponse(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    span_id: str | None = Field(default=None, alias='spanId')
    trace_id: str | None = Field(default=None, alias='traceId')
    sample_index: int | None = Field(default=None, alias='sampleIndex')
    test_case_id: str = Field(alias='testCaseId')
    evaluation: Score | list[Score]


class EvalRequest(BaseModel):
    model_config = ConfigDict(extra='forbid', populate_by_name=True)

    dataset: list[BaseEvalDataPoint]
    eval_run_id: str | None = Field(default=None, alias='evalRunId')
    options: Any | None = None
