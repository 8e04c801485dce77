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

"""`ActionKit`: the user-facing entry object.

An `ActionKit` owns a registry, registers the plugins it is given and offers
decorators to define flows and tools plus helpers that run models, embedders,
retrievers, indexers and evaluators by name.

Example:
    ```python
    ai = ActionKit(plugins=[DeepSeek.create()], model='deepseek/deepseek-chat')


    @ai.flow()
    async def joke(topic: str) -> str:
        response = await ai.generate(prompt=f'Tell me a joke about {topic}')
        return response.text
    ```
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncIterator, Callable
from functools import wraps
from typing import Any, Generic, ParamSpec, TypeVar, cast

from pydantic import BaseModel

from actionkit.blocks.document import Document
from actionkit.core.action import Action, ActionKind, StreamingCallback
from actionkit.core.error import ActionKitError
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin, ServerPlugin
from actionkit.core.registry import Registry
from actionkit.core.schema import to_json_schema
from actionkit.core.typing import (
    BaseEvalDataPoint,
    DocumentData,
    EmbedRequest,
    EmbedResponse,
    Embedding,
    EvalFnResponse,
    EvalRequest,
    GenerateRequest,
    GenerateResponse,
    GenerationCommonConfig,
    IndexerRequest,
    Message,
    OutputConfig,
    Part,
    RetrieverRequest,
    RetrieverResponse,
    Role,
    TextPart,
    ToolDefinition,
    ToolRequestPart,
    ToolResponse,
    ToolResponsePart,
)

logger = get_logger(__name__)

P = ParamSpec('P')
T = TypeVar('T')

DEFAULT_MAX_TURNS = 5


class FlowWrapper(Generic[P, T]):
    """A flow function with a `stream()` method and its registered action."""

    def __init__(self, fn: Callable[P, T], action: Action) -> None:
        self._fn = fn
        self._action = action

    @property
    def action(self) -> Action:
        return self._action

    def __call__(self, *args: P.args, **kwargs: P.kwargs) -> T:
        return self._fn(*args, **kwargs)

    def stream(
        self,
        input: Any = None,
        context: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> tuple[AsyncIterator[Any], asyncio.Future]:
        """Runs the flow and returns its chunk stream and final result."""
        return self._action.stream(input=input, context=context, timeout=timeout)


class ActionKit:
    """Entry point: owns a registry and the plugins registered with it."""

    def __init__(self, plugins: list[Plugin] | None = None, model: str | None = None) -> None:
        """Create an ActionKit.

        Args:
            plugins: Plugins to register. Server plugins are handed the
                registry so they can be started right away.
            model: Default model for `generate()`.

        Raises:
            ValueError: If an entry of `plugins` is not a `Plugin`, or two
                plugins share a name.
        """
        self.registry = Registry()
        self.registry.default_model = model
        for plugin in plugins or []:
            if not isinstance(plugin, Plugin):
                raise ValueError(
                    f'Invalid {plugin=} provided to ActionKit: must be of type `actionkit.core.plugin.Plugin`'
                )
            self.registry.register_plugin(plugin)
            if isinstance(plugin, ServerPlugin):
                plugin.set_registry(self.registry)
            logger.debug('Registered plugin', plugin=plugin.name)

    def flow(
        self, name: str | None = None, description: str | None = None
    ) -> Callable[[Callable[P, T]], FlowWrapper[P, T]]:
        """Decorator registering a function as a flow.

        Args:
            name: Flow name; defaults to the function name.
            description: Defaults to the function docstring.
        """

        def wrapper(func: Callable[P, T]) -> FlowWrapper[P, T]:
            return self.define_flow(func, name=name, description=description)

        return wrapper

    def define_flow(
        self, func: Callable[P, T], name: str | None = None, description: str | None = None
    ) -> FlowWrapper[P, T]:
        """Registers `func` as a flow and returns a callable wrapper."""
        flow_name = name if name is not None else getattr(func, '__name__', 'unnamed_flow')
        action = self.registry.register_action(
            kind=ActionKind.FLOW,
            name=flow_name,
            fn=func,
            description=_describe(func, description),
            span_metadata={'actionkit:metadata:flow:name': flow_name},
        )

        @wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
            return (await action.arun(args[0] if args else None)).response

        @wraps(func)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
            return action.run(args[0] if args else None).response

        return FlowWrapper(fn=cast(Callable[P, T], async_wrapper if action.is_async else sync_wrapper), action=action)

    def tool(
        self, name: str | None = None, description: str | None = None
    ) -> Callable[[Callable[P, T]], Callable[P, T]]:
        """Decorator registering a function as a tool models can call.

        The decorated function is returned unchanged.
        """

        def wrapper(func: Callable[P, T]) -> Callable[P, T]:
            self.define_tool(func, name=name, description=description)
            return func

        return wrapper

    def define_tool(self, func: Callable[..., Any], name: str | None = None, description: str | None = None) -> Action:
        tool_name = name if name is not None else getattr(func, '__name__', 'unnamed_tool')
        return self.registry.register_action(
            kind=ActionKind.TOOL,
            name=tool_name,
            fn=func,
            description=_describe(func, description),
        )

    async def generate(
        self,
        model: str | None = None,
        prompt: str | list[Part] | None = None,
        system: str | None = None,
        messages: list[Message] | None = None,
        tools: list[str] | None = None,
        config: GenerationCommonConfig | dict[str, Any] | None = None,
        output_format: str | None = None,
        output_schema: type | dict[str, Any] | None = None,
        on_chunk: StreamingCallback | None = None,
        max_turns: int = DEFAULT_MAX_TURNS,
        return_tool_requests: bool = False,
    ) -> GenerateResponse:
        """Runs a model and returns its response.

        Tool requests in the response are executed and their results sent
        back to the model, up to `max_turns` round trips, unless
        `return_tool_requests` is set.

        Raises:
            ActionKitError: If no model is configured or the model or a tool
                cannot be resolved.
        """
        model_name = model or self.registry.default_model
        if not model_name:
            raise ActionKitError(
                status='INVALID_ARGUMENT',
                message='No model specified and no default model configured.',
            )
        model_action = await self._resolve(ActionKind.MODEL, model_name)

        tool_actions = [await self._resolve(ActionKind.TOOL, t) for t in tools or []]
        request = GenerateRequest(
            messages=_build_messages(system, messages, prompt),
            config=config,
            tools=[_tool_definition(a) for a in tool_actions] or None,
            output=_output_config(output_format, output_schema),
        )

        for _ in range(max_turns + 1):
            result = await model_action.arun(request, on_chunk=on_chunk)
            response = result.response
            if not isinstance(response, GenerateResponse):
                response = GenerateResponse.model_validate(response)

            tool_requests = response.message.tool_requests if response.message else []
            if return_tool_requests or not tool_requests or not tool_actions:
                return response

            tool_parts = []
            for tool_request in tool_requests:
                tool = await self._resolve(ActionKind.TOOL, tool_request.name)
                tool_input = tool.input_type.validate_python(tool_request.input) if tool.input_type else None
                output = (await tool.arun(tool_input)).response
                tool_parts.append(
                    Part(
                        root=ToolResponsePart(
                            tool_response=ToolResponse(ref=tool_request.ref, name=tool_request.name, output=output)
                        )
                    )
                )
            request = request.model_copy(
                update={'messages': [*request.messages, response.message, Message(role=Role.TOOL, content=tool_parts)]}
            )

        raise ActionKitError(status='ABORTED', message=f'Exceeded maximum tool call iterations ({max_turns})')

    async def embed(
        self,
        embedder: str,
        documents: list[str | DocumentData],
        options: dict[str, Any] | None = None,
    ) -> list[Embedding]:
        """Embeds documents (or plain strings) with the named embedder."""
        action = await self._resolve(ActionKind.EMBEDDER, embedder)
        request = EmbedRequest(input=[_to_document(d) for d in documents], options=options)
        response = (await action.arun(request)).response
        return EmbedResponse.model_validate(response).embeddings

    async def retrieve(
        self,
        retriever: str,
        query: str | DocumentData,
        options: dict[str, Any] | None = None,
    ) -> list[DocumentData]:
        """Returns the documents the named retriever finds for `query`."""
        action = await self._resolve(ActionKind.RETRIEVER, retriever)
        request = RetrieverRequest(query=_to_document(query), options=options)
        response = (await action.arun(request)).response
        return RetrieverResponse.model_validate(response).documents

    async def index(
        self,
        indexer: str,
        documents: list[str | DocumentData],
        options: dict[str, Any] | None = None,
    ) -> None:
        """Stores documents with the named indexer."""
        action = await self._resolve(ActionKind.INDEXER, indexer)
        await action.arun(IndexerRequest(documents=[_to_document(d) for d in documents], options=options))

    async def evaluate(
        self,
        evaluator: str,
        dataset: list[BaseEvalDataPoint | dict[str, Any]],
        options: Any | None = None,
        eval_run_id: str | None = None,
    ) -> list[EvalFnResponse]:
        """Scores every datapoint of `dataset` with the named evaluator."""
        action = await self._resolve(ActionKind.EVALUATOR, evaluator)
        request = EvalRequest(
            dataset=[BaseEvalDataPoint.model_validate(d) if isinstance(d, dict) else d for d in dataset],
            eval_run_id=eval_run_id,
            options=options,
        )
        return (await action.arun(request)).response

    async def list_actions(self) -> dict[str, dict[str, Any]]:
        """Initializes every plugin and lists all registered actions."""
        await self.registry.initialize_plugins()
        return self.registry.list_serializable_actions()

    async def _resolve(self, kind: ActionKind, name: str) -> Action:
        action = await self.registry.resolve_action(kind, name)
        if action is None:
            raise ActionKitError(status='NOT_FOUND', message=f'{kind.capitalize()} not found: {name}')
        return action


def _describe(func: Callable[..., Any], description: str | None) -> str | None:
    if description is not None:
        return description
    return inspect.getdoc(func)


def _text(text: str) -> Part:
    return Part(root=TextPart(text=text))


def _build_messages(
    system: str | None,
    messages: list[Message] | None,
    prompt: str | list[Part] | None,
) -> list[Message]:
    result = []
    if system:
        result.append(Message(role=Role.SYSTEM, content=[_text(system)]))
    result.extend(messages or [])
    if prompt:
        content = [_text(prompt)] if isinstance(prompt, str) else prompt
        result.append(Message(role=Role.USER, content=content))
    if not result:
        raise ActionKitError(
            status='INVALID_ARGUMENT',
            message='At least one of prompt, system or messages is required.',
        )
    return result


def _tool_definition(action: Action) -> ToolDefinition:
    return ToolDefinition(
        name=action.name,
        description=action.description or '',
        input_schema=action.input_schema,
        output_schema=action.output_schema,
    )


def _output_config(output_format: str | None, output_schema: type | dict[str, Any] | None) -> OutputConfig | None:
    if output_format is None and output_schema is None:
        return None
    schema = to_json_schema(output_schema)
    return OutputConfig(format=output_format or ('json' if schema else 'text'), schema_=schema)


def _to_document(value: str | DocumentData | BaseModel) -> DocumentData:
    if isinstance(value, str):
        return Document.from_text(value)
    return value
