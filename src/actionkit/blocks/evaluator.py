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

"""Evaluator types and action helpers.

Evaluators score dataset samples, typically the input and output of a flow
run, against a reference.
"""

import uuid
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from actionkit.core.action import Action, ActionKind, ActionMetadata
from actionkit.core.logging import get_logger
from actionkit.core.schema import to_json_schema
from actionkit.core.tracing import tracer
from actionkit.core.typing import BaseEvalDataPoint, EvalFnResponse, EvalRequest, EvalStatusEnum, Score

logger = get_logger(__name__)

T = TypeVar('T')

# Scores a single datapoint.
EvaluatorFn = Callable[[BaseEvalDataPoint, T], Awaitable[EvalFnResponse]]


def evaluator_metadata(
    name: str,
    display_name: str,
    definition: str,
    is_billed: bool = False,
) -> dict[str, Any]:
    """Returns the `metadata` dict stored on a registered evaluator action."""
    return {
        'evaluator': {
            'evaluatorDisplayName': display_name,
            'evaluatorDefinition': definition,
            'evaluatorIsBilled': is_billed,
            'label': name,
        }
    }


def evaluator_action_metadata(
    name: str, display_name: str, definition: str, is_billed: bool = False
) -> ActionMetadata:
    return ActionMetadata(
        kind=ActionKind.EVALUATOR,
        name=name,
        input_json_schema=to_json_schema(EvalRequest),
        output_json_schema=to_json_schema(list[EvalFnResponse]),
        metadata=evaluator_metadata(name, display_name, definition, is_billed),
    )


def evaluator_action(
    name: str,
    display_name: str,
    definition: str,
    fn: EvaluatorFn,
    is_billed: bool = False,
) -> Action:
    """Wraps a per-datapoint evaluator function in an `evaluator` action.

    The action takes an `EvalRequest` and returns one `EvalFnResponse` per
    datapoint. Datapoints without a test case id get a random one. A failing
    datapoint is reported as a `FAIL` score carrying the error instead of
    failing the whole run.
    """

    async def _evaluate(request: EvalRequest) -> list[EvalFnResponse]:
        responses = []
        for index, datapoint in enumerate(request.dataset):
            if datapoint.test_case_id is None:
                datapoint.test_case_id = str(uuid.uuid4())
            with tracer.start_as_current_span(f'Test Case {datapoint.test_case_id}') as span:
                span.set_attribute('actionkit:type', 'evaluator')
                try:
                    response = await fn(datapoint, request.options)
                except Exception as e:
                    await logger.adebug('Evaluation failed', evaluator=name, test_case_id=datapoint.test_case_id)
                    response = EvalFnResponse(
                        test_case_id=datapoint.test_case_id,
                        evaluation=Score(
                            error=f'Evaluation of test case {datapoint.test_case_id} failed: \n{e}',
                            status=EvalStatusEnum.FAIL,
                        ),
                    )
                response.sample_index = index
                response.trace_id = format(span.get_span_context().trace_id, '032x')
                response.span_id = format(span.get_span_context().span_id, '016x')
            responses.append(response)
        return responses

    return Action(
        kind=ActionKind.EVALUATOR,
        name=name,
        fn=_evaluate,
        metadata=evaluator_metadata(name, display_name, definition, is_billed),
    )
