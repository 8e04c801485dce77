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

"""Reference-based metrics: regular expression, deep equality and JSONata.

Each metric scores one datapoint with 1.0 (pass) or 0.0 (fail) and explains
the verdict in the score details.
"""

import json
import re
from typing import Any

import jsonata

from actionkit.codec import dump_dict
from actionkit.core.typing import BaseEvalDataPoint, Details, EvalStatusEnum, Score


def _stringify(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(dump_dict(value))


def _require(datapoint: BaseEvalDataPoint, reference_kind: str) -> None:
    if datapoint.output is None:
        raise ValueError('Output was not provided')
    if datapoint.reference is None:
        raise ValueError(f'Reference ({reference_kind}) was not provided')


def _score(passed: bool, reasoning: str) -> Score:
    return Score(
        score=1.0 if passed else 0.0,
        status=EvalStatusEnum.PASS_ if passed else EvalStatusEnum.FAIL,
        details=Details(reasoning=reasoning),
    )


def regex_metric(datapoint: BaseEvalDataPoint) -> Score:
    """Searches the output for the regular expression given as reference.

    An invalid pattern yields an `UNKNOWN` status.

    Raises:
        ValueError: If the output or the reference is missing.
    """
    _require(datapoint, 'regex pattern')
    pattern = _stringify(datapoint.reference)
    try:
        match = re.search(pattern, _stringify(datapoint.output))
    except re.error as e:
        return Score(score=0.0, status=EvalStatusEnum.UNKNOWN, details=Details(reasoning=f'Invalid regex pattern: {e}'))
    if match is None:
        return _score(False, f"Output does not match regex pattern '{pattern}'")
    return _score(
        True, f"Output matches regex pattern '{pattern}' at position {match.start()}-{match.end()}: '{match.group()}'"
    )


def deep_equal_metric(datapoint: BaseEvalDataPoint) -> Score:
    """Compares the JSON forms of output and reference.

    Raises:
        ValueError: If the output or the reference is missing.
    """
    _require(datapoint, 'expected value')
    output = dump_dict(datapoint.output)
    reference = dump_dict(datapoint.reference)
    if output == reference:
        return _score(True, 'Output is deeply equal to reference')
    return _score(
        False, f'Output differs from reference.\nOutput: {json.dumps(output)}\nReference: {json.dumps(reference)}'
    )


def jsonata_metric(datapoint: BaseEvalDataPoint) -> Score:
    """Evaluates the JSONata expression given as reference against the output.

    The datapoint passes when the expression's result is truthy. Expressions
    that fail to parse or evaluate yield an `UNKNOWN` status.

    Raises:
        ValueError: If the output or the reference is missing.
    """
    _require(datapoint, 'JSONata expression')
    expression = _stringify(datapoint.reference)
    try:
        result = jsonata.Jsonata(expression).evaluate(dump_dict(datapoint.output))
    except Exception as e:
        return Score(
            score=0.0,
            status=EvalStatusEnum.UNKNOWN,
            details=Details(reasoning=f'Error evaluating JSONata expression: {e}'),
        )
    return _score(bool(result), f"JSONata expression '{expression}' evaluated to: {json.dumps(result, default=str)}")
