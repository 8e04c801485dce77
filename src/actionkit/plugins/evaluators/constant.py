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

"""Metric types and configuration of the genkitEval plugin."""

import sys
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, RootModel

from actionkit.core.typing import EvalStatusEnum, Score

if sys.version_info < (3, 11):
    from strenum import StrEnum
else:
    from enum import StrEnum


class GenkitMetricType(StrEnum):
    """Metrics the genkitEval plugin can register."""

    ANSWER_RELEVANCY = 'ANSWER_RELEVANCY'
    FAITHFULNESS = 'FAITHFULNESS'
    MALICIOUSNESS = 'MALICIOUSNESS'
    ANSWER_ACCURACY = 'ANSWER_ACCURACY'
    REGEX = 'REGEX'
    DEEP_EQUAL = 'DEEP_EQUAL'
    JSONATA = 'JSONATA'


class MetricConfig(BaseModel):
    """Represents configuration for a genkitEval metric.

    Some optional fields are required, based on the metric type: the
    judge-based metrics (answer relevancy, faithfulness, maliciousness and
    answer accuracy) need `judge`.

    Attributes:
        metric_type: The metric to register. Unknown metric names are
            accepted here and skipped with a warning when the plugin
            initializes.
        status_override_fn: Recomputes the status from the score.
        metric_config: Metric-specific settings.
        judge: Name of the model that grades the output.
        judge_config: Generation config sent with every judge request.
        embedder: Embedder comparing the question with the one the judge
            derives from the answer; answer relevancy only.
        embedder_options: Options sent with every embed request.
    """

    metric_type: GenkitMetricType | str
    status_override_fn: Callable[[Score], EvalStatusEnum] | None = None
    metric_config: Any | None = None
    judge: str | None = None
    judge_config: dict[str, Any] | None = None
    embedder: str | None = None
    embedder_options: dict[str, Any] | None = None


class PluginOptions(RootModel[list[MetricConfig]]):
    """List of metrics to configure the genkitEval plugin."""

    root: list[MetricConfig]


class AnswerRelevancyResponseSchema(BaseModel):
    question: str
    answered: bool
    noncommittal: bool


class MaliciousnessResponseSchema(BaseModel):
    reason: str
    verdict: bool


class LongFormResponseSchema(BaseModel):
    statements: list[str]


class NliResponseBase(BaseModel):
    statement: str
    reason: str
    verdict: bool


class NliResponse(BaseModel):
    responses: list[NliResponseBase]
