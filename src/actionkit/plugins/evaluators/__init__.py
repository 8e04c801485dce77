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

"""Evaluators plugin."""

from .constant import (
    AnswerRelevancyResponseSchema,
    GenkitMetricType,
    LongFormResponseSchema,
    MaliciousnessResponseSchema,
    MetricConfig,
    NliResponse,
    PluginOptions,
)
from .judge import (
    Judge,
    answer_accuracy_metric,
    answer_relevancy_metric,
    faithfulness_metric,
    maliciousness_metric,
)
from .metrics import deep_equal_metric, jsonata_metric, regex_metric
from .plugin import EVALUATORS_PLUGIN_NAME, GenkitEvaluators, evaluators_name

__all__ = [
    'EVALUATORS_PLUGIN_NAME',
    'AnswerRelevancyResponseSchema',
    'GenkitEvaluators',
    'GenkitMetricType',
    'Judge',
    'LongFormResponseSchema',
    'MaliciousnessResponseSchema',
    'MetricConfig',
    'NliResponse',
    'PluginOptions',
    'answer_accuracy_metric',
    'answer_relevancy_metric',
    'deep_equal_metric',
    'evaluators_name',
    'faithfulness_metric',
    'jsonata_metric',
    'maliciousness_metric',
    'regex_metric',
]
