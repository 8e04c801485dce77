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

"""ActionKit evaluators plugin: reference-based and judge-graded checks of flow outputs."""

from collections.abc import Awaitable, Callable
from typing import Any

from actionkit.blocks.evaluator import evaluator_action, evaluator_action_metadata
from actionkit.core.action import Action, ActionMetadata
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin
from actionkit.core.registry import Registry
from actionkit.core.typing import BaseEvalDataPoint, EvalFnResponse, EvalStatusEnum, Score
from actionkit.plugins.evaluators.constant import GenkitMetricType, MetricConfig, PluginOptions
from actionkit.plugins.evaluators.judge import (
    Judge,
    answer_accuracy_metric,
    answer_relevancy_metric,
    faithfulness_metric,
    maliciousness_metric,
)
from actionkit.plugins.evaluators.metrics import deep_equal_metric, jsonata_metric, regex_metric

EVALUATORS_PLUGIN_NAME = 'genkitEval'
logger = get_logger(__name__)

# metric -> (scoring function, display name, definition)
_METRICS: dict[GenkitMetricType, tuple[Callable[[BaseEvalDataPoint], Score], str, str]] = {
    GenkitMetricType.REGEX: (
        regex_metric,
        'RegExp',
        'Tests output against the regexp provided as reference',
    ),
    GenkitMetricType.DEEP_EQUAL: (
        deep_equal_metric,
        'Deep Equals',
        'Tests equality of output against the provided reference',
    ),
    GenkitMetricType.JSONATA: (
        jsonata_metric,
        'JSONata',
        'Tests JSONata expression (provided in reference) against output',
    ),
}

# Billed metrics that ask the configured judge model.
_JUDGE_METRICS: dict[GenkitMetricType, tuple[Callable[[Judge, BaseEvalDataPoint], Awaitable[Score]], str, str]] = {
    GenkitMetricType.ANSWER_RELEVANCY: (
        answer_relevancy_metric,
        'Answer Relevancy',
        'Assesses how pertinent the generated answer is to the given prompt',
    ),
    GenkitMetricType.FAITHFULNESS: (
        faithfulness_metric,
        'Faithfulness',
        'Measures the factual consistency of the generated answer against the given context',
    ),
    GenkitMetricType.MALICIOUSNESS: (
        maliciousness_metric,
        'Maliciousness',
        'Measures whether the generated output intends to deceive, harm, or exploit',
    ),
    GenkitMetricType.ANSWER_ACCURACY: (
        answer_accuracy_metric,
        'Answer Accuracy',
        'Measures how well the generated output agrees with the reference',
    ),
}


def evaluators_name(name: str) -> str:
    """Returns the fully qualified genkitEval action name."""
    return f'{EVALUATORS_PLUGIN_NAME}/{name}'


def fill_scores(
    datapoint: BaseEvalDataPoint,
    score: Score,
    status_override_fn: Callable[[Score], EvalStatusEnum] | None = None,
) -> EvalFnResponse:
    """Adds status overrides if provided."""
    if status_override_fn is not None:
        score.status = status_override_fn(score)
    return EvalFnResponse(test_case_id=datapoint.test_case_id, evaluation=score)


class GenkitEvaluators(Plugin):
    """Evaluator plugin to assess LLM output quality."""

    name = EVALUATORS_PLUGIN_NAME

    def __init__(self, params: PluginOptions | list[MetricConfig]) -> None:
        self.params = params if isinstance(params, PluginOptions) else PluginOptions(params)

    def _known_metrics(self) -> list[tuple[GenkitMetricType, MetricConfig]]:
        known = []
        for param in self.params.root:
            try:
                metric = GenkitMetricType(str(param.metric_type).upper())
            except ValueError:
                logger.warning('Unknown metric type, skipping', metric=str(param.metric_type))
                continue
            known.append((metric, param))
        return known

    async def init(self, registry: Registry | None = None) -> list[Action]:
        if not self.params.root:
            await logger.awarning('No metrics configured for the evaluators plugin')
        actions = []
        for metric, param in self._known_metrics():
            if metric in _JUDGE_METRICS:
                if registry is None:
                    await logger.awarning('Judge metrics need a registry, skipping', metric=str(metric))
                    continue
                actions.append(self._configure_judge_evaluator(metric, param, registry))
            else:
                actions.append(self._configure_evaluator(metric, param))
        await logger.ainfo(f'Evaluators plugin initialized with {len(actions)} evaluators')
        return actions

    def _configure_evaluator(self, metric: GenkitMetricType, param: MetricConfig) -> Action:
        score_fn, display_name, definition = _METRICS[metric]

        async def _eval(datapoint: BaseEvalDataPoint, options: Any | None) -> EvalFnResponse:
            return fill_scores(datapoint, score_fn(datapoint), param.status_override_fn)

        return evaluator_action(
            name=evaluators_name(str(metric).lower()),
            display_name=display_name,
            definition=definition,
            fn=_eval,
        )

    def _configure_judge_evaluator(self, metric: GenkitMetricType, param: MetricConfig, registry: Registry) -> Action:
        score_fn, display_name, definition = _JUDGE_METRICS[metric]
        judge = Judge(registry, param)

        async def _eval(datapoint: BaseEvalDataPoint, options: Any | None) -> EvalFnResponse:
            return fill_scores(datapoint, await score_fn(judge, datapoint), param.status_override_fn)

        return evaluator_action(
            name=evaluators_name(str(metric).lower()),
            display_name=display_name,
            definition=definition,
            fn=_eval,
            is_billed=True,
        )

    async def list_actions(self) -> list[ActionMetadata]:
        actions = []
        for metric, _ in self._known_metrics():
            if metric in _JUDGE_METRICS:
                _, display_name, definition = _JUDGE_METRICS[metric]
                is_billed = True
            else:
                _, display_name, definition = _METRICS[metric]
                is_billed = False
            actions.append(
                evaluator_action_metadata(evaluators_name(str(metric).lower()), display_name, definition, is_billed)
            )
        return actions
