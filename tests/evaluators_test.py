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

"""Tests for the genkitEval evaluators plugin."""

import pytest

from actionkit import ActionKit
from actionkit.core.action import ActionKind
from actionkit.core.registry import Registry
from actionkit.core.typing import (
    BaseEvalDataPoint,
    EmbedRequest,
    EmbedResponse,
    Embedding,
    EvalStatusEnum,
    GenerateRequest,
    GenerateResponse,
    Message,
    Part,
    Role,
    TextPart,
)
from actionkit.plugins.evaluators import (
    GenkitEvaluators,
    GenkitMetricType,
    MetricConfig,
    deep_equal_metric,
    jsonata_metric,
    regex_metric,
)
from actionkit.plugins.evaluators.judge import cosine_similarity, extract_json, parse_rating


def _datapoint(output, reference, test_case_id: str | None = None) -> BaseEvalDataPoint:
    return BaseEvalDataPoint(output=output, reference=reference, test_case_id=test_case_id)


def test_regex_match() -> None:
    score = regex_metric(_datapoint('The answer is 42', r'\d+'))

    assert score.score == 1.0
    assert score.status == EvalStatusEnum.PASS_
    assert 'at position 14-16' in score.details.reasoning


def test_regex_no_match() -> None:
    score = regex_metric(_datapoint('no digits here', r'\d+'))

    assert score.score == 0.0
    assert score.status == EvalStatusEnum.FAIL


def test_regex_invalid_pattern() -> None:
    score = regex_metric(_datapoint('anything', '(unclosed'))

    assert score.status == EvalStatusEnum.UNKNOWN
    assert score.details.reasoning.startswith('Invalid regex pattern')


def test_metrics_require_output_and_reference() -> None:
    with pytest.raises(ValueError, match='Output was not provided'):
        regex_metric(_datapoint(None, 'x'))
    with pytest.raises(ValueError, match=r'Reference \(expected value\) was not provided'):
        deep_equal_metric(_datapoint({'a': 1}, None))


def test_deep_equal() -> None:
    """Key order does not matter, values do."""
    assert deep_equal_metric(_datapoint({'a': 1, 'b': [1, 2]}, {'b': [1, 2], 'a': 1})).score == 1.0

    score = deep_equal_metric(_datapoint({'a': 1}, {'a': 2}))

    assert score.status == EvalStatusEnum.FAIL
    assert 'Output differs from reference' in score.details.reasoning


def test_jsonata() -> None:
    assert jsonata_metric(_datapoint({'answer': 42}, 'answer = 42')).status == EvalStatusEnum.PASS_
    assert jsonata_metric(_datapoint({'answer': 42}, 'answer > 100')).status == EvalStatusEnum.FAIL


def test_jsonata_invalid_expression() -> None:
    score = jsonata_metric(_datapoint({'answer': 42}, 'answer = '))

    assert score.status == EvalStatusEnum.UNKNOWN
    assert score.details.reasoning.startswith('Error evaluating JSONata expression')


@pytest.mark.asyncio
async def test_unknown_metrics_are_skipped() -> None:
    """Metric names are case-insensitive and unknown ones ignored."""
    plugin = GenkitEvaluators([
        MetricConfig(metric_type='regex'),
        MetricConfig(metric_type=GenkitMetricType.DEEP_EQUAL),
        MetricConfig(metric_type='bogus'),
    ])

    actions = await plugin.init()
    listed = await plugin.list_actions()

    assert [a.name for a in actions] == ['genkitEval/regex', 'genkitEval/deep_equal']
    assert listed[0].metadata['evaluator']['evaluatorDisplayName'] == 'RegExp'
    assert actions[1].metadata['evaluator']['evaluatorDefinition'].startswith('Tests equality')


@pytest.mark.asyncio
async def test_evaluate_through_actionkit() -> None:
    """Every datapoint gets a response; failing ones carry the error."""
    ai = ActionKit(plugins=[GenkitEvaluators([MetricConfig(metric_type=GenkitMetricType.REGEX)])])

    results = await ai.evaluate(
        'genkitEval/regex',
        [
            {'output': 'hello world', 'reference': 'wor', 'testCaseId': 'ok'},
            {'output': 'hello world', 'testCaseId': 'missing-reference'},
            {'output': 'hello', 'reference': 'bye'},
        ],
    )

    assert [r.sample_index for r in results] == [0, 1, 2]
    assert results[0].evaluation.status == EvalStatusEnum.PASS_
    assert results[1].evaluation.status == EvalStatusEnum.FAIL
    assert 'Reference (regex pattern) was not provided' in results[1].evaluation.error
    assert results[2].test_case_id
    assert results[2].evaluation.score == 0.0
    assert len(results[0].trace_id) == 32


@pytest.mark.asyncio
async def test_status_override() -> None:
    plugin = GenkitEvaluators([
        MetricConfig(metric_type='JSONATA', status_override_fn=lambda score: EvalStatusEnum.UNKNOWN),
    ])
    ai = ActionKit(plugins=[plugin])

    [result] = await ai.evaluate('genkitEval/jsonata', [_datapoint({'ok': True}, 'ok', 't1')])

    assert result.test_case_id == 't1'
    assert result.evaluation.score == 1.0
    assert result.evaluation.status == EvalStatusEnum.UNKNOWN


QUESTION = 'What is the capital of France?'


def _judge_kit(metric: GenkitMetricType, *replies: str, **config) -> tuple[ActionKit, list[GenerateRequest]]:
    """An ActionKit whose `fake-judge` model answers with `replies` in order."""
    requests: list[GenerateRequest] = []
    pending = list(replies)

    def judge(request: GenerateRequest) -> GenerateResponse:
        requests.append(request)
        return GenerateResponse(message=Message(role=Role.MODEL, content=[Part(root=TextPart(text=pending.pop(0)))]))

    config.setdefault('judge', 'fake-judge')
    ai = ActionKit(plugins=[GenkitEvaluators([MetricConfig(metric_type=metric, **config)])])
    ai.registry.register_action(ActionKind.MODEL, 'fake-judge', judge)
    return ai, requests


def _prompt_of(request: GenerateRequest) -> str:
    return request.messages[0].text


@pytest.mark.asyncio
async def test_judge_metrics_are_billed() -> None:
    plugin = GenkitEvaluators([
        MetricConfig(metric_type='faithfulness', judge='fake-judge'),
        MetricConfig(metric_type='regex'),
    ])

    actions = await plugin.init(Registry())
    listed = await plugin.list_actions()

    assert [a.name for a in actions] == ['genkitEval/faithfulness', 'genkitEval/regex']
    assert actions[0].metadata['evaluator']['evaluatorIsBilled'] is True
    assert actions[1].metadata['evaluator']['evaluatorIsBilled'] is False
    assert listed[0].metadata['evaluator']['evaluatorDisplayName'] == 'Faithfulness'
    assert listed[0].metadata['evaluator']['evaluatorIsBilled'] is True


@pytest.mark.asyncio
async def test_answer_relevancy() -> None:
    """The judge gets the rendered prompt and the configured generation config."""
    ai, requests = _judge_kit(
        GenkitMetricType.ANSWER_RELEVANCY,
        '```json\n{"question": "Which city is the capital of France?", "answered": true, "noncommittal": false}\n```',
        judge_config={'temperature': 0, 'seed': 7},
    )

    [result] = await ai.evaluate(
        'genkitEval/answer_relevancy',
        [{'input': {'question': QUESTION}, 'output': 'Paris', 'context': ['France is in Europe']}],
    )

    assert result.evaluation.score == 1.0
    assert result.evaluation.status == EvalStatusEnum.PASS_
    assert result.evaluation.details.reasoning == 'Answer is relevant to the question'
    assert f'Question: {QUESTION}' in _prompt_of(requests[0])
    assert 'Context: France is in Europe' in _prompt_of(requests[0])
    assert requests[0].config == {'temperature': 0, 'seed': 7}


@pytest.mark.asyncio
async def test_answer_relevancy_noncommittal() -> None:
    ai, _ = _judge_kit(
        GenkitMetricType.ANSWER_RELEVANCY,
        '{"question": "What is the capital of France?", "answered": true, "noncommittal": true}',
    )

    [result] = await ai.evaluate('genkitEval/answer_relevancy', [{'input': QUESTION, 'output': 'It depends'}])

    assert result.evaluation.score == 0.0
    assert result.evaluation.status == EvalStatusEnum.FAIL
    assert result.evaluation.details.reasoning == 'Answer is non-committal or evasive'


@pytest.mark.asyncio
async def test_answer_relevancy_with_embedder() -> None:
    """With an embedder the score is the similarity of the two questions."""
    vectors = {QUESTION: [1.0, 0.0], 'Which city is the capital of France?': [1.0, 1.0]}

    def embedder(request: EmbedRequest) -> EmbedResponse:
        return EmbedResponse(embeddings=[Embedding(embedding=vectors[doc.text]) for doc in request.input])

    ai, _ = _judge_kit(
        GenkitMetricType.ANSWER_RELEVANCY,
        '{"question": "Which city is the capital of France?", "answered": true, "noncommittal": false}',
        embedder='fake-embedder',
    )
    ai.registry.register_action(ActionKind.EMBEDDER, 'fake-embedder', embedder)

    [result] = await ai.evaluate('genkitEval/answer_relevancy', [{'input': QUESTION, 'output': 'Paris'}])

    assert result.evaluation.score == pytest.approx(2**-0.5)
    assert result.evaluation.status == EvalStatusEnum.PASS_
    assert result.evaluation.details.reasoning == 'Cosine similarity'


@pytest.mark.asyncio
async def test_faithfulness() -> None:
    """The score is the share of statements the context supports."""
    ai, requests = _judge_kit(
        GenkitMetricType.FAITHFULNESS,
        '{"statements": ["Paris is the capital of France.", "Paris has the Eiffel Tower.", "Paris is in Spain."]}',
        '{"responses": ['
        '{"statement": "Paris is the capital of France.", "reason": "stated", "verdict": true}, '
        '{"statement": "Paris has the Eiffel Tower.", "reason": "stated too", "verdict": true}, '
        '{"statement": "Paris is in Spain.", "reason": "contradicted", "verdict": false}]}',
    )

    [result] = await ai.evaluate(
        'genkitEval/faithfulness',
        [
            {
                'input': QUESTION,
                'output': {'answer': 'Paris, home of the Eiffel Tower'},
                'context': ['Paris is the capital of France', 'The Eiffel Tower is in Paris'],
            }
        ],
    )

    assert result.evaluation.score == pytest.approx(2 / 3)
    assert result.evaluation.status == EvalStatusEnum.PASS_
    assert result.evaluation.details.reasoning == 'stated; stated too; contradicted'
    assert 'Answer: Paris, home of the Eiffel Tower' in _prompt_of(requests[0])
    assert 'statement: Paris is in Spain.' in _prompt_of(requests[1])
    assert 'The Eiffel Tower is in Paris' in _prompt_of(requests[1])


@pytest.mark.asyncio
async def test_faithfulness_requires_context() -> None:
    ai, requests = _judge_kit(GenkitMetricType.FAITHFULNESS)

    [result] = await ai.evaluate('genkitEval/faithfulness', [{'input': QUESTION, 'output': 'Paris'}])

    assert result.evaluation.status == EvalStatusEnum.FAIL
    assert 'Context was not provided' in result.evaluation.error
    assert requests == []


@pytest.mark.asyncio
async def test_maliciousness() -> None:
    """A malicious verdict scores 1.0 and fails."""
    ai, requests = _judge_kit(
        GenkitMetricType.MALICIOUSNESS,
        'Sure. {"reason": "Encourages fraud", "verdict": true}',
        '{"reason": "Harmless", "verdict": false}',
    )

    results = await ai.evaluate(
        'genkitEval/maliciousness',
        [
            {'input': 'How do I pay less tax?', 'output': 'Hide your income', 'testCaseId': 'bad'},
            {'input': 'How do I pay less tax?', 'output': 'Ask an accountant', 'testCaseId': 'good'},
        ],
    )

    assert [r.evaluation.score for r in results] == [1.0, 0.0]
    assert [r.evaluation.status for r in results] == [EvalStatusEnum.FAIL, EvalStatusEnum.PASS_]
    assert results[0].evaluation.details.reasoning == 'Encourages fraud'
    assert 'Submission: Hide your income' in _prompt_of(requests[0])


@pytest.mark.asyncio
async def test_answer_accuracy() -> None:
    """Both rating directions are combined by harmonic mean."""
    ai, requests = _judge_kit(GenkitMetricType.ANSWER_ACCURACY, '4', 'Rating: 5')

    [result] = await ai.evaluate(
        'genkitEval/answer_accuracy', [{'input': QUESTION, 'output': 'Paris', 'reference': 'Paris, France'}]
    )

    assert result.evaluation.score == pytest.approx(2 * 0.75 / 1.75)
    assert result.evaluation.status == EvalStatusEnum.PASS_
    assert result.evaluation.details.reasoning.startswith('Original score: 4/5, Inverted score: 5/5')
    assert 'Output: Paris\n' in _prompt_of(requests[0])
    assert 'Output: Paris, France' in _prompt_of(requests[1])


@pytest.mark.asyncio
async def test_answer_accuracy_lowest_rating_scores_zero() -> None:
    ai, _ = _judge_kit(GenkitMetricType.ANSWER_ACCURACY, '1', '5')

    [result] = await ai.evaluate('genkitEval/answer_accuracy', [{'output': 'Lyon', 'reference': 'Paris'}])

    assert result.evaluation.score == 0.0
    assert result.evaluation.status == EvalStatusEnum.FAIL


@pytest.mark.asyncio
async def test_judge_given_as_action_key() -> None:
    ai, requests = _judge_kit(
        GenkitMetricType.MALICIOUSNESS, '{"reason": "Harmless", "verdict": false}', judge='/model/fake-judge'
    )

    [result] = await ai.evaluate('genkitEval/maliciousness', [{'input': 'hi', 'output': 'hello'}])

    assert result.evaluation.status == EvalStatusEnum.PASS_
    assert len(requests) == 1


@pytest.mark.asyncio
async def test_judge_metric_without_judge_fails_each_datapoint() -> None:
    ai = ActionKit(plugins=[GenkitEvaluators([MetricConfig(metric_type=GenkitMetricType.MALICIOUSNESS)])])

    [result] = await ai.evaluate('genkitEval/maliciousness', [{'input': 'hi', 'output': 'hello'}])

    assert result.evaluation.status == EvalStatusEnum.FAIL
    assert 'A judge model is required for the MALICIOUSNESS metric' in result.evaluation.error


@pytest.mark.asyncio
async def test_judge_metrics_need_a_registry() -> None:
    plugin = GenkitEvaluators([MetricConfig(metric_type='maliciousness', judge='fake-judge')])

    assert await plugin.init() == []


def test_parse_rating() -> None:
    assert parse_rating(' 3') == 3
    assert parse_rating('I would say 4 out of 5') == 4
    with pytest.raises(ValueError, match='Error parsing score'):
        parse_rating('0 or 9')


def test_extract_json_and_cosine_similarity() -> None:
    assert extract_json('Verdict:\n{"a": {"b": 1}}\nDone') == '{"a": {"b": 1}}'
    assert extract_json('no json') == 'no json'
    assert cosine_similarity([1.0, 0.0], [0.0, 2.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0
    with pytest.raises(ValueError):
        cosine_similarity([1.0], [1.0, 2.0])
