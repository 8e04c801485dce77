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

"""Metrics graded by a judge model.

The prompts are dotprompt templates in the `prompts` directory. The judge
answers with a JSON object (a single 1-5 rating for answer accuracy) that is
turned into a score. Scores above 0.5 pass, except for maliciousness where a
malicious verdict fails.
"""

import os
from typing import Any, TypeVar

from dotpromptz import Dotprompt
from dotpromptz.typing import DataArgument, PromptFunction
from pydantic import BaseModel

from actionkit.blocks.document import Document
from actionkit.blocks.embedding import embed_documents, resolve_embedder
from actionkit.core.action import ActionKind
from actionkit.core.logging import get_logger
from actionkit.core.registry import Registry
from actionkit.core.typing import (
    BaseEvalDataPoint,
    Details,
    EvalStatusEnum,
    GenerateRequest,
    GenerateResponse,
    Message,
    Part,
    Role,
    Score,
    TextPart,
)
from actionkit.plugins.evaluators.constant import (
    AnswerRelevancyResponseSchema,
    LongFormResponseSchema,
    MaliciousnessResponseSchema,
    MetricConfig,
    NliResponse,
)
from actionkit.plugins.evaluators.metrics import _stringify

logger = get_logger(__name__)

PASS_THRESHOLD = 0.5

T = TypeVar('T', bound=BaseModel)

dp = Dotprompt()
_prompt_cache: dict[str, PromptFunction] = {}


def _get_prompt_path(filename: str) -> str:
    return os.path.join(os.path.dirname(os.path.abspath(__file__)), 'prompts', filename)


async def load_prompt_file(filename: str) -> PromptFunction:
    """Compiles a template from the `prompts` directory, once per process."""
    if filename not in _prompt_cache:
        with open(_get_prompt_path(filename), encoding='utf-8') as f:
            _prompt_cache[filename] = await dp.compile(f.read())
    return _prompt_cache[filename]


async def render_text(prompt: PromptFunction, input_: dict[str, Any]) -> str:
    rendered = await prompt(data=DataArgument[dict[str, Any]](input=input_))
    result = []
    for message in rendered.messages:
        result.append(''.join(e.text for e in message.content if hasattr(e, 'text') and e.text))
    return ''.join(result)


def extract_json(text: str) -> str:
    """Returns the outermost JSON object in `text`, or `text` unchanged."""
    start = text.find('{')
    end = text.rfind('}')
    if start >= 0 and end > start:
        return text[start : end + 1]
    return text


def cosine_similarity(a: list[float], b: list[float]) -> float:
    if len(a) != len(b):
        raise ValueError('Vectors must have the same dimension')
    norm = sum(x * x for x in a) ** 0.5 * sum(y * y for y in b) ** 0.5
    if norm == 0:
        return 0.0
    return sum(x * y for x, y in zip(a, b, strict=True)) / norm


class Judge:
    """The judge model (and embedder) configured for one metric."""

    def __init__(self, registry: Registry, param: MetricConfig) -> None:
        self._registry = registry
        self._param = param

    async def generate(self, prompt_file: str, input_: dict[str, str]) -> str:
        """Renders the prompt, sends it to the judge and returns the reply text.

        Raises:
            ValueError: If no judge is configured or it cannot be found.
        """
        name = self._param.judge
        if not name:
            raise ValueError(f'A judge model is required for the {self._param.metric_type} metric')
        if name.startswith('/'):
            model = await self._registry.resolve_action_by_key(name)
        else:
            model = await self._registry.resolve_action(ActionKind.MODEL, name)
        if model is None:
            raise ValueError(f'Judge model not found: {name}')

        prompt = await render_text(await load_prompt_file(prompt_file), input_)
        request = GenerateRequest(
            messages=[Message(role=Role.USER, content=[Part(root=TextPart(text=prompt))])],
            config=self._param.judge_config,
        )
        response = (await model.arun(request)).response
        if not isinstance(response, GenerateResponse):
            response = GenerateResponse.model_validate(response)
        return response.text

    async def parse(self, prompt_file: str, input_: dict[str, str], schema: type[T]) -> T:
        """Like `generate`, validating the JSON reply against `schema`."""
        text = await self.generate(prompt_file, input_)
        return schema.model_validate_json(extract_json(text))

    @property
    def has_embedder(self) -> bool:
        return self._param.embedder is not None

    async def similarity(self, first: str, second: str) -> float:
        """Cosine similarity of the embeddings of two texts."""
        embedder = await resolve_embedder(self._registry, self._param.embedder)
        options = self._param.embedder_options
        [a] = await embed_documents(embedder, [Document.from_text(first)], options)
        [b] = await embed_documents(embedder, [Document.from_text(second)], options)
        return cosine_similarity(a.embedding, b.embedding)


def _field(value: Any, key: str) -> str:
    # Dict inputs and outputs may carry the text under a well-known key.
    if isinstance(value, dict) and value.get(key) is not None:
        value = value[key]
    return '' if value is None else _stringify(value)


def _question(datapoint: BaseEvalDataPoint) -> str:
    return _field(datapoint.input, 'question')


def _answer(datapoint: BaseEvalDataPoint) -> str:
    return _field(datapoint.output, 'answer')


def _context(datapoint: BaseEvalDataPoint) -> str:
    return '\n'.join(_stringify(c) for c in datapoint.context or [])


def _threshold_score(score: float, reasoning: str) -> Score:
    status = EvalStatusEnum.PASS_ if score > PASS_THRESHOLD else EvalStatusEnum.FAIL
    return Score(score=score, status=status, details=Details(reasoning=reasoning))


async def answer_relevancy_metric(judge: Judge, datapoint: BaseEvalDataPoint) -> Score:
    """Scores whether the output answers the input question.

    With an embedder configured, the score is the similarity between the
    question and the one the judge derives from the answer.

    Raises:
        ValueError: If the input or the output is missing.
    """
    question = _question(datapoint)
    if not question:
        raise ValueError('Input (question) was not provided')
    answer = _answer(datapoint)
    if not answer:
        raise ValueError('Output was not provided')

    verdict = await judge.parse(
        'answer_relevancy.prompt',
        {'question': question, 'answer': answer, 'context': _context(datapoint)},
        AnswerRelevancyResponseSchema,
    )
    if not verdict.answered:
        return _threshold_score(0.0, 'Answer does not address the question')
    if verdict.noncommittal:
        return _threshold_score(0.0, 'Answer is non-committal or evasive')
    if judge.has_embedder:
        return _threshold_score(await judge.similarity(question, verdict.question), 'Cosine similarity')
    return _threshold_score(1.0, 'Answer is relevant to the question')


async def faithfulness_metric(judge: Judge, datapoint: BaseEvalDataPoint) -> Score:
    """Scores the share of statements in the output supported by the context.

    The judge first splits the answer into statements, then checks each one
    against the context.

    Raises:
        ValueError: If the input, output or context is missing, or the judge
            returns no statements or verdicts.
    """
    question = _question(datapoint)
    if not question:
        raise ValueError('Input (question) was not provided')
    answer = _answer(datapoint)
    if not answer:
        raise ValueError('Output was not provided')
    context = _context(datapoint)
    if not context:
        raise ValueError('Context was not provided')

    long_form = await judge.parse(
        'faithfulness_long_form.prompt', {'question': question, 'answer': answer}, LongFormResponseSchema
    )
    if not long_form.statements:
        raise ValueError('No statements returned')

    statements = '\n'.join(f'statement: {s}' for s in long_form.statements)
    nli = await judge.parse('faithfulness_nli.prompt', {'context': context, 'statements': statements}, NliResponse)
    if not nli.responses:
        raise ValueError('Evaluator response empty')

    faithful = sum(1 for r in nli.responses if r.verdict)
    return _threshold_score(faithful / len(nli.responses), '; '.join(r.reason for r in nli.responses))


async def maliciousness_metric(judge: Judge, datapoint: BaseEvalDataPoint) -> Score:
    """Scores 1.0 when the judge finds the output malicious, which fails.

    Raises:
        ValueError: If the input or the output is missing.
    """
    input_ = _question(datapoint)
    if not input_:
        raise ValueError('Input was not provided')
    output = _answer(datapoint)
    if not output:
        raise ValueError('Output was not provided')

    verdict = await judge.parse(
        'maliciousness.prompt', {'input': input_, 'submission': output}, MaliciousnessResponseSchema
    )
    return Score(
        score=1.0 if verdict.verdict else 0.0,
        status=EvalStatusEnum.FAIL if verdict.verdict else EvalStatusEnum.PASS_,
        details=Details(reasoning=verdict.reason),
    )


def parse_rating(text: str) -> int:
    """Returns the first digit from 1 to 5 in the judge's reply.

    Raises:
        ValueError: If the reply holds no such digit.
    """
    for char in text.strip():
        if char in '12345':
            return int(char)
    raise ValueError(f'Error parsing score from response: {text}')


async def answer_accuracy_metric(judge: Judge, datapoint: BaseEvalDataPoint) -> Score:
    """Scores the agreement of output and reference.

    The judge rates the output against the reference and, swapped, the
    reference against the output. The score is the harmonic mean of both
    ratings mapped onto 0-1.

    Raises:
        ValueError: If the output or the reference is missing.
    """
    output = _answer(datapoint)
    if not output:
        raise ValueError('Output was not provided')
    if datapoint.reference is None:
        raise ValueError('Reference was not provided')
    query = _question(datapoint)
    reference = _stringify(datapoint.reference)

    original = parse_rating(
        await judge.generate('answer_accuracy.prompt', {'query': query, 'output': output, 'reference': reference})
    )
    inverted = parse_rating(
        await judge.generate('answer_accuracy.prompt', {'query': query, 'output': reference, 'reference': output})
    )

    a, b = (original - 1) / 4, (inverted - 1) / 4
    score = 0.0 if a == 0 or b == 0 else 2 * a * b / (a + b)
    await logger.adebug('Answer accuracy', original=original, inverted=inverted, score=score)
    return _threshold_score(
        score, f'Original score: {original}/5, Inverted score: {inverted}/5, Harmonic mean: {score:.2f}'
    )
