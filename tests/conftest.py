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

"""Shared fixtures."""

import pytest

from actionkit.core.action import Action, ActionKind
from actionkit.core.typing import (
    EmbedRequest,
    EmbedResponse,
    Embedding,
    GenerateRequest,
    Message,
    Role,
    TextPart,
)


def keyword_embedder(name: str = 'fake/embedder', vocabulary: tuple[str, ...] = ('cat', 'dog', 'fish')) -> Action:
    """An embedder action that counts vocabulary words in each document."""

    async def embed(request: EmbedRequest) -> EmbedResponse:
        return EmbedResponse(
            embeddings=[
                Embedding(embedding=[float(doc.text.lower().count(word)) for word in vocabulary])
                for doc in request.input
            ]
        )

    return Action(kind=ActionKind.EMBEDDER, name=name, fn=embed)


@pytest.fixture
def sample_request() -> GenerateRequest:
    return GenerateRequest(
        messages=[
            Message(role=Role.SYSTEM, content=[TextPart(text='You are an assistant')]),
            Message(role=Role.USER, content=[TextPart(text='Hello, world!')]),
        ],
    )


@pytest.fixture
def embedder() -> Action:
    return keyword_embedder()
