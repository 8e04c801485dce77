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

"""Tests for the Firebase plugin."""

from unittest.mock import MagicMock

import pytest
from google.cloud.firestore_v1.base_vector_query import DistanceMeasure

from actionkit import ActionKit
from actionkit.core.action import Action, ActionKind
from actionkit.core.error import ActionKitError
from actionkit.core.typing import DocumentData, IndexerRequest, RetrieverRequest, TextPart
from actionkit.plugins.firebase import (
    Firebase,
    FirebasePluginConfig,
    FirestoreRetrieverConfig,
    FirestoreVectorStore,
)


def _snapshot(doc_id: str, data: dict) -> MagicMock:
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.to_dict.return_value = data
    return snapshot


def _client(*snapshots: MagicMock) -> MagicMock:
    client = MagicMock()
    collection = client.collection.return_value
    collection.find_nearest.return_value.get.return_value = list(snapshots)
    collection.where.return_value = collection
    return client


def _config(**values) -> FirestoreRetrieverConfig:
    return FirestoreRetrieverConfig(name='recipes', collection='recipes', embedder='fake/embedder', **values)


def _query(text: str, options=None) -> RetrieverRequest:
    return RetrieverRequest(query=DocumentData(content=[TextPart(text=text)]), options=options)


def test_config_requires_embedder() -> None:
    with pytest.raises(ValueError, match='Either embedder or embedderName'):
        FirestoreRetrieverConfig(name='recipes', collection='recipes')


def test_config_requires_collection() -> None:
    with pytest.raises(ValueError, match='collection name'):
        FirestoreRetrieverConfig(name='recipes', collection='', embedder='fake/embedder')


@pytest.mark.asyncio
async def test_retrieve(embedder: Action) -> None:
    """Non-vector fields become metadata along with the document id."""
    client = _client(_snapshot('r1', {'content': 'cat food', 'embedding': [1.0, 0.0, 0.0], 'cuisine': 'pet'}))
    store = FirestoreVectorStore(client, _config(), embedder)

    response = await store.retrieve(_query('cat', {'k': 2, 'distanceMeasure': 'EUCLIDEAN'}))

    client.collection.assert_called_with('recipes')
    kwargs = client.collection.return_value.find_nearest.call_args.kwargs
    assert kwargs['vector_field'] == 'embedding'
    assert kwargs['limit'] == 2
    assert kwargs['distance_measure'] == DistanceMeasure.EUCLIDEAN
    [document] = response.documents
    assert document.text == 'cat food'
    assert document.metadata == {'cuisine': 'pet', 'id': 'r1'}


@pytest.mark.asyncio
async def test_retrieve_with_filters_and_fields(embedder: Action) -> None:
    """Equality filters are applied and only listed metadata fields kept."""
    client = _client(_snapshot('r1', {'content': 'fish pie', 'cuisine': 'uk', 'secret': 'x', 'dist': 0.1}))
    store = FirestoreVectorStore(
        client, _config(metadata_fields=['cuisine'], distance_result_field='dist'), embedder
    )

    response = await store.retrieve(_query('fish', {'where': {'cuisine': 'uk'}}))

    client.collection.return_value.where.assert_called_once()
    assert response.documents[0].metadata == {'cuisine': 'uk', 'dist': 0.1, 'id': 'r1'}


@pytest.mark.asyncio
async def test_content_extractor(embedder: Action) -> None:
    client = _client(_snapshot('r1', {'title': 'Soup', 'body': 'Hot'}))
    config = _config(content_field=lambda snap: [{'text': f"{snap.to_dict()['title']}: {snap.to_dict()['body']}"}])
    store = FirestoreVectorStore(client, config, embedder)

    response = await store.retrieve(_query('soup'))

    assert response.documents[0].text == 'Soup: Hot'


@pytest.mark.asyncio
async def test_retrieve_rejects_empty_query(embedder: Action) -> None:
    store = FirestoreVectorStore(_client(), _config(), embedder)

    with pytest.raises(ActionKitError) as exc_info:
        await store.retrieve(_query(''))

    assert exc_info.value.status == 'INVALID_ARGUMENT'


@pytest.mark.asyncio
async def test_index(embedder: Action) -> None:
    """Documents are written in a single batch with content and metadata."""
    client = _client()
    store = FirestoreVectorStore(client, _config(), embedder)
    documents = [
        DocumentData(content=[TextPart(text='dog treats')], metadata={'cuisine': 'pet'}),
        DocumentData(content=[TextPart(text='fish fingers')]),
    ]

    await store.index(IndexerRequest(documents=documents))

    batch = client.batch.return_value
    assert batch.set.call_count == 2
    first = batch.set.call_args_list[0].args[1]
    assert first['content'] == 'dog treats'
    assert first['cuisine'] == 'pet'
    assert 'embedding' in first
    batch.commit.assert_called_once()


@pytest.mark.asyncio
async def test_plugin_requires_registry() -> None:
    with pytest.raises(ActionKitError) as exc_info:
        await Firebase(FirebasePluginConfig(firestore_client=MagicMock())).init()

    assert exc_info.value.status == 'FAILED_PRECONDITION'


@pytest.mark.asyncio
async def test_plugin_through_actionkit(embedder: Action) -> None:
    client = _client(_snapshot('r1', {'content': 'cat food'}))
    plugin = Firebase(FirebasePluginConfig(firestore_client=client, retrievers=[_config()]))
    ai = ActionKit(plugins=[plugin])
    ai.registry.register_action_instance(embedder)

    documents = await ai.retrieve('firebase/recipes', 'cat')
    listed = await plugin.list_actions()

    assert documents[0].text == 'cat food'
    assert ai.registry.lookup_action(ActionKind.INDEXER, 'firebase/recipes') is not None
    assert plugin.get_vector_store('recipes') is not None
    assert listed[0].metadata['retriever']['label'] == 'Firestore - recipes'
