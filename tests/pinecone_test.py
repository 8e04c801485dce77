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

"""Tests for the Pinecone plugin."""

import hashlib
import os
from unittest.mock import MagicMock, patch

import pytest

from actionkit import ActionKit
from actionkit.core.action import Action, ActionKind
from actionkit.core.error import ActionKitError
from actionkit.core.typing import DocumentData, IndexerRequest, RetrieverRequest, TextPart
from actionkit.plugins.pinecone import (
    Pinecone,
    PineconeIndexConfig,
    PineconeMetric,
    PineconeVectorStore,
    pinecone_indexer_ref,
    pinecone_retriever_ref,
)


def _client(has_index: bool = True) -> MagicMock:
    client = MagicMock()
    client.has_index.return_value = has_index
    client.Index.return_value.query.return_value = {
        'matches': [
            {'id': 'a', 'score': 0.9, 'metadata': {'text': 'cats purr', 'lang': 'en'}},
            {'id': 'b', 'score': 0.4, 'metadata': {'text': 'dogs bark'}},
        ]
    }
    return client


def _doc(text: str, metadata: dict | None = None) -> DocumentData:
    return DocumentData(content=[TextPart(text=text)], metadata=metadata)


def test_requires_api_key_or_client() -> None:
    with patch.dict(os.environ, {}, clear=True):
        with pytest.raises(ActionKitError, match='apiKey is required'):
            Pinecone(indexes=[PineconeIndexConfig(index_name='docs', embedder='fake/embedder')])


def test_requires_an_index() -> None:
    with pytest.raises(ActionKitError, match='At least one index'):
        Pinecone(indexes=[], api_key='k')


def test_refs() -> None:
    assert pinecone_retriever_ref('docs') == 'pinecone/docs'
    assert pinecone_indexer_ref('docs', 'tenant-a') == 'pinecone/docs/tenant-a'


def test_missing_index_is_not_created_by_default(embedder: Action) -> None:
    store = PineconeVectorStore(_client(has_index=False), PineconeIndexConfig('docs', 'fake/embedder'), embedder)

    with pytest.raises(ActionKitError) as exc_info:
        store.initialize()

    assert exc_info.value.status == 'FAILED_PRECONDITION'


def test_missing_index_is_created_when_configured(embedder: Action) -> None:
    client = _client(has_index=False)
    config = PineconeIndexConfig(
        'docs', 'fake/embedder', dimension=3, metric=PineconeMetric.DOTPRODUCT, create_index_if_not_exists=True
    )

    PineconeVectorStore(client, config, embedder).initialize()

    kwargs = client.create_index.call_args.kwargs
    assert kwargs['name'] == 'docs'
    assert kwargs['dimension'] == 3
    assert kwargs['metric'] == 'dotproduct'
    client.Index.assert_called_once_with('docs')


@pytest.mark.asyncio
async def test_retrieve(embedder: Action) -> None:
    """Matches become documents with their score in the metadata."""
    client = _client()
    store = PineconeVectorStore(client, PineconeIndexConfig('docs', 'fake/embedder', namespace='ns'), embedder)

    response = await store.retrieve(RetrieverRequest(query=_doc('cat'), options={'k': 2, 'filter': {'lang': 'en'}}))

    kwargs = client.Index.return_value.query.call_args.kwargs
    assert kwargs['vector'] == [1.0, 0.0, 0.0]
    assert kwargs['top_k'] == 2
    assert kwargs['namespace'] == 'ns'
    assert kwargs['filter'] == {'lang': 'en'}
    assert [d.text for d in response.documents] == ['cats purr', 'dogs bark']
    assert response.documents[0].metadata == {'lang': 'en', '_score': 0.9}


@pytest.mark.asyncio
async def test_retrieve_rejects_empty_query(embedder: Action) -> None:
    store = PineconeVectorStore(_client(), PineconeIndexConfig('docs', 'fake/embedder'), embedder)

    with pytest.raises(ActionKitError) as exc_info:
        await store.retrieve(RetrieverRequest(query=_doc('   ')))

    assert exc_info.value.status == 'INVALID_ARGUMENT'


@pytest.mark.asyncio
async def test_index(embedder: Action) -> None:
    """Vectors use the id metadata or the MD5 of the text."""
    client = _client()
    config = PineconeIndexConfig('docs', 'fake/embedder', additional_metadata={'source': 'test'})
    store = PineconeVectorStore(client, config, embedder)

    await store.index(
        IndexerRequest(
            documents=[_doc('a cat'), _doc('a dog', {'id': 'dog-1', 'tags': {'size': 'big'}, 'skip': None})],
            options={'namespace': 'pets'},
        )
    )

    kwargs = client.Index.return_value.upsert.call_args.kwargs
    first, second = kwargs['vectors']
    assert kwargs['namespace'] == 'pets'
    assert first['id'] == hashlib.md5(b'a cat').hexdigest()
    assert first['values'] == [1.0, 0.0, 0.0]
    assert first['metadata'] == {'source': 'test', 'text': 'a cat'}
    assert second['id'] == 'dog-1'
    assert second['metadata'] == {'tags': '{"size": "big"}', 'source': 'test', 'text': 'a dog'}


@pytest.mark.asyncio
async def test_index_nothing(embedder: Action) -> None:
    client = _client()
    store = PineconeVectorStore(client, PineconeIndexConfig('docs', 'fake/embedder'), embedder)

    await store.index(IndexerRequest(documents=[]))

    client.Index.return_value.upsert.assert_not_called()


@pytest.mark.asyncio
async def test_plugin_through_actionkit(embedder: Action) -> None:
    """The plugin resolves its embedder and registers one store per index."""
    client = _client()
    plugin = Pinecone(
        indexes=[
            PineconeIndexConfig(index_name='docs', embedder='fake/embedder'),
            PineconeIndexConfig(index_name='docs', embedder='fake/embedder', namespace='tenant-a'),
        ],
        client=client,
    )
    ai = ActionKit(plugins=[plugin])
    ai.registry.register_action_instance(embedder)

    documents = await ai.retrieve('pinecone/docs', 'cat')

    assert documents[0].text == 'cats purr'
    assert ai.registry.lookup_action(ActionKind.INDEXER, 'pinecone/docs/tenant-a') is not None
    assert plugin.get_vector_store('docs', 'tenant-a') is not None
    assert len(await plugin.list_actions()) == 4


@pytest.mark.asyncio
async def test_plugin_without_embedder() -> None:
    plugin = Pinecone(indexes=[PineconeIndexConfig(index_name='docs', embedder='fake/missing')], client=_client())
    ai = ActionKit(plugins=[plugin])

    with pytest.raises(ActionKitError) as exc_info:
        await ai.retrieve('pinecone/docs', 'cat')

    assert exc_info.value.status == 'NOT_FOUND'
