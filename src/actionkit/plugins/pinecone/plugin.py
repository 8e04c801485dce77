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

"""Pinecone vector store plugin.

Each configured index (optionally narrowed to a namespace) is exposed as a
retriever and an indexer, both named `pinecone/{index}` or
`pinecone/{index}/{namespace}`. Documents are embedded with an embedder
resolved from the registry when the plugin initializes.
"""

from __future__ import annotations

import hashlib
import json
import os
import sys
from dataclasses import dataclass, field
from typing import Any

from pinecone import Pinecone as PineconeClient, ServerlessSpec
from pydantic import BaseModel, Field

from actionkit.blocks.document import Document
from actionkit.blocks.embedding import embed_documents, resolve_embedder
from actionkit.blocks.retriever import indexer_action_metadata, retriever_action_metadata
from actionkit.core.action import Action, ActionKind, ActionMetadata
from actionkit.core.error import ActionKitError
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin
from actionkit.core.registry import Registry
from actionkit.core.typing import DocumentData, IndexerRequest, RetrieverRequest, RetrieverResponse

if sys.version_info < (3, 11):
    from strenum import StrEnum
else:
    from enum import StrEnum

logger = get_logger(__name__)

PINECONE_PLUGIN_NAME = 'pinecone'
API_KEY_ENV = 'PINECONE_API_KEY'
SCORE_KEY = '_score'
DEFAULT_K = 10
MAX_K = 1000
UPSERT_BATCH_SIZE = 100


class PineconeMetric(StrEnum):
    COSINE = 'cosine'
    EUCLIDEAN = 'euclidean'
    DOTPRODUCT = 'dotproduct'


class PineconeCloud(StrEnum):
    AWS = 'aws'
    GCP = 'gcp'
    AZURE = 'azure'


class PineconeRetrieverOptions(BaseModel):
    """Options for Pinecone retriever queries.

    Attributes:
        k: Number of results to return (default: 10, max: 1000).
        namespace: Overrides the namespace of the index configuration.
        filter: Metadata filter for queries.
    """

    k: int = Field(default=DEFAULT_K, gt=0, le=MAX_K, description='Number of results to return')
    namespace: str | None = Field(default=None, description='Pinecone namespace')
    filter: dict[str, Any] | None = Field(default=None, description='Metadata filter')


@dataclass
class PineconeIndexConfig:
    """Configuration for a Pinecone index.

    Attributes:
        index_name: Name of the Pinecone index.
        embedder: Embedder action name (e.g., 'openai/text-embedding-3-small').
        embedder_options: Optional embedder-specific configuration.
        namespace: Namespace inside the index; empty for the default one.
        dimension: Vector dimension used when creating the index.
        metric: Distance metric used when creating the index.
        cloud: Cloud of the serverless index.
        region: Region of the serverless index.
        create_index_if_not_exists: Create a missing index on init instead
            of failing.
        text_field: Metadata field holding the document text.
        additional_metadata: Metadata stored with every indexed vector.
    """

    index_name: str
    embedder: str
    embedder_options: dict[str, Any] | None = None
    namespace: str = ''
    dimension: int = 768
    metric: PineconeMetric = PineconeMetric.COSINE
    cloud: PineconeCloud = PineconeCloud.AWS
    region: str = 'us-east-1'
    create_index_if_not_exists: bool = False
    text_field: str = 'text'
    additional_metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def store_key(self) -> str:
        return f'{self.index_name}/{self.namespace}' if self.namespace else self.index_name


def _md5_hash(content: str) -> str:
    """Generate MD5 hash of content for document ID."""
    return hashlib.md5(content.encode('utf-8')).hexdigest()


def _metadata_value(value: Any) -> Any:
    # Pinecone metadata holds strings, numbers, booleans and lists of strings.
    if isinstance(value, str | int | float | bool):
        return value
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return value
    return json.dumps(value)


class PineconeVectorStore:
    """Retriever and indexer of one Pinecone index and namespace."""

    def __init__(self, client: PineconeClient, config: PineconeIndexConfig, embedder: Action) -> None:
        self._client = client
        self._config = config
        self._embedder = embedder
        self._index = None

    @property
    def config(self) -> PineconeIndexConfig:
        return self._config

    def initialize(self) -> None:
        """Connects to the index, creating it first when configured to.

        Raises:
            ActionKitError: If the index is missing and may not be created.
        """
        if self._index is not None:
            return
        name = self._config.index_name
        if not self._client.has_index(name):
            if not self._config.create_index_if_not_exists:
                raise ActionKitError(
                    status='FAILED_PRECONDITION',
                    message=f'Index {name} does not exist and create_index_if_not_exists is false',
                )
            logger.info('Creating Pinecone index', index=name, dimension=self._config.dimension)
            self._client.create_index(
                name=name,
                dimension=self._config.dimension,
                metric=str(self._config.metric),
                spec=ServerlessSpec(cloud=str(self._config.cloud), region=self._config.region),
            )
        self._index = self._client.Index(name)
        logger.info('Pinecone vector store initialized', index=name)

    def _get_index(self) -> Any:
        self.initialize()
        return self._index

    async def retrieve(self, request: RetrieverRequest) -> RetrieverResponse:
        """Returns the `k` documents closest to the query.

        Raises:
            ActionKitError: If the query has no text.
        """
        query = Document.from_document_data(request.query)
        if not query.text.strip():
            raise ActionKitError(status='INVALID_ARGUMENT', message='Query document has no text content')

        options = PineconeRetrieverOptions.model_validate(request.options or {})
        embeddings = await embed_documents(self._embedder, [query], self._config.embedder_options)
        if not embeddings:
            raise ActionKitError(message='Embedder returned no embeddings for query')

        results = self._get_index().query(
            vector=embeddings[0].embedding,
            top_k=options.k,
            namespace=options.namespace if options.namespace is not None else self._config.namespace,
            filter=options.filter,
            include_values=False,
            include_metadata=True,
        )

        documents: list[DocumentData] = []
        for match in results.get('matches', []):
            metadata = dict(match.get('metadata') or {})
            content = str(metadata.pop(self._config.text_field, ''))
            metadata[SCORE_KEY] = match.get('score', 0.0)
            documents.append(Document.from_text(content, metadata))
        logger.debug('Retrieved documents', index=self._config.index_name, count=len(documents))
        return RetrieverResponse(documents=documents)

    async def index(self, request: IndexerRequest) -> None:
        """Embeds and upserts documents into the index.

        Vector ids come from the document's `id` metadata, else from the MD5
        hash of its text.
        """
        if not request.documents:
            logger.warning('No documents to index')
            return

        docs = [Document.from_document_data(d) for d in request.documents]
        vectors: list[dict[str, Any]] = []
        for doc in docs:
            embeddings = await embed_documents(self._embedder, [doc], self._config.embedder_options)
            for emb_doc, embedding in zip(doc.get_embedding_documents(embeddings), embeddings, strict=True):
                content = emb_doc.text
                doc_metadata = emb_doc.metadata or {}
                metadata = {k: _metadata_value(v) for k, v in doc_metadata.items() if k != 'id' and v is not None}
                metadata.update({k: _metadata_value(v) for k, v in self._config.additional_metadata.items()})
                metadata[self._config.text_field] = content
                vectors.append({
                    'id': str(doc_metadata['id']) if doc_metadata.get('id') else _md5_hash(content),
                    'values': embedding.embedding,
                    'metadata': metadata,
                })

        namespace = self._config.namespace
        if isinstance(request.options, dict) and request.options.get('namespace'):
            namespace = request.options['namespace']
        index = self._get_index()
        for start in range(0, len(vectors), UPSERT_BATCH_SIZE):
            index.upsert(vectors=vectors[start : start + UPSERT_BATCH_SIZE], namespace=namespace)
        logger.info('Indexed documents', index=self._config.index_name, count=len(vectors))


class Pinecone(Plugin):
    """Pinecone vector store plugin for ActionKit.

    Example:
        ```python
        ai = ActionKit(
            plugins=[
                OpenAI(),
                Pinecone(
                    indexes=[
                        PineconeIndexConfig(
                            index_name='my-index',
                            embedder='openai/text-embedding-3-small',
                        )
                    ]
                ),
            ]
        )
        ```
    """

    name = PINECONE_PLUGIN_NAME

    def __init__(
        self,
        indexes: list[PineconeIndexConfig] | None = None,
        api_key: str | None = None,
        client: PineconeClient | None = None,
    ) -> None:
        """Initialize the Pinecone plugin.

        Args:
            indexes: List of index configurations.
            api_key: Pinecone API key; defaults to `PINECONE_API_KEY`.
            client: A preconfigured Pinecone client; `api_key` is then unused.

        Raises:
            ActionKitError: If no API key or no index is configured.
        """
        api_key = api_key or os.getenv(API_KEY_ENV)
        if client is None and not api_key:
            raise ActionKitError(
                status='INVALID_ARGUMENT',
                message='apiKey is required when not providing an external Pinecone client',
            )
        if not indexes:
            raise ActionKitError(status='INVALID_ARGUMENT', message='At least one index configuration is required')
        self._indexes = list(indexes)
        self._api_key = api_key
        self._client = client
        self._stores: dict[str, PineconeVectorStore] = {}

    @property
    def client(self) -> PineconeClient:
        if self._client is None:
            self._client = PineconeClient(api_key=self._api_key)
        return self._client

    def get_vector_store(self, index_name: str, namespace: str | None = None) -> PineconeVectorStore | None:
        key = f'{index_name}/{namespace}' if namespace else index_name
        return self._stores.get(key)

    async def init(self, registry: Registry | None = None) -> list[Action]:
        """Resolves embedders and connects every configured index.

        Raises:
            ActionKitError: If there is no registry or an embedder is missing.
        """
        if registry is None:
            raise ActionKitError(
                status='FAILED_PRECONDITION',
                message='The pinecone plugin needs a registry to resolve embedders.',
            )
        actions = []
        for config in self._indexes:
            embedder = await resolve_embedder(registry, config.embedder)
            store = PineconeVectorStore(self.client, config, embedder)
            store.initialize()
            self._stores[config.store_key] = store

            name = pinecone_retriever_ref(config.index_name, config.namespace)
            label = f'Pinecone - {config.store_key}'
            actions.append(
                Action(
                    kind=ActionKind.RETRIEVER,
                    name=name,
                    fn=store.retrieve,
                    metadata=retriever_action_metadata(name, label, PineconeRetrieverOptions).metadata,
                )
            )
            actions.append(
                Action(
                    kind=ActionKind.INDEXER,
                    name=name,
                    fn=store.index,
                    metadata=indexer_action_metadata(name, label).metadata,
                )
            )
            await logger.ainfo('Registered Pinecone retriever and indexer', name=name)
        return actions

    async def list_actions(self) -> list[ActionMetadata]:
        metadata_list: list[ActionMetadata] = []
        for config in self._indexes:
            name = pinecone_retriever_ref(config.index_name, config.namespace)
            label = f'Pinecone - {config.store_key}'
            metadata_list.append(retriever_action_metadata(name, label, PineconeRetrieverOptions))
            metadata_list.append(indexer_action_metadata(name, label))
        return metadata_list


def pinecone_retriever_ref(index_name: str, namespace: str | None = None) -> str:
    """Returns the retriever name of a Pinecone index (and namespace)."""
    key = f'{index_name}/{namespace}' if namespace else index_name
    return f'{PINECONE_PLUGIN_NAME}/{key}'


def pinecone_indexer_ref(index_name: str, namespace: str | None = None) -> str:
    """Returns the indexer name of a Pinecone index (and namespace)."""
    return pinecone_retriever_ref(index_name, namespace)
