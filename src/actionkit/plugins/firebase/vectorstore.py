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

"""Vector similarity search over a Firestore collection."""

from typing import Any

from google.cloud.firestore_v1 import DocumentSnapshot
from google.cloud.firestore_v1.base_query import FieldFilter
from google.cloud.firestore_v1.base_vector_query import DistanceMeasure
from google.cloud.firestore_v1.vector import Vector

from actionkit.blocks.document import Document
from actionkit.blocks.embedding import embed_documents
from actionkit.core.action import Action
from actionkit.core.error import ActionKitError
from actionkit.core.logging import get_logger
from actionkit.core.typing import IndexerRequest, RetrieverRequest, RetrieverResponse
from actionkit.plugins.firebase.config import FirestoreRetrieverConfig

logger = get_logger(__name__)


class FirestoreVectorStore:
    """Retrieves and indexes documents of one Firestore collection.

    Attributes:
        config: The store configuration.
    """

    def __init__(self, firestore_client: Any, config: FirestoreRetrieverConfig, embedder: Action) -> None:
        self.firestore_client = firestore_client
        self.config = config
        self._embedder = embedder

    def _to_content(self, doc_snapshot: DocumentSnapshot) -> list[dict[str, Any]]:
        content_field = self.config.content_field
        if callable(content_field):
            return content_field(doc_snapshot)
        content = (doc_snapshot.to_dict() or {}).get(content_field)
        return [{'text': content}] if content else []

    def _to_metadata(self, doc_snapshot: DocumentSnapshot) -> dict[str, Any]:
        metadata_fields = self.config.metadata_fields
        data = doc_snapshot.to_dict() or {}
        if callable(metadata_fields):
            metadata = metadata_fields(doc_snapshot)
        elif metadata_fields:
            metadata = {field: data[field] for field in metadata_fields if data.get(field) is not None}
            if self.config.distance_result_field in data:
                metadata[self.config.distance_result_field] = data[self.config.distance_result_field]
        else:
            excluded = {self.config.vector_field}
            if isinstance(self.config.content_field, str):
                excluded.add(self.config.content_field)
            metadata = {k: v for k, v in data.items() if k not in excluded}
        metadata['id'] = doc_snapshot.id
        return metadata

    def _to_document(self, doc_snapshot: DocumentSnapshot) -> Document:
        return Document.model_validate({
            'content': self._to_content(doc_snapshot),
            'metadata': self._to_metadata(doc_snapshot),
        })

    async def retrieve(self, request: RetrieverRequest) -> RetrieverResponse:
        """Returns the documents nearest to the query.

        Options (a dict) may override `limit` (or `k`), `collection`,
        `distanceMeasure` and `distanceThreshold`, and add equality filters
        under `where`.

        Raises:
            ActionKitError: If the query has no text or nothing was embedded.
        """
        query = Document.from_document_data(request.query)
        if not query.text.strip():
            raise ActionKitError(
                status='INVALID_ARGUMENT',
                message='Query document has no text content. Please provide a non-empty query.',
            )
        embeddings = await embed_documents(self._embedder, [query], self.config.embedder_options)
        if not embeddings:
            raise ActionKitError(message='Embedder returned no embeddings')

        options = request.options if isinstance(request.options, dict) else {}
        limit = int(options.get('k', options.get('limit', self.config.limit)))
        measure = options.get('distanceMeasure')
        distance_measure = DistanceMeasure[measure] if measure else self.config.distance_measure

        firestore_query = self.firestore_client.collection(options.get('collection') or self.config.collection)
        for field, value in (options.get('where') or {}).items():
            firestore_query = firestore_query.where(filter=FieldFilter(field, '==', value))

        vector_query = firestore_query.find_nearest(
            vector_field=self.config.vector_field,
            query_vector=Vector(embeddings[0].embedding),
            distance_measure=distance_measure,
            limit=limit,
            distance_result_field=self.config.distance_result_field,
            distance_threshold=options.get('distanceThreshold', self.config.distance_threshold),
        )
        documents = [self._to_document(doc) for doc in vector_query.get()]
        logger.debug('Retrieved documents', collection=self.config.collection, count=len(documents))
        return RetrieverResponse(documents=documents)

    async def index(self, request: IndexerRequest) -> None:
        """Embeds documents and writes them in one batch.

        Raises:
            ActionKitError: If the embedder returns one embedding count for a
                different number of documents.
        """
        if not request.documents:
            return
        embeddings = await embed_documents(self._embedder, request.documents, self.config.embedder_options)
        if len(embeddings) != len(request.documents):
            raise ActionKitError(
                message=f'Embedding count mismatch: expected {len(request.documents)}, got {len(embeddings)}'
            )

        content_key = self.config.content_field if isinstance(self.config.content_field, str) else 'content'
        collection = self.firestore_client.collection(self.config.collection)
        batch = self.firestore_client.batch()
        for doc, embedding in zip(request.documents, embeddings, strict=True):
            data = {
                content_key: doc.text,
                self.config.vector_field: Vector(embedding.embedding),
                **(doc.metadata or {}),
            }
            batch.set(collection.document(), data)
        batch.commit()
        logger.info('Indexed documents', collection=self.config.collection, count=len(request.documents))
