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

"""File-backed vector store used by the dev-local-vectorstore plugin.

Embeddings are kept in a JSON file, `__db_{index_name}.json`, read and
written with ``aiofiles`` so the event loop is never blocked.
"""

import json
import os
from functools import cached_property
from hashlib import md5
from typing import Any

import aiofiles
import aiofiles.os
from pydantic import BaseModel, Field

from actionkit.blocks.document import Document
from actionkit.blocks.embedding import embed_documents
from actionkit.codec import dump_json
from actionkit.core.action import Action
from actionkit.core.error import ActionKitError
from actionkit.core.typing import DocumentData, Embedding, IndexerRequest, RetrieverRequest, RetrieverResponse

DEFAULT_LIMIT = 3


class DbValue(BaseModel):
    """One stored document with its embedding."""

    doc: DocumentData
    embedding: Embedding


class ScoredDocument(BaseModel):
    score: float
    document: DocumentData


class RetrieverOptionsSchema(BaseModel):
    """Schema for retriever options."""

    limit: int | None = Field(title='Number of documents to retrieve', default=None)


class LocalVectorStore:
    """Retriever and indexer of one local index file.

    NOT INTENDED FOR USE IN PRODUCTION
    """

    _LOCAL_FILESTORE_TEMPLATE = '__db_{index_name}.json'

    def __init__(
        self,
        index_name: str,
        embedder: Action,
        embedder_options: dict[str, Any] | None = None,
        directory: str | None = None,
    ) -> None:
        self.index_name = index_name
        self.embedder = embedder
        self.embedder_options = embedder_options
        self.directory = directory

    @cached_property
    def index_file_name(self) -> str:
        """Path of the JSON file holding the index."""
        file_name = self._LOCAL_FILESTORE_TEMPLATE.format(index_name=self.index_name)
        return os.path.join(self.directory, file_name) if self.directory else file_name

    async def _load_filestore(self) -> dict[str, DbValue]:
        data: dict[str, Any] = {}
        if await aiofiles.os.path.exists(self.index_file_name):
            async with aiofiles.open(self.index_file_name, encoding='utf-8') as f:
                data = json.loads(await f.read())
        return {k: DbValue.model_validate(v) for k, v in data.items()}

    async def _dump_filestore(self, data: dict[str, DbValue]) -> None:
        serialized = {k: v.model_dump(exclude_none=True, by_alias=True) for k, v in data.items()}
        async with aiofiles.open(self.index_file_name, 'w', encoding='utf-8') as f:
            await f.write(dump_json(serialized, indent=2))

    async def retrieve(self, request: RetrieverRequest) -> RetrieverResponse:
        """Returns the stored documents most similar to the query.

        The number of documents defaults to 3 and can be set with the
        `limit` option.
        """
        query = Document.from_document_data(request.query)
        embeddings = await embed_documents(self.embedder, [query], self.embedder_options)
        if not embeddings:
            raise ActionKitError(message='Embedder returned no embeddings for query')

        limit = DEFAULT_LIMIT
        if request.options:
            options = RetrieverOptionsSchema.model_validate(request.options)
            if options.limit is not None:
                limit = options.limit

        scored = await self._get_closest_documents(limit, embeddings[0])
        return RetrieverResponse(documents=[d.document for d in scored])

    async def _get_closest_documents(self, k: int, query_embedding: Embedding) -> list[ScoredDocument]:
        db = await self._load_filestore()
        scored_documents = [
            ScoredDocument(
                score=self.cosine_similarity(query_embedding.embedding, value.embedding.embedding),
                document=value.doc,
            )
            for value in db.values()
        ]
        scored_documents.sort(key=lambda d: d.score, reverse=True)
        return scored_documents[:k]

    async def index(self, request: IndexerRequest) -> None:
        """Embeds documents and appends them to the index file.

        Documents already in the index are skipped.
        """
        data = await self._load_filestore()
        for doc_data in request.documents:
            document = Document.from_document_data(doc_data)
            embeddings = await embed_documents(self.embedder, [document], self.embedder_options)
            for doc, embedding in zip(document.get_embedding_documents(embeddings), embeddings, strict=True):
                doc_id = md5(dump_json(doc).encode('utf-8')).hexdigest()
                if doc_id not in data:
                    data[doc_id] = DbValue(doc=doc, embedding=embedding)
        await self._dump_filestore(data)

    @classmethod
    def cosine_similarity(cls, a: list[float], b: list[float]) -> float:
        """Calculate cosine similarity between two vectors."""
        norm = (cls.dot(a, a) ** 0.5) * (cls.dot(b, b) ** 0.5)
        if norm == 0:
            return 0.0
        return cls.dot(a, b) / norm

    @staticmethod
    def dot(a: list[float], b: list[float]) -> float:
        """Calculate dot product of two vectors."""
        return sum(av * bv for av, bv in zip(a, b, strict=False))
