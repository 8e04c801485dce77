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

"""Documents: the unit of content embedded, indexed and retrieved."""

from __future__ import annotations

from typing import Any

from actionkit.core.typing import DocumentData, Embedding, Part, TextPart


class Document(DocumentData):
    """A `DocumentData` with convenience constructors."""

    @staticmethod
    def from_text(text: str, metadata: dict[str, Any] | None = None) -> Document:
        return Document(content=[Part(root=TextPart(text=text))], metadata=metadata)

    @staticmethod
    def from_document_data(data: DocumentData) -> Document:
        return Document(content=data.content, metadata=data.metadata)

    def get_embedding_documents(self, embeddings: list[Embedding]) -> list[Document]:
        """Returns one document per embedding, merging embedding metadata.

        Embedders that split a document into several embeddings report the
        slice in each embedding's metadata; the returned documents carry it
        so every vector can be stored with its own metadata.
        """
        if len(embeddings) == 1:
            return [self]
        documents = []
        for embedding in embeddings:
            metadata = dict(self.metadata or {})
            metadata.update(embedding.metadata or {})
            documents.append(Document(content=self.content, metadata=metadata))
        return documents
