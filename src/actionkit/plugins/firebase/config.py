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

"""Configuration of the Firebase plugin and its Firestore vector stores."""

from collections.abc import Callable
from typing import Any

from google.cloud.firestore_v1 import DocumentSnapshot
from google.cloud.firestore_v1.base_vector_query import DistanceMeasure
from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_DATABASE_ID = '(default)'

ContentExtractorFn = Callable[[DocumentSnapshot], list[dict[str, Any]]]
MetadataTransformFn = Callable[[DocumentSnapshot], dict[str, Any]]


class FirestoreRetrieverConfig(BaseModel):
    """A Firestore collection exposed as a retriever and an indexer.

    Attributes:
        name: Name of the store; actions are registered as `firebase/{name}`.
        label: Display label.
        collection: Collection queried and written to.
        vector_field: Field holding the embedding vector.
        content_field: Field holding the document text, or a function that
            extracts content parts from a snapshot.
        distance_measure: Distance used by `find_nearest`.
        distance_threshold: Only return documents within this distance.
        distance_result_field: Field in which Firestore reports the distance.
        embedder: Embedder action name.
        embedder_options: Options passed to the embedder.
        metadata_fields: Fields copied into document metadata, or a function
            building the metadata; all non-vector fields when omitted.
        limit: Default number of documents returned.
        embedder_dimension: Vector dimension of the embedder.
    """

    model_config = ConfigDict(extra='forbid', arbitrary_types_allowed=True)

    name: str
    label: str | None = None
    collection: str
    vector_field: str = 'embedding'
    content_field: str | ContentExtractorFn = 'content'
    distance_measure: DistanceMeasure = DistanceMeasure.COSINE
    distance_threshold: float | None = None
    distance_result_field: str | None = None
    embedder: str | None = None
    embedder_options: dict[str, Any] | None = None
    metadata_fields: list[str] | MetadataTransformFn | None = None
    limit: int = Field(default=10, gt=0)
    embedder_dimension: int = 768

    @model_validator(mode='after')
    def _check_required(self) -> 'FirestoreRetrieverConfig':
        if not self.name:
            raise ValueError('Firestore retriever config must include a name.')
        if not self.collection:
            raise ValueError('Firestore retriever config must include a collection name.')
        if not self.vector_field:
            raise ValueError('Firestore retriever config must include a vector field name.')
        if not self.content_field:
            raise ValueError('Firestore retriever config must include a content field or extractor.')
        if not self.embedder:
            raise ValueError('Either embedder or embedderName must be specified')
        return self


class FirebasePluginConfig(BaseModel):
    """Firebase project settings.

    Attributes:
        project_id: Google Cloud project; the client default when omitted.
        database_id: Firestore database id.
        firestore_client: A preconfigured `google.cloud.firestore.Client`.
        retrievers: Vector stores to register.
    """

    model_config = ConfigDict(extra='forbid', arbitrary_types_allowed=True)

    project_id: str | None = None
    database_id: str = DEFAULT_DATABASE_ID
    firestore_client: Any | None = None
    retrievers: list[FirestoreRetrieverConfig] = Field(default_factory=list)
