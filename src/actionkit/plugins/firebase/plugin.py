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

"""Firebase plugin: Firestore vector stores for ActionKit."""

from __future__ import annotations

from functools import cached_property
from typing import Any

from google.cloud import firestore

from actionkit.blocks.embedding import resolve_embedder
from actionkit.blocks.retriever import indexer_action_metadata, retriever_action_metadata
from actionkit.core.action import Action, ActionKind, ActionMetadata
from actionkit.core.error import ActionKitError
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin
from actionkit.core.registry import Registry
from actionkit.plugins.firebase.config import FirebasePluginConfig, FirestoreRetrieverConfig
from actionkit.plugins.firebase.vectorstore import FirestoreVectorStore

FIREBASE_PLUGIN_NAME = 'firebase'
logger = get_logger(__name__)


def firestore_action_name(name: str) -> str:
    return f'{FIREBASE_PLUGIN_NAME}/{name}'


class Firebase(Plugin):
    """Registers a retriever and an indexer per configured Firestore store.

    Example:
        ```python
        ai = ActionKit(
            plugins=[
                OpenAI(),
                Firebase(
                    FirebasePluginConfig(
                        project_id='my-project',
                        retrievers=[
                            FirestoreRetrieverConfig(
                                name='recipes',
                                collection='recipes',
                                embedder='openai/text-embedding-3-small',
                            )
                        ],
                    )
                ),
            ]
        )
        ```
    """

    name = FIREBASE_PLUGIN_NAME

    def __init__(self, config: FirebasePluginConfig | None = None) -> None:
        self.config = config if config is not None else FirebasePluginConfig()
        self._stores: dict[str, FirestoreVectorStore] = {}

    @cached_property
    def firestore_client(self) -> Any:
        if self.config.firestore_client is not None:
            return self.config.firestore_client
        return firestore.Client(project=self.config.project_id, database=self.config.database_id)

    def get_vector_store(self, name: str) -> FirestoreVectorStore | None:
        return self._stores.get(name)

    async def init(self, registry: Registry | None = None) -> list[Action]:
        """Resolves each store's embedder and registers its actions.

        Raises:
            ActionKitError: If there is no registry or an embedder is missing.
        """
        if registry is None:
            raise ActionKitError(
                status='FAILED_PRECONDITION',
                message='The firebase plugin needs a registry to resolve embedders.',
            )
        actions: list[Action] = []
        for retriever_config in self.config.retrievers:
            embedder = await resolve_embedder(registry, retriever_config.embedder)
            store = FirestoreVectorStore(self.firestore_client, retriever_config, embedder)
            self._stores[retriever_config.name] = store
            actions.extend(self._store_actions(store))
        await logger.ainfo(f'Firebase plugin initialized with {len(self._stores)} vector stores')
        return actions

    def _store_actions(self, store: FirestoreVectorStore) -> list[Action]:
        name = firestore_action_name(store.config.name)
        label = _label(store.config)
        return [
            Action(
                kind=ActionKind.RETRIEVER,
                name=name,
                fn=store.retrieve,
                metadata=retriever_action_metadata(name, label).metadata,
            ),
            Action(
                kind=ActionKind.INDEXER,
                name=name,
                fn=store.index,
                metadata=indexer_action_metadata(name, label).metadata,
            ),
        ]

    async def list_actions(self) -> list[ActionMetadata]:
        metadata: list[ActionMetadata] = []
        for retriever_config in self.config.retrievers:
            name = firestore_action_name(retriever_config.name)
            metadata.append(retriever_action_metadata(name, _label(retriever_config)))
            metadata.append(indexer_action_metadata(name, _label(retriever_config)))
        return metadata


def _label(config: FirestoreRetrieverConfig) -> str:
    return config.label or f'Firestore - {config.collection}'
