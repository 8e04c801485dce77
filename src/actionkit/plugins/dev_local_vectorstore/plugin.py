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

"""Local file-based vector store plugin that provides retrievers and indexers."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from actionkit.blocks.embedding import resolve_embedder
from actionkit.blocks.retriever import indexer_action_metadata, retriever_action_metadata
from actionkit.core.action import Action, ActionKind, ActionMetadata
from actionkit.core.error import ActionKitError
from actionkit.core.logging import get_logger
from actionkit.core.plugin import Plugin
from actionkit.core.registry import Registry
from actionkit.plugins.dev_local_vectorstore.store import LocalVectorStore, RetrieverOptionsSchema

DEV_LOCAL_VECTORSTORE_PLUGIN_NAME = 'devLocalVectorStore'
logger = get_logger(__name__)


class LocalVecConfig(BaseModel):
    """One local index.

    Attributes:
        index_name: Name of the index and of its JSON file.
        embedder: Embedder action name.
        embedder_options: Options passed to the embedder.
        directory: Directory of the index file; the working directory when
            omitted.
    """

    model_config = ConfigDict(extra='forbid')

    index_name: str
    embedder: str
    embedder_options: dict[str, Any] | None = None
    directory: str | None = None


class DevLocalVectorStore(Plugin):
    """Local file-based vectorstore plugin that provides retriever and indexer.

    NOT INTENDED FOR USE IN PRODUCTION
    """

    name = DEV_LOCAL_VECTORSTORE_PLUGIN_NAME

    def __init__(self, stores: list[LocalVecConfig]) -> None:
        self._configs = list(stores)
        self._stores: dict[str, LocalVectorStore] = {}

    @staticmethod
    def builder() -> DevLocalVectorStoreBuilder:
        return DevLocalVectorStoreBuilder()

    def get_store(self, index_name: str) -> LocalVectorStore | None:
        return self._stores.get(index_name)

    async def init(self, registry: Registry | None = None) -> list[Action]:
        if registry is None:
            raise ActionKitError(
                status='FAILED_PRECONDITION',
                message='The devLocalVectorStore plugin needs a registry to resolve embedders.',
            )
        actions = []
        for config in self._configs:
            embedder = await resolve_embedder(registry, config.embedder)
            store = LocalVectorStore(config.index_name, embedder, config.embedder_options, config.directory)
            self._stores[config.index_name] = store
            name = dev_local_vectorstore_name(config.index_name)
            actions.append(
                Action(
                    kind=ActionKind.RETRIEVER,
                    name=name,
                    fn=store.retrieve,
                    metadata=retriever_action_metadata(name, config_schema=RetrieverOptionsSchema).metadata,
                )
            )
            actions.append(
                Action(
                    kind=ActionKind.INDEXER,
                    name=name,
                    fn=store.index,
                    metadata=indexer_action_metadata(name).metadata,
                )
            )
            logger.debug('Registered local vector store', index=config.index_name, file=store.index_file_name)
        return actions

    async def list_actions(self) -> list[ActionMetadata]:
        result = []
        for config in self._configs:
            name = dev_local_vectorstore_name(config.index_name)
            result.append(retriever_action_metadata(name, config_schema=RetrieverOptionsSchema))
            result.append(indexer_action_metadata(name))
        return result


class DevLocalVectorStoreBuilder:
    def __init__(self) -> None:
        self._stores: list[LocalVecConfig] = []

    def add_store(self, config: LocalVecConfig) -> DevLocalVectorStoreBuilder:
        self._stores.append(config)
        return self

    def build(self) -> DevLocalVectorStore:
        """Returns the plugin.

        Raises:
            ValueError: If no store was added.
        """
        if not self._stores:
            raise ValueError('At least one local vector store must be added')
        return DevLocalVectorStore(self._stores)


def dev_local_vectorstore_name(index_name: str) -> str:
    return f'{DEV_LOCAL_VECTORSTORE_PLUGIN_NAME}/{index_name}'
