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

"""Development local vector store plugin for ActionKit.

A simple, file-based vector store for local development and testing. Each
configured index is registered as a retriever and an indexer named
`devLocalVectorStore/{index_name}`; documents are ranked by cosine similarity
against the query embedding.

Example:
    ```python
    ai = ActionKit(
        plugins=[
            OpenAI(),
            DevLocalVectorStore.builder()
            .add_store(LocalVecConfig(index_name='menu', embedder='openai/text-embedding-3-small'))
            .build(),
        ]
    )
    await ai.index('devLocalVectorStore/menu', ['Pizza', 'Pasta'])
    docs = await ai.retrieve('devLocalVectorStore/menu', 'Italian food')
    ```

Caveats:
    - NOT for production use
    - No concurrent access support
"""

from .plugin import (
    DEV_LOCAL_VECTORSTORE_PLUGIN_NAME,
    DevLocalVectorStore,
    DevLocalVectorStoreBuilder,
    LocalVecConfig,
    dev_local_vectorstore_name,
)
from .store import LocalVectorStore

__all__ = [
    'DEV_LOCAL_VECTORSTORE_PLUGIN_NAME',
    'DevLocalVectorStore',
    'DevLocalVectorStoreBuilder',
    'LocalVecConfig',
    'LocalVectorStore',
    'dev_local_vectorstore_name',
]
