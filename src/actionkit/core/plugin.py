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

"""Plugin base classes.

Plugins extend ActionKit with models, embedders, retrievers, indexers,
evaluators, or with an HTTP server that exposes registered flows.

Lifecycle:
    1. The plugin is passed to `ActionKit(plugins=[...])`, which registers it
       with the registry under `plugin.name`.
    2. The first time an action named `<plugin.name>/...` is resolved, the
       registry awaits `init(registry)` once and registers every returned
       action.
    3. Actions still unknown after `init()` are offered to `resolve()`.

Example:
    ```python
    class MyPlugin(Plugin):
        name = 'myplugin'

        async def init(self, registry=None) -> list[Action]:
            return [Action(ActionKind.MODEL, 'myplugin/my-model', self._generate)]
    ```

Caveats:
    - Plugin names must be unique within an `ActionKit` instance.
    - `resolve()` receives the fully namespaced name (`plugin/model`).
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from actionkit.core.action import Action, ActionKind, ActionMetadata
from actionkit.core.error import ActionKitError

if TYPE_CHECKING:
    from actionkit.core.registry import Registry


class Plugin(abc.ABC):
    """Abstract base class for ActionKit plugins."""

    name: str  # plugin namespace

    @abc.abstractmethod
    async def init(self, registry: Registry | None = None) -> list[Action]:
        """Called once per registry before the plugin's first action is used.

        Args:
            registry: The registry the plugin is being initialized for.
                Plugins that need other plugins' actions (e.g. an embedder
                for a vector store) resolve them through it.

        Returns:
            The actions to register.
        """
        ...

    async def resolve(self, action_type: ActionKind, name: str) -> Action | None:
        """Builds an action that `init()` did not return.

        Args:
            action_type: The kind of action to resolve.
            name: The namespaced name of the action.
        """
        return None

    async def list_actions(self) -> list[ActionMetadata]:
        """Describes the plugin's actions without initializing it."""
        return []

    def model(self, name: str) -> str:
        """Prefixes a local model name with the plugin namespace."""
        return name if '/' in name else f'{self.name}/{name}'

    def embedder(self, name: str) -> str:
        """Prefixes a local embedder name with the plugin namespace."""
        return name if '/' in name else f'{self.name}/{name}'


class ServerPlugin(Plugin):
    """A plugin that serves the registry's flows over HTTP.

    Server plugins contribute no actions. The registry is handed to them when
    they are added to `ActionKit`; `start()` refuses to run without one.
    """

    def __init__(self) -> None:
        self._registry: Registry | None = None

    @property
    def registry(self) -> Registry | None:
        return self._registry

    def set_registry(self, registry: Registry) -> None:
        self._registry = registry

    async def init(self, registry: Registry | None = None) -> list[Action]:
        if registry is not None:
            self.set_registry(registry)
        return []

    def start(self) -> None:
        """Starts serving in the background.

        Raises:
            ActionKitError: If no registry has been set.
        """
        if self._registry is None:
            raise ActionKitError(
                status='FAILED_PRECONDITION',
                message=(
                    f'Registry not set. Make sure the {self.name} plugin is added to ActionKit before calling start().'
                ),
            )
        if self.is_running():
            return
        self._start_server()

    def stop(self) -> None:
        """Stops the server if it is running."""
        if self.is_running():
            self._stop_server()

    @property
    @abc.abstractmethod
    def port(self) -> int: ...

    @abc.abstractmethod
    def is_running(self) -> bool: ...

    @abc.abstractmethod
    def _start_server(self) -> None: ...

    @abc.abstractmethod
    def _stop_server(self) -> None: ...
