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

"""Registry for actions, plugins and named values.

The registry is the central store every `ActionKit` instance owns. Actions are
keyed by kind and name. Plugins are registered by namespace and initialized
lazily: the first time an action named `<plugin>/...` is resolved, the
plugin's `init()` is awaited and every action it returns is registered.

Example:
    >>> registry = Registry()
    >>> registry.register_action(ActionKind.TOOL, 'echo', lambda x: x)
    >>> registry.lookup_action(ActionKind.TOOL, 'echo')
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from actionkit.core.action import (
    Action,
    ActionKind,
    ActionName,
    create_action_key,
    parse_action_key,
    parse_plugin_name_from_action_name,
)
from actionkit.core.logging import get_logger

if TYPE_CHECKING:
    from actionkit.core.plugin import Plugin

logger = get_logger(__name__)

# {ActionKind.MODEL: {'deepseek/deepseek-chat': Action(...)}}
ActionStore = dict[ActionKind, dict[ActionName, Action]]


class Registry:
    """Thread-safe store of actions, plugins and values.

    Attributes:
        default_model: Name of the model used when `generate()` gets none.
    """

    default_model: str | None = None

    def __init__(self) -> None:
        self._entries: ActionStore = {}
        self._plugins: dict[str, Plugin] = {}
        self._initialized_plugins: set[str] = set()
        self._init_tasks: dict[str, asyncio.Future] = {}
        self._value_by_kind_and_name: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()

    def register_plugin(self, plugin: Plugin) -> None:
        """Registers a plugin under its namespace.

        Raises:
            ValueError: If a plugin with the same name is already registered.
        """
        with self._lock:
            if plugin.name in self._plugins:
                raise ValueError(f'Plugin {plugin.name} already registered')
            self._plugins[plugin.name] = plugin

    def lookup_plugin(self, name: str) -> Plugin | None:
        with self._lock:
            return self._plugins.get(name)

    @property
    def plugins(self) -> list[Plugin]:
        with self._lock:
            return list(self._plugins.values())

    def register_action(
        self,
        kind: ActionKind,
        name: str,
        fn: Callable,
        metadata_fn: Callable | None = None,
        description: str | None = None,
        metadata: dict[str, Any] | None = None,
        span_metadata: dict[str, Any] | None = None,
    ) -> Action:
        """Creates an action and stores it under `kind` and `name`.

        Returns:
            The newly created action.
        """
        action = Action(
            kind=kind,
            name=name,
            fn=fn,
            metadata_fn=metadata_fn,
            description=description,
            metadata=metadata,
            span_metadata=span_metadata,
        )
        return self.register_action_instance(action)

    def register_action_instance(self, action: Action) -> Action:
        """Stores a prebuilt action, replacing any action with the same key."""
        with self._lock:
            self._entries.setdefault(action.kind, {})[action.name] = action
        return action

    def lookup_action(self, kind: ActionKind, name: str) -> Action | None:
        """Returns an already registered action; never initializes plugins."""
        with self._lock:
            return self._entries.get(kind, {}).get(name)

    def lookup_action_by_key(self, key: str) -> Action | None:
        """Looks up an action by its `/<kind>/<name>` key.

        Raises:
            ValueError: If the key is malformed.
        """
        kind, name = parse_action_key(key)
        return self.lookup_action(kind, name)

    async def resolve_action(self, kind: ActionKind, name: str) -> Action | None:
        """Returns the action, initializing its owning plugin when needed.

        The owning plugin is found from the `<plugin>/` prefix of `name`. Its
        `init()` runs once per registry; if the action is still unknown
        afterwards the plugin's `resolve()` gets a chance to build it.
        """
        action = self.lookup_action(kind, name)
        if action is not None:
            return action

        plugin_name = parse_plugin_name_from_action_name(name)
        plugin = self.lookup_plugin(plugin_name) if plugin_name else None
        if plugin is None:
            return None

        await self._ensure_initialized(plugin)
        action = self.lookup_action(kind, name)
        if action is not None:
            return action

        action = await plugin.resolve(kind, name)
        if action is None:
            return None
        return self.register_action_instance(action)

    async def resolve_action_by_key(self, key: str) -> Action | None:
        kind, name = parse_action_key(key)
        return await self.resolve_action(kind, name)

    async def initialize_plugins(self) -> None:
        """Initializes every registered plugin that has not been yet."""
        for plugin in self.plugins:
            await self._ensure_initialized(plugin)

    async def _ensure_initialized(self, plugin: Plugin) -> None:
        # Concurrent callers share one pending init.
        with self._lock:
            if plugin.name in self._initialized_plugins:
                return
            task = self._init_tasks.get(plugin.name)
            if task is None:
                task = asyncio.ensure_future(self._initialize(plugin))
                self._init_tasks[plugin.name] = task
        await asyncio.shield(task)

    async def _initialize(self, plugin: Plugin) -> None:
        try:
            actions = await plugin.init(self)
        except Exception:
            with self._lock:
                self._init_tasks.pop(plugin.name, None)
            raise

        for action in actions or []:
            self.register_action_instance(action)
        with self._lock:
            self._initialized_plugins.add(plugin.name)
            self._init_tasks.pop(plugin.name, None)
        await logger.adebug('Plugin initialized', plugin=plugin.name, actions=len(actions or []))

    def is_plugin_initialized(self, name: str) -> bool:
        with self._lock:
            return name in self._initialized_plugins

    def list_actions(self, kind: ActionKind | None = None) -> list[Action]:
        """Lists registered actions, optionally restricted to one kind."""
        with self._lock:
            if kind is not None:
                return list(self._entries.get(kind, {}).values())
            return [action for by_name in self._entries.values() for action in by_name.values()]

    def list_serializable_actions(self, allowed_kinds: set[ActionKind] | None = None) -> dict[str, dict[str, Any]]:
        """Returns registered actions keyed by `/<kind>/<name>`.

        Args:
            allowed_kinds: Kinds to include; all kinds when None.
        """
        with self._lock:
            actions = {}
            for kind, by_name in self._entries.items():
                if allowed_kinds is not None and kind not in allowed_kinds:
                    continue
                for name, action in by_name.items():
                    key = create_action_key(kind, name)
                    actions[key] = {
                        'key': key,
                        'name': action.name,
                        'description': action.description,
                        'inputSchema': action.input_schema,
                        'outputSchema': action.output_schema,
                        'metadata': action.metadata,
                    }
            return actions

    def register_value(self, kind: str, name: str, value: Any) -> None:
        """Stores a named value (e.g. a default model or a format).

        Raises:
            ValueError: If a value is already registered for `kind` and `name`.
        """
        with self._lock:
            by_name = self._value_by_kind_and_name.setdefault(kind, {})
            if name in by_name:
                raise ValueError(f'value for kind "{kind}" and name "{name}" is already registered')
            by_name[name] = value

    def lookup_value(self, kind: str, name: str) -> Any | None:
        with self._lock:
            return self._value_by_kind_and_name.get(kind, {}).get(name)
