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

"""Starlette server plugin.

Serves the flows of an `ActionKit` instance over HTTP with a Starlette app
run by uvicorn in a background thread.

```python
server = StarlettePlugin.create(8080)
kit = ActionKit(plugins=[server])


@kit.flow()
async def greet(name: str) -> str:
    return f'Hello, {name}!'


server.start()
```
"""

from .plugin import STARLETTE_PLUGIN_NAME, StarlettePlugin

__all__ = [
    'STARLETTE_PLUGIN_NAME',
    'StarlettePlugin',
]
