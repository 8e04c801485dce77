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

"""Flask server plugin.

Serves registered flows from a Flask application. Unlike the Starlette plugin
every route can be mounted under a `context_path`:

```python
options = ServerPluginOptions.builder().port(9000).context_path('/ai').build()
kit = ActionKit(plugins=[FlaskPlugin(options)])
```
"""

from .plugin import FLASK_PLUGIN_NAME, FlaskPlugin

__all__ = [
    'FLASK_PLUGIN_NAME',
    'FlaskPlugin',
]
