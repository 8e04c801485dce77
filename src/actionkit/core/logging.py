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

"""Typed structlog logger used across ActionKit."""

from typing import Protocol

import structlog


class Logger(Protocol):
    """The subset of structlog's BoundLogger used by ActionKit modules."""

    def debug(self, event: str | None = None, **kw: object) -> None: ...

    def info(self, event: str | None = None, **kw: object) -> None: ...

    def warning(self, event: str | None = None, **kw: object) -> None: ...

    def error(self, event: str | None = None, **kw: object) -> None: ...

    def exception(self, event: str | None = None, **kw: object) -> None: ...

    async def adebug(self, event: str | None = None, **kw: object) -> None: ...

    async def ainfo(self, event: str | None = None, **kw: object) -> None: ...

    async def awarning(self, event: str | None = None, **kw: object) -> None: ...

    async def aerror(self, event: str | None = None, **kw: object) -> None: ...

    def bind(self, **new_values: object) -> 'Logger': ...


def get_logger(name: str | None = None) -> Logger:
    """Returns a structlog logger typed as `Logger`.

    Args:
        name: Optional logger name, normally `__name__`.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info('Plugin initialized', plugin='deepseek', models=2)
    """
    return structlog.get_logger(name)
