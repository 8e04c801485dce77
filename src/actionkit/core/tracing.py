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

"""OpenTelemetry tracing for action executions.

Every action run opens a span on `tracer`. Nothing is exported unless an
exporter is attached with `add_custom_exporter`; in development mode spans
are exported synchronously, in production they are batched.
"""

from opentelemetry import trace as trace_api
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    SimpleSpanProcessor,
    SpanExporter,
)

from actionkit.core.environment import is_dev_environment
from actionkit.core.logging import get_logger

ATTR_PREFIX = 'actionkit'

logger = get_logger(__name__)

tracer = trace_api.get_tracer('actionkit-tracer', 'v1')


def init_provider() -> TracerProvider:
    """Returns the global SDK tracer provider, installing one if needed."""
    provider = trace_api.get_tracer_provider()
    if not isinstance(provider, TracerProvider):
        provider = TracerProvider()
        trace_api.set_tracer_provider(provider)
        logger.debug('Created global tracer provider')

    current = trace_api.get_tracer_provider()
    if not isinstance(current, TracerProvider):
        raise TypeError(f'Global tracer provider is not an SDK TracerProvider: {type(current)}')
    return current


def add_custom_exporter(exporter: SpanExporter | None, name: str = 'custom') -> None:
    """Attaches a span exporter to the global tracer provider.

    Args:
        exporter: The exporter to attach. `None` is ignored with a warning.
        name: Exporter name, only used for logging.
    """
    if exporter is None:
        logger.warning('Span exporter is None', exporter=name)
        return

    provider = init_provider()
    processor_cls = SimpleSpanProcessor if is_dev_environment() else BatchSpanProcessor
    provider.add_span_processor(processor_cls(exporter))
    logger.debug('Span exporter added', exporter=name)
