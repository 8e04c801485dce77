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

"""Starlette app and uvicorn server thread for serving flows."""

from __future__ import annotations

import threading
import time

import uvicorn
from sse_starlette.sse import EventSourceResponse
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from actionkit.codec import dump_dict, dump_json
from actionkit.core.logging import get_logger
from actionkit.core.plugin import ServerPlugin
from actionkit.web import (
    FLOW_NOT_FOUND,
    REGISTRY_NOT_INITIALIZED,
    ServerPluginOptions,
    error_json,
    find_flow,
    flow_names,
    flow_stream_events,
    is_streaming_requested,
    parse_flow_body,
    unwrap_flow_input,
)

logger = get_logger(__name__)

STARLETTE_PLUGIN_NAME = 'starlette'

# Seconds to wait for the server thread on stop().
_SHUTDOWN_TIMEOUT = 10.0

# Seconds between checks for the server to accept connections.
_STARTUP_POLL_INTERVAL = 0.05


class StarlettePlugin(ServerPlugin):
    """Exposes registered flows through a Starlette application."""

    name = STARLETTE_PLUGIN_NAME

    def __init__(self, options: ServerPluginOptions | None = None) -> None:
        super().__init__()
        self.options = options if options is not None else ServerPluginOptions()
        self._app: Starlette | None = None
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None

    @classmethod
    def create(cls, port: int) -> StarlettePlugin:
        return cls(ServerPluginOptions(port=port))

    @property
    def port(self) -> int:
        """The bound port once serving, else the configured one."""
        if self._server is not None and self._server.started:
            for server in self._server.servers:
                for sock in server.sockets:
                    return sock.getsockname()[1]
        return self.options.port

    @property
    def app(self) -> Starlette:
        """The Starlette application, created on first use."""
        if self._app is None:
            self._app = self.create_app()
        return self._app

    def create_app(self) -> Starlette:
        flows_path = self.options.flows_path
        return Starlette(
            routes=[
                Route(self.options.health_path, self._health, methods=['GET']),
                Route(flows_path or '/', self._list_flows, methods=['GET']),
                Route(f'{flows_path}/{{flow_name:path}}', self._run_flow, methods=['POST']),
            ]
        )

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _start_server(self) -> None:
        config = uvicorn.Config(
            self.app,
            host=self.options.host,
            port=self.options.port,
            log_level='warning',
        )
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(target=self._server.run, name='actionkit-starlette', daemon=True)
        self._thread.start()
        while not self._server.started and self._thread.is_alive():
            time.sleep(_STARTUP_POLL_INTERVAL)
        logger.info(
            'Starlette server started',
            host=self.options.host,
            port=self.port,
            flows_path=self.options.flows_path,
        )

    def _stop_server(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=_SHUTDOWN_TIMEOUT)
        self._server = None
        self._thread = None
        logger.info('Starlette server stopped', port=self.options.port)

    async def _health(self, request: Request) -> JSONResponse:
        return JSONResponse({'status': 'ok'})

    async def _list_flows(self, request: Request) -> JSONResponse:
        if self.registry is None:
            return JSONResponse({'error': REGISTRY_NOT_INITIALIZED}, status_code=503)
        return JSONResponse({'flows': flow_names(self.registry)})

    async def _run_flow(self, request: Request) -> Response:
        if self.registry is None:
            return JSONResponse({'error': REGISTRY_NOT_INITIALIZED}, status_code=503)

        flow_name = request.path_params['flow_name']
        action = find_flow(self.registry, flow_name)
        if action is None:
            await logger.awarning('Flow not found', flow=flow_name)
            return JSONResponse({'error': FLOW_NOT_FOUND.format(flow_name)}, status_code=404)

        try:
            body = parse_flow_body(await request.body())
        except ValueError as e:
            return JSONResponse({'error': f'Invalid JSON: {e}'}, status_code=400)
        input = unwrap_flow_input(body)

        if is_streaming_requested(request.headers.get('accept'), request.query_params.get('stream')):

            async def events():
                async for payload in flow_stream_events(action, input):
                    yield {'data': dump_json(payload)}

            return EventSourceResponse(events(), headers={'Cache-Control': 'no-cache'})

        try:
            response = await action.arun_raw(input)
        except Exception as e:
            await logger.aerror('Error executing flow', flow=flow_name, error=str(e))
            return JSONResponse(error_json(e), status_code=500)
        return JSONResponse({'result': dump_dict(response.response)})
