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

"""Flask app and werkzeug server thread for serving flows."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Iterator
from typing import Any

from flask import Flask, Response, request
from werkzeug.serving import BaseWSGIServer, make_server

from actionkit.aio import iter_over_async
from actionkit.codec import dump_dict, dump_json
from actionkit.core.action import Action
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
    format_sse,
    is_streaming_requested,
    parse_flow_body,
    unwrap_flow_input,
)

logger = get_logger(__name__)

FLASK_PLUGIN_NAME = 'flask'


def _json_response(body: Any, status: int = 200) -> Response:
    return Response(dump_json(body), status=status, mimetype='application/json')


def _stream(action: Action, input: Any) -> Iterator[str]:
    # Each streamed response drives its own event loop from the worker thread.
    loop = asyncio.new_event_loop()
    try:
        for payload in iter_over_async(flow_stream_events(action, input), loop):
            yield format_sse(payload)
    finally:
        loop.close()


class FlaskPlugin(ServerPlugin):
    """Exposes registered flows through a Flask application."""

    name = FLASK_PLUGIN_NAME

    def __init__(self, options: ServerPluginOptions | None = None) -> None:
        super().__init__()
        self.options = options if options is not None else ServerPluginOptions()
        self._app: Flask | None = None
        self._server: BaseWSGIServer | None = None
        self._thread: threading.Thread | None = None

    @classmethod
    def create(cls, port: int) -> FlaskPlugin:
        return cls(ServerPluginOptions(port=port))

    @property
    def port(self) -> int:
        if self._server is not None:
            return self._server.port
        return self.options.port

    @property
    def app(self) -> Flask:
        """The Flask application, created on first use."""
        if self._app is None:
            self._app = self.create_app()
        return self._app

    def create_app(self) -> Flask:
        app = Flask(__name__)
        flows_path = self.options.flows_path
        app.add_url_rule(self.options.health_path, 'health', self._health, methods=['GET'])
        app.add_url_rule(flows_path or '/', 'list_flows', self._list_flows, methods=['GET'])
        app.add_url_rule(f'{flows_path}/<path:flow_name>', 'run_flow', self._run_flow, methods=['POST'])
        return app

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _start_server(self) -> None:
        self._server = make_server(self.options.host, self.options.port, self.app, threaded=True)
        self._thread = threading.Thread(target=self._server.serve_forever, name='actionkit-flask', daemon=True)
        self._thread.start()
        logger.info(
            'Flask server started',
            host=self.options.host,
            port=self._server.port,
            flows_path=self.options.flows_path,
        )

    def _stop_server(self) -> None:
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
        if self._thread is not None:
            self._thread.join()
        self._server = None
        self._thread = None
        logger.info('Flask server stopped', port=self.options.port)

    def _health(self) -> Response:
        return _json_response({'status': 'ok'})

    def _list_flows(self) -> Response:
        if self.registry is None:
            return _json_response({'error': REGISTRY_NOT_INITIALIZED}, 503)
        return _json_response({'flows': flow_names(self.registry)})

    async def _run_flow(self, flow_name: str) -> Response:
        if self.registry is None:
            return _json_response({'error': REGISTRY_NOT_INITIALIZED}, 503)

        action = find_flow(self.registry, flow_name)
        if action is None:
            await logger.awarning('Flow not found', flow=flow_name)
            return _json_response({'error': FLOW_NOT_FOUND.format(flow_name)}, 404)

        try:
            body = parse_flow_body(request.get_data())
        except ValueError as e:
            return _json_response({'error': f'Invalid JSON: {e}'}, 400)
        input = unwrap_flow_input(body)

        if is_streaming_requested(request.headers.get('Accept'), request.args.get('stream')):
            return Response(
                _stream(action, input),
                mimetype='text/event-stream',
                headers={'Cache-Control': 'no-cache'},
            )

        try:
            response = await action.arun_raw(input)
        except Exception as e:
            await logger.aerror('Error executing flow', flow=flow_name, error=str(e))
            return _json_response(error_json(e), 500)
        return _json_response({'result': dump_dict(response.response)})
