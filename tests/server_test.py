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

"""Tests for the Starlette and Flask flow servers."""

import json

import httpx
import pytest
from starlette.testclient import TestClient

from actionkit import ActionKit
from actionkit.core.action import ActionRunContext
from actionkit.core.error import ActionKitError, UserFacingError
from actionkit.core.plugin import ServerPlugin
from actionkit.plugins.flask import FlaskPlugin
from actionkit.plugins.starlette import StarlettePlugin
from actionkit.web import ServerPluginOptions, is_streaming_requested, unwrap_flow_input
from actionkit.web.options import normalize_path

SERVER_PLUGINS = [StarlettePlugin, FlaskPlugin]


class HttpClient:
    """The same calls against a Starlette or a Flask test client."""

    def __init__(self, plugin: ServerPlugin) -> None:
        self._client = TestClient(plugin.app) if isinstance(plugin, StarlettePlugin) else plugin.app.test_client()

    def get(self, path: str) -> tuple[int, object]:
        response = self._client.get(path)
        return response.status_code, json.loads(response.text)

    def post(self, path: str, body: object = None, **kwargs) -> tuple[int, object]:
        response = self._client.post(path, json=body, **kwargs)
        return response.status_code, json.loads(response.text)

    def post_raw(self, path: str, content: bytes) -> tuple[int, object]:
        headers = {'Content-Type': 'application/json'}
        if isinstance(self._client, TestClient):
            response = self._client.post(path, content=content, headers=headers)
        else:
            response = self._client.post(path, data=content, headers=headers)
        return response.status_code, json.loads(response.text)

    def stream(self, path: str, body: object) -> list[object]:
        response = self._client.post(path, json=body, headers={'Accept': 'text/event-stream'})
        return [json.loads(line[len('data:') :]) for line in response.text.splitlines() if line.startswith('data:')]


def _serve(plugin: ServerPlugin) -> HttpClient:
    ai = ActionKit(plugins=[plugin])

    @ai.flow()
    def greet(name: str) -> str:
        return f'Hello, {name}!'

    @ai.flow()
    async def count(n: int, ctx: ActionRunContext) -> int:
        for i in range(n):
            ctx.send_chunk(i)
        return n

    @ai.flow()
    def fail(text: str) -> str:
        raise ValueError('boom')

    @ai.flow()
    def forbidden(text: str) -> str:
        raise UserFacingError('PERMISSION_DENIED', 'Not allowed')

    return HttpClient(plugin)


@pytest.fixture(params=SERVER_PLUGINS, ids=['starlette', 'flask'])
def client(request) -> HttpClient:
    return _serve(request.param())


def test_options() -> None:
    """Paths are normalized and joined."""
    options = ServerPluginOptions.builder().port(9000).context_path('v1/').base_path('flows/').build()

    assert options.flows_path == '/v1/flows'
    assert options.health_path == '/v1/health'
    assert ServerPluginOptions().flows_path == '/api/flows'
    assert normalize_path('/') == ''
    with pytest.raises(ValueError):
        ServerPluginOptions(port=70000)


def test_request_helpers() -> None:
    assert unwrap_flow_input({'data': {'a': 1}}) == {'a': 1}
    assert unwrap_flow_input([1, 2]) == [1, 2]
    assert is_streaming_requested('text/event-stream, */*', None)
    assert is_streaming_requested(None, 'true')
    assert not is_streaming_requested('application/json', 'false')


def test_health(client: HttpClient) -> None:
    assert client.get('/health') == (200, {'status': 'ok'})


def test_list_flows(client: HttpClient) -> None:
    status, body = client.get('/api/flows')

    assert status == 200
    assert sorted(body['flows']) == ['count', 'fail', 'forbidden', 'greet']


def test_run_flow(client: HttpClient) -> None:
    """Input may be wrapped in `data` or posted as is."""
    assert client.post('/api/flows/greet', {'data': 'Ada'}) == (200, {'result': 'Hello, Ada!'})
    assert client.post('/api/flows/greet', 'Grace') == (200, {'result': 'Hello, Grace!'})


def test_unknown_flow(client: HttpClient) -> None:
    assert client.post('/api/flows/nope', {'data': 1}) == (404, {'error': 'Flow not found: nope'})


def test_flow_error(client: HttpClient) -> None:
    """Failures are reported with their status and message."""
    status, body = client.post('/api/flows/fail', {'data': 'x'})

    assert status == 500
    assert body['status'] == 'INTERNAL'
    assert body['message'] == 'boom'
    assert 'stack' in body['details']


def test_user_facing_error(client: HttpClient) -> None:
    status, body = client.post('/api/flows/forbidden', {'data': 'x'})

    assert status == 500
    assert body['status'] == 'PERMISSION_DENIED'
    assert body['message'] == 'Not allowed'


def test_invalid_input(client: HttpClient) -> None:
    status, _ = client.post('/api/flows/count', {'data': 'not a number'})

    assert status == 500


@pytest.mark.parametrize('content', [b'{not json', b'\xff\xfe\xfa'], ids=['malformed', 'not-utf8'])
@pytest.mark.parametrize('plugin_class', SERVER_PLUGINS)
def test_invalid_json(plugin_class, content: bytes) -> None:
    """Bodies that are not UTF-8 JSON are rejected with 400 by both plugins."""
    plugin = plugin_class()
    ActionKit(plugins=[plugin]).define_flow(lambda x: x, name='echo')

    status, body = HttpClient(plugin).post_raw('/api/flows/echo', content)

    assert status == 400
    assert body['error'].startswith('Invalid JSON')


@pytest.mark.parametrize('content', [b'null', b'', b'{"data": null}'], ids=['null', 'empty', 'wrapped-null'])
@pytest.mark.parametrize('plugin_class', SERVER_PLUGINS)
def test_null_input(plugin_class, content: bytes) -> None:
    """A JSON null, an empty body and a wrapped null all run the flow with None."""
    plugin = plugin_class()
    ActionKit(plugins=[plugin]).define_flow(lambda x: x, name='echo')

    assert HttpClient(plugin).post_raw('/api/flows/echo', content) == (200, {'result': None})


@pytest.mark.parametrize('plugin_class', SERVER_PLUGINS)
def test_without_registry(plugin_class) -> None:
    """A plugin never added to an ActionKit answers 503 and cannot start."""
    plugin = plugin_class()
    http = HttpClient(plugin)

    assert http.get('/api/flows') == (503, {'error': 'Registry not initialized'})
    assert http.post('/api/flows/greet', {'data': 'x'})[0] == 503
    with pytest.raises(ActionKitError) as exc_info:
        plugin.start()
    assert exc_info.value.status == 'FAILED_PRECONDITION'
    assert f'Make sure the {plugin.name} plugin is added' in str(exc_info.value)


def test_context_path() -> None:
    plugin = StarlettePlugin(ServerPluginOptions(context_path='/v1', base_path='/flows'))
    http = _serve(plugin)

    assert http.get('/v1/health') == (200, {'status': 'ok'})
    assert http.post('/v1/flows/greet', {'data': 'Ada'}) == (200, {'result': 'Hello, Ada!'})


def test_stream_flow(client: HttpClient) -> None:
    """Chunks are streamed as events followed by the result."""
    events = client.stream('/api/flows/count', {'data': 3})

    assert events == [{'message': 0}, {'message': 1}, {'message': 2}, {'result': 3}]


def test_stream_error() -> None:
    """A failing streamed flow ends with an error event."""
    events = _serve(FlaskPlugin()).stream('/api/flows/fail', {'data': 'x'})

    assert events[-1]['error']['message'] == 'boom'


@pytest.mark.parametrize('plugin_class', SERVER_PLUGINS)
def test_server_lifecycle(plugin_class) -> None:
    """Plugins serve on a background thread and report the bound port."""
    plugin = plugin_class(ServerPluginOptions(host='127.0.0.1', port=0))
    _serve(plugin)

    plugin.start()
    try:
        assert plugin.is_running()
        assert plugin.port != 0
        response = httpx.post(f'http://127.0.0.1:{plugin.port}/api/flows/greet', json={'data': 'Ada'})
        assert response.json() == {'result': 'Hello, Ada!'}
    finally:
        plugin.stop()

    assert not plugin.is_running()


def test_create() -> None:
    """create(port) keeps the other defaults."""
    for plugin in (StarlettePlugin.create(3400), FlaskPlugin.create(3400)):
        assert plugin.port == 3400
        assert plugin.options.host == '0.0.0.0'
        assert plugin.options.base_path == '/api/flows'
    assert StarlettePlugin.name == 'starlette'
    assert FlaskPlugin.name == 'flask'
