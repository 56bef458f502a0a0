import json
import logging
from dataclasses import dataclass, field

import httpx
import pytest
import respx

from pilipili.network import (
    DEFAULT_USER_AGENT,
    CurlPlugin,
    HttpMethod,
    Plugin,
    Provider,
    RequestJson,
    RequestParameters,
    RequestPlain,
    TargetType,
    build_url,
)


@dataclass
class _Target(TargetType):
    base: str = "http://localhost"
    route: str = "/items"
    verb: HttpMethod = HttpMethod.GET
    job: object = field(default_factory=RequestPlain)
    extra_headers: list | None = None

    def base_url(self):
        return self.base

    def path(self):
        return self.route

    def method(self):
        return self.verb

    def task(self):
        return self.job

    def headers(self):
        return self.extra_headers


@dataclass
class _BareTarget(TargetType):
    def base_url(self):
        return "http://localhost"

    def path(self):
        return "x"

    def method(self):
        return HttpMethod.GET

    def task(self):
        return RequestPlain()


class _Recorder(Plugin):
    def __init__(self):
        self.events = []

    def on_request(self, request):
        self.events.append(("request", request))

    def on_response(self, response):
        self.events.append(("response", response))

    def on_error(self, error):
        self.events.append(("error", error))


async def _chunks():
    yield b"data"


def test_http_method_display():
    assert str(HttpMethod.GET) == "GET"
    assert str(HttpMethod.DELETE) == "DELETE"
    assert HttpMethod("PUT") is HttpMethod.PUT


@pytest.mark.parametrize(
    ("base", "route"),
    [
        ("http://localhost:8096/", "/emby/Users/abc"),
        ("http://localhost:8096", "emby/Users/abc"),
        ("http://localhost:8096///", "//emby/Users/abc"),
    ],
)
def test_build_url_joins_with_single_slash(base, route):
    url = build_url(_Target(base=base, route=route))
    assert url == "http://localhost:8096/emby/Users/abc"


def test_default_headers_are_none():
    target = _BareTarget()
    assert TargetType.headers(target) is None
    assert build_url(target) == "http://localhost/x"


@pytest.mark.asyncio
async def test_build_request_plain_uses_default_user_agent():
    async with Provider() as provider:
        request = provider.build_request(_Target(verb=HttpMethod.DELETE))
    assert request.method == "DELETE"
    assert str(request.url) == "http://localhost/items"
    assert request.headers["user-agent"] == DEFAULT_USER_AGENT
    assert request.content == b""


@pytest.mark.asyncio
async def test_build_request_parameters():
    target = _Target(job=RequestParameters({"api_key": "placeholder"}))
    async with Provider() as provider:
        request = provider.build_request(target)
    assert request.url.params["api_key"] == "placeholder"
    assert request.url.path == "/items"


@pytest.mark.asyncio
async def test_build_request_json_body_and_headers():
    body = {"name": "Alice", "tags": [1, 2]}
    target = _Target(
        verb=HttpMethod.POST,
        job=RequestJson(body),
        extra_headers=[("Accept", "application/json"), ("user-agent", "custom")],
    )
    async with Provider() as provider:
        request = provider.build_request(target)
    assert json.loads(request.content) == body
    assert request.headers["content-type"] == "application/json"
    assert request.headers["accept"] == "application/json"
    assert request.headers["user-agent"] == "custom"


@pytest.mark.asyncio
async def test_build_request_rejects_unknown_task():
    async with Provider() as provider:
        with pytest.raises(TypeError):
            provider.build_request(_Target(job="not a task"))


def test_request_to_curl_starts_with_method_and_url():
    request = httpx.Request("POST", "http://localhost/items", content=b"")
    curl = CurlPlugin.request_to_curl(request)
    assert curl.startswith("curl -X POST 'http://localhost/items' ")
    assert " -d " not in curl


def test_request_to_curl_lists_headers():
    request = httpx.Request("GET", "http://localhost/items", headers={"Accept": "text/plain"})
    curl = CurlPlugin.request_to_curl(request)
    assert '-H "accept: text/plain" ' in curl
    assert '-H "host: localhost" ' in curl


def test_request_to_curl_escapes_header_quotes():
    request = httpx.Request("GET", "http://localhost/", headers={"x-note": "say \"hi\" it's"})
    curl = CurlPlugin.request_to_curl(request)
    assert r"""-H "x-note: say \"hi\" it\'s" """ in curl


def test_request_to_curl_escapes_text_body():
    request = httpx.Request("POST", "http://localhost/", content=b'{"k":"v"}')
    assert CurlPlugin.request_to_curl(request).endswith(r""" -d '{\"k\":\"v\"}'""")
    quoted = httpx.Request("POST", "http://localhost/", content="it's".encode())
    assert CurlPlugin.request_to_curl(quoted).endswith(r" -d 'it\'s'")


def test_request_to_curl_binary_body_shows_first_fifty_bytes():
    request = httpx.Request("POST", "http://localhost/", content=b"\xff" * 60)
    curl = CurlPlugin.request_to_curl(request)
    prefix = ' -d \'Binary Data ("'
    start = curl.index(prefix) + len(prefix)
    hex_bytes = curl[start : curl.index('")', start)].split(" ")
    assert len(hex_bytes) == 50
    assert set(hex_bytes) == {"FF"}


def test_request_to_curl_unread_stream():
    request = httpx.Request("POST", "http://localhost/", content=_chunks())
    assert CurlPlugin.request_to_curl(request).endswith(" -d 'Unknown Content'")


def test_curl_plugin_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="pilipili.network")
    plugin = CurlPlugin()
    plugin.on_request(httpx.Request("GET", "http://localhost/items"))
    plugin.on_response(httpx.Response(404))
    plugin.on_error(httpx.ConnectError("boom"))
    messages = [record.getMessage() for record in caplog.records]
    assert messages[0].startswith("[NETWORK] Sending request: curl -X GET 'http://localhost/items'")
    assert messages[1] == "[NETWORK] Received response with status: 404 Not Found"
    assert messages[2] == "[NETWORK] Request occurred Error: boom"
    assert caplog.records[2].levelno == logging.ERROR


@pytest.mark.asyncio
async def test_send_request_notifies_plugins():
    recorder = _Recorder()
    with respx.mock(base_url="http://localhost") as router:
        route = router.get("/items").respond(200, text="ok")
        async with Provider([recorder]) as provider:
            response = await provider.send_request(_Target())
    assert route.called
    assert response.status_code == 200
    assert response.text == "ok"
    assert [kind for kind, _ in recorder.events] == ["request", "response"]
    assert recorder.events[1][1] is response


@pytest.mark.asyncio
async def test_send_request_reports_and_reraises_errors():
    recorder = _Recorder()
    with respx.mock(base_url="http://localhost") as router:
        router.get("/items").mock(side_effect=httpx.ConnectError("down"))
        async with Provider([recorder]) as provider:
            with pytest.raises(httpx.ConnectError):
                await provider.send_request(_Target())
    assert [kind for kind, _ in recorder.events] == ["request", "error"]
    assert str(recorder.events[1][1]) == "down"


@pytest.mark.asyncio
async def test_send_request_with_given_client_sends_query():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    provider = Provider(client=client)
    target = _Target(job=RequestParameters({"api_key": "placeholder"}))
    response = await provider.send_request(target)
    await provider.aclose()
    assert response.json() == {"ok": True}
    assert seen[0].url.params["api_key"] == "placeholder"
    assert client.is_closed is False
    await client.aclose()
    assert client.is_closed is True