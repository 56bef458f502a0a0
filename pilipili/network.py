"""Declarative HTTP targets, request plugins and an async provider."""

from __future__ import annotations

import abc
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

import httpx

logger = logging.getLogger(__name__)

NETWORK_LOGGER_DOMAIN = "[NETWORK]"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
)


class HttpMethod(str, enum.Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RequestPlain:
    """A request without body or query parameters."""


@dataclass(frozen=True)
class RequestJson:
    """A request whose body is the JSON encoding of ``body``."""

    body: Any


@dataclass(frozen=True)
class RequestParameters:
    """A request carrying ``params`` in its query string."""

    params: Mapping[str, str] = field(default_factory=dict)


Task = RequestPlain | RequestJson | RequestParameters


class TargetType(abc.ABC):
    """Description of one HTTP endpoint."""

    @abc.abstractmethod
    def base_url(self) -> str: ...

    @abc.abstractmethod
    def path(self) -> str: ...

    @abc.abstractmethod
    def method(self) -> HttpMethod: ...

    @abc.abstractmethod
    def task(self) -> Task: ...

    def headers(self) -> list[tuple[str, str]] | None:
        return None


class Plugin(abc.ABC):
    """Observer of requests sent by a :class:`Provider`."""

    @abc.abstractmethod
    def on_request(self, request: httpx.Request) -> None: ...

    @abc.abstractmethod
    def on_response(self, response: httpx.Response) -> None: ...

    @abc.abstractmethod
    def on_error(self, error: httpx.HTTPError) -> None: ...


def _body_text(request: httpx.Request) -> str:
    try:
        content = request.content
    except httpx.RequestNotRead:
        return "Unknown Content"
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError:
        hex_bytes = " ".join(f"{byte:02X}" for byte in content[:50])
        return f'Binary Data ("{hex_bytes}")'
    return text.replace("'", "\\'").replace('"', '\\"')


class CurlPlugin(Plugin):
    """Logs each request as an equivalent curl command."""

    def on_request(self, request: httpx.Request) -> None:
        logger.debug(
            "%s Sending request: %s", NETWORK_LOGGER_DOMAIN, self.request_to_curl(request)
        )

    def on_response(self, response: httpx.Response) -> None:
        logger.debug(
            "%s Received response with status: %s %s",
            NETWORK_LOGGER_DOMAIN,
            response.status_code,
            response.reason_phrase,
        )

    def on_error(self, error: httpx.HTTPError) -> None:
        logger.error("%s Request occurred Error: %s", NETWORK_LOGGER_DOMAIN, error)

    @staticmethod
    def request_to_curl(request: httpx.Request) -> str:
        """Render ``request`` as a curl command line."""
        parts = [f"curl -X {request.method} '{request.url}' "]
        for name, value in request.headers.multi_items():
            escaped = value.replace('"', '\\"').replace("'", "\\'")
            parts.append(f'-H "{name}: {escaped}" ')
        body = _body_text(request)
        if body:
            parts.append(f" -d '{body}'")
        return "".join(parts)


def build_url(target: TargetType) -> str:
    """Join the target's base URL and path with exactly one slash."""
    return f"{target.base_url().rstrip('/')}/{target.path().lstrip('/')}"


class Provider:
    """Sends requests described by targets, notifying plugins along the way.

    A client passed in is used as is and left open by :meth:`aclose`.
    """

    def __init__(
        self,
        plugins: Iterable[Plugin] = (),
        client: httpx.AsyncClient | None = None,
    ):
        self._plugins = list(plugins)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(headers={"user-agent": DEFAULT_USER_AGENT})

    def build_request(self, target: TargetType) -> httpx.Request:
        """Build the request for ``target`` without sending it."""
        headers = {name.lower(): value for name, value in target.headers() or ()}
        task = target.task()
        match task:
            case RequestPlain():
                options: dict[str, Any] = {}
            case RequestJson(body=body):
                options = {"json": body}
            case RequestParameters(params=params):
                options = {"params": dict(params)}
            case _:
                raise TypeError(f"unsupported request task: {task!r}")
        return self._client.build_request(
            HttpMethod(target.method()).value,
            build_url(target),
            headers=headers,
            **options,
        )

    async def send_request(self, target: TargetType) -> httpx.Response:
        """Send the request for ``target``; transport errors are re-raised."""
        request = self.build_request(target)
        for plugin in self._plugins:
            plugin.on_request(request)
        try:
            response = await self._client.send(request)
        except httpx.HTTPError as error:
            for plugin in self._plugins:
                plugin.on_error(error)
            raise
        for plugin in self._plugins:
            plugin.on_response(response)
        return response

    async def aclose(self) -> None:
        """Close the underlying client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Provider:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()