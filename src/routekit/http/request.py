"""Immutable request view handed to handlers.

A read-only snapshot of what the host engine received: method, path,
headers, path parameters, and a reference to the not-yet-read body.
"""

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any
from urllib.parse import parse_qsl

from routekit._internal.asgi import Receive, Scope
from routekit.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata is frozen at creation. The body is read lazily through
    ``body()``, ``text()``, ``json()``, or ``stream()`` and cached
    after the first full read.
    """

    method: str
    path: str
    headers: Headers
    path_params: Mapping[str, str] = field(default_factory=dict)
    query_string: str = ""
    root_path: str = ""
    http_version: str = "1.1"
    server: tuple[str, int] | None = None
    client: tuple[str, int] | None = None

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: body cache (the dict is mutable, the field reference is not)
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> "Request":
        """Create a Request from an ASGI scope and receive callable."""
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            path_params=MappingProxyType(dict(scope.get("path_params", {}))),
            query_string=scope.get("query_string", b"").decode("latin-1"),
            root_path=scope.get("root_path", ""),
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )

    @property
    def query(self) -> Mapping[str, str]:
        """Query parameters, first value per key."""
        if "query" not in self._cache:
            params: dict[str, str] = {}
            for key, value in parse_qsl(self.query_string, keep_blank_values=True):
                params.setdefault(key, value)
            self._cache["query"] = MappingProxyType(params)
        return self._cache["query"]

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Full request path including the mount prefix and query string."""
        full = f"{self.root_path}{self.path}"
        if self.query_string:
            return f"{full}?{self.query_string}"
        return full

    async def stream(self) -> AsyncIterator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                break
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def body(self) -> bytes:
        """Read the full request body.

        Result is cached: the ASGI receive is consumed once, then
        the same bytes are returned on subsequent calls.
        """
        if "body" not in self._cache:
            self._cache["body"] = b"".join([chunk async for chunk in self.stream()])
        return self._cache["body"]

    async def text(self) -> str:
        """Read the body as UTF-8 text."""
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        """Parse the body as JSON."""
        import json

        return json.loads(await self.body())
