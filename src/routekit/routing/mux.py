"""Request multiplexer: the pattern registry a Router is built on.

``Multiplexer`` is the capability a Router depends on: register an ASGI
app for a pattern, and serve a request by dispatching to the best match.
``ServeMux`` is the default implementation. Tests substitute their own.

Pattern syntax::

    "GET /users/"          method + subtree path
    "/static/"             any method
    "POST /users/{id}/"    {id} matches one non-empty segment
    "/health"              no trailing slash: exact path only
"""

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

from routekit._internal.asgi import ASGIApp, Receive, Scope, Send
from routekit.errors import ConfigurationError
from routekit.http.response import ErrorResponse, RawResponse
from routekit.http.sink import ASGIResponseSink
from routekit.routing.path import Pattern, parse_pattern

logger = logging.getLogger("routekit.routing")

# Already-encoded query bytes pass through a redirect unchanged
_QUERY_SAFE = "=&;%+/?:@,$!*'()[]"


class Multiplexer(Protocol):
    """Pattern-to-app registry with best-match dispatch."""

    def handle(self, pattern: str, app: ASGIApp) -> None: ...

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None: ...


@dataclass(frozen=True, slots=True)
class _Entry:
    pattern: Pattern
    app: ASGIApp

    def accepts(self, method: str) -> bool:
        wanted = self.pattern.method
        if wanted is None or wanted == method:
            return True
        return wanted == "GET" and method == "HEAD"

    def rank(self, method: str) -> tuple[int, tuple[bool, ...], bool, bool]:
        """Sort key for a request with *method*: larger is more specific.

        A pattern naming the request method outranks a GET pattern
        standing in for HEAD.
        """
        segments = self.pattern.segments
        return (
            len(segments),
            tuple(not seg.is_wildcard for seg in segments),
            self.pattern.method is not None,
            self.pattern.method == method,
        )


class ServeMux:
    """Default multiplexer with most-specific-pattern dispatch.

    Among the patterns matching a request's method and path, the winner
    has the most segments, then the leftmost literal segment, then an
    explicit method. Requests that match a path but no method get a
    ``405``; unmatched paths get a ``301`` to the slash-terminated path
    when that one is registered, else a ``404``.

    Registration happens during composition only; serving never mutates
    the table, so concurrent requests need no locking.
    """

    __slots__ = ("_entries", "_keys")

    def __init__(self) -> None:
        self._entries: list[_Entry] = []
        self._keys: dict[tuple[object, ...], str] = {}

    def handle(self, pattern: str, app: ASGIApp) -> None:
        """Register *app* for *pattern*. Duplicate patterns are rejected."""
        parsed = parse_pattern(pattern)
        existing = self._keys.get(parsed.key)
        if existing is not None:
            msg = f"pattern {pattern!r} conflicts with already registered {existing!r}"
            raise ConfigurationError(msg)
        self._keys[parsed.key] = pattern
        self._entries.append(_Entry(pattern=parsed, app=app))
        logger.debug("registered pattern %r", pattern)

    @property
    def patterns(self) -> list[str]:
        """Registered pattern strings, in registration order."""
        return [entry.pattern.text for entry in self._entries]

    def match(self, method: str, path: str) -> tuple[ASGIApp, dict[str, str]] | None:
        """Return the best app and its wildcard values, or None."""
        best = self._best(method, path)
        if best is None:
            return None
        entry, params = best
        return entry.app, params

    def _candidates(self, path: str) -> list[tuple[_Entry, dict[str, str]]]:
        parts = path[1:].split("/")
        found: list[tuple[_Entry, dict[str, str]]] = []
        for entry in self._entries:
            params = entry.pattern.match(parts)
            if params is not None:
                found.append((entry, params))
        return found

    def _best(self, method: str, path: str) -> tuple[_Entry, dict[str, str]] | None:
        accepted = [(e, p) for e, p in self._candidates(path) if e.accepts(method)]
        if not accepted:
            return None
        return max(accepted, key=lambda item: item[0].rank(method))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        method: str = scope["method"]
        path: str = scope["path"]

        candidates = self._candidates(path)
        accepted = [(e, p) for e, p in candidates if e.accepts(method)]
        if accepted:
            entry, params = max(accepted, key=lambda item: item[0].rank(method))
            if params:
                scope = {**scope, "path_params": {**scope.get("path_params", {}), **params}}
            await entry.app(scope, receive, send)
            return

        sink = ASGIResponseSink(send)

        if candidates:
            allowed = sorted(self._allowed_methods(candidates))
            await RawResponse(
                status=405,
                headers={
                    "Allow": ", ".join(allowed),
                    "Content-Type": "text/plain; charset=utf-8",
                },
                body="method not allowed",
            ).write(sink)
            return

        if self._should_redirect(method, path):
            location = quote(f"{scope.get('root_path', '')}{path}/", safe="/")
            query = scope.get("query_string", b"")
            if query:
                location = f"{location}?{quote(query, safe=_QUERY_SAFE)}"
            await RawResponse(status=301, headers={"Location": location}).write(sink)
            return

        await ErrorResponse(404, "not found").write(sink)

    def _should_redirect(self, method: str, path: str) -> bool:
        if path.endswith("/"):
            return False
        depth = len(path[1:].split("/"))
        best = self._best(method, f"{path}/")
        return best is not None and best[0].pattern.subtree and len(best[0].pattern.segments) == depth

    @staticmethod
    def _allowed_methods(candidates: list[tuple[_Entry, dict[str, str]]]) -> set[str]:
        allowed: set[str] = set()
        for entry, _ in candidates:
            method = entry.pattern.method
            if method is not None:
                allowed.add(method)
                if method == "GET":
                    allowed.add("HEAD")
        return allowed
