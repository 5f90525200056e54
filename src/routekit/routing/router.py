"""Router: method/path routes and linked sub-routers over a Multiplexer.

Routes and links are registered during composition. Once the router is
serving, its table is only read.

Usage::

    users = Router().route(Method.GET, "/{id}/", get_user)

    api = (
        Router()
        .route(Method.GET, "/health/", health)
        .link("/users/", users)       # GET /users/42/ -> get_user
    )
"""

from collections.abc import Mapping

from routekit._internal.asgi import ASGIApp, Receive, Scope, Send
from routekit.handler import Handler, adapt
from routekit.http.method import Method
from routekit.http.response import ErrorResponse
from routekit.http.sink import ASGIResponseSink
from routekit.routing.mux import Multiplexer, ServeMux
from routekit.routing.path import parse_pattern, validate

ROOT = "/"


def strip_prefix(prefix: str, app: ASGIApp) -> ASGIApp:
    """Forward requests to *app* with the leading *prefix* segments removed.

    *prefix* is a validated path such as ``"/api/"`` or ``"/users/{id}/"``.
    The stripped part moves onto ``root_path``, so ``/api/users/`` reaches
    *app* as path ``/users/`` with root path ``/api``; ``raw_path`` loses
    the same number of segments. A request outside the prefix gets a
    ``404``.
    """
    pattern = parse_pattern(prefix)
    depth = len(pattern.segments)

    async def stripped(scope: Scope, receive: Receive, send: Send) -> None:
        path: str = scope["path"]
        parts = path.split("/")
        # parts[0] is the empty string before the leading slash
        if len(parts) <= depth + 1 or pattern.match(parts[1:]) is None:
            await ErrorResponse(404, "not found").write(ASGIResponseSink(send))
            return
        head = "/".join(parts[: depth + 1])
        rest = "/" + "/".join(parts[depth + 1 :])
        scope = {
            **scope,
            "path": rest,
            "root_path": scope.get("root_path", "") + head,
        }
        raw_path: bytes | None = scope.get("raw_path")
        if raw_path is not None:
            raw_parts = raw_path.split(b"/")
            if len(raw_parts) > depth + 1:
                scope["raw_path"] = b"/" + b"/".join(raw_parts[depth + 1 :])
            else:
                # %2F in the raw path: segment counts disagree
                del scope["raw_path"]
        await app(scope, receive, send)

    return stripped


class Router:
    """Maps ``(method, path)`` pairs to handlers and mounts other routers.

    The multiplexer is injected so composition can be tested against a
    recording fake; by default each router owns a fresh ``ServeMux``.
    The router is itself an ASGI app.
    """

    __slots__ = ("_multiplexer",)

    def __init__(self, multiplexer: Multiplexer | None = None) -> None:
        self._multiplexer: Multiplexer = multiplexer if multiplexer is not None else ServeMux()

    @property
    def multiplexer(self) -> Multiplexer:
        return self._multiplexer

    def route(self, method: Method | str, path: str, handler: Handler) -> "Router":
        """Register *handler* for *method* and *path*.

        The path must start and end with ``/``, contain no whitespace
        and no consecutive slashes; ``{name}`` segments capture into
        ``request.path_params``. Raises ``InvalidPathError`` otherwise.
        """
        validate(path)
        self._multiplexer.handle(f"{method} {path}", adapt(handler))
        return self

    def link(self, path: str, other: "Router") -> "Router":
        """Mount *other* under *path*.

        ``link("/v1/", other)`` serves other's ``/items/`` at
        ``/v1/items/``. Linking at ``/`` merges the two pattern spaces
        instead: other's routes answer at their own paths, for any
        request this router does not match more specifically.
        """
        if path == ROOT:
            self._multiplexer.handle(ROOT, other.multiplexer)
            return self
        validate(path)
        self._multiplexer.handle(path, strip_prefix(path, other.multiplexer))
        return self

    def merge(self, other: "Router") -> "Router":
        """Combine *other*'s routes into this router's namespace."""
        return self.link(ROOT, other)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self._multiplexer(scope, receive, send)


def create_router(
    routes: Mapping[Method | str, Mapping[str, Handler]] | None = None,
    routers: Mapping[str, Router] | None = None,
) -> Router:
    """Build a router from route and sub-router tables.

    *routes* maps methods to paths to handlers; *routers* maps link
    paths to routers. Paths must not overlap.
    """
    router = Router()
    for method, by_path in (routes or {}).items():
        for path, handler in by_path.items():
            router.route(method, path, handler)
    for path, sub_router in (routers or {}).items():
        router.link(path, sub_router)
    return router


def create_router_with_prefix(
    prefix: str,
    routes: Mapping[Method | str, Mapping[str, Handler]] | None = None,
    routers: Mapping[str, Router] | None = None,
) -> Router:
    """Like ``create_router``, with everything mounted under *prefix*.

    Useful for versioned APIs::

        v1 = create_router_with_prefix("/v1/", {Method.GET: {"/items/": list_items}})
    """
    return Router().link(prefix, create_router(routes, routers))
