"""routekit: HTTP routing and response dispatch over an ASGI host engine.

Typed responses, panic-proof handlers, composable routers, and a thin
server lifecycle around uvicorn.

Basic usage::

    from routekit import JSONResponse, Method, Router, Server

    async def hello(request):
        return JSONResponse(200, body={"hello": request.path_params["name"]})

    router = Router().route(Method.GET, "/hello/{name}/", hello)
    Server("127.0.0.1:8000").with_router(router).start()
"""

__version__ = "0.1.0"
__all__ = [
    "BadRequest",
    "ConfigurationError",
    "ErrorResponse",
    "Handler",
    "InternalServerError",
    "InvalidPathError",
    "JSONResponse",
    "Method",
    "Middleware",
    "ObjectResponse",
    "RawResponse",
    "Request",
    "Response",
    "RoutekitError",
    "Router",
    "Server",
    "ServerConfig",
    "ServerError",
    "ServiceUnavailable",
    "create_router",
    "create_router_with_prefix",
]

_RESPONSES = (
    "BadRequest",
    "ErrorResponse",
    "InternalServerError",
    "JSONResponse",
    "ObjectResponse",
    "RawResponse",
    "Response",
    "ServiceUnavailable",
)
_ERRORS = ("ConfigurationError", "InvalidPathError", "RoutekitError", "ServerError")
_ROUTING = ("Router", "create_router", "create_router_with_prefix")


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import routekit`` fast (uvicorn is only imported with Server)
    while providing a clean top-level API.
    """
    if name in _RESPONSES:
        from routekit.http import response

        return getattr(response, name)

    if name in _ERRORS:
        from routekit import errors

        return getattr(errors, name)

    if name in _ROUTING:
        from routekit.routing import router

        return getattr(router, name)

    if name == "Request":
        from routekit.http.request import Request

        return Request

    if name == "Method":
        from routekit.http.method import Method

        return Method

    if name == "Handler":
        from routekit.handler import Handler

        return Handler

    if name == "Middleware":
        from routekit.middleware.protocol import Middleware

        return Middleware

    if name == "Server":
        from routekit.server.server import Server

        return Server

    if name == "ServerConfig":
        from routekit.config import ServerConfig

        return ServerConfig

    msg = f"module 'routekit' has no attribute {name!r}"
    raise AttributeError(msg)
