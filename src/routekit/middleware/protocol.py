"""Middleware type alias.

A middleware is any callable that wraps an ASGI app and returns a new
one::

    def timing(app: ASGIApp) -> ASGIApp:
        async def timed(scope, receive, send):
            start = time.monotonic()
            await app(scope, receive, send)
            logger.info("took %.3fs", time.monotonic() - start)
        return timed

No base class required. Classes whose constructor takes the wrapped
app (``AccessLogMiddleware``) qualify as-is.
"""

from collections.abc import Callable

from routekit._internal.asgi import ASGIApp

type Middleware = Callable[[ASGIApp], ASGIApp]
