"""Handler adaptation.

A handler is any ``def`` or ``async def`` taking a :class:`Request` and
returning a :class:`Response`. ``adapt`` turns one into an ASGI app the
multiplexer can dispatch to, with a failure boundary around the call:
whatever the handler raises, the client gets a plain 500 and the host
engine never sees the exception.
"""

import logging
from collections.abc import Awaitable, Callable

from routekit._internal.asgi import ASGIApp, Receive, Scope, Send
from routekit._internal.invoke import invoke
from routekit.http.request import Request
from routekit.http.response import InternalServerError, Response
from routekit.http.sink import ASGIResponseSink

logger = logging.getLogger("routekit.handler")

# Route handler: sync or async, one Request in, one Response out
type Handler = Callable[[Request], Response | Awaitable[Response]]


def adapt(handler: Handler) -> ASGIApp:
    """Wrap *handler* into a fault-isolated ASGI app.

    Both a raised exception and a non-``Response`` return value render
    ``InternalServerError()`` with no cause: the body is exactly
    ``internal server error``. The real failure is logged, not sent.

    Errors from the sink while rendering are not caught; they mean the
    connection is gone and belong to the host engine.
    """

    async def adapted(scope: Scope, receive: Receive, send: Send) -> None:
        request = Request.from_asgi(scope, receive)
        try:
            response = await invoke(handler, request)
            if not isinstance(response, Response):
                msg = f"handler returned {type(response).__name__}, not a Response"
                raise TypeError(msg)
        except Exception:
            logger.exception("500 %s %s", request.method, request.url)
            response = InternalServerError()
        await response.write(ASGIResponseSink(send))

    adapted.__name__ = getattr(handler, "__name__", adapted.__name__)
    adapted.__qualname__ = getattr(handler, "__qualname__", adapted.__qualname__)
    return adapted
