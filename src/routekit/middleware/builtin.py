"""Built-in middleware: access logging and security headers.

Both wrap the ASGI ``send`` callable to observe or amend the
``http.response.start`` message, so they work around any app: a
Router, a bare multiplexer, or another middleware.
"""

import logging
import time
from dataclasses import dataclass

from routekit._internal.asgi import ASGIApp, Message, Receive, Scope, Send

access_logger = logging.getLogger("routekit.access")


class AccessLogMiddleware:
    """Log one line per request on the ``routekit.access`` logger.

    Format: ``GET /users/42/ 200 3.1ms``. Requests whose response never
    started (the app raised, or the client went away) log status ``-``.

    Usage::

        server.with_middleware(AccessLogMiddleware)
    """

    __slots__ = ("app",)

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        status: int | None = None
        start = time.perf_counter()

        async def observe(message: Message) -> None:
            nonlocal status
            if message["type"] == "http.response.start":
                status = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, observe)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            access_logger.info(
                "%s %s%s %s %.1fms",
                scope["method"],
                scope.get("root_path", ""),
                scope["path"],
                status if status is not None else "-",
                elapsed_ms,
            )


@dataclass(frozen=True, slots=True)
class SecurityHeadersConfig:
    """Configuration for security headers.

    All values are applied as-is. Use standard header values; ``None``
    leaves the header out.
    """

    x_frame_options: str = "DENY"
    x_content_type_options: str = "nosniff"
    referrer_policy: str = "strict-origin-when-cross-origin"
    content_security_policy: str | None = None
    strict_transport_security: str | None = None

    def headers(self) -> list[tuple[bytes, bytes]]:
        pairs = [
            ("x-frame-options", self.x_frame_options),
            ("x-content-type-options", self.x_content_type_options),
            ("referrer-policy", self.referrer_policy),
            ("content-security-policy", self.content_security_policy),
            ("strict-transport-security", self.strict_transport_security),
        ]
        return [(name.encode("latin-1"), value.encode("latin-1")) for name, value in pairs if value]


class SecurityHeadersMiddleware:
    """Add security headers to every response.

    Headers the app already set win over the configured values. An
    instance is a middleware: call it with an app to get the wrapped app.

    Usage::

        server.with_middleware(SecurityHeadersMiddleware())
        server.with_middleware(SecurityHeadersMiddleware(SecurityHeadersConfig(
            x_frame_options="SAMEORIGIN",
        )))
    """

    __slots__ = ("config", "_extra")

    def __init__(self, config: SecurityHeadersConfig | None = None) -> None:
        self.config = config or SecurityHeadersConfig()
        self._extra = self.config.headers()

    def __call__(self, app: ASGIApp) -> ASGIApp:
        extra = self._extra

        async def secured(scope: Scope, receive: Receive, send: Send) -> None:
            if scope["type"] != "http":
                await app(scope, receive, send)
                return

            async def add_headers(message: Message) -> None:
                if message["type"] == "http.response.start":
                    headers = list(message.get("headers", []))
                    present = {name.lower() for name, _ in headers}
                    headers.extend(pair for pair in extra if pair[0] not in present)
                    message = {**message, "headers": headers}
                await send(message)

            await app(scope, receive, add_headers)

        return secured
