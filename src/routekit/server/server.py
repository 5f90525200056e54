"""HTTP server: a Router plus middleware, served by uvicorn.

The server owns the listen lifecycle only. Connection handling, HTTP
parsing, and keep-alive all belong to uvicorn; routekit hands it one
composed ASGI app and a bound socket.
"""

import asyncio
import contextlib
import logging
import socket
import threading

import uvicorn

from routekit._internal.asgi import ASGIApp
from routekit.config import ServerConfig
from routekit.errors import ServerError
from routekit.middleware.protocol import Middleware
from routekit.routing.router import Router

logger = logging.getLogger("routekit.server")


class _HostServer(uvicorn.Server):
    """uvicorn server that reports when it is listening and on which loop."""

    def __init__(self, config: uvicorn.Config, started: threading.Event) -> None:
        super().__init__(config)
        self.loop: asyncio.AbstractEventLoop | None = None
        self._started_event = started

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        self.loop = asyncio.get_running_loop()
        await super().startup(sockets=sockets)
        if self.started:
            self._started_event.set()

    def abort_connections(self) -> None:
        """Drop every open connection. Must run on the server's loop."""
        for connection in list(self.server_state.connections):
            transport = getattr(connection, "transport", None)
            if transport is not None:
                transport.abort()


class Server:
    """An HTTP server wrapping a Router. Not started automatically.

    Usage::

        server = (
            Server("127.0.0.1:8000")
            .with_router(router)
            .with_middleware(AccessLogMiddleware)
        )
        server.start()   # blocks until shutdown() or force_shutdown()

    ``start`` blocks the calling thread; ``shutdown`` and
    ``force_shutdown`` are meant to be called from another one.
    """

    def __init__(self, address: str | None = None, *, config: ServerConfig | None = None) -> None:
        if config is None:
            config = ServerConfig.from_address(address) if address else ServerConfig()
        self.config = config
        self.router = Router()
        # Last registered first: index 0 is the outermost wrapper.
        self.middleware: list[Middleware] = []
        self._host: _HostServer | None = None
        self._bound: tuple[str, int] | None = None
        self._lock = threading.Lock()
        self._started = threading.Event()
        self._stopped = threading.Event()
        self._stopped.set()

    # -- Composition --

    def with_router(self, router: Router) -> "Server":
        """Set the router. Overwrites any existing router."""
        self.router = router
        return self

    def with_middleware(self, middleware: Middleware) -> "Server":
        """Add a middleware.

        The last middleware added is the outermost: it sees the request
        first and the response last.
        """
        self.middleware.insert(0, middleware)
        return self

    def compose(self) -> ASGIApp:
        """Return the router wrapped in every middleware, outermost last-added."""
        app: ASGIApp = self.router
        for middleware in reversed(self.middleware):
            app = middleware(app)
        return app

    # -- Lifecycle --

    @property
    def address(self) -> tuple[str, int] | None:
        """The bound ``(host, port)`` while running, else None."""
        return self._bound

    @property
    def running(self) -> bool:
        return not self._stopped.is_set()

    def wait_started(self, timeout: float | None = None) -> bool:
        """Block until the listener accepts connections. False on timeout."""
        return self._started.wait(timeout)

    def start(self) -> None:
        """Bind the listener and serve until stopped.

        Blocks the calling thread. Returns None after ``shutdown`` or
        ``force_shutdown``. Raises ``ServerError`` when the address
        cannot be bound or uvicorn gives up during startup.
        """
        with self._lock:
            if self._host is not None:
                msg = "server is already running"
                raise ServerError(msg)
            sock = self._bind()
            host = _HostServer(self._uvicorn_config(self.compose()), self._started)
            self._host = host
            self._bound = sock.getsockname()[:2]
            self._started.clear()
            self._stopped.clear()

        logger.info("listening on %s:%d", *self._bound)
        try:
            host.run(sockets=[sock])
        except SystemExit as exc:
            # uvicorn calls sys.exit() when startup fails
            msg = f"server failed to start (exit status {exc.code})"
            raise ServerError(msg) from exc
        finally:
            sock.close()
            with self._lock:
                self._host = None
                self._bound = None
                self._started.clear()
                self._stopped.set()
            logger.info("stopped")

    def shutdown(self) -> None:
        """Stop gracefully and block until in-flight requests finish.

        No new connections are accepted; open requests run to
        completion. There is no timeout: wrap the call if you need one.
        Returns immediately when the server is not running.
        """
        host = self._host
        if host is None:
            return
        logger.info("shutting down")
        host.should_exit = True
        self._stopped.wait()

    def force_shutdown(self) -> None:
        """Close every connection now, in-flight or not. Does not block."""
        host = self._host
        if host is None:
            return
        logger.info("forcing shutdown")
        host.force_exit = True
        host.should_exit = True
        loop = host.loop
        if loop is not None:
            # The loop may close between the check and the call.
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(host.abort_connections)

    # -- Internal --

    def _bind(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.config.host else socket.AF_INET
        try:
            return socket.create_server(
                (self.config.host, self.config.port),
                family=family,
                backlog=self.config.backlog,
            )
        except OSError as exc:
            msg = f"cannot listen on {self.config.host}:{self.config.port}: {exc.strerror or exc}"
            raise ServerError(msg) from exc

    def _uvicorn_config(self, app: ASGIApp) -> uvicorn.Config:
        return uvicorn.Config(
            app,
            host=self.config.host,
            port=self.config.port,
            backlog=self.config.backlog,
            timeout_keep_alive=self.config.keep_alive_timeout,
            access_log=self.config.access_log,
            log_level=self.config.log_level,
            log_config=None,
            lifespan="off",
            interface="asgi3",
        )
