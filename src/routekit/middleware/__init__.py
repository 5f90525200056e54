"""Middleware: callables that wrap one ASGI app into another.

Registered on a Server with ``with_middleware``; the last one
registered is the outermost wrapper.
"""

from routekit.middleware.builtin import (
    AccessLogMiddleware,
    SecurityHeadersConfig,
    SecurityHeadersMiddleware,
)
from routekit.middleware.protocol import Middleware

__all__ = [
    "AccessLogMiddleware",
    "Middleware",
    "SecurityHeadersConfig",
    "SecurityHeadersMiddleware",
]
