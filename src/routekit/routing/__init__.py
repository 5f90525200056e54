"""Routing: path validation, the request multiplexer, and the Router.

Routes are registered during composition and only read while serving.
"""

from routekit.routing.mux import Multiplexer, ServeMux
from routekit.routing.path import is_valid_path, validate
from routekit.routing.router import Router, create_router, create_router_with_prefix, strip_prefix

__all__ = [
    "Multiplexer",
    "Router",
    "ServeMux",
    "create_router",
    "create_router_with_prefix",
    "is_valid_path",
    "strip_prefix",
    "validate",
]
