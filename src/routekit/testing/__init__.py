"""Test utilities for routekit applications.

An in-process client that drives any ASGI app (a Router, a composed
Server app, a single adapted handler) without a socket, and a sink that
records how a response renders itself::

    from routekit.testing import RecordingSink, TestClient
"""

from routekit.testing.client import TestClient, TestResponse
from routekit.testing.sink import RecordingSink

__all__ = [
    "RecordingSink",
    "TestClient",
    "TestResponse",
]
