"""Server: listen lifecycle over uvicorn."""

from routekit.server.server import Server

__all__ = ["Server"]
