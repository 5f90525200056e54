"""ASGI type aliases.

The only vocabulary shared with the host engine. Everything that crosses
the boundary to uvicorn (or any other ASGI server) is typed with these.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

# Raw ASGI types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]

# An ASGI application: the request-serving callback handed to the host engine
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]
