"""Response sinks: the destination a Response renders onto.

Rendering always happens in the same order: status, then headers,
then the body exactly once. ``ASGIResponseSink`` buffers the first two
and emits both ASGI messages when the body arrives.
"""

import logging
import re
from typing import Protocol

from routekit._internal.asgi import Send

logger = logging.getLogger("routekit.http")

# RFC 9110 token: the only characters a header name may contain
_TOKEN = re.compile(r"[!#$%&'*+.^_`|~0-9a-z-]+")
_LINE_BREAK = re.compile(r"[\r\n]+")


class ResponseSink(Protocol):
    """Anything a response can be written to."""

    def set_status(self, status: int) -> None: ...

    def set_header(self, name: str, value: str) -> None: ...

    async def write_body(self, body: bytes) -> None: ...


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


def _encode_value(value: str) -> bytes:
    """Header value bytes. Line breaks fold to a space; text is sent as UTF-8."""
    return _LINE_BREAK.sub(" ", value).encode("utf-8")


class ASGIResponseSink:
    """Translate sink calls into ASGI ``send()`` messages.

    Header names are sent lower-cased, as ASGI servers expect. A header
    set twice keeps the last value. Names that are not valid HTTP
    tokens are dropped with a warning; values go out as UTF-8.

    Errors raised by ``send`` (a dead connection, usually) propagate to
    the caller untouched.
    """

    __slots__ = ("_headers", "_send", "_status", "_written")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._status = 200
        self._headers: dict[str, str] = {}
        self._written = False

    def set_status(self, status: int) -> None:
        self._status = status

    def set_header(self, name: str, value: str) -> None:
        self._headers[name.lower()] = value

    @property
    def written(self) -> bool:
        return self._written

    async def write_body(self, body: bytes) -> None:
        if self._written:
            msg = "response body already written"
            raise RuntimeError(msg)
        self._written = True

        if not _body_allowed(self._status):
            body = b""

        raw_headers: list[tuple[bytes, bytes]] = []
        for key, value in self._headers.items():
            if key == "content-length":
                continue
            if not _TOKEN.fullmatch(key):
                logger.warning("dropping response header with invalid name %r", key)
                continue
            raw_headers.append((key.encode("ascii"), _encode_value(value)))
        raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

        await self._send(
            {
                "type": "http.response.start",
                "status": self._status,
                "headers": raw_headers,
            }
        )
        await self._send(
            {
                "type": "http.response.body",
                "body": body,
            }
        )
