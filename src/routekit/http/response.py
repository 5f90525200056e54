"""Response variants.

A closed family of immutable response types. Each one knows how to
render itself onto a :class:`~routekit.http.sink.ResponseSink` through
a single ``write(sink)`` coroutine, and the richer variants delegate to
the simpler ones: ``JSONResponse`` -> ``ObjectResponse`` -> ``RawResponse``
and every error variant -> ``ErrorResponse`` -> ``RawResponse``.

``write`` only raises when the sink itself fails. Bad data never does:
a body that cannot be JSON-encoded is rendered as an
``InternalServerError`` carrying the encoding error instead.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from routekit.http.sink import ResponseSink

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


def _freeze(headers: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(headers))


def encode_json(value: Any) -> bytes:
    """Compact JSON encoding used by object responses.

    Raises ``TypeError`` or ``ValueError`` for values JSON cannot
    represent (unknown types, circular references, NaN, infinities).
    """
    return json.dumps(
        value,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


@dataclass(frozen=True, slots=True)
class RawResponse:
    """A status code, headers, and an opaque body, written as-is."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | str = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze(self.headers))

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    async def write(self, sink: ResponseSink) -> None:
        sink.set_status(self.status)
        for name, value in self.headers.items():
            sink.set_header(name, value)
        await sink.write_body(self.body_bytes)


@dataclass(frozen=True, slots=True)
class ObjectResponse:
    """Any JSON-serializable value, rendered as ``application/json``."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", _freeze(self.headers))

    async def write(self, sink: ResponseSink) -> None:
        try:
            serialized = encode_json(self.body)
        except (TypeError, ValueError) as exc:
            await InternalServerError(exc).write(sink)
            return
        await RawResponse(
            status=self.status,
            headers={**self.headers, "Content-Type": JSON_CONTENT_TYPE},
            body=serialized,
        ).write(sink)


@dataclass(frozen=True, slots=True)
class JSONResponse:
    """A JSON object response: the body must be a string-keyed mapping."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.body, Mapping):
            msg = f"JSONResponse body must be a mapping, got {type(self.body).__name__}"
            raise TypeError(msg)
        bad_keys = [key for key in self.body if not isinstance(key, str)]
        if bad_keys:
            msg = f"JSONResponse body keys must be strings, got {bad_keys!r}"
            raise TypeError(msg)
        object.__setattr__(self, "headers", _freeze(self.headers))

    async def write(self, sink: ResponseSink) -> None:
        await ObjectResponse(status=self.status, headers=self.headers, body=dict(self.body)).write(sink)


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    """A plain-text error: ``message``, or ``message: cause`` when a cause is attached."""

    status: int
    message: str
    cause: BaseException | str | None = None

    @property
    def text(self) -> str:
        if self.cause is None:
            return self.message
        return f"{self.message}: {self.cause}"

    async def write(self, sink: ResponseSink) -> None:
        await RawResponse(
            status=self.status,
            headers={"Content-Type": TEXT_CONTENT_TYPE},
            body=self.text,
        ).write(sink)


@dataclass(frozen=True, slots=True)
class InternalServerError:
    """500: something failed on the server side."""

    cause: BaseException | str | None = None

    status = 500
    message = "internal server error"

    async def write(self, sink: ResponseSink) -> None:
        await ErrorResponse(self.status, self.message, self.cause).write(sink)


@dataclass(frozen=True, slots=True)
class BadRequest:
    """400: the client sent something the handler cannot accept."""

    cause: BaseException | str | None = None

    status = 400
    message = "bad request"

    async def write(self, sink: ResponseSink) -> None:
        await ErrorResponse(self.status, self.message, self.cause).write(sink)


@dataclass(frozen=True, slots=True)
class ServiceUnavailable:
    """503: fixed body, no parameters."""

    status = 503
    message = "service unavailable"

    async def write(self, sink: ResponseSink) -> None:
        await ErrorResponse(self.status, self.message).write(sink)


# Every renderable response. A closed union: isinstance() accepts it directly.
Response = (
    RawResponse
    | ObjectResponse
    | JSONResponse
    | ErrorResponse
    | InternalServerError
    | BadRequest
    | ServiceUnavailable
)
