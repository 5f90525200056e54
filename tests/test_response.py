"""Tests for routekit.http.response: rendering order, JSON, error variants."""

import dataclasses
import math

import pytest

from routekit.http.response import (
    BadRequest,
    ErrorResponse,
    InternalServerError,
    JSONResponse,
    ObjectResponse,
    RawResponse,
    Response,
    ServiceUnavailable,
)
from routekit.testing import RecordingSink


class TestRawResponse:
    @pytest.mark.asyncio
    async def test_status_then_headers_then_body(self) -> None:
        sink = RecordingSink()
        await RawResponse(201, {"X-A": "1", "X-B": "2"}, b"hello").write(sink)

        assert sink.calls == [
            ("status", 201),
            ("header", "X-A", "1"),
            ("header", "X-B", "2"),
            ("body", b"hello"),
        ]

    @pytest.mark.asyncio
    async def test_str_body_is_utf8(self) -> None:
        sink = RecordingSink()
        await RawResponse(200, body="héllo").write(sink)
        assert sink.body == "héllo".encode()

    @pytest.mark.asyncio
    async def test_empty_body_still_written_once(self) -> None:
        sink = RecordingSink()
        await RawResponse(204).write(sink)
        assert sink.calls == [("status", 204), ("body", b"")]

    @pytest.mark.asyncio
    async def test_sink_failure_propagates(self) -> None:
        sink = RecordingSink(fail_with=ConnectionResetError("gone"))
        with pytest.raises(ConnectionResetError):
            await RawResponse(200, body=b"x").write(sink)

    def test_frozen(self) -> None:
        response = RawResponse(200)
        with pytest.raises(dataclasses.FrozenInstanceError):
            response.status = 404  # type: ignore[misc]

    def test_headers_are_a_snapshot(self) -> None:
        headers = {"X-A": "1"}
        response = RawResponse(200, headers)
        headers["X-A"] = "changed"

        assert response.headers["X-A"] == "1"
        with pytest.raises(TypeError):
            response.headers["X-B"] = "2"  # type: ignore[index]


class TestObjectResponse:
    @pytest.mark.asyncio
    async def test_compact_json(self) -> None:
        sink = RecordingSink()
        await ObjectResponse(200, body={"a": [1, 2], "b": None}).write(sink)

        assert sink.status == 200
        assert sink.headers["Content-Type"] == "application/json"
        assert sink.body == b'{"a":[1,2],"b":null}'

    @pytest.mark.asyncio
    async def test_any_serializable_value(self) -> None:
        sink = RecordingSink()
        await ObjectResponse(200, body=[1, "two", 3.5]).write(sink)
        assert sink.body == b'[1,"two",3.5]'

    @pytest.mark.asyncio
    async def test_none_body_is_null(self) -> None:
        sink = RecordingSink()
        await ObjectResponse(200).write(sink)
        assert sink.body == b"null"

    @pytest.mark.asyncio
    async def test_user_headers_kept(self) -> None:
        sink = RecordingSink()
        await ObjectResponse(202, {"X-Request-Id": "abc"}, {"ok": True}).write(sink)

        assert sink.status == 202
        assert sink.headers == {"X-Request-Id": "abc", "Content-Type": "application/json"}

    @pytest.mark.asyncio
    async def test_content_type_always_json(self) -> None:
        sink = RecordingSink()
        await ObjectResponse(200, {"Content-Type": "text/plain"}, 1).write(sink)
        assert sink.headers["Content-Type"] == "application/json"

    @pytest.mark.asyncio
    async def test_unserializable_becomes_500(self) -> None:
        sink = RecordingSink()
        await ObjectResponse(200, body={"s": {1, 2}}).write(sink)

        assert sink.status == 500
        assert sink.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert sink.text.startswith("internal server error: ")
        assert "set" in sink.text

    @pytest.mark.asyncio
    async def test_nan_becomes_500(self) -> None:
        sink = RecordingSink()
        await ObjectResponse(200, body={"x": math.nan}).write(sink)

        assert sink.status == 500
        assert sink.text.startswith("internal server error: ")

    @pytest.mark.asyncio
    async def test_circular_reference_becomes_500(self) -> None:
        data: list[object] = []
        data.append(data)
        sink = RecordingSink()
        await ObjectResponse(200, body=data).write(sink)
        assert sink.status == 500

    @pytest.mark.asyncio
    async def test_encoding_failure_writes_body_once(self) -> None:
        sink = RecordingSink()
        await ObjectResponse(200, body=object()).write(sink)
        assert [call[0] for call in sink.calls].count("body") == 1
        assert [call[0] for call in sink.calls].count("status") == 1


class TestJSONResponse:
    @pytest.mark.asyncio
    async def test_renders_like_object_response(self) -> None:
        sink = RecordingSink()
        await JSONResponse(200, body={"hello": "world"}).write(sink)

        assert sink.headers["Content-Type"] == "application/json"
        assert sink.body == b'{"hello":"world"}'

    @pytest.mark.asyncio
    async def test_non_ascii_kept(self) -> None:
        sink = RecordingSink()
        await JSONResponse(200, body={"name": "Zoë"}).write(sink)
        assert sink.body == '{"name":"Zoë"}'.encode()

    def test_rejects_non_mapping_body(self) -> None:
        with pytest.raises(TypeError, match="mapping"):
            JSONResponse(200, body=[1, 2])  # type: ignore[arg-type]

    def test_rejects_non_string_keys(self) -> None:
        with pytest.raises(TypeError, match="strings"):
            JSONResponse(200, body={1: "one"})  # type: ignore[dict-item]

    @pytest.mark.asyncio
    async def test_unserializable_value_becomes_500(self) -> None:
        sink = RecordingSink()
        await JSONResponse(200, body={"when": object()}).write(sink)
        assert sink.status == 500


class TestErrorResponses:
    @pytest.mark.asyncio
    async def test_error_response_without_cause(self) -> None:
        sink = RecordingSink()
        await ErrorResponse(418, "teapot").write(sink)

        assert sink.calls == [
            ("status", 418),
            ("header", "Content-Type", "text/plain; charset=utf-8"),
            ("body", b"teapot"),
        ]

    @pytest.mark.asyncio
    async def test_error_response_with_cause(self) -> None:
        sink = RecordingSink()
        await ErrorResponse(409, "conflict", ValueError("version 3 is stale")).write(sink)
        assert sink.text == "conflict: version 3 is stale"

    @pytest.mark.asyncio
    async def test_internal_server_error(self) -> None:
        sink = RecordingSink()
        await InternalServerError().write(sink)

        assert sink.status == 500
        assert sink.text == "internal server error"

    @pytest.mark.asyncio
    async def test_internal_server_error_with_cause(self) -> None:
        sink = RecordingSink()
        await InternalServerError("db down").write(sink)
        assert sink.text == "internal server error: db down"

    @pytest.mark.asyncio
    async def test_bad_request(self) -> None:
        sink = RecordingSink()
        await BadRequest(ValueError("missing field 'name'")).write(sink)

        assert sink.status == 400
        assert sink.text == "bad request: missing field 'name'"

    @pytest.mark.asyncio
    async def test_bad_request_without_cause(self) -> None:
        sink = RecordingSink()
        await BadRequest().write(sink)
        assert sink.text == "bad request"

    @pytest.mark.asyncio
    async def test_service_unavailable(self) -> None:
        sink = RecordingSink()
        await ServiceUnavailable().write(sink)

        assert sink.status == 503
        assert sink.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert sink.text == "service unavailable"


class TestResponseUnion:
    @pytest.mark.parametrize(
        "response",
        [
            RawResponse(200),
            ObjectResponse(200),
            JSONResponse(200),
            ErrorResponse(400, "x"),
            InternalServerError(),
            BadRequest(),
            ServiceUnavailable(),
        ],
    )
    def test_every_variant_is_a_response(self, response: object) -> None:
        assert isinstance(response, Response)

    @pytest.mark.parametrize("value", ["ok", b"ok", {"ok": True}, None, 200])
    def test_plain_values_are_not(self, value: object) -> None:
        assert not isinstance(value, Response)
