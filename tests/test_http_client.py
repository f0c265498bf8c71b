"""Tests for the httpx executor: content negotiation, status policy, transport failures."""

import asyncio

import httpx
import pytest

from adapters.http_client import classify_response
from core.domain.errors import (
    DecodeError,
    NonSuccessStatus,
    RequestTimeout,
    TransportError,
    UnsupportedContentType,
    UnsupportedScheme,
)
from core.domain.models import ResolvedRequest
from core.domain.result import Failure, Success


def _json_headers(value="application/json"):
    return {"Content-Type": value}


class TestClassifyResponse:
    def test_json_payload(self):
        outcome = classify_response(200, _json_headers(), b'{"a":1}')
        assert isinstance(outcome, Success)
        assert outcome.value.status == 200
        assert outcome.value.data == {"a": 1}
        assert outcome.value.headers["content-type"] == "application/json"

    def test_json_media_type_is_case_insensitive(self):
        outcome = classify_response(200, _json_headers("Application/JSON; charset=utf-8"), b"[1]")
        assert outcome.unwrap().data == [1]

    def test_malformed_json_is_decode_error(self):
        outcome = classify_response(200, _json_headers(), b"not-json")
        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, DecodeError)

    def test_empty_json_body_is_decode_error(self):
        outcome = classify_response(200, _json_headers(), b"")
        assert outcome.kind == "decode_error"

    def test_json_null_is_data(self):
        envelope = classify_response(200, _json_headers(), b"null").unwrap()
        assert envelope.has_data
        assert envelope.data is None

    def test_missing_content_type_has_no_data(self):
        envelope = classify_response(204, {}, b"").unwrap()
        assert envelope.status == 204
        assert not envelope.has_data

    def test_unsupported_content_type(self):
        outcome = classify_response(200, {"content-type": "text/xml"}, b"<a/>")
        assert isinstance(outcome.error, UnsupportedContentType)
        assert outcome.error.content_type == "text/xml"

    @pytest.mark.parametrize("content_type", ["text/plain", "text/html; charset=utf-8"])
    def test_text_payload(self, content_type):
        envelope = classify_response(200, {"content-type": content_type}, "héllo".encode()).unwrap()
        assert envelope.data == "héllo"

    def test_text_uses_declared_charset(self):
        envelope = classify_response(200, {"content-type": "text/plain; charset=latin-1"}, b"caf\xe9").unwrap()
        assert envelope.data == "café"

    def test_undecodable_text_is_decode_error(self):
        outcome = classify_response(200, {"content-type": "text/plain"}, b"\xff\xfe\xfa")
        assert outcome.kind == "decode_error"

    def test_unknown_charset_is_decode_error(self):
        outcome = classify_response(200, {"content-type": "text/plain; charset=nope-42"}, b"x")
        assert outcome.kind == "decode_error"

    def test_non_success_status_keeps_envelope(self):
        outcome = classify_response(404, _json_headers(), b'{"error":"missing"}')
        assert isinstance(outcome.error, NonSuccessStatus)
        assert outcome.error.status == 404
        assert outcome.error.response.data == '{"error":"missing"}'

    def test_non_success_status_with_unknown_charset(self):
        outcome = classify_response(500, {"content-type": "text/plain; charset=bogus"}, b"oops")
        assert outcome.kind == "non_success_status"
        assert outcome.error.response.data == "oops"

    def test_unusual_status_is_non_success(self):
        outcome = classify_response(699, {}, b"")
        assert isinstance(outcome.error, NonSuccessStatus)
        assert outcome.error.status == 699

    def test_non_success_status_checked_before_content_type(self):
        outcome = classify_response(500, {"content-type": "text/xml"}, b"")
        assert outcome.kind == "non_success_status"
        assert not outcome.error.response.has_data

    def test_redirect_is_not_success(self):
        outcome = classify_response(302, {"location": "/elsewhere"}, b"")
        assert outcome.kind == "non_success_status"


def _request(url="https://api.example.com/items", **kwargs):
    return ResolvedRequest(method="GET", url=url, **kwargs)


class TestHttpxRequestExecutor:
    @pytest.mark.asyncio
    async def test_success_roundtrip(self, make_executor, recorder):
        outcome = await make_executor(recorder).execute(_request(headers={"Accept": "application/json"}))
        assert outcome.unwrap().data == {"ok": True}
        assert recorder.last.method == "GET"
        assert recorder.last.headers["accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_user_agent_from_settings(self, make_executor, recorder, settings):
        await make_executor(recorder).execute(_request())
        assert recorder.last.headers["user-agent"] == settings.user_agent

    @pytest.mark.asyncio
    async def test_plain_http_is_supported(self, make_executor, recorder):
        outcome = await make_executor(recorder).execute(_request(url="http://api.example.com/items"))
        assert outcome.is_success()
        assert recorder.last.url.scheme == "http"

    @pytest.mark.asyncio
    async def test_unsupported_scheme_never_hits_transport(self, make_executor, recorder):
        outcome = await make_executor(recorder).execute(_request(url="ftp://files.example.com/a"))
        assert isinstance(outcome.error, UnsupportedScheme)
        assert outcome.error.scheme == "ftp"
        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self, make_executor):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        outcome = await make_executor(handler).execute(_request())
        assert type(outcome.error) is TransportError
        assert "connection refused" in outcome.error.message

    @pytest.mark.asyncio
    async def test_httpx_timeout_is_request_timeout(self, make_executor):
        def handler(request):
            raise httpx.ReadTimeout("read timed out", request=request)

        outcome = await make_executor(handler).execute(_request(timeout_ms=300))
        assert isinstance(outcome.error, RequestTimeout)
        assert outcome.error.timeout_ms == 300

    @pytest.mark.asyncio
    async def test_deadline_elapses_before_response(self, make_executor):
        async def handler(request):
            await asyncio.sleep(1)
            return httpx.Response(200, json={"late": True})

        outcome = await make_executor(handler).execute(_request(timeout_ms=50))
        assert outcome.is_failure()
        assert outcome.kind == "timeout"
        assert outcome.unwrap_or(None) is None

    @pytest.mark.asyncio
    async def test_unexpected_error_is_funneled(self, make_executor):
        def handler(request):
            raise RuntimeError("boom")

        outcome = await make_executor(handler).execute(_request())
        assert isinstance(outcome.error, TransportError)
        assert "boom" in outcome.error.message

    @pytest.mark.asyncio
    async def test_error_while_reading_body_yields_no_payload(self, make_executor):
        class BrokenStream(httpx.AsyncByteStream):
            async def __aiter__(self):
                yield b'{"partial":'
                raise httpx.ReadError("connection reset")

        def handler(request):
            return httpx.Response(200, headers={"content-type": "application/json"}, stream=BrokenStream())

        outcome = await make_executor(handler).execute(_request())
        assert isinstance(outcome.error, TransportError)

    @pytest.mark.asyncio
    async def test_body_is_sent(self, make_executor, recorder):
        request = ResolvedRequest(
            method="PUT",
            url="https://api.example.com/items/1",
            headers={"content-type": "text/plain", "content-length": "2"},
            content=b"hi",
        )
        await make_executor(recorder).execute(request)
        assert recorder.last.content == b"hi"
        assert recorder.last.headers["content-length"] == "2"
