"""Ejecutor de requests sobre httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y logging para todas las llamadas.
- Convierte cada respuesta (o error de transporte) en exactamente un `Outcome`.
- Facilita testeo: se puede inyectar un `httpx.MockTransport` en vez de la red.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping

import httpx

from core.config import AppSettings
from core.domain.errors import (
    DecodeError,
    NonSuccessStatus,
    RequestTimeout,
    TransportError,
    UnsupportedContentType,
    UnsupportedScheme,
)
from core.domain.models import ResolvedRequest, ResponseEnvelope
from core.domain.result import Failure, Outcome, Success

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("http", "https")
JSON_MEDIA_TYPE = "application/json"
TEXT_MEDIA_TYPES = ("text/plain", "text/html")


def build_async_client(
    settings: AppSettings | None = None,
    *,
    timeout_ms: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the library defaults.

    Why a builder:
    - Centralizes timeout/headers so every call behaves the same.
    - `transport` lets tests replace the network.
    """

    settings = settings or AppSettings()
    timeout_ms = timeout_ms or settings.default_timeout_ms
    headers: dict[str, str] = {"User-Agent": settings.user_agent}
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_ms / 1000),
        follow_redirects=False,
        trust_env=False,
        headers=headers,
        transport=transport,
    )


def _charset(content_type: str | None, default: str = "utf-8") -> str:
    if not content_type:
        return default
    for part in content_type.split(";")[1:]:
        name, _, value = part.partition("=")
        if name.strip().lower() == "charset" and value.strip():
            return value.strip().strip('"')
    return default


def _decode_text(body: bytes, content_type: str | None) -> str:
    return body.decode(_charset(content_type))


def classify_response(status: int, headers: Mapping[str, str], body: bytes) -> Outcome:
    """Single decision tree from a buffered response to one `Outcome`.

    Order:
    1. status outside [200, 300) -> `NonSuccessStatus` (envelope kept, body as text)
    2. no content-type -> success without data
    3. `application/json` -> parsed JSON or `DecodeError`
    4. `text/plain` / `text/html` -> decoded text or `DecodeError`
    5. anything else -> `UnsupportedContentType`

    Media types are matched by case-insensitive containment.
    """

    headers = {k.lower(): v for k, v in headers.items()}
    content_type = headers.get("content-type")

    if not 200 <= status < 300:
        if body:
            try:
                text = body.decode(_charset(content_type), errors="replace")
            except LookupError:
                text = body.decode("utf-8", errors="replace")
            envelope = ResponseEnvelope(status=status, headers=headers, data=text)
        else:
            envelope = ResponseEnvelope(status=status, headers=headers)
        return Failure(NonSuccessStatus(envelope))

    if not content_type:
        return Success(ResponseEnvelope(status=status, headers=headers))

    media_type = content_type.lower()

    if JSON_MEDIA_TYPE in media_type:
        try:
            data: Any = json.loads(_decode_text(body, content_type))
        except (ValueError, LookupError) as exc:
            return Failure(DecodeError(f"Invalid JSON payload: {exc}"))
        return Success(ResponseEnvelope(status=status, headers=headers, data=data))

    if any(t in media_type for t in TEXT_MEDIA_TYPES):
        try:
            text = _decode_text(body, content_type)
        except (ValueError, LookupError) as exc:
            return Failure(DecodeError(f"Undecodable text payload: {exc}"))
        return Success(ResponseEnvelope(status=status, headers=headers, data=text))

    return Failure(UnsupportedContentType(content_type))


class HttpxRequestExecutor:
    """`RequestExecutor` implemented with one short-lived `httpx.AsyncClient` per call.

    Plain `http` goes over TCP, `https` over TLS (both handled by httpx);
    other schemes are rejected before any I/O.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    async def execute(self, request: ResolvedRequest) -> Outcome:
        scheme = request.scheme
        if scheme not in SUPPORTED_SCHEMES:
            return Failure(UnsupportedScheme(scheme))

        try:
            # httpx enforces the timeout per phase; wait_for bounds the whole call.
            return await asyncio.wait_for(self._send(request), timeout=request.timeout_ms / 1000)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning("%s %s timed out after %d ms", request.method, request.url, request.timeout_ms)
            return Failure(RequestTimeout(request.timeout_ms))
        except (httpx.HTTPError, httpx.InvalidURL, OSError) as exc:
            logger.warning("%s %s failed: %r", request.method, request.url, exc)
            return Failure(TransportError(str(exc) or type(exc).__name__))
        except Exception as exc:
            logger.exception("Unexpected error during %s %s", request.method, request.url)
            return Failure(TransportError(f"Unexpected error: {exc!r}"))

    async def _send(self, request: ResolvedRequest) -> Outcome:
        async with build_async_client(
            self._settings,
            timeout_ms=request.timeout_ms,
            transport=self._transport,
        ) as client:
            outgoing = client.build_request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.content,
            )
            logger.debug("-> %s %s", outgoing.method, outgoing.url)
            response = await client.send(outgoing, stream=True)
            try:
                buffer = bytearray()
                async for chunk in response.aiter_bytes():
                    buffer.extend(chunk)
            finally:
                await response.aclose()

        logger.debug("<- %s %s %d (%d bytes)", request.method, request.url, response.status_code, len(buffer))
        return classify_response(response.status_code, response.headers, bytes(buffer))

