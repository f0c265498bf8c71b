"""Taxonomía de errores de http-instance.

Reglas:
- Todo fallo esperado de una llamada es una de estas clases y se entrega
  dentro de un `Failure`, nunca se lanza (salvo `InvalidConfiguration`, que
  sale del constructor).
- `kind` es un string estable para que los callers (y la CLI) ramifiquen sin
  importar cada clase.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.domain.models import ResponseEnvelope


class HttpInstanceError(Exception):
    """Base class for all errors produced by the library."""

    kind = "error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidConfiguration(HttpInstanceError):
    """Bad base URL or option at construction time (raised, not wrapped)."""

    kind = "invalid_configuration"


class InvalidRequest(HttpInstanceError):
    """Per-call options that cannot form a request (wrong header or param types)."""

    kind = "invalid_request"


class UnsupportedScheme(HttpInstanceError):
    kind = "unsupported_scheme"

    def __init__(self, scheme: str) -> None:
        super().__init__(f"Unsupported URL scheme: {scheme!r}")
        self.scheme = scheme


class TransportError(HttpInstanceError):
    """DNS failure, refused connection, reset, protocol error."""

    kind = "transport_error"


class RequestTimeout(TransportError):
    kind = "timeout"

    def __init__(self, timeout_ms: int) -> None:
        super().__init__(f"Request timed out after {timeout_ms} ms")
        self.timeout_ms = timeout_ms


class UnsupportedContentType(HttpInstanceError):
    kind = "unsupported_content_type"

    def __init__(self, content_type: str) -> None:
        super().__init__(f"Unsupported content type: {content_type!r}")
        self.content_type = content_type


class DecodeError(HttpInstanceError):
    """Payload could not be decoded (or a request body could not be encoded)."""

    kind = "decode_error"


class NonSuccessStatus(HttpInstanceError):
    """Status outside [200, 300). The received envelope is kept for inspection."""

    kind = "non_success_status"

    def __init__(self, response: ResponseEnvelope) -> None:
        super().__init__(f"Non success status code. {response.status}")
        self.response = response

    @property
    def status(self) -> int:
        return self.response.status
