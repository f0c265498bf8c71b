"""Modelos del dominio (Pydantic v2).

Por qué Pydantic aquí:
- Validación estricta en el borde (base URL, timeout) con documentación
  autocontenida (`Field`).
- Los modelos congelados hacen inmutable la configuración por instancia.

Nota:
- Estos modelos describen *qué* viaja en una llamada, no *cómo* se envía.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

DEFAULT_TIMEOUT_MS = 1000
DEFAULT_ACCEPT = "application/json"


class InstanceConfig(BaseModel):
    """Per-instance defaults shared by every call of one `HttpInstance`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    base_url: str = Field(
        ...,
        min_length=1,
        description="Absolute base URL every call path is resolved against.",
    )
    headers: dict[str, str] = Field(
        default_factory=lambda: {"Accept": DEFAULT_ACCEPT},
        description="Default headers; per-call headers override them by name.",
    )
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Default query parameters applied to every call.",
    )
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Timeout per call (milliseconds).",
    )

    @field_validator("base_url")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        try:
            parts = urlsplit(value)
            # `port` valida el puerto; urlsplit por sí solo no lo hace.
            parts.port
            hostname = parts.hostname
        except ValueError as exc:
            raise ValueError(f"malformed base URL: {exc}") from exc
        if not parts.scheme or not hostname:
            raise ValueError("base URL must be absolute (scheme://host/...)")
        return value

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000


class CallOptions(BaseModel):
    """Options of a single call. Created fresh per call."""

    model_config = ConfigDict(extra="forbid")

    headers: dict[str, str] = Field(default_factory=dict)
    params: dict[str, Any] = Field(default_factory=dict)
    # Not coerced: serialize_body dispatches on the runtime type.
    body: Any = Field(
        default=None,
        description="Structured value (mapping/list), text, bytes, or None.",
    )


class ResolvedRequest(BaseModel):
    """Fully merged request, consumed once by a `RequestExecutor`."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    content: bytes | None = None
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, gt=0)

    @property
    def scheme(self) -> str:
        return urlsplit(self.url).scheme.lower()


class ResponseEnvelope(BaseModel):
    """Status, headers and (optionally) the decoded payload of one response."""

    model_config = ConfigDict(frozen=True)

    status: int = Field(..., ge=100, le=999)
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Response headers, lower-cased names.",
    )
    data: Any = Field(
        default=None,
        description="Decoded JSON value or text. Absent when the response declared no content type.",
    )

    @property
    def has_data(self) -> bool:
        # A JSON `null` body is data; an omitted field is not.
        return "data" in self.model_fields_set

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")
