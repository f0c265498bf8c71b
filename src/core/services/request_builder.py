"""Convierte configuración de instancia + opciones de llamada en un `ResolvedRequest`.

Todo aquí es puro: mismas entradas, misma salida. Sin I/O.
"""

from __future__ import annotations

import json
from typing import Any, Mapping
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from pydantic import BaseModel

from core.domain.errors import DecodeError, InvalidRequest
from core.domain.models import CallOptions, InstanceConfig, ResolvedRequest


def _param_scalar(name: str, value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise InvalidRequest(f"Unsupported value for query parameter {name!r}: {type(value).__name__}")


def _param_values(name: str, value: Any) -> list[str]:
    """A list/tuple becomes a repeated parameter (`a=1&a=2`)."""

    if isinstance(value, (list, tuple)):
        return [_param_scalar(name, v) for v in value]
    return [_param_scalar(name, value)]


def merge_params(url: str, *layers: Mapping[str, Any] | None) -> str:
    """Merge query parameters into `url`. Later layers win by name.

    Pairs already present in the URL are kept unless a layer overrides them.

    Raises:
        InvalidRequest: a value is not a str/int/float/bool (or a list of them).
    """

    overrides: dict[str, list[str]] = {}
    for layer in layers:
        if layer:
            overrides.update({k: _param_values(k, v) for k, v in layer.items()})
    if not overrides:
        return url

    parts = urlsplit(url)
    pairs = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k not in overrides]
    pairs.extend((k, v) for k, values in overrides.items() for v in values)
    return urlunsplit(parts._replace(query=urlencode(pairs)))


def resolve_url(
    base_url: str,
    path: str,
    base_params: Mapping[str, Any] | None = None,
    params: Mapping[str, Any] | None = None,
) -> str:
    """Resolve `path` against `base_url` (RFC 3986) and merge query parameters.

    - `/x` replaces the base path, `x` resolves relative to it.
    - An absolute URL replaces the base entirely.
    - Per-call `params` override `base_params`.
    """

    url = urljoin(base_url, path) if path else base_url
    return merge_params(url, base_params, params)


def merge_headers(*layers: Mapping[str, str] | None) -> dict[str, str]:
    """Case-insensitive, last-write-wins header merge.

    The surviving entry keeps the spelling of the layer that wrote it last.
    """

    merged: dict[str, str] = {}
    names: dict[str, str] = {}
    for layer in layers:
        if not layer:
            continue
        for name, value in layer.items():
            key = name.lower()
            previous = names.get(key)
            if previous is not None:
                del merged[previous]
            merged[name] = str(value)
            names[key] = name
    return merged


def has_header(headers: Mapping[str, str], name: str) -> bool:
    wanted = name.lower()
    return any(k.lower() == wanted for k in headers)


def serialize_body(body: Any) -> tuple[bytes | None, dict[str, str]]:
    """Encode a request body and compute its content headers.

    Returns `(content, headers)`:
    - mapping/list (or a pydantic model) -> compact JSON, `application/json`
    - str -> UTF-8, `text/plain`
    - bytes -> as is, `application/octet-stream`
    - None -> `(None, {})`
    """

    if body is None:
        return None, {}

    if isinstance(body, (bytes, bytearray)):
        content = bytes(body)
        content_type = "application/octet-stream"
    elif isinstance(body, str):
        content = body.encode("utf-8")
        content_type = "text/plain"
    elif isinstance(body, (Mapping, list, tuple, BaseModel)):
        value = body.model_dump(mode="json") if isinstance(body, BaseModel) else body
        try:
            text = json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise DecodeError(f"Request body is not JSON serializable: {exc}") from exc
        content = text.encode("utf-8")
        content_type = "application/json"
    else:
        raise DecodeError(f"Unsupported request body type: {type(body).__name__}")

    return content, {"content-type": content_type, "content-length": str(len(content))}


def build_request(
    config: InstanceConfig,
    method: str,
    path: str,
    options: CallOptions | None = None,
) -> ResolvedRequest:
    """Merge defaults, computed body headers and per-call options.

    Header precedence, lowest first: instance defaults, computed body headers,
    explicit per-call headers.

    Raises:
        DecodeError: the body cannot be serialized.
        InvalidRequest: a query parameter value is unsupported.
    """

    options = options or CallOptions()
    content, body_headers = serialize_body(options.body)
    return ResolvedRequest(
        method=method.upper(),
        url=resolve_url(config.base_url, path, config.params, options.params),
        headers=merge_headers(config.headers, body_headers, options.headers),
        content=content,
        timeout_ms=config.timeout_ms,
    )
