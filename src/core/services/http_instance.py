"""`HttpInstance`: una base URL, defaults compartidos, entry points por verbo.

Responsabilidad:
- Validar y congelar la configuración por instancia.
- Combinar path, query params, headers y body de cada llamada en un
  `ResolvedRequest` y entregarlo a un `RequestExecutor`.
- Devolver exactamente un `Outcome` por llamada; los fallos esperados nunca
  se lanzan.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from adapters.http_client import HttpxRequestExecutor
from core.config import AppSettings
from core.domain.errors import HttpInstanceError, InvalidConfiguration, InvalidRequest
from core.domain.models import DEFAULT_ACCEPT, CallOptions, InstanceConfig
from core.domain.result import Failure, Outcome
from core.interfaces.executor import RequestExecutor
from core.services.request_builder import build_request, merge_headers, merge_params

logger = logging.getLogger(__name__)


class HttpInstance:
    """HTTP client bound to a base URL.

    Example::

        api = HttpInstance("https://api.example.com/v1/", timeout_ms=2000)
        outcome = await api.get("users", params={"page": 2})
    """

    def __init__(
        self,
        base_url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        timeout_ms: int | None = None,
        settings: AppSettings | None = None,
        executor: RequestExecutor | None = None,
    ) -> None:
        try:
            settings = settings or AppSettings()
            self._config = InstanceConfig(
                base_url=base_url,
                headers=merge_headers({"Accept": DEFAULT_ACCEPT}, headers),
                params=dict(params or {}),
                timeout_ms=settings.default_timeout_ms if timeout_ms is None else timeout_ms,
            )
            merge_params(self._config.base_url, self._config.params)
        except (ValidationError, InvalidRequest, AttributeError, TypeError, ValueError) as exc:
            raise InvalidConfiguration(f"Invalid instance configuration: {exc}") from exc
        self._executor: RequestExecutor = executor or HttpxRequestExecutor(settings)
        logger.debug("HttpInstance created for %s", self._config.base_url)

    @classmethod
    def from_config(
        cls,
        config: InstanceConfig,
        *,
        settings: AppSettings | None = None,
        executor: RequestExecutor | None = None,
    ) -> "HttpInstance":
        return cls(
            config.base_url,
            headers=config.headers,
            params=config.params,
            timeout_ms=config.timeout_ms,
            settings=settings,
            executor=executor,
        )

    @property
    def config(self) -> InstanceConfig:
        return self._config

    async def request(self, method: str, path: str = "", options: CallOptions | None = None) -> Outcome:
        """Resolve and execute one call."""

        try:
            resolved = build_request(self._config, method, path, options)
        except HttpInstanceError as exc:
            return Failure(exc)
        return await self._executor.execute(resolved)

    async def _call(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        headers: Mapping[str, str] | None,
        params: Mapping[str, Any] | None,
    ) -> Outcome:
        try:
            options = CallOptions(headers=dict(headers or {}), params=dict(params or {}), body=body)
        except (ValidationError, TypeError, ValueError) as exc:
            return Failure(InvalidRequest(f"Invalid call options: {exc}"))
        return await self.request(method, path, options)

    async def get(
        self,
        path: str = "",
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Outcome:
        return await self._call("GET", path, headers=headers, params=params)

    async def delete(
        self,
        path: str = "",
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Outcome:
        return await self._call("DELETE", path, headers=headers, params=params)

    async def post(
        self,
        path: str = "",
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Outcome:
        return await self._call("POST", path, body=body, headers=headers, params=params)

    async def put(
        self,
        path: str = "",
        body: Any = None,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Outcome:
        return await self._call("PUT", path, body=body, headers=headers, params=params)
