from typing import Callable

import httpx
import pytest

from adapters.http_client import HttpxRequestExecutor
from core.config import AppSettings
from core.services.http_instance import HttpInstance

BASE_URL = "https://api.example.com/v1/"


@pytest.fixture
def settings(monkeypatch, tmp_path):
    # Keep a developer's .env / HTTP_INSTANCE_* variables out of the tests.
    monkeypatch.chdir(tmp_path)
    for name in ("HTTP_INSTANCE_DEFAULT_TIMEOUT_MS", "HTTP_INSTANCE_USER_AGENT", "HTTP_INSTANCE_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return AppSettings(_env_file=None)


@pytest.fixture
def make_executor(settings) -> Callable[..., HttpxRequestExecutor]:
    def _make(handler) -> HttpxRequestExecutor:
        return HttpxRequestExecutor(settings, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def make_instance(settings, make_executor) -> Callable[..., HttpInstance]:
    def _make(handler, base_url: str = BASE_URL, **kwargs) -> HttpInstance:
        return HttpInstance(base_url, settings=settings, executor=make_executor(handler), **kwargs)

    return _make


class Recorder:
    """MockTransport handler that stores every request and replies with a fixed response."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.requests: list[httpx.Request] = []
        self.response = response

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.response is not None:
            # Fresh object per call: a sent response is bound to its request.
            return httpx.Response(
                self.response.status_code,
                headers=self.response.headers,
                content=self.response.content,
            )
        return httpx.Response(200, json={"ok": True})

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()
