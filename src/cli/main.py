"""http-instance CLI (Typer).

Issues one request through `HttpInstance` and renders the outcome with Rich.
Exit codes: 0 success, 1 failed call, 2 bad arguments/configuration.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, List, Optional
from urllib.parse import urlsplit, urlunsplit

import typer
from rich.console import Console

from adapters.http_client import HttpxRequestExecutor
from cli import doctor
from cli.ui_components import build_failure_panel, build_payload_renderable, build_response_table
from core.config import AppSettings, configure_logging
from core.domain.errors import InvalidConfiguration
from core.domain.result import Failure, Success
from core.interfaces.executor import RequestExecutor
from core.services.http_instance import HttpInstance

app = typer.Typer(no_args_is_help=True, help="Minimal HTTP client returning success/failure outcomes.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

METHODS = ("GET", "POST", "PUT", "DELETE")


def build_executor(settings: AppSettings) -> RequestExecutor:
    return HttpxRequestExecutor(settings)


def split_url(url: str) -> tuple[str, str]:
    """Split an absolute URL into `(base_url, path)` for `HttpInstance`."""

    parts = urlsplit(url)
    base = urlunsplit((parts.scheme, parts.netloc, "/", "", ""))
    path = urlunsplit(("", "", parts.path or "/", parts.query, ""))
    return base, path


def _parse_pairs(values: list[str] | None, sep: str, option: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for raw in values or []:
        if sep not in raw:
            raise typer.BadParameter(f"expected NAME{sep}VALUE, got {raw!r}", param_hint=option)
        name, value = raw.split(sep, 1)
        out[name.strip()] = value.strip()
    return out


@app.command()
def request(
    method: str = typer.Argument(..., help="GET, POST, PUT or DELETE."),
    url: str = typer.Argument(..., help="Absolute URL."),
    header: Optional[List[str]] = typer.Option(None, "--header", "-H", help="Header as 'Name: value'."),
    param: Optional[List[str]] = typer.Option(None, "--param", "-p", help="Query parameter as 'name=value'."),
    json_body: Optional[str] = typer.Option(None, "--json", help="JSON request body."),
    data: Optional[str] = typer.Option(None, "--data", "-d", help="Plain-text request body."),
    timeout_ms: Optional[int] = typer.Option(None, "--timeout-ms", min=1, help="Timeout in milliseconds."),
) -> None:
    """Send one request and print status, headers and payload."""

    settings = AppSettings()
    configure_logging(settings)

    verb = method.upper()
    if verb not in METHODS:
        raise typer.BadParameter(f"unsupported method {method!r}", param_hint="METHOD")
    if json_body is not None and data is not None:
        raise typer.BadParameter("use either --json or --data", param_hint="--json/--data")

    body: Any = None
    if json_body is not None:
        try:
            body = json.loads(json_body)
        except ValueError as exc:
            raise typer.BadParameter(f"invalid JSON: {exc}", param_hint="--json") from exc
    elif data is not None:
        body = data
    if body is not None and verb not in ("POST", "PUT"):
        raise typer.BadParameter(f"{verb} does not take a body", param_hint="--json/--data")

    headers = _parse_pairs(header, ":", "--header")
    params = _parse_pairs(param, "=", "--param")

    base_url, path = split_url(url)
    try:
        api = HttpInstance(
            base_url,
            timeout_ms=timeout_ms,
            settings=settings,
            executor=build_executor(settings),
        )
    except InvalidConfiguration as exc:
        _console.print(build_failure_panel(exc))
        raise typer.Exit(code=2) from exc

    if verb in ("POST", "PUT"):
        call = getattr(api, verb.lower())(path, body, headers=headers, params=params)
    else:
        call = getattr(api, verb.lower())(path, headers=headers, params=params)

    match asyncio.run(call):
        case Success(value=envelope):
            _console.print(build_response_table(envelope))
            _console.print(build_payload_renderable(envelope))
        case Failure(error=error):
            _console.print(build_failure_panel(error))
            raise typer.Exit(code=1)


def run() -> None:
    app()
