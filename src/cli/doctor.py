"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.errors import InvalidConfiguration
from core.domain.result import Failure, Success
from core.services.http_instance import HttpInstance

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        api = HttpInstance(url, settings=settings)
    except InvalidConfiguration as exc:
        return False, exc.message
    match await api.get():
        case Success(value=envelope):
            return True, f"HTTP {envelope.status}"
        case Failure(error=error):
            return False, f"{error.kind}: {error.message}"


@app.command()
def run(
    url: str = typer.Option("https://example.com/", "--url", help="URL used for the connectivity check."),
) -> None:
    """Show the effective settings and check connectivity."""

    settings = AppSettings()

    table = Table(title="http-instance Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Default timeout", "OK", f"{settings.default_timeout_ms} ms")
    table.add_row("User-Agent", "OK", settings.user_agent)
    table.add_row("Log level", "OK", settings.log_level)
    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))

    ok_http, detail_http = asyncio.run(_check_http(url, settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)


@app.command(name="set-defaults")
def set_defaults() -> None:
    """Interactive setup of the defaults stored in the user config .env."""

    settings = AppSettings()
    timeout_ms = typer.prompt("Default timeout (ms)", default=settings.default_timeout_ms, type=int)
    user_agent = typer.prompt("User-Agent", default=settings.user_agent, show_default=True).strip()

    if timeout_ms <= 0:
        raise typer.BadParameter("timeout must be positive")
    if not user_agent:
        raise typer.BadParameter("User-Agent is required")

    env_path = write_user_env_vars(
        {
            "HTTP_INSTANCE_DEFAULT_TIMEOUT_MS": str(timeout_ms),
            "HTTP_INSTANCE_USER_AGENT": user_agent,
        }
    )

    _console.print(f"[green]Saved defaults to:[/green] {env_path}")
