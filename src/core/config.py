"""Configuración del core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin acoplarlas al CLI.
- Permite que adapters (HTTP) y la fachada lean los defaults de forma
  consistente.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import DEFAULT_TIMEOUT_MS


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "http-instance"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "http-instance"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "http-instance"
    return Path.home() / ".config" / "http-instance"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key:
            data[key] = value.strip().strip('"').strip("'")
    return data


def write_user_env_vars(values: dict[str, str], env_path: Path | None = None) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# http-instance user config (.env)"]
    for key in sorted(existing):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Application-wide defaults.

    Why pydantic-settings:
    - Typing + validation at the edge (env vars) without cluttering the core.
    - One configuration contract for the CLI and the library.
    """

    model_config = SettingsConfigDict(
        env_prefix="HTTP_INSTANCE_",
        extra="ignore",
        case_sensitive=False,
        # Order: project first (dev), then the user's global config.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    default_timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        gt=0,
        description="Timeout per request when the instance does not set one (milliseconds).",
    )
    user_agent: str = Field(
        default="http-instance/0.1",
        min_length=1,
        description="User-Agent sent with every request unless overridden.",
    )
    log_level: str = Field(
        default="WARNING",
        description="Root logging level used by the CLI.",
    )

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value!r}")
        return level


def configure_logging(settings: AppSettings | None = None) -> None:
    """Configure root logging for entry points. The library never calls this."""

    settings = settings or AppSettings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
