"""Componentes de UI para la CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import json

from rich.console import RenderableType
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.errors import HttpInstanceError, NonSuccessStatus
from core.domain.models import ResponseEnvelope


def build_response_table(envelope: ResponseEnvelope) -> Table:
    """Línea de estado más headers de la respuesta."""

    table = Table(title=f"HTTP {envelope.status}")
    table.add_column("Header", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for name, value in sorted(envelope.headers.items()):
        table.add_row(name, value)
    return table


def build_payload_renderable(envelope: ResponseEnvelope) -> RenderableType:
    """Texto tal cual; cualquier otro payload se imprime como JSON."""

    if not envelope.has_data:
        return Text("(no payload)", style="dim")
    if isinstance(envelope.data, str):
        return Text(envelope.data)
    return JSON(json.dumps(envelope.data, ensure_ascii=False))


def build_failure_panel(error: HttpInstanceError) -> Panel:
    """Panel rojo con el `kind` y el mensaje del error."""

    body = Text()
    body.append(f"{error.kind}\n", style="bold")
    body.append(error.message)
    if isinstance(error, NonSuccessStatus) and error.response.has_data:
        body.append("\n\n")
        body.append(str(error.response.data), style="dim")
    return Panel(body, title=Text("Request failed", style="bold red"), border_style="red")
