"""Contrato del ejecutor de requests.

Por qué Protocol:
- Contrato estructural (duck typing) sin herencia rígida.
- La fachada depende de esta abstracción, así los tests pueden cambiar el
  ejecutor httpx por un stub.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ResolvedRequest
from core.domain.result import Outcome


@runtime_checkable
class RequestExecutor(Protocol):
    """Minimal contract for something that performs one request.

    Design rules:
    - `execute` is asynchronous because it performs network I/O.
    - It never raises for expected failures: it returns exactly one `Outcome`.
    """

    async def execute(self, request: ResolvedRequest) -> Outcome:
        """Send `request` and classify the response."""

        ...
