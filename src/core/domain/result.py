"""Tipo resultado éxito/fallo.

Cada llamada de un `HttpInstance` produce exactamente un `Outcome`:
`Success(envelope)` o `Failure(error)`. El caller lo inspecciona de forma
explícita::

    match await api.get("/users/1"):
        case Success(value=envelope):
            ...
        case Failure(error=NonSuccessStatus() as err):
            ...
        case Failure(error=err):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from core.domain.errors import HttpInstanceError
from core.domain.models import ResponseEnvelope

T = TypeVar("T")
D = TypeVar("D")


@dataclass(frozen=True, slots=True)
class Success(Generic[T]):
    value: T

    def is_success(self) -> bool:
        return True

    def is_failure(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: D) -> T | D:
        return self.value


@dataclass(frozen=True, slots=True)
class Failure:
    error: HttpInstanceError

    def is_success(self) -> bool:
        return False

    def is_failure(self) -> bool:
        return True

    def unwrap(self):
        """Raise the carried error."""

        raise self.error

    def unwrap_or(self, default: D) -> D:
        return default

    @property
    def kind(self) -> str:
        return self.error.kind


Outcome = Union[Success[ResponseEnvelope], Failure]
