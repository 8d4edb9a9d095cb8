"""
Resultados etiquetados para las operaciones de servicio.

Cada operación pública devuelve Ok(valor) o Err(tipo, mensaje); ninguna
excepción del backend cruza hacia las rutas.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    AUTH_ERROR = "AuthError"
    NOT_FOUND = "NotFound"
    UNAUTHORIZED = "Unauthorized"
    FORBIDDEN = "Forbidden"
    BACKEND_ERROR = "BackendError"
    INVALID_INPUT = "InvalidInput"


# Código HTTP para cada tipo de error
HTTP_STATUS = {
    ErrorKind.AUTH_ERROR: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.BACKEND_ERROR: 500,
    ErrorKind.INVALID_INPUT: 400,
}


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T = None
    success = True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    success = False

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.kind]

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "kind": self.kind.value}


Result = Union[Ok[T], Err]


def auth_error(message: str) -> Err:
    return Err(ErrorKind.AUTH_ERROR, message)


def not_found(message: str) -> Err:
    return Err(ErrorKind.NOT_FOUND, message)


def unauthorized(message: str) -> Err:
    return Err(ErrorKind.UNAUTHORIZED, message)


def forbidden(message: str) -> Err:
    return Err(ErrorKind.FORBIDDEN, message)


def backend_error(message: str) -> Err:
    return Err(ErrorKind.BACKEND_ERROR, message)


def invalid_input(message: str) -> Err:
    return Err(ErrorKind.INVALID_INPUT, message)
