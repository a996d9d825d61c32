"""
===============================================================================
MÓDULO: Respuestas de error estándar (JSON con `message`)
===============================================================================

Objetivo
--------
Uniformar TODOS los errores HTTP para que:
- El frontend lea siempre `message` (contrato histórico de JWT Pizza)
- El backend pueda correlacionar por request_id / error_id
- El dominio siga sin conocer status HTTP (mapeo kind -> status vive acá)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  AppHTTPException + STATUS_BY_KIND + handler

Responsabilidades:
  - Definir el cuerpo de error (ErrorBody)
  - Traducir ErrorKind -> status HTTP
  - Proveer factories de errores frecuentes
  - Proveer handler FastAPI que serializa AppHTTPException

Colaboradores:
  - crosscutting/exceptions.py (ErrorKind)
  - api/exception_handlers.py (mapea errores internos)
===============================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ErrorKind

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.TRANSIENT_STORE: 500,
    ErrorKind.EXTERNAL_SERVICE: 500,
    ErrorKind.INTERNAL: 500,
}


def status_for(kind: ErrorKind) -> int:
    """Status HTTP para un ErrorKind (500 para cualquier kind desconocido)."""
    return STATUS_BY_KIND.get(kind, 500)


class ErrorBody(BaseModel):
    """
    Cuerpo de error.

    Campos:
    - message: texto para el usuario final
    - statusCode: status HTTP (redundante, lo consume el frontend)
    - code: código estable para clientes
    - errors: detalles opcionales (request_id, error_id, campos inválidos)
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    message: str
    status_code: int = Field(serialization_alias="statusCode")
    code: str
    errors: list[dict[str, Any]] | None = None


class AppHTTPException(HTTPException):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      AppHTTPException

    Responsabilidades:
      - Adjuntar un código estable (ErrorKind.value)
      - Transportar detalles (errors[]) y campos extra del contrato original
        (ej: followLinkToEndChaos en fallas de la fábrica)

    Colaboradores:
      - app_exception_handler()
    ----------------------------------------------------------------------------
    """

    def __init__(
        self,
        status_code: int,
        kind: ErrorKind,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.kind = kind
        self.errors = errors
        self.extra = extra or {}


# ---------------------------------------------------------------------------
# Factories de error (helpers)
# ---------------------------------------------------------------------------
def validation_error(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(400, ErrorKind.VALIDATION, detail, errors)


def not_found(detail: str = "not found") -> AppHTTPException:
    return AppHTTPException(404, ErrorKind.NOT_FOUND, detail)


def conflict(detail: str) -> AppHTTPException:
    return AppHTTPException(409, ErrorKind.CONFLICT, detail)


def unauthorized(detail: str = "unauthorized") -> AppHTTPException:
    return AppHTTPException(401, ErrorKind.UNAUTHORIZED, detail)


def forbidden(detail: str = "forbidden") -> AppHTTPException:
    return AppHTTPException(403, ErrorKind.FORBIDDEN, detail)


def internal_error(
    detail: str = "Ocurrió un error inesperado", extra: dict[str, Any] | None = None
) -> AppHTTPException:
    return AppHTTPException(500, ErrorKind.INTERNAL, detail, extra=extra)


# ---------------------------------------------------------------------------
# Serialización + handler FastAPI
# ---------------------------------------------------------------------------
def build_error_content(
    *,
    status_code: int,
    code: str,
    message: str,
    errors: list[dict[str, Any]] | None = None,
    extra: dict[str, Any] | None = None,
) -> dict[str, Any]:
    body = ErrorBody(
        message=message,
        status_code=status_code,
        code=code,
        errors=errors or None,
    )
    content = body.model_dump(by_alias=True, exclude_none=True)
    if extra:
        content.update(extra)
    return content


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """Handler para AppHTTPException (propaga headers opcionales)."""
    request_id = getattr(getattr(request, "state", None), "request_id", None)

    errors = exc.errors or []
    if request_id:
        errors = [*errors, {"request_id": request_id}]

    content = build_error_content(
        status_code=exc.status_code,
        code=exc.kind.value,
        message=str(exc.detail),
        errors=errors,
        extra=exc.extra,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )
