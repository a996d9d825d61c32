"""
===============================================================================
TARJETA CRC — pizza_service/api/exception_handlers.py (Manejo Centralizado)
===============================================================================

Responsabilidades:
  - Traducir errores de dominio (PizzaError) a JSON `{message, statusCode, code}`.
  - Mapear kind -> status SOLO acá (el dominio no conoce HTTP).
  - Responder 404 `{"message": "unknown endpoint"}` para rutas inexistentes.
  - Evitar filtrar SQL / stacktraces en errores 500 de producción.

Colaboradores:
  - crosscutting.error_responses: AppHTTPException, status_for, app_exception_handler
  - crosscutting.exceptions: PizzaError y derivadas
  - crosscutting.config.get_settings (nivel de detalle)
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    app_exception_handler,
    build_error_content,
    status_for,
)
from ..crosscutting.exceptions import ErrorKind, PizzaError
from ..crosscutting.logger import logger


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def pizza_error_handler(request: Request, exc: PizzaError) -> JSONResponse:
    status_code = status_for(exc.kind)
    request_id = _request_id_from(request)

    if status_code >= 500:
        logger.error(
            "Error de servicio",
            extra={
                "code": exc.error_code,
                "error_id": exc.error_id,
                "error": exc.message,
                "request_id": request_id,
            },
        )
        detail = exc.message if not get_settings().is_production() else "Error interno."
    else:
        detail = exc.message

    app_exc = AppHTTPException(
        status_code=status_code,
        kind=exc.kind,
        detail=detail,
        errors=[{"error_id": exc.error_id}] if status_code >= 500 else None,
    )
    return await app_exception_handler(request, app_exc)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """HTTPException de Starlette/FastAPI (404 de ruta, 405, ...)."""
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"message": "unknown endpoint"})

    kind = {
        400: ErrorKind.VALIDATION,
        401: ErrorKind.UNAUTHORIZED,
        403: ErrorKind.FORBIDDEN,
        404: ErrorKind.NOT_FOUND,
        409: ErrorKind.CONFLICT,
    }.get(exc.status_code, ErrorKind.INTERNAL)
    content = build_error_content(
        status_code=exc.status_code, code=kind.value, message=str(exc.detail)
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Body/query inválidos -> 400 (contrato histórico del frontend)."""
    errors = [
        {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    app_exc = AppHTTPException(
        status_code=400,
        kind=ErrorKind.VALIDATION,
        detail="invalid request",
        errors=errors,
    )
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handler para excepciones no tipadas.

    - Log completo (stacktrace).
    - Respuesta siempre genérica: el detalle queda solo en el log.
    """
    request_id = _request_id_from(request)

    logger.error(
        "Excepción no controlada",
        exc_info=exc,
        extra={"request_id": request_id, "error": str(exc)},
    )

    app_exc = AppHTTPException(
        status_code=500,
        kind=ErrorKind.INTERNAL,
        detail="Error interno.",
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Registra handlers en la app FastAPI.

    AppHTTPException va antes que HTTPException genérico (más específico).
    """
    app.add_exception_handler(PizzaError, pizza_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
