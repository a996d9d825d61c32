"""
===============================================================================
MÓDULO: Excepciones tipadas del backend (taxonomía de errores)
===============================================================================

Objetivo
--------
Tener excepciones internas coherentes, con:
- kind estable (ErrorKind), sin acoplarse a HTTP
- error_id para correlación con logs
- message “humana” (sin SQL ni secretos)

El mapeo kind -> status HTTP vive SOLO en crosscutting/error_responses.py.

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  PizzaError + subclases

Responsabilidades:
  - Estandarizar errores de dominio (not found, unauthorized, conflict, ...)
  - Representar fallas de infraestructura (DatabaseError) y de la fábrica
  - Generar error_id para rastreo

Colaboradores:
  - infrastructure/repositories/postgres/* (lanzan errores tipados)
  - api/exception_handlers.py (traduce a respuestas JSON)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from uuid import uuid4


class ErrorKind(str, Enum):
    """Categorías de error que entiende la capa de borde."""

    VALIDATION = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    TRANSIENT_STORE = "DATABASE_ERROR"
    EXTERNAL_SERVICE = "FACTORY_ERROR"
    INTERNAL = "INTERNAL_ERROR"


class PizzaError(Exception):
    """
    ----------------------------------------------------------------------------
    CRC (Class Card)
    ----------------------------------------------------------------------------
    Clase:
      PizzaError

    Responsabilidades:
      - Base para errores internos del sistema
      - Proveer kind + error_id + message

    Colaboradores:
      - api/exception_handlers.py
    ----------------------------------------------------------------------------
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    @property
    def error_code(self) -> str:
        return self.kind.value


class ValidationError(PizzaError):
    """Input malformado o incompleto."""

    kind = ErrorKind.VALIDATION


class NotFoundError(PizzaError):
    """La entidad referenciada (usuario, franquicia, tienda, ítem) no existe."""

    kind = ErrorKind.NOT_FOUND


class UnauthorizedError(PizzaError):
    """Credenciales inválidas o sesión inexistente."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(PizzaError):
    """Autenticado pero sin privilegios suficientes."""

    kind = ErrorKind.FORBIDDEN


class ConflictError(PizzaError):
    """Violación de unicidad (email o nombre de franquicia duplicado)."""

    kind = ErrorKind.CONFLICT


class DatabaseError(PizzaError):
    """Errores de DB (conexión, query, timeout, pool). No se reintenta."""

    kind = ErrorKind.TRANSIENT_STORE


# Nombre de la taxonomía: mismo tipo, alias explícito.
TransientStoreError = DatabaseError


class FactoryError(PizzaError):
    """La fábrica de pizzas rechazó o no pudo procesar la orden."""

    kind = ErrorKind.EXTERNAL_SERVICE

    def __init__(
        self,
        message: str,
        *,
        report_url: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error=original_error)
        self.report_url = report_url
        self.status_code = status_code
