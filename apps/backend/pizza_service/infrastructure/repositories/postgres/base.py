"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/base.py
============================================================
Class: PostgresRepository

Responsibilities:
  - Resolver el pool (inyectado o global) y el TransactionCoordinator.
  - Ejecutar SELECT/DML parametrizados con manejo de errores consistente.
  - Traducir fallas SQL conocidas a errores de dominio:
      UniqueViolation      -> ConflictError
      ForeignKeyViolation  -> NotFoundError
      resto                -> DatabaseError (encadenado al original)

Collaborators:
  - psycopg_pool.ConnectionPool / infrastructure.db.pool.get_pool
  - infrastructure.db.transaction.TransactionCoordinator
  - crosscutting.exceptions / crosscutting.logger

Constraints / Notes:
  - Los PizzaError que ya vienen tipados pasan sin tocar.
  - SQL parametrizado siempre (nunca interpolar input de usuario).
============================================================
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, NoReturn, Optional, TypeVar

from psycopg import errors as pg_errors
from psycopg_pool import ConnectionPool

from ....crosscutting.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    PizzaError,
)
from ....crosscutting.logger import logger
from ...db.transaction import TransactionCoordinator

T = TypeVar("T")


class PostgresRepository:
    """R: Base común de los repositorios PostgreSQL."""

    # R: Mensajes de dominio para violaciones de constraint (override por repo).
    _conflict_message = "duplicate entry"
    _not_found_message = "referenced entity not found"

    def __init__(
        self,
        pool: Optional[ConnectionPool] = None,
        coordinator: Optional[TransactionCoordinator] = None,
    ):
        # R: Pool inyectable para tests; en producción se obtiene por factory global.
        self._pool = pool
        self._coordinator = coordinator or TransactionCoordinator(pool)

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from ...db.pool import get_pool

        return get_pool()

    # =========================================================
    # Traducción de errores
    # =========================================================
    def _raise_translated(
        self, exc: Exception, context_msg: str, extra: dict
    ) -> NoReturn:
        if isinstance(exc, PizzaError):
            raise exc
        if isinstance(exc, pg_errors.UniqueViolation):
            logger.info(context_msg, extra={**extra, "reason": "unique_violation"})
            raise ConflictError(self._conflict_message, original_error=exc) from exc
        if isinstance(exc, pg_errors.ForeignKeyViolation):
            logger.info(context_msg, extra={**extra, "reason": "foreign_key_violation"})
            raise NotFoundError(self._not_found_message, original_error=exc) from exc

        logger.exception(context_msg, extra={**extra, "error": str(exc)})
        raise DatabaseError(context_msg, original_error=exc) from exc

    # =========================================================
    # Helpers de ejecución (DRY + errores consistentes)
    # =========================================================
    def _fetchall(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        context_msg: str,
        extra: dict,
    ) -> list[tuple]:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchall()
        except Exception as exc:
            self._raise_translated(exc, context_msg, extra)

    def _fetchone(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        context_msg: str,
        extra: dict,
    ) -> tuple | None:
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).fetchone()
        except Exception as exc:
            self._raise_translated(exc, context_msg, extra)

    def _execute(
        self,
        *,
        query: str,
        params: Iterable[object] = (),
        context_msg: str,
        extra: dict,
    ) -> int:
        """DML simple (autocommit del pool al salir del contexto). Retorna rowcount."""
        try:
            with self._get_pool().connection() as conn:
                return conn.execute(query, tuple(params)).rowcount
        except Exception as exc:
            self._raise_translated(exc, context_msg, extra)

    def _in_transaction(
        self,
        work: Callable[[Any], T],
        *,
        operation: str,
        context_msg: str,
        extra: dict,
    ) -> T:
        """Corre `work(conn)` en el TransactionCoordinator y traduce errores."""
        try:
            return self._coordinator.run(work, operation=operation)
        except Exception as exc:
            self._raise_translated(exc, context_msg, extra)
