"""
===============================================================================
CRC CARD — infrastructure/db/transaction.py
===============================================================================

Clase:
  TransactionCoordinator

Responsabilidades:
  - Ejecutar una secuencia de escrituras como una unidad atómica.
  - Commit si `work` termina bien; rollback y re-raise del error original
    si `work` falla en cualquier statement.
  - Devolver siempre la conexión al pool sin transacción abierta.

Colaboradores:
  - psycopg Connection.transaction() (BEGIN / COMMIT / ROLLBACK)
  - infrastructure/db/pool.get_pool (pool por defecto)
  - infrastructure/repositories/postgres/*: add_user, create_franchise,
    delete_franchise, delete_user, add_diner_order.
===============================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from psycopg_pool import ConnectionPool

from ...crosscutting.logger import logger

T = TypeVar("T")


class TransactionCoordinator:
    """R: Unidad de trabajo sobre una conexión del pool."""

    def __init__(self, pool: Optional[ConnectionPool] = None):
        self._pool = pool

    def _get_pool(self) -> ConnectionPool:
        if self._pool is not None:
            return self._pool

        from .pool import get_pool

        return get_pool()

    def run(self, work: Callable[[Any], T], *, operation: str = "transaction") -> T:
        """
        Ejecuta `work(conn)` dentro de una transacción.

        Todos los statements de `work` usan la misma conexión, en orden.
        Cualquier excepción deja la DB como estaba antes de llamar a run().
        """
        pool = self._get_pool()
        with pool.connection() as conn:
            try:
                with conn.transaction():
                    return work(conn)
            except Exception as exc:
                logger.warning(
                    "Transacción revertida",
                    extra={"operation": operation, "error_type": type(exc).__name__},
                )
                raise
