"""
============================================================
TARJETA CRC
============================================================
Class: pizza_service.infrastructure.repositories (Package exports)

Responsibilities:
- Exponer implementaciones concretas de repositorios en un único punto de
  importación.
- Mantener una API estable para routers y composition root.

Collaborators:
- Repositorios Postgres (SQL crudo)
============================================================
"""

from .postgres import (
    PostgresFranchiseRepository,
    PostgresMenuRepository,
    PostgresOrderRepository,
    PostgresSessionRepository,
    PostgresUserRepository,
    get_token_signature,
)

__all__ = [
    "PostgresFranchiseRepository",
    "PostgresMenuRepository",
    "PostgresOrderRepository",
    "PostgresSessionRepository",
    "PostgresUserRepository",
    "get_token_signature",
]
