"""
===============================================================================
TARJETA CRC — pizza_service/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer repositorios y clientes externos siguiendo DIP.
  - Exponer factories para FastAPI (Depends).
  - Mantener singletons con caching (lru_cache): un objeto por proceso.

Colaboradores:
  - pizza_service.crosscutting.config.get_settings
  - pizza_service.domain.repositories.* (puertos)
  - pizza_service.infrastructure.* (implementaciones)

Patrones aplicados:
  - Composition Root
  - Lazy singletons con lru_cache

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Este archivo NO depende de FastAPI (solo expone factories).
  - Los repositorios resuelven el pool global recién al usarse, así que
    construirlos no exige que init_pool() ya haya corrido.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .crosscutting.config import get_settings
from .domain.repositories import (
    FranchiseRepository,
    MenuRepository,
    OrderRepository,
    SessionRepository,
    UserRepository,
)
from .infrastructure.db.transaction import TransactionCoordinator
from .infrastructure.repositories import (
    PostgresFranchiseRepository,
    PostgresMenuRepository,
    PostgresOrderRepository,
    PostgresSessionRepository,
    PostgresUserRepository,
)
from .infrastructure.services import FactoryClient


@lru_cache(maxsize=1)
def get_transaction_coordinator() -> TransactionCoordinator:
    return TransactionCoordinator()


@lru_cache(maxsize=1)
def get_session_repository() -> SessionRepository:
    return PostgresSessionRepository()


@lru_cache(maxsize=1)
def get_user_repository() -> UserRepository:
    return PostgresUserRepository(coordinator=get_transaction_coordinator())


@lru_cache(maxsize=1)
def get_menu_repository() -> MenuRepository:
    return PostgresMenuRepository()


@lru_cache(maxsize=1)
def get_order_repository() -> OrderRepository:
    return PostgresOrderRepository(
        coordinator=get_transaction_coordinator(),
        list_per_page=get_settings().list_per_page,
    )


@lru_cache(maxsize=1)
def get_franchise_repository() -> FranchiseRepository:
    return PostgresFranchiseRepository(coordinator=get_transaction_coordinator())


@lru_cache(maxsize=1)
def get_factory_client() -> FactoryClient:
    settings = get_settings()
    return FactoryClient(
        base_url=settings.factory_url,
        api_key=settings.factory_api_key,
        timeout=settings.factory_timeout_seconds,
    )


def clear_container_cache() -> None:
    """Cierra el cliente HTTP de la fábrica (si se creó) y olvida los singletons."""
    if get_factory_client.cache_info().currsize:
        get_factory_client().close()

    for factory in (
        get_transaction_coordinator,
        get_session_repository,
        get_user_repository,
        get_menu_repository,
        get_order_repository,
        get_franchise_repository,
        get_factory_client,
    ):
        factory.cache_clear()
