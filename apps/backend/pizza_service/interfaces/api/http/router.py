"""
===============================================================================
TARJETA CRC — router.py (Router raíz / Composición)
===============================================================================

Responsabilidades:
  - Definir el APIRouter raíz que se incluye en FastAPI (app.include_router).
  - Componer routers por feature (auth/user/order/franchise/service).

Patrones aplicados:
  - Feature-based modular routing.
  - Factory: build_router() para testear composición sin side-effects.
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter

from .routers.auth import router as auth_router
from .routers.franchise import router as franchise_router
from .routers.order import router as order_router
from .routers.service import router as service_router
from .routers.user import router as user_router


def build_router() -> APIRouter:
    """Construye el router raíz con todos los sub-routers."""
    api_router = APIRouter()

    api_router.include_router(service_router)
    api_router.include_router(auth_router)
    api_router.include_router(user_router)
    api_router.include_router(order_router)
    api_router.include_router(franchise_router)

    return api_router


router = build_router()

__all__ = ["router", "build_router"]
