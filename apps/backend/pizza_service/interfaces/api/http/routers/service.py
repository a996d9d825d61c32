"""
===============================================================================
TARJETA CRC — interfaces/api/http/routers/service.py
===============================================================================

Class/Module:
    Service Router (/, /api/docs)

Responsibilities:
    - Mensaje de bienvenida con la versión desplegada.
    - Documentación liviana: endpoints de cada router + config no sensible.
===============================================================================
"""

from __future__ import annotations

from pizza_service.crosscutting.config import get_settings
from fastapi import APIRouter

from . import auth, franchise, order, user

router = APIRouter(tags=["service"])


@router.get("/")
def welcome():
    return {"message": "welcome to JWT Pizza", "version": get_settings().version}


@router.get("/api/docs")
def docs():
    settings = get_settings()
    return {
        "version": settings.version,
        "endpoints": [
            *auth.ENDPOINT_DOCS,
            *user.ENDPOINT_DOCS,
            *order.ENDPOINT_DOCS,
            *franchise.ENDPOINT_DOCS,
        ],
        "config": {"factory": settings.factory_url, "db": settings.db_host},
    }
