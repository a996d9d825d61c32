"""
===============================================================================
TARJETA CRC — interfaces/api/http/routers/order.py
===============================================================================

Class/Module:
    Order Router (/api/order)

Responsibilities:
    - Exponer el menú (lectura pública, alta solo admin).
    - Listar órdenes del diner autenticado (paginado).
    - Crear la orden y enviarla a la fábrica; propagar su JWT y reporte.

Collaborators:
    - container (menu / order repositories, factory client)
    - infrastructure.services.FactoryClient
    - crosscutting.metrics.record_order_placed
===============================================================================
"""

from __future__ import annotations

from pizza_service.container import (
    get_factory_client,
    get_menu_repository,
    get_order_repository,
)
from pizza_service.crosscutting.error_responses import forbidden, internal_error
from pizza_service.crosscutting.exceptions import FactoryError
from pizza_service.crosscutting.metrics import record_order_placed
from pizza_service.domain.repositories import MenuRepository, OrderRepository
from pizza_service.identity.access_control import is_admin
from pizza_service.identity.users import User
from pizza_service.infrastructure.services import FactoryClient
from fastapi import APIRouter, Depends, Query

from ..dependencies import require_user
from ..schemas.order import MenuItemReq, OrderReq

router = APIRouter(prefix="/api/order", tags=["order"])

ENDPOINT_DOCS = [
    {
        "method": "GET",
        "path": "/api/order/menu",
        "requiresAuth": False,
        "description": "Get the pizza menu",
    },
    {
        "method": "PUT",
        "path": "/api/order/menu",
        "requiresAuth": True,
        "description": "Add an item to the menu",
    },
    {
        "method": "GET",
        "path": "/api/order?page=1",
        "requiresAuth": True,
        "description": "Get the orders for the authenticated user",
    },
    {
        "method": "POST",
        "path": "/api/order",
        "requiresAuth": True,
        "description": "Create a order for the authenticated user",
    },
]


@router.get("/menu")
def get_menu(menu: MenuRepository = Depends(get_menu_repository)):
    return [item.to_dict() for item in menu.get_menu()]


@router.put("/menu")
def add_menu_item(
    req: MenuItemReq,
    user: User = Depends(require_user),
    menu: MenuRepository = Depends(get_menu_repository),
):
    if not is_admin(user):
        raise forbidden("unable to add menu item")

    menu.add_menu_item(req.to_entity())
    return [item.to_dict() for item in menu.get_menu()]


@router.get("")
def get_orders(
    page: int = Query(default=1, ge=1),
    user: User = Depends(require_user),
    orders: OrderRepository = Depends(get_order_repository),
):
    return orders.get_orders(user.id, page).to_dict()


@router.post("")
def create_order(
    req: OrderReq,
    user: User = Depends(require_user),
    orders: OrderRepository = Depends(get_order_repository),
    factory: FactoryClient = Depends(get_factory_client),
):
    order = orders.add_diner_order(user.id, req.to_entity())
    record_order_placed(len(order.items))

    try:
        result = factory.create_order(user, order)
    except FactoryError as exc:
        raise internal_error(
            "Failed to fulfill order at factory",
            extra={"followLinkToEndChaos": exc.report_url},
        ) from exc

    return {
        "order": order.to_dict(),
        "followLinkToEndChaos": result.report_url,
        "jwt": result.jwt,
    }
