"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio (MenuItem, Franchise, Store, Order, páginas)

Responsabilidades:
    - Definir estructuras centrales del negocio (sin infraestructura).
    - Serializar a dict con las claves camelCase que consume el frontend.
    - Mantener tipos claros para repositorios y routers.

Colaboradores:
    - domain.repositories: contratos que persisten/recuperan estas entidades.
    - infrastructure/repositories/postgres/*: mapean filas -> entidades.
    - interfaces/api/http/routers/*: retornan `to_dict()` como JSON.

Principios:
    - Sin dependencias a DB/FastAPI.
    - OrderItem es un snapshot (descripción y precio congelados al ordenar).
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..identity.users import User


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


# ---------------------------------------------------------------------------
# Menu
# ---------------------------------------------------------------------------


@dataclass
class MenuItem:
    """Ítem del menú (pizza) tal como se vende hoy."""

    title: str
    description: str
    image: str
    price: float
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image": self.image,
            "price": self.price,
        }


# ---------------------------------------------------------------------------
# Franchise / Store
# ---------------------------------------------------------------------------


@dataclass
class FranchiseAdmin:
    """Usuario que administra una franquicia (rol franchisee con objectId)."""

    id: int
    name: str
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email}


@dataclass
class Store:
    """
    Tienda de una franquicia.

    total_revenue solo se calcula en vistas detalladas (None en las demás).
    """

    id: int
    name: str
    franchise_id: Optional[int] = None
    total_revenue: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.franchise_id is not None:
            data["franchiseId"] = self.franchise_id
        if self.total_revenue is not None:
            data["totalRevenue"] = self.total_revenue
        return data


@dataclass
class Franchise:
    """Franquicia con sus admins (orden de alta) y sus tiendas."""

    id: int
    name: str
    admins: List[FranchiseAdmin] = field(default_factory=list)
    stores: List[Store] = field(default_factory=list)
    # R: En listados no detallados los admins no se cargan (y no se exponen).
    include_admins: bool = True

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": self.id, "name": self.name}
        if self.include_admins:
            data["admins"] = [a.to_dict() for a in self.admins]
        data["stores"] = [s.to_dict() for s in self.stores]
        return data


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@dataclass
class NewOrderItem:
    """Línea pedida por el diner (antes de persistir)."""

    menu_id: int
    description: str
    price: float


@dataclass
class NewOrder:
    """Pedido entrante: franquicia, tienda y líneas."""

    franchise_id: int
    store_id: int
    items: List[NewOrderItem] = field(default_factory=list)


@dataclass
class OrderItem:
    """Snapshot de una línea de orden (no cambia si cambia el menú)."""

    menu_id: int
    description: str
    price: float
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "menuId": self.menu_id,
            "description": self.description,
            "price": self.price,
        }


@dataclass
class Order:
    """Orden de un diner con sus líneas."""

    id: int
    diner_id: int
    franchise_id: int
    store_id: int
    date: Optional[datetime] = None
    items: List[OrderItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "franchiseId": self.franchise_id,
            "storeId": self.store_id,
            "date": _iso(self.date),
            "items": [i.to_dict() for i in self.items],
        }


# ---------------------------------------------------------------------------
# Páginas (resultados paginados)
# ---------------------------------------------------------------------------


@dataclass
class UserPage:
    users: List[User]
    more: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"users": [u.to_dict() for u in self.users], "more": self.more}


@dataclass
class FranchisePage:
    franchises: List[Franchise]
    more: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "franchises": [f.to_dict() for f in self.franchises],
            "more": self.more,
        }


@dataclass
class OrderPage:
    diner_id: int
    orders: List[Order]
    page: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dinerId": self.diner_id,
            "orders": [o.to_dict() for o in self.orders],
            "page": self.page,
        }
