"""
===============================================================================
TARJETA CRC — schemas/order.py
===============================================================================

Módulo:
    Schemas HTTP para menú y órdenes

Responsabilidades:
    - Definir DTOs de request (camelCase en el cable, snake_case en Python).
    - Convertir DTOs -> entidades de dominio (MenuItem / NewOrder).
===============================================================================
"""

from __future__ import annotations

from pizza_service.domain.entities import MenuItem, NewOrder, NewOrderItem
from pydantic import BaseModel, ConfigDict, Field


class MenuItemReq(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)

    def to_entity(self) -> MenuItem:
        return MenuItem(
            title=self.title,
            description=self.description,
            image=self.image,
            price=self.price,
        )


class OrderItemReq(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    menu_id: int = Field(..., alias="menuId")
    description: str
    price: float = Field(..., ge=0)


class OrderReq(BaseModel):
    """Orden entrante: `{franchiseId, storeId, items: [{menuId, description, price}]}`."""

    model_config = ConfigDict(populate_by_name=True)

    franchise_id: int = Field(..., alias="franchiseId")
    store_id: int = Field(..., alias="storeId")
    items: list[OrderItemReq] = Field(default_factory=list)

    def to_entity(self) -> NewOrder:
        return NewOrder(
            franchise_id=self.franchise_id,
            store_id=self.store_id,
            items=[
                NewOrderItem(
                    menu_id=i.menu_id, description=i.description, price=i.price
                )
                for i in self.items
            ],
        )
