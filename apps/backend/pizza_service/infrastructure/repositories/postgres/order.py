"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/order.py
============================================================
Class: PostgresOrderRepository

Responsibilities:
  - Listar órdenes de un diner paginadas (id ASC) con sus ítems.
  - Crear una orden + sus ítems (snapshots) en una sola transacción.

Collaborators:
  - domain.entities.Order / OrderItem / NewOrder / OrderPage
  - infrastructure.repositories.postgres.base.PostgresRepository
  - Tablas: orders, order_items (FK a menu)

Constraints / Notes:
  - Ítems de la página se cargan en UNA query (order_id = ANY(...)).
  - menu_id inexistente -> ForeignKeyViolation -> NotFoundError.
  - Lista de ítems vacía: se acepta (la validación es del caller).
============================================================
"""

from __future__ import annotations

from typing import Optional

from psycopg_pool import ConnectionPool

from ....crosscutting.config import get_settings
from ....domain.entities import NewOrder, Order, OrderItem, OrderPage
from ...db.transaction import TransactionCoordinator
from .base import PostgresRepository


class PostgresOrderRepository(PostgresRepository):
    """R: Órdenes de diners en PostgreSQL."""

    _not_found_message = "unknown menu item"

    def __init__(
        self,
        pool: Optional[ConnectionPool] = None,
        coordinator: Optional[TransactionCoordinator] = None,
        *,
        list_per_page: Optional[int] = None,
    ):
        super().__init__(pool, coordinator)
        self._list_per_page = list_per_page

    @property
    def page_size(self) -> int:
        return self._list_per_page or get_settings().list_per_page

    def _load_items(self, order_ids: list[int]) -> dict[int, list[OrderItem]]:
        items: dict[int, list[OrderItem]] = {order_id: [] for order_id in order_ids}
        if not order_ids:
            return items

        rows = self._fetchall(
            query="""
                SELECT order_id, id, menu_id, description, price
                FROM order_items
                WHERE order_id = ANY(%s)
                ORDER BY id
            """,
            params=[order_ids],
            context_msg="PostgresOrderRepository: Failed to load order items",
            extra={"order_count": len(order_ids)},
        )
        for order_id, item_id, menu_id, description, price in rows:
            items[order_id].append(
                OrderItem(
                    id=item_id,
                    menu_id=menu_id,
                    description=description,
                    price=float(price),
                )
            )
        return items

    def get_orders(self, user_id: int, page: int = 1) -> OrderPage:
        """Página `page` (1-based) de órdenes del diner."""
        page = max(page, 1)
        limit = self.page_size
        rows = self._fetchall(
            query="""
                SELECT id, franchise_id, store_id, date
                FROM orders
                WHERE diner_id = %s
                ORDER BY id
                LIMIT %s OFFSET %s
            """,
            params=[user_id, limit, (page - 1) * limit],
            context_msg="PostgresOrderRepository: Failed to get orders",
            extra={"user_id": user_id, "page": page},
        )

        items = self._load_items([r[0] for r in rows])
        orders = [
            Order(
                id=order_id,
                diner_id=user_id,
                franchise_id=franchise_id,
                store_id=store_id,
                date=date,
                items=items[order_id],
            )
            for order_id, franchise_id, store_id, date in rows
        ]
        return OrderPage(diner_id=user_id, orders=orders, page=page)

    def add_diner_order(self, user_id: int, order: NewOrder) -> Order:
        """Inserta orden + ítems (atómico) y retorna la orden compuesta."""

        def work(conn) -> Order:
            order_id, date = conn.execute(
                """
                INSERT INTO orders (diner_id, franchise_id, store_id, date)
                VALUES (%s, %s, %s, now())
                RETURNING id, date
                """,
                (user_id, order.franchise_id, order.store_id),
            ).fetchone()

            items: list[OrderItem] = []
            for item in order.items:
                (item_id,) = conn.execute(
                    """
                    INSERT INTO order_items (order_id, menu_id, description, price)
                    VALUES (%s, %s, %s, %s)
                    RETURNING id
                    """,
                    (order_id, item.menu_id, item.description, item.price),
                ).fetchone()
                items.append(
                    OrderItem(
                        id=item_id,
                        menu_id=item.menu_id,
                        description=item.description,
                        price=item.price,
                    )
                )

            return Order(
                id=order_id,
                diner_id=user_id,
                franchise_id=order.franchise_id,
                store_id=order.store_id,
                date=date,
                items=items,
            )

        return self._in_transaction(
            work,
            operation="add_diner_order",
            context_msg="PostgresOrderRepository: Failed to add order",
            extra={"user_id": user_id, "item_count": len(order.items)},
        )
