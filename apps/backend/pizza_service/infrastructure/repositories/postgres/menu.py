"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/menu.py
============================================================
Class: PostgresMenuRepository

Responsibilities:
  - Listar el menú completo (orden de alta).
  - Agregar ítems validando campos obligatorios.

Collaborators:
  - domain.entities.MenuItem
  - infrastructure.repositories.postgres.base.PostgresRepository
  - Tabla: menu
============================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import ValidationError
from ....domain.entities import MenuItem
from .base import PostgresRepository

_MENU_COLUMNS = "id, title, description, image, price"


def _row_to_menu_item(row: tuple) -> MenuItem:
    item_id, title, description, image, price = row
    return MenuItem(
        id=item_id,
        title=title,
        description=description,
        image=image,
        price=float(price),
    )


class PostgresMenuRepository(PostgresRepository):
    """R: Menú en PostgreSQL."""

    def get_menu(self) -> list[MenuItem]:
        rows = self._fetchall(
            query=f"SELECT {_MENU_COLUMNS} FROM menu ORDER BY id",
            context_msg="PostgresMenuRepository: Failed to get menu",
            extra={},
        )
        return [_row_to_menu_item(r) for r in rows]

    def add_menu_item(self, item: MenuItem) -> MenuItem:
        missing = [
            field
            for field in ("title", "description", "image", "price")
            if getattr(item, field) is None
        ]
        if missing:
            raise ValidationError(f"missing menu item fields: {', '.join(missing)}")

        row = self._fetchone(
            query=f"""
                INSERT INTO menu (title, description, image, price)
                VALUES (%s, %s, %s, %s)
                RETURNING {_MENU_COLUMNS}
            """,
            params=[item.title, item.description, item.image, item.price],
            context_msg="PostgresMenuRepository: Failed to add menu item",
            extra={"title": item.title},
        )
        return _row_to_menu_item(row)
