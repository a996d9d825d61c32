"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/franchise.py
============================================================
Class: PostgresFranchiseRepository

Responsibilities:
  - Listar franquicias paginadas con filtro por nombre (`*` = comodín).
  - Cargar franquicias con admins y tiendas (+ revenue en vistas detalladas).
  - Crear franquicias resolviendo admins por email (todo o nada).
  - Borrar franquicias con sus tiendas y roles de franchisee (atómico).
  - Crear / borrar tiendas, siempre acotadas a su franquicia.

Collaborators:
  - domain.entities.Franchise / FranchiseAdmin / Store / FranchisePage
  - identity.users.Role
  - infrastructure.repositories.postgres.base.PostgresRepository
  - Tablas: franchises, stores, user_roles, users, orders, order_items

Constraints / Notes:
  - Admins y tiendas se cargan en batch para toda la página.
  - Nombre duplicado -> ConflictError; franquicia inexistente -> NotFoundError.
  - Orden estable: id ASC (franquicias y tiendas), alta del rol (admins).
============================================================
"""

from __future__ import annotations

from typing import Sequence

from ....crosscutting.exceptions import NotFoundError, ValidationError
from ....domain.entities import Franchise, FranchiseAdmin, FranchisePage, Store
from ....identity.users import Role
from .base import PostgresRepository


def _name_pattern(name_filter: str) -> str:
    """Filtro de nombre -> patrón ILIKE. Solo `*` es comodín."""
    escaped = (
        name_filter.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    )
    return escaped.replace("*", "%")


class PostgresFranchiseRepository(PostgresRepository):
    """R: Franquicias y tiendas en PostgreSQL."""

    _conflict_message = "franchise with that name already exists"
    _not_found_message = "unknown franchise"

    # =========================================================
    # Carga en batch (admins / tiendas)
    # =========================================================
    def _load_admins(self, franchise_ids: list[int]) -> dict[int, list[FranchiseAdmin]]:
        admins: dict[int, list[FranchiseAdmin]] = {fid: [] for fid in franchise_ids}
        if not franchise_ids:
            return admins

        rows = self._fetchall(
            query="""
                SELECT ur.object_id, u.id, u.name, u.email
                FROM user_roles ur
                JOIN users u ON u.id = ur.user_id
                WHERE ur.role = %s AND ur.object_id = ANY(%s)
                ORDER BY ur.id
            """,
            params=[Role.FRANCHISEE.value, franchise_ids],
            context_msg="PostgresFranchiseRepository: Failed to load admins",
            extra={"franchise_count": len(franchise_ids)},
        )
        for franchise_id, user_id, user_name, email in rows:
            admins[franchise_id].append(
                FranchiseAdmin(id=user_id, name=user_name, email=email)
            )
        return admins

    def _load_stores(
        self, franchise_ids: list[int], *, with_revenue: bool
    ) -> dict[int, list[Store]]:
        stores: dict[int, list[Store]] = {fid: [] for fid in franchise_ids}
        if not franchise_ids:
            return stores

        if with_revenue:
            query = """
                SELECT s.franchise_id, s.id, s.name, COALESCE(SUM(oi.price), 0)
                FROM stores s
                LEFT JOIN orders o ON o.store_id = s.id
                LEFT JOIN order_items oi ON oi.order_id = o.id
                WHERE s.franchise_id = ANY(%s)
                GROUP BY s.franchise_id, s.id, s.name
                ORDER BY s.id
            """
        else:
            query = """
                SELECT franchise_id, id, name
                FROM stores
                WHERE franchise_id = ANY(%s)
                ORDER BY id
            """

        rows = self._fetchall(
            query=query,
            params=[franchise_ids],
            context_msg="PostgresFranchiseRepository: Failed to load stores",
            extra={"franchise_count": len(franchise_ids)},
        )
        for row in rows:
            store = Store(id=row[1], name=row[2])
            if with_revenue:
                store.total_revenue = float(row[3])
            stores[row[0]].append(store)
        return stores

    def _compose(self, rows: list[tuple], *, include_details: bool) -> list[Franchise]:
        ids = [r[0] for r in rows]
        stores = self._load_stores(ids, with_revenue=include_details)
        admins = self._load_admins(ids) if include_details else {}
        return [
            Franchise(
                id=franchise_id,
                name=franchise_name,
                admins=admins.get(franchise_id, []),
                stores=stores[franchise_id],
                include_admins=include_details,
            )
            for franchise_id, franchise_name in rows
        ]

    # =========================================================
    # Public API
    # =========================================================
    def get_franchises(
        self,
        *,
        page: int = 0,
        limit: int = 10,
        name_filter: str = "*",
        include_details: bool = False,
    ) -> FranchisePage:
        """Página `page` (0-based); more=True si hay franquicias después."""
        if limit <= 0:
            raise ValidationError("limit must be positive")
        page = max(page, 0)

        rows = self._fetchall(
            query="""
                SELECT id, name
                FROM franchises
                WHERE name ILIKE %s
                ORDER BY id
                LIMIT %s OFFSET %s
            """,
            params=[_name_pattern(name_filter or "*"), limit + 1, page * limit],
            context_msg="PostgresFranchiseRepository: Failed to list franchises",
            extra={"page": page, "limit": limit},
        )

        more = len(rows) > limit
        franchises = self._compose(rows[:limit], include_details=include_details)
        return FranchisePage(franchises=franchises, more=more)

    def get_franchise(self, franchise_id: int) -> Franchise:
        row = self._fetchone(
            query="SELECT id, name FROM franchises WHERE id = %s",
            params=[franchise_id],
            context_msg="PostgresFranchiseRepository: Failed to get franchise",
            extra={"franchise_id": franchise_id},
        )
        if row is None:
            raise NotFoundError("unknown franchise")
        return self._compose([row], include_details=True)[0]

    def get_user_franchises(self, user_id: int) -> list[Franchise]:
        """Franquicias (detalladas) que administra el usuario."""
        rows = self._fetchall(
            query="""
                SELECT f.id, f.name
                FROM franchises f
                WHERE f.id IN (
                    SELECT object_id FROM user_roles
                    WHERE user_id = %s AND role = %s
                )
                ORDER BY f.id
            """,
            params=[user_id, Role.FRANCHISEE.value],
            context_msg="PostgresFranchiseRepository: Failed to get user franchises",
            extra={"user_id": user_id},
        )
        return self._compose(rows, include_details=True)

    def create_franchise(self, name: str, admin_emails: Sequence[str]) -> Franchise:
        """
        Crea franquicia + roles franchisee de sus admins (atómico).

        Un email sin usuario aborta todo con NotFoundError (no se escribe nada).
        """
        if not name:
            raise ValidationError("franchise name is required")

        # R: Un email repetido no duplica el rol; se conserva el orden de alta.
        emails = list(dict.fromkeys(admin_emails))

        def work(conn) -> Franchise:
            admins: list[FranchiseAdmin] = []
            for email in emails:
                row = conn.execute(
                    "SELECT id, name FROM users WHERE email = %s", (email,)
                ).fetchone()
                if row is None:
                    raise NotFoundError(
                        f"unknown user for franchise admin {email} provided"
                    )
                admins.append(FranchiseAdmin(id=row[0], name=row[1], email=email))

            (franchise_id,) = conn.execute(
                "INSERT INTO franchises (name) VALUES (%s) RETURNING id", (name,)
            ).fetchone()

            for admin in admins:
                conn.execute(
                    "INSERT INTO user_roles (user_id, role, object_id) VALUES (%s, %s, %s)",
                    (admin.id, Role.FRANCHISEE.value, franchise_id),
                )

            return Franchise(id=franchise_id, name=name, admins=admins, stores=[])

        return self._in_transaction(
            work,
            operation="create_franchise",
            context_msg="PostgresFranchiseRepository: Failed to create franchise",
            extra={"franchise_name": name, "admin_count": len(emails)},
        )

    def delete_franchise(self, franchise_id: int) -> None:
        """Borra tiendas, roles franchisee y la franquicia: todo o nada."""

        def work(conn) -> None:
            conn.execute("DELETE FROM stores WHERE franchise_id = %s", (franchise_id,))
            conn.execute(
                "DELETE FROM user_roles WHERE role = %s AND object_id = %s",
                (Role.FRANCHISEE.value, franchise_id),
            )
            conn.execute("DELETE FROM franchises WHERE id = %s", (franchise_id,))

        self._in_transaction(
            work,
            operation="delete_franchise",
            context_msg="PostgresFranchiseRepository: Failed to delete franchise",
            extra={"franchise_id": franchise_id},
        )

    def create_store(self, franchise_id: int, name: str) -> Store:
        if not name:
            raise ValidationError("store name is required")

        row = self._fetchone(
            query="INSERT INTO stores (franchise_id, name) VALUES (%s, %s) RETURNING id",
            params=[franchise_id, name],
            context_msg="PostgresFranchiseRepository: Failed to create store",
            extra={"franchise_id": franchise_id},
        )
        return Store(id=row[0], name=name, franchise_id=franchise_id)

    def delete_store(self, franchise_id: int, store_id: int) -> None:
        # R: El id de tienda solo no alcanza: debe pertenecer a esa franquicia.
        self._execute(
            query="DELETE FROM stores WHERE franchise_id = %s AND id = %s",
            params=[franchise_id, store_id],
            context_msg="PostgresFranchiseRepository: Failed to delete store",
            extra={"franchise_id": franchise_id, "store_id": store_id},
        )
