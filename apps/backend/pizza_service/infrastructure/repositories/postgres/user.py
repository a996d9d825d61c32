"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/user.py
============================================================
Class: PostgresUserRepository

Responsibilities:
  - Alta de usuarios (hash + fila + roles) en una sola transacción.
  - Autenticación por email/password (Unauthorized si falla).
  - Actualización de nombre/email/password y listado paginado con filtro.
  - Baja de usuario con sus roles y sesiones (atómica).
  - Mapear filas -> identity.users.User (nunca con el hash).

Collaborators:
  - identity.passwords (hash / verify)
  - identity.users.User / Role / RoleAssignment / RoleRequest
  - infrastructure.repositories.postgres.base.PostgresRepository
  - Tablas: users, user_roles, franchises, sessions

Constraints / Notes:
  - Email duplicado -> ConflictError.
  - Franchisee: el nombre de franquicia se resuelve a id o falla con NotFound.
  - Filtro por nombre: substring, case-insensitive; `*` funciona como comodín.
  - Orden estable en listados: id ASC.
============================================================
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ....crosscutting.exceptions import (
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from ....domain.entities import UserPage
from ....identity.passwords import hash_password, verify_password
from ....identity.users import Role, RoleAssignment, RoleRequest, User
from .base import PostgresRepository


def _like_pattern(name: str) -> str:
    """Texto de usuario -> patrón ILIKE de substring (`*` = cualquier cosa)."""
    escaped = name.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped.replace('*', '%')}%"


def _row_to_assignment(role: str, object_id: Optional[int]) -> RoleAssignment:
    try:
        return RoleAssignment(role=Role(role), object_id=object_id)
    except ValueError as exc:
        raise DatabaseError(f"Invalid user role in database: {role}") from exc


class PostgresUserRepository(PostgresRepository):
    """R: Usuarios y roles en PostgreSQL."""

    _conflict_message = "user with that email already exists"

    # =========================================================
    # Roles (batch)
    # =========================================================
    def _load_roles(self, user_ids: Iterable[int]) -> dict[int, list[RoleAssignment]]:
        ids = list(user_ids)
        roles: dict[int, list[RoleAssignment]] = {user_id: [] for user_id in ids}
        if not ids:
            return roles

        rows = self._fetchall(
            query="""
                SELECT user_id, role, object_id
                FROM user_roles
                WHERE user_id = ANY(%s)
                ORDER BY id
            """,
            params=[ids],
            context_msg="PostgresUserRepository: Failed to load roles",
            extra={"user_count": len(ids)},
        )
        for user_id, role, object_id in rows:
            roles[user_id].append(_row_to_assignment(role, object_id))
        return roles

    def _with_roles(self, row: tuple) -> User:
        user_id, name, email = row[0], row[1], row[2]
        return User(
            id=user_id,
            name=name,
            email=email,
            roles=self._load_roles([user_id])[user_id],
        )

    # =========================================================
    # Public API
    # =========================================================
    def add_user(
        self,
        *,
        name: str,
        email: str,
        password: str,
        roles: Sequence[RoleRequest],
    ) -> User:
        """Crea usuario + roles (atómico). Password solo se persiste hasheado."""
        if not name or not email or not password:
            raise ValidationError("name, email, and password are required")

        password_hash = hash_password(password)

        def work(conn) -> User:
            row = conn.execute(
                "INSERT INTO users (name, email, password) VALUES (%s, %s, %s) RETURNING id",
                (name, email, password_hash),
            ).fetchone()
            user_id = row[0]

            assignments: list[RoleAssignment] = []
            for request in roles:
                object_id = None
                if request.role == Role.FRANCHISEE:
                    franchise = conn.execute(
                        "SELECT id FROM franchises WHERE name = %s",
                        (request.franchise_name,),
                    ).fetchone()
                    if franchise is None:
                        raise NotFoundError(
                            f"unknown franchise {request.franchise_name}"
                        )
                    object_id = franchise[0]
                conn.execute(
                    "INSERT INTO user_roles (user_id, role, object_id) VALUES (%s, %s, %s)",
                    (user_id, request.role.value, object_id),
                )
                assignments.append(RoleAssignment(role=request.role, object_id=object_id))

            return User(id=user_id, name=name, email=email, roles=assignments)

        return self._in_transaction(
            work,
            operation="add_user",
            context_msg="PostgresUserRepository: Failed to add user",
            extra={"email": email},
        )

    def get_user(self, email: str, password: str) -> User:
        """Autentica. Unauthorized si el email no existe o el password no coincide."""
        row = self._fetchone(
            query="SELECT id, name, email, password FROM users WHERE email = %s",
            params=[email],
            context_msg="PostgresUserRepository: Failed to get user by email",
            extra={"email": email},
        )
        if row is None or not verify_password(password or "", row[3]):
            raise UnauthorizedError("unknown user")
        return self._with_roles(row)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        row = self._fetchone(
            query="SELECT id, name, email FROM users WHERE id = %s",
            params=[user_id],
            context_msg="PostgresUserRepository: Failed to get user by id",
            extra={"user_id": user_id},
        )
        return self._with_roles(row) if row else None

    def update_user(
        self,
        user_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        password: Optional[str] = None,
    ) -> User:
        """Actualiza los campos presentes y retorna el usuario refrescado."""
        assignments: list[str] = []
        params: list[object] = []
        if name:
            assignments.append("name = %s")
            params.append(name)
        if email:
            assignments.append("email = %s")
            params.append(email)
        if password:
            assignments.append("password = %s")
            params.append(hash_password(password))

        if assignments:
            updated = self._execute(
                query=f"UPDATE users SET {', '.join(assignments)} WHERE id = %s",
                params=[*params, user_id],
                context_msg="PostgresUserRepository: Failed to update user",
                extra={"user_id": user_id},
            )
            if updated == 0:
                raise NotFoundError("unknown user")

        user = self.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("unknown user")
        return user

    def list_users(
        self,
        *,
        limit: int,
        offset: Optional[int] = None,
        page: int = 1,
        name: Optional[str] = None,
    ) -> UserPage:
        """
        Página de usuarios ordenada por id.

        - offset explícito gana; si no, (page-1)*limit (page es 1-based).
        - more=True si existe al menos una fila más allá de la página.
        """
        if limit <= 0:
            raise ValidationError("limit must be positive")
        if offset is None:
            offset = max(page - 1, 0) * limit
        if offset < 0:
            raise ValidationError("offset must not be negative")

        rows = self._fetchall(
            query="""
                SELECT id, name, email
                FROM users
                WHERE name ILIKE %s
                ORDER BY id
                LIMIT %s OFFSET %s
            """,
            params=[_like_pattern(name or "*"), limit + 1, offset],
            context_msg="PostgresUserRepository: Failed to list users",
            extra={"limit": limit, "offset": offset},
        )

        more = len(rows) > limit
        rows = rows[:limit]
        roles = self._load_roles(r[0] for r in rows)
        users = [
            User(id=r[0], name=r[1], email=r[2], roles=roles[r[0]]) for r in rows
        ]
        return UserPage(users=users, more=more)

    def delete_user(self, user_id: int) -> None:
        """Borra sesiones, roles y usuario (atómico). Usuario inexistente: no-op."""

        def work(conn) -> None:
            conn.execute("DELETE FROM sessions WHERE user_id = %s", (user_id,))
            conn.execute("DELETE FROM user_roles WHERE user_id = %s", (user_id,))
            conn.execute("DELETE FROM users WHERE id = %s", (user_id,))

        self._in_transaction(
            work,
            operation="delete_user",
            context_msg="PostgresUserRepository: Failed to delete user",
            extra={"user_id": user_id},
        )
