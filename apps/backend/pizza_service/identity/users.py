"""
===============================================================================
TARJETA CRC — identity/users.py
===============================================================================

Módulo:
    Modelos de Usuario y Roles

Responsabilidades:
    - Definir el enum cerrado de roles (admin, franchisee, diner).
    - Definir RoleAssignment (rol + franquicia opcional) y User.
    - Mantener el contrato de datos de auth centralizado y estable.

Colaboradores:
    - identity/access_control.py: has_role() sobre User.roles.
    - identity/auth_users.py: serializa User en los claims del JWT.
    - infrastructure/repositories/postgres/user.py: mapea filas -> User.

Notas:
    - User NUNCA lleva el hash del password: el hash vive solo en la tabla.
    - Este módulo NO contiene lógica de negocio: solo “shapes” de datos.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Role(str, Enum):
    """Roles soportados (conjunto cerrado)."""

    ADMIN = "admin"
    FRANCHISEE = "franchisee"
    DINER = "diner"


@dataclass(frozen=True, slots=True)
class RoleAssignment:
    """
    Rol asignado a un usuario.

    object_id solo tiene sentido para FRANCHISEE (id de la franquicia).
    """

    role: Role
    object_id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role.value}
        if self.object_id:
            data["objectId"] = self.object_id
        return data


@dataclass(frozen=True, slots=True)
class RoleRequest:
    """
    Rol pedido al crear un usuario.

    Para FRANCHISEE, `franchise_name` se resuelve a un id al persistir.
    """

    role: Role
    franchise_name: str | None = None


@dataclass(slots=True)
class User:
    """Usuario tal como se expone a callers (sin password)."""

    id: int
    name: str
    email: str
    roles: list[RoleAssignment] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "roles": [r.to_dict() for r in self.roles],
        }
