"""
===============================================================================
TARJETA CRC — identity/access_control.py
===============================================================================

Módulo:
    Capacidades por rol (Policy Helpers)

Responsabilidades:
    - Responder “¿tiene este usuario el rol X (sobre la franquicia Y)?”.
    - Encapsular las reglas de administración de franquicias/tiendas.

Colaboradores:
    - identity.users: User, Role.
    - interfaces/api/http/routers/*: chequeos de autorización.

Notas:
    - Lógica pura: no depende de FastAPI ni de la DB (fácil de testear).
===============================================================================
"""

from __future__ import annotations

from .users import Role, User


def has_role(user: User | None, role: Role, object_id: int | None = None) -> bool:
    """True si el usuario tiene `role` (y, si se pide, sobre `object_id`)."""
    if user is None:
        return False
    for assignment in user.roles:
        if assignment.role != role:
            continue
        if object_id is None or assignment.object_id == object_id:
            return True
    return False


def is_admin(user: User | None) -> bool:
    return has_role(user, Role.ADMIN)


def can_manage_franchise(user: User | None, franchise_id: int) -> bool:
    """Admin global o franquiciado de esa franquicia."""
    return is_admin(user) or has_role(user, Role.FRANCHISEE, franchise_id)


def can_manage_user(user: User | None, target_user_id: int) -> bool:
    """Un usuario puede editarse a sí mismo; un admin puede editar a cualquiera."""
    if user is None:
        return False
    return user.id == target_user_id or is_admin(user)
