"""
===============================================================================
TARJETA CRC — dependencies.py (Dependencias de autenticación)
===============================================================================

Responsabilidades:
  - Resolver el usuario actual desde `Authorization: Bearer <jwt>`.
  - Exigir sesión activa: el JWT debe verificar Y su firma estar logueada.
  - Proveer guardias reutilizables (require_user / require_admin).

Patrones aplicados:
  - DRY: los routers solo declaran Depends(require_user).
  - Fail-fast: 401 antes de tocar repositorios de negocio.

Colaboradores:
  - identity.auth_users (extract_bearer_token / decode_access_token)
  - identity.access_control.is_admin
  - container.get_session_repository
  - crosscutting.error_responses (unauthorized / forbidden)
===============================================================================
"""

from __future__ import annotations

from pizza_service.container import get_session_repository
from pizza_service.context import set_user_context
from pizza_service.crosscutting.error_responses import forbidden, unauthorized
from pizza_service.crosscutting.exceptions import UnauthorizedError
from pizza_service.domain.repositories import SessionRepository
from pizza_service.identity.access_control import is_admin
from pizza_service.identity.auth_users import (
    decode_access_token,
    extract_bearer_token,
)
from pizza_service.identity.users import User
from fastapi import Depends, Header


def get_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    """Token crudo del header (o None)."""
    return extract_bearer_token(authorization)


def get_current_user(
    token: str | None = Depends(get_bearer_token),
    sessions: SessionRepository = Depends(get_session_repository),
) -> User | None:
    """
    Usuario autenticado o None.

    Reglas:
      - Sin token => None
      - Firma del token sin sesión (logout previo) => None
      - JWT inválido / expirado => None
    """
    if not token:
        return None
    if not sessions.is_logged_in(token):
        return None
    try:
        user = decode_access_token(token)
    except UnauthorizedError:
        return None

    set_user_context(user.id)
    return user


def require_user(user: User | None = Depends(get_current_user)) -> User:
    if user is None:
        raise unauthorized("unauthorized")
    return user


def require_admin(user: User = Depends(require_user)) -> User:
    if not is_admin(user):
        raise forbidden("unauthorized")
    return user
