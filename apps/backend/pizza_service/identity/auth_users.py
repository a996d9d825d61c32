"""
===============================================================================
TARJETA CRC — identity/auth_users.py
===============================================================================

Módulo:
    Tokens de acceso (JWT)

Responsabilidades:
    - Emitir JWT de acceso firmados (HS256) con el usuario embebido.
    - Decodificar y validar JWT (firma, exp, claims mínimos) -> User.
    - Extraer token desde `Authorization: Bearer <token>`.

Colaboradores:
    - crosscutting.config.get_settings: secreto y TTL.
    - crosscutting.exceptions.UnauthorizedError: fallas de token.
    - identity.users: User / Role / RoleAssignment.

Decisiones de diseño:
    - La lógica criptográfica vive acá (borde de identidad), NO en repositorios.
    - Claims: sub, name, email, roles, iat, exp, typ, jti.
      jti hace único cada token emitido (y por ende su firma, que es la clave
      de la tabla de sesiones).
    - Errores de dominio (UnauthorizedError), nunca HTTPException: el mapeo a
      status ocurre en el borde.
    - No loguear secretos ni tokens.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import uuid4

import jwt

from ..crosscutting.config import get_settings
from ..crosscutting.exceptions import UnauthorizedError
from .users import Role, RoleAssignment, User

# ---------------------------------------------------------------------------
# Constantes (evitan strings mágicos)
# ---------------------------------------------------------------------------

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_NAME: str = "name"
CLAIM_EMAIL: str = "email"
CLAIM_ROLES: str = "roles"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_TYP: str = "typ"
CLAIM_JTI: str = "jti"

TOKEN_TYPE_ACCESS: str = "access"


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """Settings de auth (snapshot)."""

    jwt_secret: str
    jwt_access_ttl_minutes: int


def get_auth_settings() -> AuthSettings:
    """Construye un snapshot de settings de auth."""
    s = get_settings()
    return AuthSettings(
        jwt_secret=s.jwt_secret,
        jwt_access_ttl_minutes=s.jwt_access_ttl_minutes,
    )


# ---------------------------------------------------------------------------
# Emitir / decodificar
# ---------------------------------------------------------------------------


def create_access_token(user: User, settings: AuthSettings | None = None) -> str:
    """Crea un JWT de acceso firmado con el usuario (sin password) embebido."""
    auth_settings = settings or get_auth_settings()

    now = datetime.now(timezone.utc)
    expires_at = now + timedelta(minutes=auth_settings.jwt_access_ttl_minutes)

    payload: dict[str, Any] = {
        CLAIM_SUB: str(user.id),
        CLAIM_NAME: user.name,
        CLAIM_EMAIL: user.email,
        CLAIM_ROLES: [r.to_dict() for r in user.roles],
        CLAIM_IAT: int(now.timestamp()),
        CLAIM_EXP: int(expires_at.timestamp()),
        CLAIM_TYP: TOKEN_TYPE_ACCESS,
        CLAIM_JTI: uuid4().hex,
    }

    return jwt.encode(payload, auth_settings.jwt_secret, algorithm=JWT_ALGORITHM)


def _parse_roles(raw: Any) -> list[RoleAssignment]:
    if not isinstance(raw, list):
        raise UnauthorizedError("Token inválido.")

    roles: list[RoleAssignment] = []
    for item in raw:
        if not isinstance(item, dict):
            raise UnauthorizedError("Token inválido.")
        try:
            role = Role(str(item.get("role")))
        except ValueError as exc:
            raise UnauthorizedError("Token inválido.") from exc
        object_id = item.get("objectId")
        roles.append(
            RoleAssignment(role=role, object_id=int(object_id) if object_id else None)
        )
    return roles


def decode_access_token(token: str, settings: AuthSettings | None = None) -> User:
    """Decodifica y valida un JWT de acceso y reconstruye el User.

    Errores:
        - UnauthorizedError si expiró, la firma es inválida o faltan claims.
    """
    auth_settings = settings or get_auth_settings()

    try:
        payload = jwt.decode(
            token,
            auth_settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": [CLAIM_SUB, CLAIM_EMAIL, CLAIM_EXP]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token expirado.") from exc
    except jwt.InvalidTokenError as exc:
        raise UnauthorizedError("Token inválido.") from exc

    token_type = payload.get(CLAIM_TYP)
    if token_type is not None and token_type != TOKEN_TYPE_ACCESS:
        raise UnauthorizedError("Tipo de token inválido.")

    try:
        user_id = int(payload[CLAIM_SUB])
    except (TypeError, ValueError) as exc:
        raise UnauthorizedError("Token inválido.") from exc

    return User(
        id=user_id,
        name=str(payload.get(CLAIM_NAME) or ""),
        email=str(payload[CLAIM_EMAIL]),
        roles=_parse_roles(payload.get(CLAIM_ROLES, [])),
    )


# ---------------------------------------------------------------------------
# Extracción de token (header)
# ---------------------------------------------------------------------------


def extract_bearer_token(authorization: str | None) -> str | None:
    """Extrae token desde `Authorization: Bearer <token>`."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None
