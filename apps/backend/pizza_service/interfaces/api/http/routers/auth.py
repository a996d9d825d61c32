"""
===============================================================================
TARJETA CRC — interfaces/api/http/routers/auth.py
===============================================================================

Class/Module:
    Auth Router (/api/auth)

Responsibilities:
    - Registrar diners (POST), loguear (PUT) y desloguear (DELETE).
    - Emitir JWT y registrar su firma como sesión activa.

Collaborators:
    - container (user / session repositories)
    - identity.auth_users.create_access_token
    - dependencies (require_user / get_bearer_token)
===============================================================================
"""

from __future__ import annotations

from pizza_service.container import get_session_repository, get_user_repository
from pizza_service.crosscutting.error_responses import validation_error
from pizza_service.crosscutting.logger import logger
from pizza_service.domain.repositories import SessionRepository, UserRepository
from pizza_service.identity.auth_users import create_access_token
from pizza_service.identity.users import Role, RoleRequest, User
from fastapi import APIRouter, Depends

from ..dependencies import get_bearer_token, require_user
from ..schemas.auth import LoginReq, RegisterReq

router = APIRouter(prefix="/api/auth", tags=["auth"])

ENDPOINT_DOCS = [
    {
        "method": "POST",
        "path": "/api/auth",
        "requiresAuth": False,
        "description": "Register a new user",
    },
    {
        "method": "PUT",
        "path": "/api/auth",
        "requiresAuth": False,
        "description": "Login existing user",
    },
    {
        "method": "DELETE",
        "path": "/api/auth",
        "requiresAuth": True,
        "description": "Logout a user",
    },
]


def _issue_session(user: User, sessions: SessionRepository) -> dict:
    token = create_access_token(user)
    sessions.login_user(user.id, token)
    return {"user": user.to_dict(), "token": token}


@router.post("")
def register(
    req: RegisterReq,
    users: UserRepository = Depends(get_user_repository),
    sessions: SessionRepository = Depends(get_session_repository),
):
    if not req.name or not req.email or not req.password:
        raise validation_error("name, email, and password are required")

    user = users.add_user(
        name=req.name,
        email=req.email,
        password=req.password,
        roles=[RoleRequest(role=Role.DINER)],
    )
    logger.info("usuario registrado", extra={"user_id": user.id})
    return _issue_session(user, sessions)


@router.put("")
def login(
    req: LoginReq,
    users: UserRepository = Depends(get_user_repository),
    sessions: SessionRepository = Depends(get_session_repository),
):
    if not req.email or not req.password:
        raise validation_error("email and password are required")

    user = users.get_user(req.email, req.password)
    return _issue_session(user, sessions)


@router.delete("")
def logout(
    _user: User = Depends(require_user),
    token: str | None = Depends(get_bearer_token),
    sessions: SessionRepository = Depends(get_session_repository),
):
    sessions.logout_user(token or "")
    return {"message": "logout successful"}
