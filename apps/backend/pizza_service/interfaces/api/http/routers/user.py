"""
===============================================================================
TARJETA CRC — interfaces/api/http/routers/user.py
===============================================================================

Class/Module:
    User Router (/api/user)

Responsibilities:
    - Devolver el usuario autenticado.
    - Actualizar un usuario (él mismo o admin) y re-emitir su token.
    - Listar (paginado, filtro por nombre) y borrar usuarios (admin).

Collaborators:
    - container (user / session repositories)
    - identity.access_control.can_manage_user
    - identity.auth_users.create_access_token
===============================================================================
"""

from __future__ import annotations

from pizza_service.container import get_session_repository, get_user_repository
from pizza_service.crosscutting.error_responses import forbidden
from pizza_service.domain.repositories import SessionRepository, UserRepository
from pizza_service.identity.access_control import can_manage_user
from pizza_service.identity.auth_users import create_access_token
from pizza_service.identity.users import User
from fastapi import APIRouter, Depends, Query, Response

from ..dependencies import require_admin, require_user
from ..schemas.user import UpdateUserReq

router = APIRouter(prefix="/api/user", tags=["user"])

ENDPOINT_DOCS = [
    {
        "method": "GET",
        "path": "/api/user/me",
        "requiresAuth": True,
        "description": "Get authenticated user",
    },
    {
        "method": "PUT",
        "path": "/api/user/:userId",
        "requiresAuth": True,
        "description": "Update user",
    },
    {
        "method": "GET",
        "path": "/api/user?page=1&limit=10&name=*",
        "requiresAuth": True,
        "description": "Gets a list of users",
    },
    {
        "method": "DELETE",
        "path": "/api/user/:userId",
        "requiresAuth": True,
        "description": "Delete user",
    },
]


@router.get("/me")
def get_me(user: User = Depends(require_user)):
    return user.to_dict()


@router.put("/{user_id}")
def update_user(
    user_id: int,
    req: UpdateUserReq,
    user: User = Depends(require_user),
    users: UserRepository = Depends(get_user_repository),
    sessions: SessionRepository = Depends(get_session_repository),
):
    if not can_manage_user(user, user_id):
        raise forbidden("unauthorized")

    updated = users.update_user(
        user_id, name=req.name, email=req.email, password=req.password
    )
    token = create_access_token(updated)
    sessions.login_user(updated.id, token)
    return {"user": updated.to_dict(), "token": token}


@router.get("")
def list_users(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    name: str = Query(default="*"),
    _admin: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    return users.list_users(limit=limit, page=page, name=name).to_dict()


@router.delete("/{user_id}", status_code=204)
def delete_user(
    user_id: int,
    _admin: User = Depends(require_admin),
    users: UserRepository = Depends(get_user_repository),
):
    users.delete_user(user_id)
    return Response(status_code=204)
