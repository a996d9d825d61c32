"""
===============================================================================
TARJETA CRC — interfaces/api/http/routers/franchise.py
===============================================================================

Class/Module:
    Franchise Router (/api/franchise)

Responsibilities:
    - Listar franquicias (detalle con admins/revenue solo para admin).
    - Listar las franquicias de un usuario (él mismo o admin).
    - Crear / borrar franquicias (admin).
    - Crear / borrar tiendas (admin o franchisee de esa franquicia).

Collaborators:
    - container.get_franchise_repository
    - identity.access_control (is_admin / can_manage_franchise)
===============================================================================
"""

from __future__ import annotations

from pizza_service.container import get_franchise_repository
from pizza_service.crosscutting.error_responses import forbidden
from pizza_service.domain.entities import Franchise
from pizza_service.domain.repositories import FranchiseRepository
from pizza_service.identity.access_control import can_manage_franchise, is_admin
from pizza_service.identity.users import User
from fastapi import APIRouter, Depends, Query

from ..dependencies import get_current_user, require_user
from ..schemas.franchise import CreateFranchiseReq, CreateStoreReq

router = APIRouter(prefix="/api/franchise", tags=["franchise"])

ENDPOINT_DOCS = [
    {
        "method": "GET",
        "path": "/api/franchise?page=0&limit=10&name=*",
        "requiresAuth": False,
        "description": "List all the franchises",
    },
    {
        "method": "GET",
        "path": "/api/franchise/:userId",
        "requiresAuth": True,
        "description": "List a user's franchises",
    },
    {
        "method": "POST",
        "path": "/api/franchise",
        "requiresAuth": True,
        "description": "Create a new franchise",
    },
    {
        "method": "DELETE",
        "path": "/api/franchise/:franchiseId",
        "requiresAuth": True,
        "description": "Delete a franchise",
    },
    {
        "method": "POST",
        "path": "/api/franchise/:franchiseId/store",
        "requiresAuth": True,
        "description": "Create a new franchise store",
    },
    {
        "method": "DELETE",
        "path": "/api/franchise/:franchiseId/store/:storeId",
        "requiresAuth": True,
        "description": "Delete a store",
    },
]


def _can_manage(user: User, franchise: Franchise) -> bool:
    # R: Los admins persistidos cuentan aunque el token sea anterior al rol.
    return can_manage_franchise(user, franchise.id) or any(
        admin.id == user.id for admin in franchise.admins
    )


@router.get("")
def list_franchises(
    page: int = Query(default=0, ge=0),
    limit: int = Query(default=10, ge=1, le=100),
    name: str = Query(default="*"),
    user: User | None = Depends(get_current_user),
    franchises: FranchiseRepository = Depends(get_franchise_repository),
):
    result = franchises.get_franchises(
        page=page,
        limit=limit,
        name_filter=name,
        include_details=is_admin(user),
    )
    return result.to_dict()


@router.get("/{user_id}")
def list_user_franchises(
    user_id: int,
    user: User = Depends(require_user),
    franchises: FranchiseRepository = Depends(get_franchise_repository),
):
    if user.id != user_id and not is_admin(user):
        return []
    return [f.to_dict() for f in franchises.get_user_franchises(user_id)]


@router.post("")
def create_franchise(
    req: CreateFranchiseReq,
    user: User = Depends(require_user),
    franchises: FranchiseRepository = Depends(get_franchise_repository),
):
    if not is_admin(user):
        raise forbidden("unable to create a franchise")
    return franchises.create_franchise(req.name, req.admin_emails).to_dict()


@router.delete("/{franchise_id}")
def delete_franchise(
    franchise_id: int,
    user: User = Depends(require_user),
    franchises: FranchiseRepository = Depends(get_franchise_repository),
):
    if not is_admin(user):
        raise forbidden("unable to delete a franchise")
    franchises.delete_franchise(franchise_id)
    return {"message": "franchise deleted"}


@router.post("/{franchise_id}/store")
def create_store(
    franchise_id: int,
    req: CreateStoreReq,
    user: User = Depends(require_user),
    franchises: FranchiseRepository = Depends(get_franchise_repository),
):
    franchise = franchises.get_franchise(franchise_id)
    if not _can_manage(user, franchise):
        raise forbidden("unable to create a store")
    return franchises.create_store(franchise_id, req.name).to_dict()


@router.delete("/{franchise_id}/store/{store_id}")
def delete_store(
    franchise_id: int,
    store_id: int,
    user: User = Depends(require_user),
    franchises: FranchiseRepository = Depends(get_franchise_repository),
):
    franchise = franchises.get_franchise(franchise_id)
    if not _can_manage(user, franchise):
        raise forbidden("unable to delete a store")
    franchises.delete_store(franchise_id, store_id)
    return {"message": "store deleted"}
