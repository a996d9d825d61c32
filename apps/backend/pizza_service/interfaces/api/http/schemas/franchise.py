"""
===============================================================================
TARJETA CRC — schemas/franchise.py
===============================================================================

Módulo:
    Schemas HTTP para franquicias y tiendas
===============================================================================
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class FranchiseAdminReq(BaseModel):
    email: str = Field(..., min_length=1)


class CreateFranchiseReq(BaseModel):
    """`{name, admins: [{email}]}`."""

    name: str = Field(..., min_length=1)
    admins: list[FranchiseAdminReq] = Field(default_factory=list)

    @property
    def admin_emails(self) -> list[str]:
        return [a.email for a in self.admins]


class CreateStoreReq(BaseModel):
    name: str = Field(..., min_length=1)
