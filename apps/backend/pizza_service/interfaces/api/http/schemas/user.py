"""Schemas HTTP para /api/user."""

from __future__ import annotations

from pydantic import BaseModel


class UpdateUserReq(BaseModel):
    """Campos ausentes (o vacíos) no se modifican."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
