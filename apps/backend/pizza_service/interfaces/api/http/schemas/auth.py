"""
===============================================================================
TARJETA CRC — schemas/auth.py
===============================================================================

Módulo:
    Schemas HTTP para registro / login

Responsabilidades:
    - Definir DTOs de request de /api/auth.
    - Dejar la obligatoriedad de campos al router (mensaje histórico 400).
===============================================================================
"""

from __future__ import annotations

from pydantic import BaseModel


class RegisterReq(BaseModel):
    """Alta de diner. Los tres campos son obligatorios (validado en el router)."""

    name: str | None = None
    email: str | None = None
    password: str | None = None


class LoginReq(BaseModel):
    email: str | None = None
    password: str | None = None
