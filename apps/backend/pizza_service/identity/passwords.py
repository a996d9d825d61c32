"""
===============================================================================
TARJETA CRC — identity/passwords.py
===============================================================================

Módulo:
    Credential Store (Argon2)

Responsabilidades:
    - Hashear passwords con Argon2 (salted, costo adaptativo).
    - Verificar password vs hash con la primitiva verify() de argon2.

Colaboradores:
    - infrastructure/repositories/postgres/user.py (alta / login / update)
    - infrastructure/db/schema.py (seed del admin por defecto)

Notas:
    - Sin estado: wrapper funcional sobre PasswordHasher.
    - Nunca se comparan hashes como strings (argon2 re-deriva y compara).
===============================================================================
"""

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_password_hasher = PasswordHasher()


def hash_password(password: str) -> str:
    """Hashea un password usando Argon2."""
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verifica password vs hash almacenado (False si no coincide o hash inválido)."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False
