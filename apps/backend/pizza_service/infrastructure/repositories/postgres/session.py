"""
============================================================
TARJETA CRC — infrastructure/repositories/postgres/session.py
============================================================
Class: PostgresSessionRepository

Responsibilities:
  - Registrar sesiones activas (login) por firma del token.
  - Responder "¿está logueado?" con un lookup por PK.
  - Revocar sesiones (logout) de forma idempotente.

Collaborators:
  - infrastructure.repositories.postgres.base.PostgresRepository
  - Tabla: sessions (signature PK, user_id)

Constraints / Notes:
  - Nunca se guarda el token completo: solo su firma (último segmento).
  - get_token_signature es pura: sin I/O y nunca lanza.
============================================================
"""

from __future__ import annotations

from .base import PostgresRepository


def get_token_signature(token: str | None) -> str:
    """
    Firma de un token `header.payload.signature`.

    Retorna lo que sigue al último punto si hay ≥3 segmentos; "" si no.
    """
    if not token:
        return ""
    parts = token.split(".")
    if len(parts) < 3:
        return ""
    return parts[-1]


class PostgresSessionRepository(PostgresRepository):
    """R: Sesiones activas en PostgreSQL."""

    def login_user(self, user_id: int, token: str) -> None:
        signature = get_token_signature(token)
        self._execute(
            query="""
                INSERT INTO sessions (signature, user_id)
                VALUES (%s, %s)
                ON CONFLICT (signature) DO NOTHING
            """,
            params=[signature, user_id],
            context_msg="PostgresSessionRepository: Failed to login user",
            extra={"user_id": user_id},
        )

    def is_logged_in(self, token: str) -> bool:
        signature = get_token_signature(token)
        if not signature:
            return False
        row = self._fetchone(
            query="SELECT user_id FROM sessions WHERE signature = %s",
            params=[signature],
            context_msg="PostgresSessionRepository: Failed to check session",
            extra={},
        )
        return row is not None

    def logout_user(self, token: str) -> None:
        # R: Borrar una sesión inexistente no es un error.
        self._execute(
            query="DELETE FROM sessions WHERE signature = %s",
            params=[get_token_signature(token)],
            context_msg="PostgresSessionRepository: Failed to logout user",
            extra={},
        )
