"""
===============================================================================
CRC CARD — infrastructure/db/schema.py
===============================================================================

Componente:
  Schema Initializer (bootstrap idempotente)

Responsabilidades:
  - Verificar si la base configurada existe; crearla si no.
  - Ejecutar TABLE_CREATE_STATEMENTS en orden (IF NOT EXISTS).
  - Sembrar el admin por defecto cuando la base se acaba de crear.
  - Fallar fuerte (log + re-raise): sin base no hay servicio.

Colaboradores:
  - psycopg.connect (conexiones propias, cerradas al terminar)
  - crosscutting.config.Settings (conninfo + datos del admin)
  - identity.passwords.hash_password (seed)
  - api/main.py (lifespan, antes de init_pool)

Notas:
  - CREATE DATABASE no corre dentro de una transacción: conexión autocommit
    contra la base de mantenimiento.
  - No hay migraciones: solo "crear si no existe".
===============================================================================
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import sql

from ...crosscutting.config import Settings, get_settings
from ...crosscutting.logger import logger
from ...identity.passwords import hash_password
from ...identity.users import Role

# R: Orden relevante: cada tabla se crea después de las que referencia.
TABLE_CREATE_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS sessions (
        signature TEXT PRIMARY KEY,
        user_id INTEGER NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS sessions_user_id_idx ON sessions (user_id)",
    """
    CREATE TABLE IF NOT EXISTS users (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL,
        email TEXT NOT NULL UNIQUE,
        password TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS menu (
        id SERIAL PRIMARY KEY,
        title TEXT NOT NULL,
        image TEXT NOT NULL,
        price NUMERIC(10, 4) NOT NULL,
        description TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS franchises (
        id SERIAL PRIMARY KEY,
        name TEXT NOT NULL UNIQUE
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS stores (
        id SERIAL PRIMARY KEY,
        franchise_id INTEGER NOT NULL REFERENCES franchises (id),
        name TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS stores_franchise_id_idx ON stores (franchise_id)",
    """
    CREATE TABLE IF NOT EXISTS user_roles (
        id SERIAL PRIMARY KEY,
        user_id INTEGER NOT NULL REFERENCES users (id) ON DELETE CASCADE,
        role TEXT NOT NULL,
        object_id INTEGER
    )
    """,
    "CREATE INDEX IF NOT EXISTS user_roles_user_id_idx ON user_roles (user_id)",
    "CREATE INDEX IF NOT EXISTS user_roles_object_id_idx ON user_roles (object_id)",
    # R: Las órdenes son historial: sin FK a franquicias/tiendas (sobreviven a su baja).
    """
    CREATE TABLE IF NOT EXISTS orders (
        id SERIAL PRIMARY KEY,
        diner_id INTEGER NOT NULL,
        franchise_id INTEGER NOT NULL,
        store_id INTEGER NOT NULL,
        date TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    "CREATE INDEX IF NOT EXISTS orders_diner_id_idx ON orders (diner_id)",
    "CREATE INDEX IF NOT EXISTS orders_store_id_idx ON orders (store_id)",
    """
    CREATE TABLE IF NOT EXISTS order_items (
        id SERIAL PRIMARY KEY,
        order_id INTEGER NOT NULL REFERENCES orders (id) ON DELETE CASCADE,
        menu_id INTEGER NOT NULL REFERENCES menu (id),
        description TEXT NOT NULL,
        price NUMERIC(10, 4) NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS order_items_order_id_idx ON order_items (order_id)",
)


def _database_exists(conn, name: str) -> bool:
    row = conn.execute(
        "SELECT 1 FROM pg_database WHERE datname = %s", (name,)
    ).fetchone()
    return row is not None


def _seed_default_admin(conn, settings: Settings) -> None:
    """Crea el admin inicial (solo en una base recién creada)."""
    row = conn.execute(
        "INSERT INTO users (name, email, password) VALUES (%s, %s, %s) RETURNING id",
        (
            settings.default_admin_name,
            settings.default_admin_email,
            hash_password(settings.default_admin_password),
        ),
    ).fetchone()
    conn.execute(
        "INSERT INTO user_roles (user_id, role, object_id) VALUES (%s, %s, NULL)",
        (row[0], Role.ADMIN.value),
    )
    logger.info(
        "Admin por defecto creado",
        extra={"email": settings.default_admin_email},
    )


def initialize_database(settings: Optional[Settings] = None) -> bool:
    """
    Asegura base + tablas. Retorna True si la base fue creada en esta llamada.

    Errores:
        - Cualquier falla (conexión rechazada, permisos, DDL) se loguea y se
          propaga sin reintentos.
    """
    settings = settings or get_settings()

    try:
        with psycopg.connect(
            settings.conninfo(settings.db_maintenance_name), autocommit=True
        ) as admin_conn:
            created = not _database_exists(admin_conn, settings.db_name)
            if created:
                logger.info(
                    "Creando base de datos", extra={"db_name": settings.db_name}
                )
                admin_conn.execute(
                    sql.SQL("CREATE DATABASE {}").format(
                        sql.Identifier(settings.db_name)
                    )
                )

        with psycopg.connect(settings.conninfo()) as conn:
            with conn.transaction():
                for statement in TABLE_CREATE_STATEMENTS:
                    conn.execute(statement)
                if created and settings.seed_default_admin:
                    _seed_default_admin(conn, settings)
    except Exception as exc:
        logger.exception(
            "Error inicializando la base de datos",
            extra={
                "db_host": settings.db_host,
                "db_name": settings.db_name,
                "error": str(exc),
            },
        )
        raise

    logger.info(
        "Base de datos lista",
        extra={"db_name": settings.db_name, "db_created": created},
    )
    return created
