"""
Name: Integration Test DB Setup

Responsibilities:
  - Bootstrap a throwaway database (create db + tables) once per session
  - Open the global pool against it
  - Leave every test with empty tables

Notes:
  - Only runs when RUN_INTEGRATION=1
  - Connection settings come from DB_HOST / DB_PORT / DB_USER / DB_PASSWORD;
    DB_NAME defaults to pizza_test
"""

from __future__ import annotations

import os

import pytest

if os.getenv("RUN_INTEGRATION") == "1":
    os.environ["APP_ENV"] = "integration"
    os.environ.setdefault("DB_NAME", "pizza_test")

from pizza_service.crosscutting.config import get_settings  # noqa: E402
from pizza_service.infrastructure.db.pool import (  # noqa: E402
    close_pool,
    get_pool,
    init_pool,
)
from pizza_service.infrastructure.db.schema import initialize_database  # noqa: E402

TABLES = (
    "order_items",
    "orders",
    "user_roles",
    "stores",
    "franchises",
    "menu",
    "users",
    "sessions",
)


@pytest.fixture(scope="session", autouse=True)
def init_db_pool():
    if os.getenv("RUN_INTEGRATION") != "1":
        yield
        return

    get_settings.cache_clear()
    settings = get_settings()
    initialize_database(settings)
    init_pool(
        settings.conninfo(),
        min_size=1,
        max_size=settings.db_pool_max_size,
        timeout=float(settings.db_connect_timeout_seconds),
    )
    yield
    close_pool()


@pytest.fixture
def clean_db():
    with get_pool().connection() as conn:
        conn.execute(f"TRUNCATE {', '.join(TABLES)} RESTART IDENTITY CASCADE")
    yield
