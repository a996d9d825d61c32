"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure the test environment (settings without .env, test JWT secret)
  - Provide a recording fake pool/connection for repository unit tests
  - Provide small user factories

Collaborators:
  - pytest: Test framework
  - pizza_service.crosscutting.config: Settings

Notes:
  - FakeConnection records every statement (normalized SQL + params) and
    every transaction event (BEGIN / COMMIT / ROLLBACK).
  - Responses are scripted by SQL fragment, consumed once, in FIFO order.
"""

import os
import sys
from contextlib import contextmanager
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-with-at-least-32-bytes!!")
os.environ.setdefault("LOG_JSON", "false")

from pizza_service.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None
app_config.get_settings.cache_clear()

from pizza_service.identity.users import Role, RoleAssignment, User  # noqa: E402


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require PostgreSQL)"
    )


# ============================================================================
# Fake psycopg connection / pool
# ============================================================================


def normalize_sql(query) -> str:
    return " ".join(str(query).split())


class FakeCursor:
    def __init__(self, rows=None, rowcount=None):
        self._rows = list(rows or [])
        self.rowcount = len(self._rows) if rowcount is None else rowcount

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)


class FakeConnection:
    """Recording stand-in for a psycopg Connection."""

    def __init__(self):
        self.statements: list[tuple[str, object]] = []
        self.events: list[str] = []
        self._responses: list[tuple[str, list | None, int | None, Exception | None]] = []

    def respond(self, fragment, rows=None, *, rowcount=None, error=None):
        """Next statement containing `fragment` returns `rows` (or raises `error`)."""
        self._responses.append((fragment, rows, rowcount, error))
        return self

    def execute(self, query, params=None):
        sql = normalize_sql(query)
        if isinstance(params, list):
            params = tuple(params)
        self.statements.append((sql, params))
        for index, (fragment, rows, rowcount, error) in enumerate(self._responses):
            if fragment in sql:
                del self._responses[index]
                if error is not None:
                    raise error
                return FakeCursor(rows, rowcount)
        return FakeCursor([], rowcount=1)

    @contextmanager
    def transaction(self):
        self.events.append("BEGIN")
        try:
            yield self
        except Exception:
            self.events.append("ROLLBACK")
            raise
        self.events.append("COMMIT")

    def executed(self, fragment: str) -> list[tuple[str, object]]:
        return [(sql, params) for sql, params in self.statements if fragment in sql]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False


class FakePool:
    """Stand-in for psycopg_pool.ConnectionPool handing out one FakeConnection."""

    def __init__(self, conn: FakeConnection | None = None):
        self.conn = conn or FakeConnection()
        self.acquired = 0
        self.released = 0

    @contextmanager
    def connection(self):
        self.acquired += 1
        try:
            yield self.conn
        finally:
            self.released += 1


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def make_conn():
    """Factory for extra FakeConnection instances (e.g. several psycopg.connect calls)."""
    return FakeConnection


@pytest.fixture
def fake_pool(fake_conn: FakeConnection) -> FakePool:
    return FakePool(fake_conn)


# ============================================================================
# User factories
# ============================================================================


@pytest.fixture
def admin_user() -> User:
    return User(
        id=1,
        name="常用名字",
        email="a@jwt.com",
        roles=[RoleAssignment(role=Role.ADMIN)],
    )


@pytest.fixture
def diner_user() -> User:
    return User(
        id=2,
        name="pizza diner",
        email="d@jwt.com",
        roles=[RoleAssignment(role=Role.DINER)],
    )


@pytest.fixture
def franchisee_user() -> User:
    return User(
        id=3,
        name="pizza franchisee",
        email="f@jwt.com",
        roles=[
            RoleAssignment(role=Role.DINER),
            RoleAssignment(role=Role.FRANCHISEE, object_id=1),
        ],
    )
