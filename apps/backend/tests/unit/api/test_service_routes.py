"""
Name: Service Routes and Error Contract Tests
"""

import pytest
from psycopg import errors as pg_errors
from pizza_service.container import get_user_repository
from pizza_service.infrastructure.repositories.postgres.user import (
    PostgresUserRepository,
)

pytestmark = pytest.mark.unit


def test_welcome(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["message"] == "welcome to JWT Pizza"
    assert response.json()["version"]


def test_docs_lists_every_router(client):
    body = client.get("/api/docs").json()

    paths = {(e["method"], e["path"]) for e in body["endpoints"]}
    assert ("PUT", "/api/auth") in paths
    assert ("GET", "/api/user/me") in paths
    assert ("POST", "/api/order") in paths
    assert ("DELETE", "/api/franchise/:franchiseId/store/:storeId") in paths
    assert set(body["config"]) == {"factory", "db"}


def test_unknown_endpoint(client):
    response = client.get("/api/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"message": "unknown endpoint"}


def test_invalid_body_is_bad_request(client, admin_headers):
    response = client.post(
        "/api/franchise", json={"admins": []}, headers=admin_headers
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "invalid request"
    assert body["code"] == "VALIDATION_ERROR"


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-Id": "req-123"})

    assert response.headers["X-Request-Id"] == "req-123"


def test_unhandled_error_is_500(client, backend, diner_headers):
    def explode(*_args, **_kwargs):
        raise RuntimeError("boom")

    backend.orders.get_orders = explode

    response = client.get("/api/order", headers=diner_headers)

    assert response.status_code == 500
    assert response.json()["code"] == "INTERNAL_ERROR"
    assert "boom" not in response.text


def test_database_failure_does_not_leak_sql(client, admin_headers, fake_pool, fake_conn):
    fake_conn.respond(
        "FROM users",
        error=pg_errors.UndefinedColumn(
            'column "nmae" does not exist\nLINE 2: SELECT id, nmae, email FROM users'
        ),
    )
    client.app.dependency_overrides[get_user_repository] = lambda: PostgresUserRepository(
        fake_pool
    )

    response = client.get("/api/user", headers=admin_headers)

    assert response.status_code == 500
    assert response.json()["code"] == "DATABASE_ERROR"
    assert "nmae" not in response.text
    assert "SELECT" not in response.text
