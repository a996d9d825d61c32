"""
Name: Settings Tests
"""

import pytest
from pydantic import ValidationError
from pizza_service.crosscutting.config import Settings

pytestmark = pytest.mark.unit


def _settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults():
    settings = _settings()

    assert settings.list_per_page == 10
    assert settings.default_admin_email == "a@jwt.com"
    assert settings.is_production() is False


def test_conninfo_targets_requested_database():
    settings = _settings(db_host="db", db_name="pizza", db_connect_timeout_seconds=5)

    assert "dbname=pizza" in settings.conninfo()
    assert "dbname=postgres" in settings.conninfo("postgres")
    assert "connect_timeout=5" in settings.conninfo()
    assert "host=db" in settings.conninfo()


def test_allowed_origins_list():
    settings = _settings(allowed_origins="https://a.test, https://b.test,")

    assert settings.get_allowed_origins_list() == ["https://a.test", "https://b.test"]


def test_pool_bounds_are_validated():
    with pytest.raises(ValidationError):
        _settings(db_pool_min_size=5, db_pool_max_size=2)


def test_page_size_must_be_positive():
    with pytest.raises(ValidationError):
        _settings(list_per_page=0)


def test_production_rejects_default_secret():
    with pytest.raises(ValidationError):
        _settings(app_env="production", jwt_secret="dev-secret")


def test_production_accepts_strong_secret():
    settings = _settings(app_env="production", jwt_secret="x" * 40)

    assert settings.is_production() is True
