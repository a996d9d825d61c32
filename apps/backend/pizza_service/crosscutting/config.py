"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Provide defaults that match the reference JWT Pizza deployment

Collaborators:
  - api/main.py: reads settings for CORS, schema bootstrap and pool sizing
  - container.py: reads settings for page size and factory client
  - identity/auth_users.py: JWT secret and TTL

Constraints:
  - Lives in API/infrastructure layer, NOT in domain
  - No business logic: pure configuration

Notes:
  - Uses pydantic-settings for env parsing and validation
  - Singleton via lru_cache
"""

from functools import lru_cache

from psycopg.conninfo import make_conninfo
from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/test/production)
        version: Version string reported by / and /api/docs
        log_level: Root log level for the service logger
        log_json: Emit JSON logs (False = plain text, handy in local dev)
        db_host / db_port / db_user / db_password: PostgreSQL connection
        db_name: Target database (created at startup if missing)
        db_maintenance_name: Database used to check/create db_name
        db_connect_timeout_seconds: Fail fast on unreachable server
        db_pool_min_size / db_pool_max_size: psycopg_pool sizing
        db_slow_query_seconds: Threshold for slow query warnings
        list_per_page: Default page size for diner orders
        jwt_secret: Secret for signing JWT access tokens
        jwt_access_ttl_minutes: Access token TTL in minutes
        factory_url: Base URL of the pizza factory service
        factory_api_key: API key sent to the factory
        factory_timeout_seconds: HTTP timeout for factory calls
        allowed_origins: Comma-separated CORS origins
        seed_default_admin: Seed the default admin when the db is created
        default_admin_name / default_admin_email / default_admin_password
    """

    # Environment
    app_env: str = "development"
    version: str = "0.1.0"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Database
    db_host: str = "127.0.0.1"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_name: str = "pizza"
    db_maintenance_name: str = "postgres"
    db_connect_timeout_seconds: int = 60

    # Database - Connection Pool
    db_pool_min_size: int = 2
    db_pool_max_size: int = 10
    db_slow_query_seconds: float = 0.25

    # Pagination
    list_per_page: int = 10

    # Security - JWT Auth
    jwt_secret: str = "dev-secret"
    jwt_access_ttl_minutes: int = 24 * 60

    # Pizza factory
    factory_url: str = "https://pizza-factory.cs329.click"
    factory_api_key: str = ""
    factory_timeout_seconds: float = 30.0

    # CORS
    allowed_origins: str = "*"

    # Bootstrap seed (only runs when the database is created)
    seed_default_admin: bool = True
    default_admin_name: str = "常用名字"
    default_admin_email: str = "a@jwt.com"
    default_admin_password: str = "admin"

    @field_validator("list_per_page", "db_pool_min_size", "db_pool_max_size")
    @classmethod
    def must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator("db_connect_timeout_seconds")
    @classmethod
    def connect_timeout_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("db_connect_timeout_seconds must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_upper(cls, v: str) -> str:
        return (v or "INFO").strip().upper()

    @model_validator(mode="after")
    def validate_pool_bounds(self):
        if self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError(
                f"db_pool_min_size ({self.db_pool_min_size}) must be <= "
                f"db_pool_max_size ({self.db_pool_max_size})"
            )
        return self

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        insecure_secrets = {"dev-secret", "changeme", "change-me", "password"}
        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in insecure_secrets:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")
        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def conninfo(self, dbname: str | None = None) -> str:
        """
        libpq connection string for `dbname` (defaults to db_name).

        connect_timeout travels inside the conninfo, so both the pool and the
        schema bootstrap fail fast with the same budget.
        """
        return make_conninfo(
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password,
            dbname=dbname or self.db_name,
            connect_timeout=self.db_connect_timeout_seconds,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
