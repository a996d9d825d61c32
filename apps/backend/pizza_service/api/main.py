"""
Name: FastAPI Application Entry Point

Responsibilities:
  - Initialize FastAPI application with metadata (title, version)
  - Bootstrap the database (create db/tables) BEFORE opening the pool
  - Configure middleware (CORS, request context)
  - Mount the JWT Pizza routers (/, /api/*)
  - Expose health check and metrics endpoints

Collaborators:
  - infrastructure.db.schema.initialize_database: Schema Initializer
  - infrastructure.db.pool: init_pool / close_pool
  - RequestContextMiddleware: Request ID and logging context
  - interfaces.api.http.router: feature routers

Notes:
  - Startup fails (and the process does not serve) if the bootstrap fails
  - /healthz follows Kubernetes health check convention
  - /metrics exposes Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from ..container import clear_container_cache
from ..crosscutting.config import get_settings
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response
from ..crosscutting.middleware import RequestContextMiddleware
from ..infrastructure.db.pool import close_pool, get_pool, init_pool
from ..infrastructure.db.schema import initialize_database
from ..interfaces.api.http.router import router
from .exception_handlers import register_exception_handlers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle: bootstrap DB, open pool, close pool."""
    settings = get_settings()

    # R: Bootstrap con conexiones propias; si falla, la app no arranca.
    initialize_database(settings)

    init_pool(
        settings.conninfo(),
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=float(settings.db_connect_timeout_seconds),
        slow_query_seconds=settings.db_slow_query_seconds,
    )

    try:
        logger.info(
            "JWT Pizza service starting up",
            extra={
                "version": settings.version,
                "db_host": settings.db_host,
                "db_name": settings.db_name,
                "db_pool_min": settings.db_pool_min_size,
                "db_pool_max": settings.db_pool_max_size,
            },
        )
        yield
    finally:
        close_pool()
        clear_container_cache()
        logger.info("JWT Pizza service shutting down")


def create_app() -> FastAPI:
    """Construye la app (sin tocar la DB hasta que corre el lifespan)."""
    settings = get_settings()

    fastapi_app = FastAPI(
        title="JWT Pizza Service",
        version=settings.version,
        lifespan=lifespan,
    )

    register_exception_handlers(fastapi_app)

    # R: Middleware order (bottom = first to execute): CORS -> RequestContext
    fastapi_app.add_middleware(RequestContextMiddleware)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
    )

    fastapi_app.include_router(router)

    @fastapi_app.get("/healthz", tags=["service"])
    def healthz():
        """Liveness + DB ping."""
        try:
            with get_pool().connection() as conn:
                conn.execute("SELECT 1")
            db_status = "connected"
        except Exception as exc:
            logger.warning("healthz: DB no disponible", extra={"error": str(exc)})
            db_status = "disconnected"
        return {"ok": db_status == "connected", "db": db_status}

    @fastapi_app.get("/metrics", tags=["service"])
    def metrics():
        body, content_type = get_metrics_response()
        return Response(content=body, media_type=content_type)

    return fastapi_app


app = create_app()
