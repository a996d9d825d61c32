"""HTTP adapter (FastAPI routers, schemas, dependencies)."""
