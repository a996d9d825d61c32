"""FastAPI application (entry point + exception handlers)."""
