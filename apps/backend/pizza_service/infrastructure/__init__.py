"""Infrastructure layer (PostgreSQL, external services)."""
