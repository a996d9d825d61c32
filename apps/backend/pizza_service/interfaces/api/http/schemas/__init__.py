"""HTTP request schemas (Pydantic)."""
