"""Clients for external services (pizza factory)."""

from .factory_client import FactoryClient, FactoryOrderResult

__all__ = ["FactoryClient", "FactoryOrderResult"]
