"""
PostgreSQL Repository Implementations.

Raw SQL over psycopg 3 + psycopg_pool.
"""

from .franchise import PostgresFranchiseRepository
from .menu import PostgresMenuRepository
from .order import PostgresOrderRepository
from .session import PostgresSessionRepository, get_token_signature
from .user import PostgresUserRepository

__all__ = [
    "PostgresFranchiseRepository",
    "PostgresMenuRepository",
    "PostgresOrderRepository",
    "PostgresSessionRepository",
    "PostgresUserRepository",
    "get_token_signature",
]
