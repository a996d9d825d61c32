"""Database infrastructure: pool, instrumentation, schema bootstrap, transactions."""

from .pool import close_pool, get_pool, init_pool, reset_pool
from .schema import TABLE_CREATE_STATEMENTS, initialize_database
from .transaction import TransactionCoordinator

__all__ = [
    "TABLE_CREATE_STATEMENTS",
    "TransactionCoordinator",
    "close_pool",
    "get_pool",
    "init_pool",
    "initialize_database",
    "reset_pool",
]
