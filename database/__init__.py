"""
Database Package Initialization.

============================================================
RECORD STORE PERSISTENCE LAYER
============================================================

Engine and transaction management for the indexer's Record
Store. Every inbound event and every off-chain completion is
one transaction: commit on success, roll back on failure.

============================================================
"""

from .engine import (
    DEFAULT_DATABASE_URL,
    DatabaseConnectionError,
    DatabaseInitializationError,
    DatabasePersistenceError,
    create_all_tables,
    create_database_engine,
    get_database_url,
    get_engine,
    get_session_factory,
    get_table_row_counts,
    reset_engine,
    transaction_scope,
)

__all__ = [
    "DEFAULT_DATABASE_URL",
    "create_database_engine",
    "get_database_url",
    "get_engine",
    "get_session_factory",
    "reset_engine",
    "transaction_scope",
    "create_all_tables",
    "get_table_row_counts",
    "DatabasePersistenceError",
    "DatabaseConnectionError",
    "DatabaseInitializationError",
]
