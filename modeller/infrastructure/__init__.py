"""
Infrastructure package for modeller.

Centralizes storage concerns: the query-execution contract, its psycopg
implementation and the connection pool factory. Keep this layer focused on I/O
and resource management, decoupled from schema and model logic.
"""

from modeller.infrastructure.db_factory import open_async_pool, open_pool_from_settings
from modeller.infrastructure.executor import (
    PsycopgExecutor,
    QueryBuilder,
    QueryExecutor,
    TableQuery,
)

__all__ = [
    "PsycopgExecutor",
    "QueryBuilder",
    "QueryExecutor",
    "TableQuery",
    "open_async_pool",
    "open_pool_from_settings",
]
