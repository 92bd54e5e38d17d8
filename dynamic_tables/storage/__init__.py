# ==============================================
# TOPIC 2: STORAGE (PostgreSQL)
# ==============================================
#
# This package handles all database operations:
# connecting, creating tables dynamically, inserting rows
# and dropping whole table namespaces.
#
# Modules:
# --------
# - postgres_client.py → Connection, CREATE / INSERT, catalog reads
# - row_router.py      → Picks the table for a row and inserts it
# - eviction.py        → Drops every table with a given prefix
# - results.py         → OperationResult / RouteResult
#
# ==============================================

from .postgres_client import PostgresClient
from .row_router import RowRouter
from .eviction import NamespaceEvictor
from .results import OperationResult, RouteResult

__all__ = [
    "PostgresClient",
    "RowRouter",
    "NamespaceEvictor",
    "OperationResult",
    "RouteResult",
]
