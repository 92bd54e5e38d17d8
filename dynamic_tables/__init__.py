# ==============================================
# Dynamic Tables
# ==============================================
#
# Package Structure (2 Topics + Facade):
#
# dynamic_tables/
# ├── schema/           # Topic 1: Column definitions, registry, name sanitizing
# ├── storage/          # Topic 2: PostgreSQL client, row routing, eviction
# ├── dynamic_tables.py # Facade class users interact with
# ├── config.py         # Configuration management
# ├── errors.py         # Exception hierarchy
# ├── log.py            # Logging setup
# ├── stream.py         # Feed rows from an HTTP endpoint
# └── cli.py            # Command line entry point
#
# ==============================================

__version__ = "0.2.1"

from .dynamic_tables import DynamicTables
from .errors import (
    DynamicTablesError,
    ConfigurationError,
    ConnectivityError,
    SchemaError,
    InsertError,
    ArityMismatch,
    DynamicColumnNotFound,
    TransactionError,
)
from .schema import ColumnDefinition, SchemaRegistry, sanitize
from .storage import OperationResult, RouteResult

__all__ = [
    "DynamicTables",
    "DynamicTablesError",
    "ConfigurationError",
    "ConnectivityError",
    "SchemaError",
    "InsertError",
    "ArityMismatch",
    "DynamicColumnNotFound",
    "TransactionError",
    "ColumnDefinition",
    "SchemaRegistry",
    "sanitize",
    "OperationResult",
    "RouteResult",
]
