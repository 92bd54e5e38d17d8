# ==============================================
# Errors
# ==============================================
#
# PURPOSE:
#   One exception family for everything the package can fail at.
#
#   DynamicTablesError
#   ├── ConfigurationError     → bad credentials file, ambiguous dynamic column
#   ├── ConnectivityError      → could not connect / not connected
#   ├── SchemaError            → CREATE TABLE failed
#   ├── InsertError            → INSERT failed or row rejected
#   │   ├── ArityMismatch          → value count != column count
#   │   └── DynamicColumnNotFound  → no column matches the dynamic column
#   └── TransactionError       → bulk delete rolled back
#
#   Only ConfigurationError and ConnectivityError are raised by default.
#   The others are carried inside an OperationResult and only raised
#   when the caller asks for strict behaviour.
#
# ==============================================

from typing import Optional


class DynamicTablesError(Exception):
    """Base class for all dynamic_tables errors."""

    def __init__(self, message: str, table_name: Optional[str] = None):
        super().__init__(message)
        self.table_name = table_name


class ConfigurationError(DynamicTablesError):
    pass


class ConnectivityError(DynamicTablesError):
    pass


class SchemaError(DynamicTablesError):
    pass


class InsertError(DynamicTablesError):
    pass


class ArityMismatch(InsertError):
    """Row has a different number of values than the configured columns."""

    def __init__(self, expected: int, received: int):
        super().__init__(
            f"Expected {expected} value(s) for the configured columns, got {received}"
        )
        self.expected = expected
        self.received = received


class DynamicColumnNotFound(InsertError):
    """The dynamic column is unset or names no configured column."""

    def __init__(self, column_name: str):
        if column_name:
            message = f"Dynamic column '{column_name}' is not one of the configured columns"
        else:
            message = "No dynamic column configured"
        super().__init__(message)
        self.column_name = column_name


class TransactionError(DynamicTablesError):
    pass
