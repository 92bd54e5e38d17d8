# ==============================================
# DynamicTables: Facade
# ==============================================
#
# PURPOSE:
#   This is the MAIN CLASS users interact with. It owns one
#   PostgreSQL connection and one immutable SchemaRegistry and
#   wires them into the storage services.
#
# HOW IT CONNECTS THE TOPICS:
#
#   ┌──────────────────────────────────────────────────────────┐
#   │                     DynamicTables                        │
#   │                                                          │
#   │  set_columns / set_dynamic_column / set_table_prefix     │
#   │                 │ replace                                │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 1: SCHEMA                              │        │
#   │  │  SchemaRegistry (immutable) + sanitize()     │        │
#   │  └──────────────┬───────────────────────────────┘        │
#   │                 │ passed into every call                 │
#   │                 ▼                                        │
#   │  ┌──────────────────────────────────────────────┐        │
#   │  │ TOPIC 2: STORAGE                             │        │
#   │  │  RowRouter → PostgresClient                  │        │
#   │  │  NamespaceEvictor → PostgresClient           │        │
#   │  └──────────────────────────────────────────────┘        │
#   └──────────────────────────────────────────────────────────┘
#
# CLASS: DynamicTables
# --------------------
#
#   Constructor:
#   ------------
#   - __init__(config: AppConfig | None = None, client: PostgresClient | None = None)
#       1. Load config (from .env or passed in)
#       2. Build the registry from config.tables
#       3. Build PostgresClient (not connected), RowRouter, NamespaceEvictor
#
#   Public Methods (User-facing API):
#   ---------------------------------
#   Connection:    connect(), connect_json(), connect_env(), close()
#   Configuration: set_columns(), set_dynamic_column(), set_table_prefix()
#   Rows:          input(*values), input_batch(rows), insert_data()
#   Tables:        create_table(), delete_tables(), format_table_name()
#   Catalog:       list_tables(), list_columns(), get_table_rows(),
#                  current_database()
#   Info:          status(), version
#
#   Error policy:
#   -------------
#   Row, table and delete operations return an OperationResult and
#   only log failures. Pass strict=True (or set TableConfig.strict)
#   to have the error raised instead.
#
# ==============================================

import logging
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from dynamic_tables import __version__
from dynamic_tables.config import (
    AppConfig,
    PostgresConfig,
    get_config,
    load_postgres_config_json,
    postgres_config_from_env,
)
from dynamic_tables.log import change_log_level, setup_logging
from dynamic_tables.schema.column import ColumnDefinition, parse_columns
from dynamic_tables.schema.registry import SchemaRegistry
from dynamic_tables.schema.sanitizer import is_safe_identifier
from dynamic_tables.storage.eviction import NamespaceEvictor
from dynamic_tables.storage.postgres_client import PostgresClient
from dynamic_tables.storage.results import OperationResult, RouteResult
from dynamic_tables.storage.row_router import Row, RowRouter

logger = logging.getLogger(__name__)


class DynamicTables:
    """
    Route rows into tables named after the value of one column.

    Example:
        with DynamicTables() as tables:
            tables.set_table_prefix("dt1_")
            tables.set_columns("domain VARCHAR(100), keyword VARCHAR(100), language VARCHAR(100)")
            tables.set_dynamic_column("domain")
            tables.input("wikipedia.org", "cats", "en")   # → table dt1_wikipediaorg
    """

    def __init__(self, config: Optional[AppConfig] = None, client: Optional[PostgresClient] = None):
        """
        Args:
            config: Application configuration. If None, loads from environment.
            client: Pre-built client (e.g. one attached to an existing connection).
        """
        self._config = config or get_config()

        tables_config = self._config.tables
        columns = parse_columns(tables_config.columns) if tables_config.columns.strip() else ()
        self._registry = SchemaRegistry(
            columns=columns,
            dynamic_column=tables_config.dynamic_column,
            table_prefix=tables_config.table_prefix,
        )
        self._strict = tables_config.strict

        self._client = client or self._build_client(self._config.postgres)
        self._router = RowRouter(self._client, atomic=tables_config.atomic_input)
        self._evictor = NamespaceEvictor(self._client)

    @staticmethod
    def _build_client(postgres: PostgresConfig) -> PostgresClient:
        return PostgresClient(
            host=postgres.host,
            port=postgres.port,
            user=postgres.user,
            password=postgres.password,
            database=postgres.database,
            schema=postgres.schema
        )

    # ------------------------------------------
    # Connection
    # ------------------------------------------

    def connect(
        self,
        database: Optional[str] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        host: Optional[str] = None,
        port: Optional[int] = None
    ) -> None:
        """
        Open the connection. Arguments override the configured values.

        Raises:
            ConnectivityError: If the server can't be reached or refuses the login.
        """
        if database is not None:
            self._client.database = database
        if user is not None:
            self._client.user = user
        if password is not None:
            self._client.password = password
        if host is not None:
            self._client.host = host
        if port is not None:
            self._client.port = port
        self._client.connect()

    def connect_json(self, path: Union[str, Path, None] = None) -> None:
        """Connect with credentials read from a JSON file (default config.json)."""
        postgres = load_postgres_config_json(path, schema=self._client.schema)
        self.connect(postgres.database, postgres.user, postgres.password, postgres.host, postgres.port)

    def connect_env(self) -> None:
        """Connect with credentials from the DTABLES_ENVS_PGSQL_* environment variables."""
        postgres = postgres_config_from_env(schema=self._client.schema)
        self.connect(postgres.database, postgres.user, postgres.password, postgres.host, postgres.port)

    def close(self) -> None:
        self._client.disconnect()

    @property
    def connection(self):
        return self._client.connection

    @property
    def client(self) -> PostgresClient:
        return self._client

    # ------------------------------------------
    # Configuration
    # ------------------------------------------

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    def set_columns(self, spec: str) -> None:
        """Replace the column list, e.g. "domain VARCHAR(100), keyword TEXT"."""
        self._registry = self._registry.with_columns(spec)

    def set_dynamic_column(self, name: str) -> None:
        self._registry = self._registry.with_dynamic_column(name)

    def set_table_prefix(self, prefix: str) -> None:
        self._registry = self._registry.with_table_prefix(prefix)

    def format_table_name(self, raw: str) -> str:
        return self._registry.format_table_name(raw)

    def setup_logging(self, level: Union[str, int] = "ERROR", log_to_file: bool = False) -> None:
        setup_logging(level, log_to_file, self._config.logging.log_file)

    def change_log_level(self, level_name: str) -> bool:
        return change_log_level(level_name)

    # ------------------------------------------
    # Rows and tables
    # ------------------------------------------

    def input(self, *values: Any, strict: Optional[bool] = None) -> OperationResult:
        """
        Insert one row, values in column order.

        The dynamic column's value picks the table; the table is
        created with the configured columns if it doesn't exist yet.
        """
        result = self._router.route(values, self._registry)
        return self._finish(result, strict)

    def input_batch(self, rows: Iterable[Row]) -> RouteResult:
        """Insert many rows; failures are collected, never raised."""
        return self._router.route_batch(rows, self._registry)

    def create_table(
        self,
        table_name: str,
        columns: Optional[Sequence[ColumnDefinition]] = None,
        strict: Optional[bool] = None
    ) -> OperationResult:
        """CREATE TABLE IF NOT EXISTS with the given (or configured) columns."""
        if columns is None:
            columns = self._registry.columns
        return self._finish(self._client.ensure_table(table_name, columns), strict)

    def insert_data(
        self,
        table_name: str,
        data: Mapping[str, Any],
        strict: Optional[bool] = None
    ) -> OperationResult:
        return self._finish(self._client.insert_row(table_name, data), strict)

    def delete_tables(self, strict: Optional[bool] = None) -> OperationResult:
        """Drop every table starting with the current prefix, all or nothing."""
        return self._finish(self._evictor.delete_tables(self._registry.table_prefix), strict)

    def _finish(self, result: OperationResult, strict: Optional[bool]) -> OperationResult:
        strict = self._strict if strict is None else strict
        if strict:
            result.raise_for_error()
        return result

    # ------------------------------------------
    # Catalog
    # ------------------------------------------

    def list_tables(self) -> list[str]:
        return self._client.list_tables()

    def list_columns(self, table_name: str) -> list[tuple[str, str]]:
        return self._client.list_columns(table_name)

    def get_table_rows(self, table_name: str) -> list[tuple]:
        """All rows of a table; names outside [A-Za-z0-9_] are refused."""
        if not is_safe_identifier(table_name):
            logger.warning(f"Invalid table name: {table_name}")
            return []
        rows = self._client.fetch_rows(table_name)
        if rows:
            logger.info(f"Retrieved {len(rows)} rows from table: {table_name}")
        else:
            logger.info(f"Table '{table_name}' exists but has no data.")
        return rows

    def current_database(self) -> Optional[str]:
        return self._client.current_database()

    # ------------------------------------------
    # Info
    # ------------------------------------------

    @property
    def version(self) -> str:
        return __version__

    def status(self) -> dict:
        """
        Get the current configuration and connection state.

        Returns:
            Dictionary with columns, dynamic column, prefix and connection info.
        """
        return {
            "version": self.version,
            "columns": [str(column) for column in self._registry.columns],
            "dynamic_column": self._registry.dynamic_column,
            "table_prefix": self._registry.table_prefix,
            "connected": self._client.is_connected,
            "database": self._client.database,
            "schema": self._client.schema,
            "strict": self._strict,
            "atomic_input": self._router.atomic,
        }

    def __enter__(self):
        if not self._client.is_connected:
            self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
