# ==============================================
# PostgresClient
# ==============================================
#
# PURPOSE:
#   Manages the PostgreSQL connection and all single-statement SQL
#   operations: creating tables on first use, inserting rows and
#   reading the catalog.
#
# WHY THIS CLASS EXISTS:
#   Tables are created ON THE FLY from the value of the dynamic
#   column. There is no predefined schema beyond the generic column
#   list, so every row may name a table nobody has created yet.
#   This class creates it (idempotently) and inserts into it.
#
# CLASS: PostgresClient
# ---------------------
#   Stateful: holds ONE connection. Not thread safe: callers on
#   several threads need one client each.
#
#   Constructor:
#   ------------
#   - __init__(host, port, user, password, database, schema="public")
#       Store connection params. Don't connect yet.
#
#   Methods:
#   --------
#   - connect() -> None
#       Open the connection in autocommit mode.
#       Raises ConnectivityError on failure.
#
#   - attach(connection) -> None
#       Use an already-open DB-API connection instead.
#
#   - disconnect() -> None
#
#   - transaction() -> context manager
#       Turn autocommit off, commit on success, roll back on any
#       exception, always turn autocommit back on.
#
#   - ensure_table(table_name, columns) -> OperationResult
#       CREATE TABLE IF NOT EXISTS "<name>" (id SERIAL PRIMARY KEY,
#       "<col>" <type>, ...). Errors are logged and returned.
#
#   - insert_row(table_name, data) -> OperationResult
#       Parameterized INSERT of one mapping. Errors are logged and
#       returned.
#
#   - list_tables() -> list[str]
#   - list_columns(table_name) -> list[tuple[str, str]]
#   - fetch_rows(table_name) -> list[tuple]
#   - current_database() -> str | None
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with PostgresClient(...) as db:` usage.
#
# ==============================================

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional, Sequence

import psycopg2
from psycopg2 import sql

from dynamic_tables.errors import ConnectivityError, InsertError, SchemaError
from dynamic_tables.schema.column import ColumnDefinition
from .results import OperationResult

logger = logging.getLogger(__name__)


class PostgresClient:
    def __init__(self, host="localhost", port=5432, user="postgres", password="",
                 database="postgres", schema="public"):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.schema = schema
        self.connection = None

    def connect(self) -> None:
        # Establish connection to PostgreSQL
        try:
            self.connection = psycopg2.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                dbname=self.database,
            )
        except psycopg2.Error as e:
            logger.exception(f"Database connection failed: {e}")
            raise ConnectivityError(f"Could not connect to {self.host}/{self.database}: {e}") from e
        self.connection.autocommit = True
        logger.info(f"Connected to the database: {self.database}")

    def attach(self, connection) -> None:
        # Adopt a connection opened elsewhere
        self.connection = connection
        self.connection.autocommit = True

    def disconnect(self) -> None:
        # Close connection cleanly
        if self.connection is not None:
            try:
                self.connection.close()
                logger.info("Database connection closed.")
            except psycopg2.Error:
                logger.exception("Error closing database connection")
            finally:
                self.connection = None

    @property
    def is_connected(self) -> bool:
        return self.connection is not None and not self.connection.closed

    def _require_connection(self):
        if self.connection is None:
            raise ConnectivityError("Not connected to PostgreSQL")
        return self.connection

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """
        Run several statements as one transaction.

        Yields:
            The underlying connection with autocommit disabled.
        """
        connection = self._require_connection()
        connection.autocommit = False
        try:
            yield connection
            connection.commit()
        except Exception:
            try:
                connection.rollback()
                logger.warning("Transaction rolled back due to an error.")
            except psycopg2.Error:
                logger.exception("Error during rollback")
            raise
        finally:
            try:
                connection.autocommit = True
            except psycopg2.Error:
                logger.exception("Error re-enabling auto-commit")

    def ensure_table(self, table_name: str, columns: Sequence[ColumnDefinition]) -> OperationResult:
        # Create table if it doesn't exist
        connection = self._require_connection()
        column_defs = [
            sql.SQL("{} {}").format(sql.Identifier(column.name), sql.SQL(column.sql_type))
            for column in columns
        ]
        query = sql.SQL("CREATE TABLE IF NOT EXISTS {} ({})").format(
            sql.Identifier(table_name),
            sql.SQL(", ").join([sql.SQL("id SERIAL PRIMARY KEY")] + column_defs),
        )

        logger.info(f"Attempting to create table: {table_name}")
        logger.debug(f"Table columns: {', '.join(str(column) for column in columns)}")
        try:
            with connection.cursor() as cursor:
                cursor.execute(query)
        except psycopg2.Error as e:
            logger.exception(f"Error creating table: {table_name}")
            return OperationResult.failure(
                "create", SchemaError(f"Error creating table {table_name}: {e}", table_name), table_name
            )
        logger.info(f"Table created successfully: {table_name}")
        return OperationResult("create", table_name)

    def insert_row(self, table_name: str, data: Mapping[str, Any]) -> OperationResult:
        # Insert one row; values bound in the mapping's iteration order
        if not data:
            logger.warning(f"No data to insert into table: {table_name}")
            return OperationResult("insert", table_name)

        connection = self._require_connection()
        column_names = list(data.keys())
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({})").format(
            sql.Identifier(table_name),
            sql.SQL(", ").join(map(sql.Identifier, column_names)),
            sql.SQL(", ").join(sql.Placeholder() * len(column_names)),
        )
        values = tuple(data.values())

        try:
            with connection.cursor() as cursor:
                cursor.execute(query, values)
                inserted = cursor.rowcount
        except psycopg2.Error as e:
            logger.exception(f"Error inserting data into table: {table_name}")
            return OperationResult.failure(
                "insert", InsertError(f"Error inserting into {table_name}: {e}", table_name), table_name
            )

        if inserted > 0:
            logger.info(f"Successfully inserted {inserted} row(s) into table: {table_name}")
        else:
            logger.warning(f"No rows inserted into table: {table_name}")
        return OperationResult("insert", table_name, rows_affected=max(inserted, 0))

    def list_tables(self) -> list[str]:
        # Base tables in the configured schema
        return [
            str(row[0]) for row in self._fetch(
                "SELECT table_name FROM information_schema.tables "
                "WHERE table_schema = %s AND table_type = 'BASE TABLE' "
                "ORDER BY table_name",
                (self.schema,),
            )
        ]

    def list_columns(self, table_name: str) -> list[tuple[str, str]]:
        # Each row is a tuple: (column_name, data_type)
        return [
            (str(name), str(dtype)) for name, dtype in self._fetch(
                "SELECT column_name, data_type FROM information_schema.columns "
                "WHERE table_schema = %s AND table_name = %s "
                "ORDER BY ordinal_position",
                (self.schema, table_name),
            )
        ]

    def fetch_rows(self, table_name: str) -> list[tuple]:
        query = sql.SQL("SELECT * FROM {} ORDER BY id").format(sql.Identifier(table_name))
        return self._fetch(query)

    def current_database(self) -> Optional[str]:
        rows = self._fetch("SELECT current_database()")
        return str(rows[0][0]) if rows else None

    def _fetch(self, query, params: Optional[tuple] = None) -> list[tuple]:
        # Read-only helper: errors are logged, an empty list returned
        connection = self._require_connection()
        try:
            with connection.cursor() as cursor:
                cursor.execute(query, params)
                return list(cursor.fetchall())
        except psycopg2.Error:
            logger.exception("Error reading from the database")
            return []

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
