# ==============================================
# NamespaceEvictor
# ==============================================
#
# PURPOSE:
#   Drop every table whose name starts with a prefix, all or
#   nothing.
#
# HOW:
#   One transaction (PostgreSQL DDL is transactional):
#     1. autocommit off
#     2. SELECT table_name FROM information_schema.tables
#        WHERE table_schema = <schema> AND table_name LIKE prefix || '%'
#     3. DROP TABLE IF EXISTS "<name>" CASCADE, one per table
#     4. COMMIT, or ROLLBACK if anything above failed
#     5. autocommit back on, whatever happened
#
#   The prefix goes into LIKE verbatim, so "_" and "%" inside it
#   act as wildcards: prefix "dt_" also matches "dtx...".
#
# ==============================================

import logging

import psycopg2
from psycopg2 import sql

from dynamic_tables.errors import TransactionError
from .postgres_client import PostgresClient
from .results import OperationResult

logger = logging.getLogger(__name__)

_FIND_BY_PREFIX = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema = %s AND table_name LIKE %s "
    "ORDER BY table_name"
)


class NamespaceEvictor:
    def __init__(self, client: PostgresClient):
        self.client = client

    def delete_tables(self, prefix: str) -> OperationResult:
        """
        Drop all tables in the client's schema whose name starts with prefix.

        Returns:
            OperationResult with the dropped table names, or a failed
            result carrying a TransactionError after a rollback.
        """
        pattern = prefix + "%"
        logger.debug(f"Prefix pattern for table deletion: {pattern}")

        try:
            with self.client.transaction() as connection:
                with connection.cursor() as cursor:
                    cursor.execute(_FIND_BY_PREFIX, (self.client.schema, pattern))
                    tables = [str(row[0]) for row in cursor.fetchall()]

                    if not tables:
                        logger.info(f"No tables found for deletion with prefix: {pattern}")
                    else:
                        logger.info(f"Found tables to delete: {tables}")

                    for table_name in tables:
                        logger.info(f"Dropping table: {table_name}")
                        cursor.execute(
                            sql.SQL("DROP TABLE IF EXISTS {} CASCADE").format(sql.Identifier(table_name))
                        )
        except psycopg2.Error as e:
            logger.exception("Error deleting tables")
            return OperationResult.failure(
                "delete", TransactionError(f"Deleting tables with prefix '{prefix}' rolled back: {e}")
            )

        if tables:
            logger.info(f"Successfully deleted {len(tables)} table(s).")
        return OperationResult("delete", rows_affected=len(tables), tables=tables)
