# ==============================================
# RowRouter
# ==============================================
#
# PURPOSE:
#   Takes one row of values plus the active SchemaRegistry,
#   works out which table the row belongs to, makes sure that
#   table exists and inserts the row into it.
#
# WHY THIS CLASS EXISTS:
#   The target table is not known until the row arrives: it is
#   prefix + sanitize(value of the dynamic column). Every row
#   therefore needs the same resolve → create → insert sequence.
#
# CLASS: RowRouter
# ----------------
#   Holds a reference to a PostgresClient. The registry is passed
#   in on every call, never stored.
#
#   Constructor:
#   ------------
#   - __init__(client: PostgresClient, atomic: bool = False)
#       atomic=True runs create + insert in one transaction, so a
#       failed insert leaves no freshly created empty table.
#       Default is two autocommitted statements.
#
#   Methods:
#   --------
#   - route(values, registry) -> OperationResult
#       1. Check value count == column count (ArityMismatch)
#       2. Locate the dynamic column (DynamicColumnNotFound)
#       3. Pair column names with values
#       4. ensure_table(prefix + sanitize(str(value)), columns)
#       5. insert_row(table, mapping)
#       Rejections and database errors come back in the result.
#       ConfigurationError (dynamic column named twice) and
#       ConnectivityError are raised.
#
#   - route_batch(rows, registry) -> RouteResult
#       route() for each row; one bad row never stops the batch.
#
#   Rows may be positional sequences or mappings keyed by column
#   name; mappings are reordered to the registry's column order.
#
# ==============================================

import logging
from dataclasses import replace
from typing import Any, Iterable, Mapping, Sequence, Union

import psycopg2

from dynamic_tables.errors import ArityMismatch, InsertError, SchemaError
from dynamic_tables.schema.registry import SchemaRegistry
from .postgres_client import PostgresClient
from .results import OperationResult, RouteResult

logger = logging.getLogger(__name__)

Row = Union[Sequence[Any], Mapping[str, Any]]


class RowRouter:
    def __init__(self, client: PostgresClient, atomic: bool = False):
        self.client = client
        self.atomic = atomic

    def route(self, values: Row, registry: SchemaRegistry) -> OperationResult:
        try:
            table_name, row = self.resolve(values, registry)
        except InsertError as e:
            logger.error(f"Row rejected: {e}")
            return OperationResult.failure("route", e)

        if self.atomic:
            return self._route_atomic(table_name, row, registry)

        # Result ignored: a failed create still lets the insert report what went wrong
        self.client.ensure_table(table_name, registry.columns)
        inserted = self.client.insert_row(table_name, row)
        return replace(inserted, operation="route")

    def route_batch(self, rows: Iterable[Row], registry: SchemaRegistry) -> RouteResult:
        result = RouteResult()
        for values in rows:
            result.add(self.route(values, registry))
        if result.errors:
            logger.warning(
                f"{len(result.errors)} of {result.rows_processed} row(s) were not inserted"
            )
        return result

    def resolve(self, values: Row, registry: SchemaRegistry) -> tuple[str, dict[str, Any]]:
        """
        Work out the target table and the column → value mapping for a row.

        Args:
            values: Positional values in column order, or a mapping by column name.
            registry: Active schema configuration.

        Returns:
            (table_name, row) where row preserves the column order.

        Raises:
            ArityMismatch, DynamicColumnNotFound, ConfigurationError, InsertError
        """
        if isinstance(values, Mapping):
            values = self._values_from_mapping(values, registry)

        expected = len(registry.columns)
        if len(values) != expected:
            raise ArityMismatch(expected, len(values))

        index = registry.dynamic_index()
        raw = values[index]
        if raw is None:
            raise InsertError(f"Dynamic column '{registry.dynamic_column}' has no value")

        table_name = registry.format_table_name(str(raw))
        if not table_name:
            raise InsertError(f"Value {raw!r} does not produce a usable table name")

        row: dict[str, Any] = {}
        for column, value in zip(registry.columns, values):
            row[column.name] = value
        return table_name, row

    def _route_atomic(
        self,
        table_name: str,
        row: dict[str, Any],
        registry: SchemaRegistry
    ) -> OperationResult:
        try:
            with self.client.transaction():
                self.client.ensure_table(table_name, registry.columns).raise_for_error()
                inserted = self.client.insert_row(table_name, row)
                inserted.raise_for_error()
        except (SchemaError, InsertError) as e:
            return OperationResult.failure("route", e, table_name)
        except psycopg2.Error as e:
            logger.exception(f"Error committing row into table: {table_name}")
            return OperationResult.failure(
                "route", InsertError(f"Error committing into {table_name}: {e}", table_name), table_name
            )
        return replace(inserted, operation="route")

    @staticmethod
    def _values_from_mapping(record: Mapping[str, Any], registry: SchemaRegistry) -> list[Any]:
        names = registry.column_names
        present = [name for name in names if name in record]
        if len(present) != len(names):
            raise ArityMismatch(len(names), len(present))
        return [record[name] for name in names]
