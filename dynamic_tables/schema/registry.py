# ==============================================
# SchemaRegistry
# ==============================================
#
# PURPOSE:
#   The complete table configuration as ONE immutable value:
#   the ordered columns, the name of the dynamic column and the
#   table prefix. Storage services receive it as an argument on
#   every call instead of reading shared mutable state.
#
#   Reconfiguring never mutates a registry. with_columns(),
#   with_dynamic_column() and with_table_prefix() each return a
#   new registry; the owner (DynamicTables) swaps its reference.
#
# CLASS: SchemaRegistry (frozen dataclass)
# ----------------------------------------
#   Attributes:
#   -----------
#   - columns: tuple[ColumnDefinition, ...]
#       Order defines CREATE TABLE column order AND the positional
#       mapping of row values.
#   - dynamic_column: str
#       Name of the column whose value selects the table.
#   - table_prefix: str
#       Prepended to every generated table name, unsanitized.
#       Also the LIKE pattern used by eviction.
#
#   Methods:
#   --------
#   - format_table_name(raw) -> str
#   - dynamic_index() -> int
#       Position of the dynamic column. Raises DynamicColumnNotFound
#       or ConfigurationError (name used by more than one column).
#   - to_dict() / from_dict()
#
# ==============================================

from dataclasses import dataclass, replace
from typing import Any, Dict

from dynamic_tables.errors import ConfigurationError, DynamicColumnNotFound
from .column import ColumnDefinition, parse_columns
from .sanitizer import sanitize

DEFAULT_TABLE_PREFIX = "dtbl_"


@dataclass(frozen=True)
class SchemaRegistry:
    columns: tuple[ColumnDefinition, ...] = ()
    dynamic_column: str = ""
    table_prefix: str = DEFAULT_TABLE_PREFIX

    @classmethod
    def from_spec(
        cls,
        spec: str,
        dynamic_column: str = "",
        table_prefix: str = DEFAULT_TABLE_PREFIX
    ) -> "SchemaRegistry":
        """Build a registry from a "name type, name type" column spec."""
        return cls(parse_columns(spec), dynamic_column, table_prefix)

    def with_columns(self, spec: str) -> "SchemaRegistry":
        # Replaces the entire column list
        return replace(self, columns=parse_columns(spec))

    def with_dynamic_column(self, name: str) -> "SchemaRegistry":
        return replace(self, dynamic_column=name)

    def with_table_prefix(self, prefix: str) -> "SchemaRegistry":
        return replace(self, table_prefix=prefix)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    def format_table_name(self, raw: str) -> str:
        """Prefix + sanitized raw value."""
        return self.table_prefix + sanitize(raw)

    def dynamic_index(self) -> int:
        """
        Find the position of the dynamic column in the column list.

        Returns:
            Index into columns (and into row values).

        Raises:
            DynamicColumnNotFound: No dynamic column set, or no column has that name.
            ConfigurationError: More than one column has that name.
        """
        if not self.dynamic_column:
            raise DynamicColumnNotFound("")
        matches = [
            i for i, column in enumerate(self.columns)
            if column.name == self.dynamic_column
        ]
        if not matches:
            raise DynamicColumnNotFound(self.dynamic_column)
        if len(matches) > 1:
            raise ConfigurationError(
                f"Dynamic column '{self.dynamic_column}' is defined {len(matches)} times"
            )
        return matches[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [column.to_dict() for column in self.columns],
            "dynamic_column": self.dynamic_column,
            "table_prefix": self.table_prefix,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SchemaRegistry":
        return cls(
            columns=tuple(ColumnDefinition.from_dict(c) for c in data.get("columns", [])),
            dynamic_column=data.get("dynamic_column", ""),
            table_prefix=data.get("table_prefix", DEFAULT_TABLE_PREFIX),
        )
