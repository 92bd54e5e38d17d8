# ==============================================
# TOPIC 1: SCHEMA
# ==============================================
#
# This package holds everything about the generic table layout
# that does not need a database: column definitions, the
# immutable registry of the active configuration, and the
# sanitizer that turns raw values into table-name fragments.
#
# Modules:
# --------
# - sanitizer.py  → raw value → safe identifier fragment
# - column.py     → ColumnDefinition + column spec parser
# - registry.py   → SchemaRegistry (columns, dynamic column, prefix)
#
# ==============================================

from .sanitizer import sanitize
from .column import ColumnDefinition, parse_columns
from .registry import SchemaRegistry, DEFAULT_TABLE_PREFIX

__all__ = [
    "sanitize",
    "ColumnDefinition",
    "parse_columns",
    "SchemaRegistry",
    "DEFAULT_TABLE_PREFIX",
]
