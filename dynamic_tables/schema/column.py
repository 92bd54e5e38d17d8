# ==============================================
# ColumnDefinition (Data Class)
# ==============================================
#
# PURPOSE:
#   Describes one column of every dynamically created table and
#   parses the comma separated column spec users configure.
#
# CLASSES:
# --------
# - ColumnDefinition (frozen dataclass)
#     name: str          → column name, quoted in SQL to keep its case
#     sql_type: str      → PostgreSQL type text, e.g. "VARCHAR(100)"
#     Equality and hashing use the name only.
#
# FUNCTIONS:
# ----------
# - parse_columns(spec: str) -> tuple[ColumnDefinition, ...]
#     "domain VARCHAR(100), keyword TEXT" → two definitions.
#     Each entry is split on the first run of whitespace, so the
#     type may itself contain spaces ("DOUBLE PRECISION").
#     Entries that don't split into a name and a type are skipped
#     with a warning.
#
# ==============================================

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnDefinition:
    """A column name and its SQL type."""
    name: str
    sql_type: str = field(compare=False)

    def __str__(self) -> str:
        return f"{self.name} {self.sql_type}"

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "sql_type": self.sql_type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnDefinition":
        return cls(name=data["name"], sql_type=data["sql_type"])


def parse_columns(spec: str) -> tuple[ColumnDefinition, ...]:
    """
    Parse a column spec string into an ordered tuple of definitions.

    Args:
        spec: Comma separated "name type" pairs.

    Returns:
        The valid definitions, in the order they appear in spec.
    """
    columns: list[ColumnDefinition] = []
    for entry in spec.split(","):
        entry = entry.strip()
        parts = entry.split(None, 1)
        if len(parts) != 2:
            logger.warning(f"Invalid column format: '{entry}'")
            continue
        name, sql_type = parts[0], parts[1].strip()
        if any(existing.name == name for existing in columns):
            # Row values for a repeated name overwrite each other on insert
            logger.warning(f"Duplicate column name: '{name}'")
        columns.append(ColumnDefinition(name, sql_type))
        logger.info(f"Adding column definition: '{name}, {sql_type}'")
    return tuple(columns)
