# ==============================================
# Results (Data Classes)
# ==============================================
#
# PURPOSE:
#   Every create / insert / route / delete returns one of these
#   instead of raising. Batch callers keep going after a bad row;
#   callers that want strict behaviour call raise_for_error().
#
# CLASSES:
# --------
# - OperationResult
#     operation: str                 → "create", "insert", "route", "delete"
#     table_name: str                → target table ("" when not resolved)
#     ok: bool
#     rows_affected: int
#     tables: list[str]              → tables dropped by "delete"
#     error: DynamicTablesError | None
#
# - RouteResult
#     rows_processed: int
#     rows_inserted: int
#     tables: set[str]               → tables that received rows
#     errors: list[str]
#
# ==============================================

from dataclasses import dataclass, field
from typing import Optional

from dynamic_tables.errors import DynamicTablesError


@dataclass
class OperationResult:
    operation: str
    table_name: str = ""
    ok: bool = True
    rows_affected: int = 0
    tables: list[str] = field(default_factory=list)
    error: Optional[DynamicTablesError] = None

    @classmethod
    def failure(
        cls,
        operation: str,
        error: DynamicTablesError,
        table_name: str = ""
    ) -> "OperationResult":
        return cls(operation=operation, table_name=table_name, ok=False, error=error)

    def raise_for_error(self) -> None:
        """Raise the captured error, if any."""
        if self.error is not None:
            raise self.error

    def __bool__(self) -> bool:
        return self.ok


@dataclass
class RouteResult:
    rows_processed: int = 0
    rows_inserted: int = 0
    tables: set[str] = field(default_factory=set)
    errors: list[str] = field(default_factory=list)

    def add(self, result: OperationResult) -> None:
        self.rows_processed += 1
        if result.ok:
            self.rows_inserted += result.rows_affected
            self.tables.add(result.table_name)
        else:
            self.errors.append(f"{result.table_name or '<unresolved>'}: {result.error}")
