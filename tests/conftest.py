# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# FakeDatabase / FakeConnection stand in for a psycopg2
# connection. They understand exactly the statements the
# package issues and model the parts of PostgreSQL the
# package relies on:
#   - autocommit on/off (and refusing to toggle it mid-transaction)
#   - transactional DDL: rollback restores dropped/created tables
#   - aborted transactions rejecting further statements
#   - information_schema lookups, including LIKE patterns
#
# Statements built with psycopg2.sql are turned into plain
# text by render(), so tests can assert on real SQL.
#
# FIXTURES:
# ---------
# - fake_db, fake_connection, client
# - app_config    → AppConfig with prefix dt1_ and the domain/keyword/language schema
# - tables        → DynamicTables wired to the fake connection
#
# ==============================================

import copy
import logging
import re

import psycopg2
import psycopg2.errors
import pytest
from psycopg2 import sql

from dynamic_tables import log as dt_log
from dynamic_tables.config import AppConfig, TableConfig
from dynamic_tables.dynamic_tables import DynamicTables
from dynamic_tables.storage.postgres_client import PostgresClient

COLUMN_SPEC = "domain VARCHAR(100), keyword VARCHAR(100), language VARCHAR(100)"


def render(query) -> str:
    """Turn a psycopg2.sql composable (or plain string) into SQL text."""
    if isinstance(query, str):
        return query
    if isinstance(query, sql.Composed):
        return "".join(render(part) for part in query.seq)
    if isinstance(query, sql.Identifier):
        return ".".join('"' + s.replace('"', '""') + '"' for s in query.strings)
    if isinstance(query, sql.Placeholder):
        return "%s" if query.name is None else f"%({query.name})s"
    if isinstance(query, sql.SQL):
        return query.string
    if isinstance(query, sql.Literal):
        return repr(query.wrapped)
    raise TypeError(f"Cannot render {query!r}")


def like_to_regex(pattern: str) -> re.Pattern:
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def _unquote(name: str) -> str:
    return name.replace('""', '"')


_QUOTED = r'"((?:[^"]|"")*)"'
_CREATE = re.compile(r"^CREATE TABLE IF NOT EXISTS " + _QUOTED + r" \((.*)\)$", re.DOTALL)
_INSERT = re.compile(r"^INSERT INTO " + _QUOTED + r" \((.*)\) VALUES \((.*)\)$", re.DOTALL)
_DROP = re.compile(r"^DROP TABLE IF EXISTS " + _QUOTED + r" CASCADE$")
_SELECT_ALL = re.compile(r"^SELECT \* FROM " + _QUOTED + r" ORDER BY id$")
_COLUMN_DEF = re.compile(_QUOTED + r" ([^,]+(?:\([^)]*\))?)")


class FakeDatabase:
    """Tables live here so several connections can share them."""

    def __init__(self, name="testdb", schema="public"):
        self.name = name
        self.schema = schema
        # table name -> {"columns": [(name, type)], "rows": [tuple], "next_id": int}
        self.tables = {}


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.rowcount = -1
        self._results = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self):
        pass

    def execute(self, query, params=None):
        self._results = []
        self.rowcount = -1
        self.connection._execute(self, render(query), params)

    def fetchall(self):
        return list(self._results)

    def fetchone(self):
        return self._results[0] if self._results else None


class FakeConnection:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self.closed = 0
        self.executed = []
        self.fail_on = []
        self.commits = 0
        self.rollbacks = 0
        self.autocommit_changes = []
        self._autocommit = False
        self._snapshot = None
        self._aborted = False

    @property
    def autocommit(self):
        return self._autocommit

    @autocommit.setter
    def autocommit(self, value):
        if self._snapshot is not None:
            raise psycopg2.ProgrammingError("set_session cannot be used inside a transaction")
        self._autocommit = value
        self.autocommit_changes.append(value)

    @property
    def in_transaction(self):
        return self._snapshot is not None

    def cursor(self):
        if self.closed:
            raise psycopg2.InterfaceError("connection already closed")
        return FakeCursor(self)

    def commit(self):
        if self._aborted:
            # PostgreSQL answers COMMIT of a failed transaction with ROLLBACK
            self.rollback()
            return
        self._snapshot = None
        self.commits += 1

    def rollback(self):
        if self._snapshot is not None:
            self.db.tables = self._snapshot
        self._snapshot = None
        self._aborted = False
        self.rollbacks += 1

    def close(self):
        self.closed = 1

    def _execute(self, cursor, statement, params):
        self.executed.append((statement, params))
        if not self._autocommit and self._snapshot is None:
            self._snapshot = copy.deepcopy(self.db.tables)
        if self._aborted:
            raise psycopg2.errors.InFailedSqlTransaction(
                "current transaction is aborted, commands ignored until end of transaction block"
            )
        try:
            for fragment in self.fail_on:
                if fragment in statement:
                    raise psycopg2.ProgrammingError(f"injected failure on: {statement}")
            self._apply(cursor, statement, params)
        except psycopg2.Error:
            if not self._autocommit:
                self._aborted = True
            raise

    def _apply(self, cursor, statement, params):
        tables = self.db.tables

        match = _CREATE.match(statement)
        if match:
            name = _unquote(match.group(1))
            if name not in tables:
                columns = [("id", "integer")]
                columns += [(_unquote(c), t.strip().lower()) for c, t in _COLUMN_DEF.findall(match.group(2))]
                tables[name] = {"columns": columns, "rows": [], "next_id": 1}
            return

        match = _INSERT.match(statement)
        if match:
            name = _unquote(match.group(1))
            if name not in tables:
                raise psycopg2.errors.UndefinedTable(f'relation "{name}" does not exist')
            table = tables[name]
            column_names = [_unquote(c) for c in re.findall(_QUOTED, match.group(2))]
            known = [c for c, _ in table["columns"]]
            for column in column_names:
                if column not in known:
                    raise psycopg2.errors.UndefinedColumn(f'column "{column}" does not exist')
            values = dict(zip(column_names, params))
            values["id"] = table["next_id"]
            table["next_id"] += 1
            table["rows"].append(tuple(values.get(c) for c in known))
            cursor.rowcount = 1
            return

        match = _DROP.match(statement)
        if match:
            tables.pop(_unquote(match.group(1)), None)
            return

        match = _SELECT_ALL.match(statement)
        if match:
            name = _unquote(match.group(1))
            if name not in tables:
                raise psycopg2.errors.UndefinedTable(f'relation "{name}" does not exist')
            cursor._results = sorted(tables[name]["rows"], key=lambda row: row[0])
            return

        if "FROM information_schema.tables" in statement:
            schema = params[0]
            names = sorted(tables) if schema == self.db.schema else []
            if "LIKE" in statement:
                pattern = like_to_regex(params[1])
                names = [n for n in names if pattern.fullmatch(n)]
            cursor._results = [(n,) for n in names]
            return

        if "FROM information_schema.columns" in statement:
            schema, name = params
            if schema == self.db.schema and name in tables:
                cursor._results = list(tables[name]["columns"])
            return

        if statement == "SELECT current_database()":
            cursor._results = [(self.db.name,)]
            return

        raise AssertionError(f"FakeConnection does not understand: {statement}")


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo any setup_logging() a test performed."""
    yield
    logger = logging.getLogger(dt_log.PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    dt_log._file_handler = None


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def fake_connection(fake_db):
    return FakeConnection(fake_db)


@pytest.fixture
def client(fake_connection):
    pg = PostgresClient(database="testdb")
    pg.attach(fake_connection)
    return pg


@pytest.fixture
def app_config():
    return AppConfig(
        tables=TableConfig(
            table_prefix="dt1_",
            columns=COLUMN_SPEC,
            dynamic_column="domain",
        )
    )


@pytest.fixture
def tables(app_config, client):
    return DynamicTables(app_config, client=client)
