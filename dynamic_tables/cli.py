# ==============================================
# CLI: Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to the dynamic tables.
#   Connection settings come from .env / DTABLES_* variables,
#   or from a JSON credentials file with --config-json.
#
# COMMANDS:
# ---------
# 1. Show version / configuration:
#    python -m dynamic_tables version
#    python -m dynamic_tables status
#
# 2. Inspect the database:
#    python -m dynamic_tables tables
#    python -m dynamic_tables columns dt1_wikipediaorg
#    python -m dynamic_tables columns --all
#    python -m dynamic_tables show dt1_wikipediaorg
#
# 3. Insert one row:
#    python -m dynamic_tables --prefix dt1_ \
#        --columns "domain VARCHAR(100), keyword VARCHAR(100)" \
#        --dynamic-column domain input wikipedia.org cats
#
# 4. Drop every table with the prefix:
#    python -m dynamic_tables --prefix dt1_ delete --yes
#
# 5. Stream rows from an HTTP endpoint:
#    python -m dynamic_tables stream --url http://127.0.0.1:8000/record --count 100
#
# ==============================================

import argparse
import sys
from typing import Optional, Sequence

from dynamic_tables import __version__
from dynamic_tables.config import get_config
from dynamic_tables.dynamic_tables import DynamicTables
from dynamic_tables.errors import DynamicTablesError
from dynamic_tables.log import setup_logging
from dynamic_tables.stream import stream_rows


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dynamic_tables",
        description="Route rows into PostgreSQL tables named after a column value"
    )
    parser.add_argument("--prefix", help="Table name prefix (default from config)")
    parser.add_argument("--columns", help='Column spec, e.g. "domain VARCHAR(100), keyword TEXT"')
    parser.add_argument("--dynamic-column", help="Column whose value selects the table")
    parser.add_argument("--config-json", help="JSON file with database, user, password, host")
    parser.add_argument("--env", action="store_true",
                        help="Read credentials from DTABLES_ENVS_PGSQL_* only")
    parser.add_argument("--log-level", help="Logging level (e.g. INFO, DEBUG, SEVERE)")
    parser.add_argument("--log-to-file", action="store_true", help="Also log to the log file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("version", help="Print the package version")
    subparsers.add_parser("status", help="Print the active configuration")
    subparsers.add_parser("tables", help="List tables in the schema")

    columns = subparsers.add_parser("columns", help="List the columns of a table")
    columns.add_argument("table", nargs="?")
    columns.add_argument("--all", action="store_true", help="Every table in the schema")

    show = subparsers.add_parser("show", help="Print all rows of a table")
    show.add_argument("table")

    input_parser = subparsers.add_parser("input", help="Insert one row (values in column order)")
    input_parser.add_argument("values", nargs="+")

    delete = subparsers.add_parser("delete", help="Drop every table with the prefix")
    delete.add_argument("--yes", action="store_true", help="Confirm the deletion")

    stream = subparsers.add_parser("stream", help="Feed rows from an HTTP endpoint")
    stream.add_argument("--url", help="Endpoint URL (default from config)")
    stream.add_argument("--count", type=int, default=None, help="Stop after N rows")
    stream.add_argument("--delay", type=float, default=0.1, help="Seconds between requests")

    return parser


def main(argv: Optional[Sequence[str]] = None, tables: Optional[DynamicTables] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = get_config()

    try:
        setup_logging(
            args.log_level or config.logging.level,
            args.log_to_file or config.logging.log_to_file,
            config.logging.log_file
        )
    except ValueError as e:
        parser.error(str(e))

    if args.command == "version":
        print(__version__)
        return 0

    tables = tables or DynamicTables(config)
    if args.prefix is not None:
        tables.set_table_prefix(args.prefix)
    if args.columns is not None:
        tables.set_columns(args.columns)
    if args.dynamic_column is not None:
        tables.set_dynamic_column(args.dynamic_column)

    if args.command == "status":
        _print_status(tables)
        return 0

    try:
        if not tables.client.is_connected:
            if args.config_json:
                tables.connect_json(args.config_json)
            elif args.env:
                tables.connect_env()
            else:
                tables.connect()
        return _run(args, tables, config.stream_url)
    except DynamicTablesError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    finally:
        tables.close()


def _run(args: argparse.Namespace, tables: DynamicTables, default_url: str) -> int:
    if args.command == "tables":
        names = tables.list_tables()
        if not names:
            print("No tables found.")
        else:
            print("Tables in the database:")
            for name in names:
                print(name)
        return 0

    if args.command == "columns":
        if args.all:
            targets = tables.list_tables()
        elif args.table:
            targets = [args.table]
        else:
            print("✗ Give a table name or --all", file=sys.stderr)
            return 2
        for table_name in targets:
            _print_columns(tables, table_name)
        return 0

    if args.command == "show":
        rows = tables.get_table_rows(args.table)
        if not rows:
            print(f"Table '{args.table}' has no data or could not be read.")
        else:
            print(f"Rows in '{args.table}':")
            for row in rows:
                print(f" - {list(row)}")
        return 0

    if args.command == "input":
        result = tables.input(*args.values)
        if result.ok:
            print(f"✓ Inserted {result.rows_affected} row(s) into {result.table_name}")
            return 0
        print(f"✗ {result.error}", file=sys.stderr)
        return 1

    if args.command == "delete":
        if not args.yes:
            print(f"✗ Refusing to drop tables with prefix '{tables.registry.table_prefix}' without --yes",
                  file=sys.stderr)
            return 2
        result = tables.delete_tables()
        if result.ok:
            print(f"✓ Dropped {len(result.tables)} table(s)")
            return 0
        print(f"✗ {result.error}", file=sys.stderr)
        return 1

    if args.command == "stream":
        stats = stream_rows(tables, args.url or default_url, max_records=args.count, delay=args.delay)
        print(f"✓ {stats.rows_received} rows received, {stats.rows_inserted} inserted, "
              f"{stats.rows_rejected} rejected, "
              f"{stats.errors} request error(s) in {stats.elapsed_seconds:.1f}s")
        return 0

    return 2


def _print_status(tables: DynamicTables) -> None:
    status = tables.status()
    print(f"dynamic_tables {status['version']}")
    print(f"Connected: {'yes' if status['connected'] else 'no'} ({status['database']})")
    print("\nConfigured Columns:")
    for column in status["columns"]:
        print(column)
    print(f"\nDynamic Column:\n{status['dynamic_column']}")
    print(f"\nTable Prefix:\n{status['table_prefix']}\n")


def _print_columns(tables: DynamicTables, table_name: str) -> None:
    columns = tables.list_columns(table_name)
    if not columns:
        print(f"No columns found for table '{table_name}' or the table does not exist.")
        return
    print(f"Columns in table '{table_name}':")
    for name, data_type in columns:
        print(f" - {name}: {data_type}")


if __name__ == "__main__":
    sys.exit(main())
