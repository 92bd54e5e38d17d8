# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load all configuration from environment variables / .env
#   file and provide typed config objects to all other modules.
#
# CLASSES:
# --------
# - PostgresConfig (dataclass)
#     host: str          (default "localhost")
#     port: int          (default 5432)
#     user: str          (default "postgres")
#     password: str      (default "")
#     database: str      (default "postgres")
#     schema: str        (default "public")
#
# - TableConfig (dataclass)
#     table_prefix: str    (default "dtbl_")
#     columns: str         (default "")  → "name type, name type"
#     dynamic_column: str  (default "")
#     strict: bool         (default False) → raise instead of log+return
#     atomic_input: bool   (default False) → create+insert in one transaction
#
# - LoggingConfig (dataclass)
#     level: str           (default "ERROR")
#     log_to_file: bool    (default False)
#     log_file: str        (default "dynamic_tables.log")
#
# - AppConfig (dataclass)
#     postgres: PostgresConfig
#     tables: TableConfig
#     logging: LoggingConfig
#     stream_url: str      (default "http://127.0.0.1:8000/record")
#
# FUNCTIONS:
# ----------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# - postgres_config_from_env() -> PostgresConfig
#     Strict variant: all four DTABLES_ENVS_PGSQL_* credentials
#     must be set, else ConfigurationError.
#
# - load_postgres_config_json(path=None) -> PostgresConfig
#     Read {database, user, password, host[, port]} from a JSON
#     file (default "config.json").
#
# USAGE:
# ------
#   from dynamic_tables.config import get_config
#   config = get_config()
#   print(config.postgres.host)
#   print(config.tables.table_prefix)
#
# ==============================================

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from dynamic_tables.errors import ConfigurationError
from dynamic_tables.schema.registry import DEFAULT_TABLE_PREFIX

ENV_PREFIX = "DTABLES_ENVS_PGSQL_"
DEFAULT_CONFIG_JSON = "config.json"


@dataclass
class PostgresConfig:
    """PostgreSQL database configuration."""
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    database: str = "postgres"
    schema: str = "public"


@dataclass
class TableConfig:
    """Dynamic table configuration."""
    table_prefix: str = DEFAULT_TABLE_PREFIX
    columns: str = ""
    dynamic_column: str = ""
    strict: bool = False
    atomic_input: bool = False


@dataclass
class LoggingConfig:
    level: str = "ERROR"
    log_to_file: bool = False
    log_file: str = "dynamic_tables.log"


@dataclass
class AppConfig:
    """Main application configuration."""
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    tables: TableConfig = field(default_factory=TableConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    stream_url: str = "http://127.0.0.1:8000/record"


# Singleton instance
_config_instance: Optional[AppConfig] = None


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env from the working directory (existing env vars win)
    load_dotenv(dotenv_path=Path.cwd() / ".env")

    # Build PostgreSQL configuration
    postgres_config = PostgresConfig(
        host=os.getenv(f"{ENV_PREFIX}HOST", "localhost"),
        port=int(os.getenv(f"{ENV_PREFIX}PORT", "5432")),
        user=os.getenv(f"{ENV_PREFIX}USER", "postgres"),
        password=os.getenv(f"{ENV_PREFIX}PASSWORD", ""),
        database=os.getenv(f"{ENV_PREFIX}DATABASE", "postgres"),
        schema=os.getenv("DTABLES_PGSQL_SCHEMA", "public")
    )

    # Build table configuration
    table_config = TableConfig(
        table_prefix=os.getenv("DTABLES_TABLE_PREFIX", DEFAULT_TABLE_PREFIX),
        columns=os.getenv("DTABLES_COLUMNS", ""),
        dynamic_column=os.getenv("DTABLES_DYNAMIC_COLUMN", ""),
        strict=_env_bool("DTABLES_STRICT"),
        atomic_input=_env_bool("DTABLES_ATOMIC_INPUT")
    )

    # Build logging configuration
    logging_config = LoggingConfig(
        level=os.getenv("DTABLES_LOG_LEVEL", "ERROR"),
        log_to_file=_env_bool("DTABLES_LOG_TO_FILE"),
        log_file=os.getenv("DTABLES_LOG_FILE", "dynamic_tables.log")
    )

    _config_instance = AppConfig(
        postgres=postgres_config,
        tables=table_config,
        logging=logging_config,
        stream_url=os.getenv("DTABLES_STREAM_URL", "http://127.0.0.1:8000/record")
    )

    return _config_instance


def reset_config() -> None:
    """Forget the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def postgres_config_from_env(schema: str = "public") -> PostgresConfig:
    """
    Build a PostgresConfig purely from the DTABLES_ENVS_PGSQL_* variables.

    Raises:
        ConfigurationError: If DATABASE, USER, PASSWORD or HOST is missing.
    """
    load_dotenv(dotenv_path=Path.cwd() / ".env")

    values = {}
    missing = []
    for key in ("DATABASE", "USER", "PASSWORD", "HOST"):
        value = os.getenv(f"{ENV_PREFIX}{key}")
        if value is None:
            missing.append(f"{ENV_PREFIX}{key}")
        values[key.lower()] = value
    if missing:
        raise ConfigurationError(f"Missing environment variable(s): {', '.join(missing)}")

    return PostgresConfig(
        host=values["host"],
        port=int(os.getenv(f"{ENV_PREFIX}PORT", "5432")),
        user=values["user"],
        password=values["password"],
        database=values["database"],
        schema=schema
    )


def load_postgres_config_json(
    path: Union[str, Path, None] = None,
    schema: str = "public"
) -> PostgresConfig:
    """
    Read connection credentials from a JSON file.

    Args:
        path: JSON file with database, user, password and host keys
              (port optional). Defaults to config.json.

    Raises:
        ConfigurationError: File missing, unreadable, or a key is absent.
    """
    config_path = Path(path) if path else Path(DEFAULT_CONFIG_JSON)
    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read {config_path}: {e}") from e

    missing = [key for key in ("database", "user", "password", "host") if key not in data]
    if missing:
        raise ConfigurationError(f"{config_path} is missing key(s): {', '.join(missing)}")

    return PostgresConfig(
        host=data["host"],
        port=int(data.get("port", 5432)),
        user=data["user"],
        password=data["password"],
        database=data["database"],
        schema=schema
    )
