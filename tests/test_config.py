# ==============================================
# Tests for Configuration Management
# ==============================================

import json
import os

import pytest

from dynamic_tables.config import (
    get_config,
    load_postgres_config_json,
    postgres_config_from_env,
    reset_config,
)
from dynamic_tables.errors import ConfigurationError

CREDENTIAL_VARS = [
    "DTABLES_ENVS_PGSQL_DATABASE",
    "DTABLES_ENVS_PGSQL_USER",
    "DTABLES_ENVS_PGSQL_PASSWORD",
    "DTABLES_ENVS_PGSQL_HOST",
    "DTABLES_ENVS_PGSQL_PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Run each test in an empty directory with no DTABLES_* variables."""
    monkeypatch.chdir(tmp_path)
    for name in CREDENTIAL_VARS + [
        "DTABLES_PGSQL_SCHEMA", "DTABLES_TABLE_PREFIX", "DTABLES_COLUMNS",
        "DTABLES_DYNAMIC_COLUMN", "DTABLES_STRICT", "DTABLES_ATOMIC_INPUT",
        "DTABLES_LOG_LEVEL", "DTABLES_LOG_TO_FILE", "DTABLES_LOG_FILE", "DTABLES_STREAM_URL",
    ]:
        monkeypatch.delenv(name, raising=False)
    reset_config()
    yield
    reset_config()


class TestGetConfig:
    def test_defaults(self):
        config = get_config()
        assert config.postgres.host == "localhost"
        assert config.postgres.port == 5432
        assert config.postgres.schema == "public"
        assert config.tables.table_prefix == "dtbl_"
        assert config.tables.columns == ""
        assert config.tables.strict is False
        assert config.logging.level == "ERROR"
        assert config.logging.log_to_file is False

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("DTABLES_ENVS_PGSQL_HOST", "db.internal")
        monkeypatch.setenv("DTABLES_ENVS_PGSQL_PORT", "6543")
        monkeypatch.setenv("DTABLES_TABLE_PREFIX", "dt1_")
        monkeypatch.setenv("DTABLES_COLUMNS", "domain TEXT")
        monkeypatch.setenv("DTABLES_DYNAMIC_COLUMN", "domain")
        monkeypatch.setenv("DTABLES_STRICT", "true")
        monkeypatch.setenv("DTABLES_ATOMIC_INPUT", "1")
        monkeypatch.setenv("DTABLES_LOG_LEVEL", "INFO")

        config = get_config()

        assert config.postgres.host == "db.internal"
        assert config.postgres.port == 6543
        assert config.tables.table_prefix == "dt1_"
        assert config.tables.columns == "domain TEXT"
        assert config.tables.dynamic_column == "domain"
        assert config.tables.strict is True
        assert config.tables.atomic_input is True
        assert config.logging.level == "INFO"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("DTABLES_TABLE_PREFIX=from_dotenv_\n")
        try:
            assert get_config().tables.table_prefix == "from_dotenv_"
        finally:
            # load_dotenv writes into os.environ
            os.environ.pop("DTABLES_TABLE_PREFIX", None)

    def test_singleton(self):
        assert get_config() is get_config()


class TestPostgresConfigFromEnv:
    def test_all_present(self, monkeypatch):
        for key, value in {"DATABASE": "mydb", "USER": "me", "PASSWORD": "pw", "HOST": "h"}.items():
            monkeypatch.setenv(f"DTABLES_ENVS_PGSQL_{key}", value)
        config = postgres_config_from_env()
        assert (config.database, config.user, config.password, config.host) == ("mydb", "me", "pw", "h")
        assert config.port == 5432

    def test_missing_variables(self, monkeypatch):
        monkeypatch.setenv("DTABLES_ENVS_PGSQL_DATABASE", "mydb")
        with pytest.raises(ConfigurationError) as exc_info:
            postgres_config_from_env()
        assert "DTABLES_ENVS_PGSQL_USER" in str(exc_info.value)
        assert "DTABLES_ENVS_PGSQL_DATABASE" not in str(exc_info.value)


class TestLoadPostgresConfigJson:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "creds.json"
        path.write_text(json.dumps({
            "database": "mydb", "user": "me", "password": "pw", "host": "h", "port": 5999
        }))
        config = load_postgres_config_json(path, schema="analytics")
        assert config.database == "mydb"
        assert config.port == 5999
        assert config.schema == "analytics"

    def test_default_path(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({
            "database": "d", "user": "u", "password": "p", "host": "h"
        }))
        assert load_postgres_config_json().database == "d"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_postgres_config_json(tmp_path / "absent.json")

    def test_missing_key(self, tmp_path):
        path = tmp_path / "creds.json"
        path.write_text(json.dumps({"database": "d", "user": "u"}))
        with pytest.raises(ConfigurationError, match="password, host"):
            load_postgres_config_json(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "creds.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError):
            load_postgres_config_json(path)
