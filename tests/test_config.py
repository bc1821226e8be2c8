"""Tests for configuration loading and startup connection resolution."""

import pytest

from pg_shell.core.config import (
    AppConfig,
    ConnectionProfile,
    load_config,
    parse_dsn,
    resolve_connection,
)
from pg_shell.core.exceptions import ConfigError


def _write(path, text):
    path.write_text(text)
    return path


@pytest.mark.unit
class TestParseDsn:
    def test_full_dsn(self):
        fields = parse_dsn("postgresql://app:pw@db.example.com:6543/sales")
        assert fields == {
            "host": "db.example.com",
            "port": 6543,
            "database": "sales",
            "username": "app",
            "password": "pw",
        }

    def test_postgres_scheme_and_partial(self):
        assert parse_dsn("postgres://db/app") == {"host": "db", "database": "app"}

    def test_percent_encoded_password(self):
        assert parse_dsn("postgresql://u:p%40ss@h/d")["password"] == "p@ss"

    def test_query_params(self):
        fields = parse_dsn("postgresql://h/d?user=bob&password=x")
        assert fields["username"] == "bob"
        assert fields["password"] == "x"

    def test_keyword_string(self):
        assert parse_dsn("host=h port=7000 dbname=x user=u") == {
            "host": "h",
            "port": 7000,
            "database": "x",
            "username": "u",
        }

    def test_garbage(self):
        with pytest.raises(ConfigError, match="Invalid DSN"):
            parse_dsn("not a dsn")

    def test_bad_scheme(self):
        with pytest.raises(ConfigError, match="Invalid DSN scheme"):
            parse_dsn("mysql://h/d")


@pytest.mark.unit
class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.toml")
        assert config == AppConfig()
        assert config.default_max_rows == 100

    def test_loads_profiles_and_tools(self, tmp_path):
        path = _write(
            tmp_path / "config.toml",
            """
default_max_rows = 50
default_profile = "local"

[tools]
pg_dump = "/opt/pg16/bin/pg_dump"

[profiles.local]
host = "127.0.0.1"
database = "app"

[profiles.prod]
dsn = "postgresql://admin@prod.internal:5433/main"
""",
        )
        config = load_config(path)
        assert config.default_max_rows == 50
        assert config.tools.pg_dump == "/opt/pg16/bin/pg_dump"
        assert config.tools.psql == "psql"
        assert config.profiles["local"].host == "127.0.0.1"
        assert config.profiles["prod"].port == 5433
        assert config.profiles["prod"].username == "admin"

    def test_malformed_toml(self, tmp_path):
        path = _write(tmp_path / "config.toml", "this is = = not toml")
        with pytest.raises(ConfigError, match="Malformed TOML"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = _write(tmp_path / "config.toml", "default_max_rows = 0\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_invalid_port_in_profile(self, tmp_path):
        path = _write(tmp_path / "config.toml", "[profiles.x]\nport = 70000\n")
        with pytest.raises(ConfigError):
            load_config(path)


@pytest.mark.unit
class TestResolveConnection:
    def test_profile_dsn_with_explicit_override(self):
        profile = ConnectionProfile(dsn="postgresql://a@dsnhost/db1", database="db2")
        assert profile.host == "dsnhost"
        assert profile.database == "db2"
        assert profile.explicit_fields() == {
            "host": "dsnhost",
            "database": "db2",
            "username": "a",
        }

    def test_nothing_requested(self):
        assert resolve_connection(AppConfig()) is None

    def test_env_alone_does_not_connect(self, monkeypatch):
        monkeypatch.setenv("PGHOST", "envhost")
        assert resolve_connection(AppConfig()) is None

    def test_cli_flags_fill_over_defaults(self):
        params = resolve_connection(AppConfig(), host="h", port=None, database="d")
        assert params.host == "h"
        assert params.port == 5432
        assert params.database == "d"
        assert params.username == "postgres"

    def test_profile_then_env_then_dsn_then_cli(self, monkeypatch):
        config = AppConfig(
            profiles={
                "p": ConnectionProfile(host="profhost", database="profdb", username="prof")
            }
        )
        monkeypatch.setenv("PGUSER", "envuser")
        params = resolve_connection(
            config,
            profile_name="p",
            dsn="postgresql://dsnhost/dsndb",
            database="clidb",
        )
        assert params.host == "dsnhost"
        assert params.username == "envuser"
        assert params.database == "clidb"

    def test_profile_from_env_var(self, monkeypatch):
        config = AppConfig(profiles={"p": ConnectionProfile(host="ph")})
        monkeypatch.setenv("PG_SHELL_PROFILE", "p")
        assert resolve_connection(config).host == "ph"

    def test_default_profile(self):
        config = AppConfig(
            default_profile="p", profiles={"p": ConnectionProfile(port=6000)}
        )
        assert resolve_connection(config).port == 6000

    def test_unknown_profile(self):
        config = AppConfig(profiles={"a": ConnectionProfile()})
        with pytest.raises(ConfigError, match="Unknown profile: 'zzz'. Available profiles: a"):
            resolve_connection(config, profile_name="zzz")

    def test_bad_pgport(self, monkeypatch):
        monkeypatch.setenv("PGPORT", "five")
        with pytest.raises(ConfigError, match="PGPORT"):
            resolve_connection(AppConfig(), host="h")
