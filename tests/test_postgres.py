"""Tests for catalog introspection (core.postgres)."""

from unittest.mock import MagicMock

import pytest

from pg_shell.core.client import PgClient
from pg_shell.core.config import parse_dsn
from pg_shell.core.exceptions import EngineError
from pg_shell.core.models import ConnectionParams, ResultTable
from pg_shell.core.postgres import (
    describe_columns,
    list_activity,
    list_indexes,
    list_tables,
    list_users,
    server_info,
    table_exists,
    table_stats,
)
from tests.integration_config import TEST_DSN, TEST_TABLE_PREFIX, requires_database


def _client(*tables):
    client = MagicMock()
    client.execute_query.side_effect = list(tables)
    return client


# ---------------------------------------------------------------------------
# Unit tests
# ---------------------------------------------------------------------------


@pytest.mark.unit
class TestTableLookups:
    def test_table_exists_true(self):
        client = _client(ResultTable.from_rows(["?column?"], [(1,)]))
        assert table_exists(client, "users") is True
        _, params = client.execute_query.call_args.args
        assert params == {"schema": "public", "table": "users"}

    def test_table_exists_false(self):
        client = _client(ResultTable(headers=["?column?"]))
        assert table_exists(client, "ghost") is False

    def test_list_tables(self):
        client = _client(ResultTable.from_rows(["table_name"], [("a",), ("b",)]))
        assert list_tables(client) == ["a", "b"]


@pytest.mark.unit
class TestDescribeColumns:
    def test_maps_rows(self):
        client = _client(
            ResultTable.from_rows(
                ["column_name", "type_name", "size", "nullable", "is_primary_key"],
                [("id", "int4", 32, False, True), ("name", "varchar", 100, True, False)],
            )
        )
        cols = describe_columns(client, "users")
        assert [c.name for c in cols] == ["id", "name"]
        assert cols[0].size == 32
        assert cols[0].is_primary_key is True
        assert cols[0].nullable is False
        assert cols[1].nullable is True


@pytest.mark.unit
class TestListIndexes:
    def test_maps_rows(self):
        client = _client(
            ResultTable.from_rows(
                ["index_name", "column_name", "is_unique", "index_type", "sort_order"],
                [("users_pkey", "id", True, "OTHER", "A"), ("h_idx", "x", False, "HASHED", None)],
            )
        )
        idx = list_indexes(client, "users")
        assert idx[0].unique is True
        assert idx[0].sort_order == "A"
        assert idx[1].index_type == "HASHED"
        assert idx[1].sort_order is None


@pytest.mark.unit
class TestServerInfo:
    def _settings(self):
        return ResultTable.from_rows(
            ["server_version", "max_connections", "username", "database"],
            [("16.2", "100", "app", "appdb")],
        )

    def test_properties_in_order(self):
        client = _client(self._settings(), ResultTable.from_rows(["db_size"], [("8 MB",)]))
        pairs = server_info(client)
        info = dict(pairs)
        names = [name for name, _ in pairs]
        assert names[:3] == ["Database Product Name", "Database Version", "Database"]
        assert info["Database Product Name"] == "PostgreSQL"
        assert info["Database Version"] == "16.2"
        assert info["Driver Name"] == "psycopg"
        assert info["Max Connections"] == "100"
        assert info["Username"] == "app"
        assert info["Database Size"] == "8 MB"

    def test_size_is_best_effort(self):
        client = _client(self._settings(), EngineError("permission denied"))
        info = dict(server_info(client))
        assert "Database Size" not in info
        assert info["Database"] == "appdb"


@pytest.mark.unit
class TestStatsAndActivity:
    def test_table_stats_pairs(self):
        client = _client(
            ResultTable.from_rows(["table_name", "live_rows"], [("users", 12)])
        )
        assert table_stats(client, "users") == [("table_name", "users"), ("live_rows", "12")]

    def test_table_stats_missing(self):
        client = _client(ResultTable(headers=["table_name"]))
        assert table_stats(client, "users") == []

    def test_activity_and_users_pass_through(self):
        activity = ResultTable.from_rows(["pid"], [(42,)])
        users = ResultTable.from_rows(["username"], [("app",)])
        assert list_activity(_client(activity)) is activity
        assert list_users(_client(users)) is users


# ---------------------------------------------------------------------------
# Integration tests
# ---------------------------------------------------------------------------


@pytest.fixture
def live_client():
    fields = parse_dsn(TEST_DSN)
    params = ConnectionParams(
        host=fields.get("host", "localhost"),
        port=fields.get("port", 5432),
        database=fields.get("database", "postgres"),
        username=fields.get("username", "postgres"),
        password=fields.get("password", ""),
    )
    return PgClient(params)


@pytest.fixture
def live_table(live_client):
    name = f"{TEST_TABLE_PREFIX}people"
    live_client.execute(f"DROP TABLE IF EXISTS {name}")
    live_client.execute(f"CREATE TABLE {name} (id SERIAL PRIMARY KEY, name VARCHAR(40))")
    yield name
    live_client.execute(f"DROP TABLE IF EXISTS {name}")


@requires_database
@pytest.mark.integration
def test_live_describe_and_indexes(live_client, live_table):
    assert table_exists(live_client, live_table)
    assert live_table in list_tables(live_client)

    cols = describe_columns(live_client, live_table)
    assert [c.name for c in cols] == ["id", "name"]
    assert cols[0].is_primary_key
    assert cols[1].size == 40

    idx = list_indexes(live_client, live_table)
    assert idx[0].column_name == "id"
    assert idx[0].unique


@requires_database
@pytest.mark.integration
def test_live_server_info(live_client):
    info = dict(server_info(live_client))
    assert info["Database Product Name"] == "PostgreSQL"


@requires_database
@pytest.mark.integration
def test_live_infinite_timestamps(live_client):
    table = live_client.execute_query(
        "SELECT 'infinity'::timestamptz AS t, '-infinity'::date AS d, "
        "'2024-01-02'::date AS day"
    )
    assert table.rows == [["infinity", "-infinity", "2024-01-02"]]
