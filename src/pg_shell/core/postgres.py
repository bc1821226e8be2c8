"""PostgreSQL introspection and monitoring queries.

Framework-agnostic catalog access used by the command engine. Lookups
are parameterized; only the statements built in core.statements carry
operator text into SQL.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import psycopg
import psycopg.pq
import structlog

from pg_shell.core.exceptions import EngineError
from pg_shell.core.models import ColumnSpec, IndexColumn, ResultTable

if TYPE_CHECKING:
    from pg_shell.core.client import PgClient

DEFAULT_SCHEMA = "public"


def table_exists(client: PgClient, table_name: str, schema: str = DEFAULT_SCHEMA) -> bool:
    sql = """
    SELECT 1
    FROM information_schema.tables
    WHERE table_schema = %(schema)s
      AND table_name = %(table)s
      AND table_type = 'BASE TABLE'
    """
    result = client.execute_query(sql, {"schema": schema, "table": table_name})
    return not result.is_empty


def list_tables(client: PgClient, schema: str = DEFAULT_SCHEMA) -> list[str]:
    sql = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = %(schema)s AND table_type = 'BASE TABLE'
    ORDER BY table_name
    """
    result = client.execute_query(sql, {"schema": schema})
    return [row[0] for row in result.rows if row[0] is not None]


def describe_columns(
    client: PgClient, table_name: str, schema: str = DEFAULT_SCHEMA
) -> list[ColumnSpec]:
    """Column definitions in ordinal order, with primary key membership."""
    sql = """
    SELECT
        c.column_name,
        c.udt_name AS type_name,
        COALESCE(
            c.character_maximum_length,
            c.numeric_precision,
            c.datetime_precision,
            0
        ) AS size,
        c.is_nullable = 'YES' AS nullable,
        EXISTS (
            SELECT 1
            FROM information_schema.table_constraints tc
            JOIN information_schema.key_column_usage kcu
              ON kcu.constraint_name = tc.constraint_name
             AND kcu.table_schema = tc.table_schema
             AND kcu.table_name = tc.table_name
            WHERE tc.constraint_type = 'PRIMARY KEY'
              AND tc.table_schema = c.table_schema
              AND tc.table_name = c.table_name
              AND kcu.column_name = c.column_name
        ) AS is_primary_key
    FROM information_schema.columns c
    WHERE c.table_schema = %(schema)s AND c.table_name = %(table)s
    ORDER BY c.ordinal_position
    """
    result = client.execute_query(sql, {"schema": schema, "table": table_name})
    return [
        ColumnSpec(
            name=name,
            type_name=type_name,
            size=int(size or 0),
            nullable=nullable == "true",
            is_primary_key=is_pk == "true",
        )
        for name, type_name, size, nullable, is_pk in result.rows
    ]


def list_indexes(
    client: PgClient, table_name: str, schema: str = DEFAULT_SCHEMA
) -> list[IndexColumn]:
    """One entry per (index, column), unique indexes first.

    Type is CLUSTERED for the clustered index, HASHED for hash indexes and
    OTHER for everything else. Sort order is only meaningful for btree.
    """
    sql = """
    SELECT
        ic.relname AS index_name,
        a.attname AS column_name,
        i.indisunique AS is_unique,
        CASE
            WHEN i.indisclustered THEN 'CLUSTERED'
            WHEN am.amname = 'hash' THEN 'HASHED'
            ELSE 'OTHER'
        END AS index_type,
        CASE
            WHEN am.amname = 'btree' THEN
                CASE WHEN (i.indoption[k.ord - 1] & 1) = 1 THEN 'D' ELSE 'A' END
        END AS sort_order
    FROM pg_catalog.pg_index i
    JOIN pg_catalog.pg_class tc ON tc.oid = i.indrelid
    JOIN pg_catalog.pg_namespace n ON n.oid = tc.relnamespace
    JOIN pg_catalog.pg_class ic ON ic.oid = i.indexrelid
    JOIN pg_catalog.pg_am am ON am.oid = ic.relam
    CROSS JOIN LATERAL unnest(i.indkey::int2[]) WITH ORDINALITY AS k(attnum, ord)
    JOIN pg_catalog.pg_attribute a ON a.attrelid = tc.oid AND a.attnum = k.attnum
    WHERE n.nspname = %(schema)s AND tc.relname = %(table)s
    ORDER BY i.indisunique DESC, ic.relname, k.ord
    """
    result = client.execute_query(sql, {"schema": schema, "table": table_name})
    return [
        IndexColumn(
            index_name=index_name,
            column_name=column_name,
            unique=is_unique == "true",
            index_type=index_type,
            sort_order=sort_order,
        )
        for index_name, column_name, is_unique, index_type, sort_order in result.rows
    ]


def server_info(client: PgClient) -> list[tuple[str, str]]:
    """Server and driver properties for db-info.

    Database size is best effort: a role that may not call
    pg_database_size() still gets the rest of the report.
    """
    sql = """
    SELECT
        current_setting('server_version') AS server_version,
        current_setting('max_connections') AS max_connections,
        current_user AS username,
        current_database() AS database
    """
    row = client.execute_query(sql).records()[0]

    info: list[tuple[str, str]] = [
        ("Database Product Name", "PostgreSQL"),
        ("Database Version", row["server_version"] or ""),
        ("Database", row["database"] or ""),
        ("Driver Name", "psycopg"),
        ("Driver Version", psycopg.__version__),
        ("libpq Version", _libpq_version()),
        ("Max Connections", row["max_connections"] or ""),
        ("Username", row["username"] or ""),
    ]

    try:
        size = client.execute_query(
            "SELECT pg_size_pretty(pg_database_size(current_database())) AS db_size"
        )
    except EngineError as e:
        structlog.get_logger().debug("database size unavailable", error=e.message)
        return info
    if not size.is_empty and size.rows[0][0] is not None:
        info.append(("Database Size", size.rows[0][0]))
    return info


def _libpq_version() -> str:
    version = psycopg.pq.version()
    return f"{version // 10000}.{version % 10000}"


def list_activity(client: PgClient) -> ResultTable:
    """Non-idle backends other than our own, newest query first."""
    sql = """
    SELECT
        pid,
        usename AS username,
        application_name,
        client_addr AS client_address,
        state,
        query_start,
        now() - query_start AS duration,
        query
    FROM pg_stat_activity
    WHERE state != 'idle'
      AND pid != pg_backend_pid()
    ORDER BY query_start DESC
    """
    return client.execute_query(sql)


def table_stats(
    client: PgClient, table_name: str, schema: str = DEFAULT_SCHEMA
) -> list[tuple[str, str | None]]:
    """Size, scan and vacuum statistics as (statistic, value) pairs."""
    sql = """
    SELECT
        s.relname AS table_name,
        c.reltuples::bigint AS row_estimate,
        pg_size_pretty(pg_total_relation_size(c.oid)) AS total_size,
        pg_size_pretty(pg_relation_size(c.oid)) AS table_size,
        pg_size_pretty(pg_total_relation_size(c.oid) - pg_relation_size(c.oid)) AS index_size,
        s.seq_scan AS sequential_scans,
        s.seq_tup_read AS sequential_rows_read,
        s.idx_scan AS index_scans,
        s.idx_tup_fetch AS index_rows_fetched,
        s.n_tup_ins AS rows_inserted,
        s.n_tup_upd AS rows_updated,
        s.n_tup_del AS rows_deleted,
        s.n_live_tup AS live_rows,
        s.n_dead_tup AS dead_rows,
        s.last_vacuum AS last_vacuum,
        s.last_autovacuum AS last_autovacuum,
        s.last_analyze AS last_analyze,
        s.last_autoanalyze AS last_autoanalyze
    FROM pg_stat_user_tables s
    JOIN pg_catalog.pg_class c ON c.oid = s.relid
    WHERE s.schemaname = %(schema)s AND s.relname = %(table)s
    """
    result = client.execute_query(sql, {"schema": schema, "table": table_name})
    if result.is_empty:
        return []
    return list(zip(result.headers, result.rows[0], strict=True))


def list_users(client: PgClient) -> ResultTable:
    sql = """
    SELECT
        rolname AS username,
        rolcreatedb AS can_create_db,
        rolsuper AS is_superuser,
        rolvaliduntil AS valid_until
    FROM pg_roles
    WHERE rolcanlogin
    ORDER BY rolname
    """
    return client.execute_query(sql)
