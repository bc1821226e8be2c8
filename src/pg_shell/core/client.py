"""PostgreSQL client for pg-shell.

Wraps psycopg v3 synchronous connections. Every call opens its own
connection and closes it before returning, whatever the outcome; nothing
is pooled or kept between commands. Driver exceptions are mapped to the
PgShellError hierarchy.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import psycopg
import psycopg.errors
import sentry_sdk
import structlog
from psycopg.types.string import TextLoader

from pg_shell.core.exceptions import ConnectionFailure, EngineError
from pg_shell.core.models import ResultTable

if TYPE_CHECKING:
    from collections.abc import Iterator

    from pg_shell.core.models import ConnectionParams

# Loaded as plain text so infinity and out-of-range values survive.
TEXT_LOADED_TYPES = ("date", "timestamp", "timestamptz")


class PgClient:
    """Query/execute capability bound to one set of connection parameters."""

    def __init__(
        self,
        params: ConnectionParams,
        *,
        connect_timeout: int = 10,
        application_name: str = "pg-shell",
        statement_timeout: float | None = None,
    ) -> None:
        self.params = params
        self.connect_timeout = connect_timeout
        self.application_name = application_name
        self.statement_timeout = statement_timeout

    @contextmanager
    def connection(self) -> Iterator[psycopg.Connection[Any]]:
        """Acquire a fresh connection, closed when the block exits."""
        try:
            conn = psycopg.connect(
                host=self.params.host,
                port=self.params.port,
                dbname=self.params.database,
                user=self.params.username,
                password=self.params.password,
                connect_timeout=self.connect_timeout,
                application_name=self.application_name,
                autocommit=True,
            )
        except psycopg.Error as e:
            raise ConnectionFailure(str(e).strip()) from e

        for type_name in TEXT_LOADED_TYPES:
            conn.adapters.register_loader(type_name, TextLoader)

        try:
            yield conn
        finally:
            conn.close()

    def _prepare(self, cur: psycopg.Cursor[Any]) -> None:
        if self.statement_timeout:
            timeout_ms = int(self.statement_timeout * 1000)
            cur.execute(f"SET statement_timeout = {timeout_ms}")

    def execute_query(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        max_rows: int | None = None,
    ) -> ResultTable:
        """Run a row-returning statement and build a ResultTable from its cursor."""
        log = structlog.get_logger()
        sql_normalized = " ".join(sql.split())
        log.debug("executing query", sql=sql_normalized, max_rows=max_rows)

        with sentry_sdk.start_span(
            op="db.query", description=sql_normalized[:100]
        ) as span:
            start_time = time.monotonic()
            with self.connection() as conn:
                try:
                    with conn.cursor() as cur:
                        self._prepare(cur)
                        cur.execute(sql, params)
                        table = ResultTable.from_cursor(cur, max_rows=max_rows)
                except psycopg.errors.QueryCanceled as e:
                    span.set_status("deadline_exceeded")
                    log.error("query timeout", sql=sql_normalized)
                    msg = f"Query timed out after {self.statement_timeout}s: {e}"
                    raise EngineError(msg) from e
                except psycopg.Error as e:
                    span.set_status("internal_error")
                    log.error("query failed", sql=sql_normalized, error=str(e))
                    raise EngineError(str(e).strip()) from e

            duration_ms = (time.monotonic() - start_time) * 1000
            span.set_data("row_count", len(table.rows))
            span.set_data("duration_ms", duration_ms)
            log.debug(
                "query complete",
                duration_ms=f"{duration_ms:.1f}",
                row_count=len(table.rows),
            )
            return table

    def execute(
        self,
        sql: str,
        params: dict[str, Any] | None = None,
        *,
        log_as: str | None = None,
    ) -> int:
        """Run a data-modifying or DDL statement. Returns the affected row count.

        ``log_as`` replaces the statement text in logs and spans, for
        statements that carry a password literal.
        """
        log = structlog.get_logger()
        sql_normalized = " ".join((log_as or sql).split())
        log.debug("executing statement", sql=sql_normalized)

        with sentry_sdk.start_span(
            op="db.execute", description=sql_normalized[:100]
        ) as span:
            with self.connection() as conn:
                try:
                    with conn.cursor() as cur:
                        self._prepare(cur)
                        cur.execute(sql, params)
                        affected = max(cur.rowcount, 0)
                except psycopg.Error as e:
                    span.set_status("internal_error")
                    log.error("statement failed", sql=sql_normalized, error=str(e))
                    raise EngineError(str(e).strip()) from e

            span.set_data("rows_affected", affected)
            log.debug("statement complete", rows_affected=affected)
            return affected

    def ping(self) -> None:
        """Round-trip ``SELECT 1``; raises ConnectionFailure or EngineError."""
        self.execute_query("SELECT 1")
