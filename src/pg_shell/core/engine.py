"""Command engine: every db-* operation of the shell.

Each operation checks the session, validates its own preconditions,
builds SQL through core.statements or calls core.postgres, and returns
one string. Nothing raises out of an operation: the ``command``
decorator turns failures into text, verbatim for precondition errors and
behind the operation's error prefix for engine, process and I/O errors.

``CommandEngine.handlers()`` is the name -> handler table the front-end
dispatches through.
"""

from __future__ import annotations

import functools
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pg_shell.core import postgres, statements, tools
from pg_shell.core.config import AppConfig
from pg_shell.core.exceptions import (
    ObjectAlreadyExists,
    ObjectNotFound,
    PgShellError,
    PreconditionError,
    UnsupportedFormat,
    UsageError,
)
from pg_shell.core.logging import get_logger
from pg_shell.core.models import ResultTable
from pg_shell.formatters import export, registry, render

if TYPE_CHECKING:
    from collections.abc import Callable

    from pg_shell.core.session import Session

REQUIRED = object()

EXPORT_FORMATS = ("csv", "json")

CONNECTION = "Connection"
SCHEMA = "Schema Operations"
DATA = "Data Operations"
BACKUP = "Backup and Restore"
USERS = "User Management"
HELP = "Help"

_GROUP_ORDER = (CONNECTION, SCHEMA, DATA, BACKUP, USERS, HELP)

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


@dataclass(frozen=True)
class Param:
    """One positional argument of a command, in surface order."""

    name: str
    kind: type = str
    default: Any = REQUIRED
    help: str = ""

    @property
    def keyword(self) -> str:
        return _CAMEL_RE.sub("_", self.name).lower()

    @property
    def option(self) -> str:
        return "--" + _CAMEL_RE.sub("-", self.name).lower()

    @property
    def required(self) -> bool:
        return self.default is REQUIRED


@dataclass(frozen=True)
class CommandSpec:
    name: str
    summary: str
    params: tuple[Param, ...]
    group: str
    handler: Callable[..., str] | None = field(default=None, compare=False)

    @property
    def usage(self) -> str:
        parts = [self.name]
        for param in self.params:
            parts.append(f"<{param.name}>" if param.required else f"[{param.name}]")
        return " ".join(parts)


def command(
    name: str,
    summary: str,
    *params: Param,
    group: str,
    error_prefix: str,
) -> Callable[[Callable[..., str]], Callable[..., str]]:
    """Register an engine method as a shell command and make it total."""

    def decorator(func: Callable[..., str]) -> Callable[..., str]:
        @functools.wraps(func)
        def wrapper(self: CommandEngine, *args: Any, **kwargs: Any) -> str:
            log = get_logger("engine").bind(command=name)
            try:
                result = func(self, *args, **kwargs)
            except PreconditionError as e:
                log.info("command refused", reason=e.message)
                return e.message
            except PgShellError as e:
                log.warning("command failed", error=e.message)
                return f"{error_prefix}: {e.message}"
            except (OSError, subprocess.SubprocessError) as e:
                log.warning("command failed", error=str(e))
                return f"{error_prefix}: {e}"
            except Exception as e:
                log.exception("command crashed")
                return f"{error_prefix}: {e}"
            log.debug("command complete")
            return result

        wrapper.__command__ = CommandSpec(  # type: ignore[attr-defined]
            name=name, summary=summary, params=params, group=group
        )
        return wrapper

    return decorator


def is_select(sql: str) -> bool:
    return sql.strip().upper().startswith("SELECT")


def _yes_no(flag: bool) -> str:
    return "YES" if flag else "NO"


class CommandEngine:
    """The db-* operations bound to one Session."""

    def __init__(
        self,
        session: Session,
        config: AppConfig | None = None,
        runner: tools.ToolRunner | None = None,
    ) -> None:
        self.session = session
        self.config = config or AppConfig()
        self.runner = runner or tools.ToolRunner(timeout=self.config.tool_timeout)

    @classmethod
    def specs(cls) -> list[CommandSpec]:
        found = []
        for attr in vars(cls).values():
            spec = getattr(attr, "__command__", None)
            if spec is not None:
                found.append(spec)
        return found

    def handlers(self) -> dict[str, CommandSpec]:
        """Command name -> spec with the handler bound to this engine."""
        table: dict[str, CommandSpec] = {}
        for attr_name, attr in vars(type(self)).items():
            spec = getattr(attr, "__command__", None)
            if spec is None:
                continue
            bound = getattr(self, attr_name)
            table[spec.name] = CommandSpec(
                name=spec.name,
                summary=spec.summary,
                params=spec.params,
                group=spec.group,
                handler=bound,
            )
        return table

    def _require_table(self, client: Any, table_name: str, message: str) -> None:
        if not postgres.table_exists(client, table_name):
            raise ObjectNotFound(message)

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    @command(
        "db-connect",
        "Connect to PostgreSQL database",
        Param("host", help="Database host"),
        Param("port", int, help="Database port"),
        Param("database", help="Database name"),
        Param("username", help="Database username"),
        Param("password", help="Database password"),
        group=CONNECTION,
        error_prefix="Failed to connect to database",
    )
    def connect(
        self, host: str, port: int, database: str, username: str, password: str
    ) -> str:
        return self.session.connect(host, port, database, username, password)

    @command(
        "db-status",
        "Show current database connection status",
        group=CONNECTION,
        error_prefix="Error reading status",
    )
    def status(self) -> str:
        return self.session.status()

    @command(
        "db-info",
        "Show database server information",
        group=CONNECTION,
        error_prefix="Error retrieving database information",
    )
    def info(self) -> str:
        client, _ = self.session.require_connected()
        pairs = postgres.server_info(client)
        return render(ResultTable.from_rows(["Property", "Value"], pairs), 100)

    # ------------------------------------------------------------------
    # Schema operations
    # ------------------------------------------------------------------

    @command(
        "db-list-tables",
        "List all tables in the database",
        group=SCHEMA,
        error_prefix="Error listing tables",
    )
    def list_tables(self) -> str:
        client, _ = self.session.require_connected()
        tables = postgres.list_tables(client)
        if not tables:
            return "No tables found in the database."
        return render(ResultTable.from_rows(["Table Name"], [[t] for t in tables]), 80)

    @command(
        "db-describe-table",
        "Show column properties for a table",
        Param("tableName", help="Table name"),
        group=SCHEMA,
        error_prefix="Error describing table",
    )
    def describe_table(self, table_name: str) -> str:
        client, _ = self.session.require_connected()
        self._require_table(client, table_name, f"Table '{table_name}' does not exist.")

        columns = postgres.describe_columns(client, table_name)
        rows = [
            [
                col.name,
                col.type_name,
                str(col.size),
                _yes_no(col.nullable),
                _yes_no(col.is_primary_key),
            ]
            for col in columns
        ]
        headers = ["Column Name", "Data Type", "Size", "Nullable", "Primary Key"]
        return render(ResultTable(headers=headers, rows=rows), 100)

    @command(
        "db-create-table",
        "Create a new table",
        Param(
            "tableName",
            help="Table name",
        ),
        Param(
            "columnDefinitions",
            help='Column definitions (e.g. "id SERIAL PRIMARY KEY, name VARCHAR(100)")',
        ),
        group=SCHEMA,
        error_prefix="Error creating table",
    )
    def create_table(self, table_name: str, column_definitions: str) -> str:
        client, _ = self.session.require_connected()
        if postgres.table_exists(client, table_name):
            raise ObjectAlreadyExists(f"Error: Table '{table_name}' already exists.")

        client.execute(statements.build_create_table(table_name, column_definitions))
        return f"Table '{table_name}' created successfully."

    @command(
        "db-show-indexes",
        "Show indexes for a table",
        Param("tableName", help="Table name"),
        group=SCHEMA,
        error_prefix="Error retrieving indexes",
    )
    def show_indexes(self, table_name: str) -> str:
        client, _ = self.session.require_connected()
        self._require_table(client, table_name, f"Table '{table_name}' does not exist.")

        indexes = postgres.list_indexes(client, table_name)
        if not indexes:
            return f"No indexes found for table '{table_name}'."
        rows = [
            [
                idx.index_name,
                idx.column_name,
                "true" if idx.unique else "false",
                idx.index_type,
                idx.sort_order or "N/A",
            ]
            for idx in indexes
        ]
        headers = ["Index Name", "Column Name", "Unique", "Type", "Order"]
        return render(ResultTable(headers=headers, rows=rows), 100)

    @command(
        "db-export-schema",
        "Export database schema to a file",
        Param("filePath", help="Output file path"),
        Param("includeData", bool, False, help="Include data"),
        Param("tables", str, "", help="Tables to include (comma-separated, empty for all)"),
        group=SCHEMA,
        error_prefix="Error exporting schema",
    )
    def export_schema(
        self, file_path: str, include_data: bool = False, tables: str = ""
    ) -> str:
        _, params = self.session.require_connected()
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        table_list = statements.split_list(tables) if tables.strip() else []
        argv = tools.export_schema_args(
            params,
            file_path,
            include_data=include_data,
            tables=table_list,
            paths=self.config.tools,
        )
        self.runner.run_checked(argv, params.password)

        message = "Database schema"
        if include_data:
            message += " and data"
        message += f" exported successfully to: {file_path}"
        if tables.strip():
            message += f" (Tables: {tables})"
        return message

    @command(
        "db-copy-table",
        "Create a copy of a table",
        Param("sourceTable", help="Source table name"),
        Param("destinationTable", help="Destination table name"),
        Param("includeData", bool, False, help="Include data"),
        Param("includeIndexes", bool, True, help="Include indexes"),
        Param("includeConstraints", bool, True, help="Include constraints"),
        group=SCHEMA,
        error_prefix="Error copying table",
    )
    def copy_table(
        self,
        source_table: str,
        destination_table: str,
        include_data: bool = False,
        include_indexes: bool = True,
        include_constraints: bool = True,
    ) -> str:
        client, _ = self.session.require_connected()
        self._require_table(
            client, source_table, f"Error: Source table '{source_table}' does not exist."
        )
        if postgres.table_exists(client, destination_table):
            msg = f"Error: Destination table '{destination_table}' already exists."
            raise ObjectAlreadyExists(msg)

        client.execute(
            statements.build_copy_table(
                source_table,
                destination_table,
                include_indexes=include_indexes,
                include_constraints=include_constraints,
            )
        )

        if include_data:
            copied = client.execute(
                statements.build_copy_data(source_table, destination_table)
            )
            message = f"Table '{source_table}' copied to '{destination_table}' with structure"
            if include_indexes:
                message += " and indexes"
            if include_constraints:
                message += " and constraints"
            return f"{message}. {copied} rows copied."

        return (
            f"Table '{source_table}' structure copied to '{destination_table}'"
            + (" with indexes" if include_indexes else " without indexes")
            + (" with constraints" if include_constraints else " without constraints")
        )

    # ------------------------------------------------------------------
    # Data operations
    # ------------------------------------------------------------------

    @command(
        "db-query",
        "Execute a SELECT query",
        Param("query", help="SQL query"),
        Param("maxRows", int, None, help="Maximum rows to display"),
        group=DATA,
        error_prefix="Error executing query",
    )
    def query(self, query: str, max_rows: int | None = None) -> str:
        client, _ = self.session.require_connected()
        if not is_select(query):
            raise UsageError(
                "Only SELECT queries are allowed with this command. "
                "Use db-execute for other operations."
            )
        limit = self.config.default_max_rows if max_rows is None else max_rows

        table = client.execute_query(query, max_rows=limit)
        if table.is_empty and limit > 0:
            return "Query executed successfully. No results returned."

        rendered = render(table, 120)
        if len(table.rows) >= limit:
            return (
                f"{rendered}\n\nShowing {limit} rows. There may be more results. "
                "Use a LIMIT clause or increase maxRows parameter."
            )
        return rendered

    @command(
        "db-execute",
        "Execute a non-query SQL statement",
        Param("sql", help="SQL statement"),
        group=DATA,
        error_prefix="Error executing statement",
    )
    def execute(self, sql: str) -> str:
        client, _ = self.session.require_connected()
        if is_select(sql):
            raise UsageError("Use db-query for SELECT operations.")

        affected = client.execute(sql)
        return f"Statement executed successfully. Rows affected: {affected}"

    @command(
        "db-insert",
        "Insert a record into a table",
        Param("tableName", help="Table name"),
        Param("columns", help="Column names (comma-separated)"),
        Param("values", help="Values (comma-separated)"),
        group=DATA,
        error_prefix="Error inserting record",
    )
    def insert(self, table_name: str, columns: str, values: str) -> str:
        client, _ = self.session.require_connected()
        sql = statements.build_insert(
            table_name, statements.split_list(columns), statements.split_list(values)
        )
        affected = client.execute(sql)
        return f"Record inserted successfully. Rows affected: {affected}"

    @command(
        "db-update",
        "Update records in a table",
        Param("tableName", help="Table name"),
        Param("setClause", help="Set clause (column=value,...)"),
        Param("whereClause", str, "", help="Where clause (without WHERE keyword)"),
        group=DATA,
        error_prefix="Error updating records",
    )
    def update(self, table_name: str, set_clause: str, where_clause: str = "") -> str:
        client, _ = self.session.require_connected()
        sql = statements.build_update(table_name, set_clause, where_clause)
        affected = client.execute(sql)
        return f"Update executed successfully. Rows affected: {affected}"

    @command(
        "db-delete",
        "Delete records from a table",
        Param("tableName", help="Table name"),
        Param("whereClause", str, "", help="Where clause (without WHERE keyword)"),
        group=DATA,
        error_prefix="Error deleting records",
    )
    def delete(self, table_name: str, where_clause: str = "") -> str:
        client, _ = self.session.require_connected()
        if not where_clause.strip():
            raise UsageError(
                "Warning: This will delete ALL records from the table. "
                "Use db-execute if you're sure."
            )
        affected = client.execute(statements.build_delete(table_name, where_clause))
        return f"Delete executed successfully. Rows affected: {affected}"

    @command(
        "db-truncate-table",
        "Remove all data from a table",
        Param("tableName", help="Table name"),
        Param("restartIdentity", bool, False, help="Restart identity (reset sequences)"),
        Param("cascade", bool, False, help="Cascade (also truncate dependent tables)"),
        group=DATA,
        error_prefix="Error truncating table",
    )
    def truncate_table(
        self, table_name: str, restart_identity: bool = False, cascade: bool = False
    ) -> str:
        client, _ = self.session.require_connected()
        self._require_table(
            client, table_name, f"Error: Table '{table_name}' does not exist."
        )

        client.execute(
            statements.build_truncate(
                table_name, restart_identity=restart_identity, cascade=cascade
            )
        )
        message = f"Table '{table_name}' truncated successfully."
        if restart_identity:
            message += " Identity columns reset."
        if cascade:
            message += " Dependent tables also truncated."
        return message

    @command(
        "db-export-query",
        "Export query results to a file (csv, json)",
        Param("query", help="SQL query"),
        Param("filePath", help="Output file path"),
        Param("format", str, "csv", help="Export format (csv, json)"),
        group=DATA,
        error_prefix="Error exporting query results",
    )
    def export_query(self, query: str, file_path: str, format: str = "csv") -> str:
        client, _ = self.session.require_connected()
        if not is_select(query):
            raise UsageError("Only SELECT queries are allowed with this command.")
        fmt = format.strip().lower()
        if fmt not in EXPORT_FORMATS:
            raise UnsupportedFormat(
                f"Unsupported export format: {format}. "
                f"Supported formats are: {', '.join(EXPORT_FORMATS)}"
            )

        table = client.execute_query(query)
        if table.is_empty:
            return "Query executed successfully. No results to export."

        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            export(registry.get(fmt), table, f)

        return f"Query results exported to {fmt.upper()} file: {file_path}"

    @command(
        "db-activity",
        "Show currently running queries",
        group=DATA,
        error_prefix="Error retrieving database activity",
    )
    def activity(self) -> str:
        client, _ = self.session.require_connected()
        table = postgres.list_activity(client)
        if table.is_empty:
            return "No active queries found."
        return render(table, 150)

    @command(
        "db-table-stats",
        "Show table statistics",
        Param("tableName", help="Table name"),
        group=DATA,
        error_prefix="Error retrieving table statistics",
    )
    def table_stats(self, table_name: str) -> str:
        client, _ = self.session.require_connected()
        self._require_table(
            client, table_name, f"Error: Table '{table_name}' does not exist."
        )

        stats = postgres.table_stats(client, table_name)
        if not stats:
            raise ObjectNotFound(
                f"Error: No statistics available for table '{table_name}'."
            )
        return render(ResultTable.from_rows(["Statistic", "Value"], stats), 100)

    # ------------------------------------------------------------------
    # Backup and restore
    # ------------------------------------------------------------------

    @command(
        "db-backup",
        "Backup database to a file",
        Param("filePath", help="Output file path"),
        Param("format", str, "custom", help="Format (plain, custom, directory, tar)"),
        Param("compressionLevel", int, 5, help="Compression level (0-9)"),
        Param("tables", str, "", help="Tables to include (comma-separated, empty for all)"),
        group=BACKUP,
        error_prefix="Error creating backup",
    )
    def backup(
        self,
        file_path: str,
        format: str = "custom",
        compression_level: int = 5,
        tables: str = "",
    ) -> str:
        _, params = self.session.require_connected()
        table_list = statements.split_list(tables) if tables.strip() else []
        argv = tools.backup_args(
            params,
            file_path,
            backup_format=format,
            compression_level=compression_level,
            tables=table_list,
            paths=self.config.tools,
        )
        Path(file_path).parent.mkdir(parents=True, exist_ok=True)
        self.runner.run_checked(argv, params.password)

        message = f"Database backup created successfully at: {file_path}"
        if tables.strip():
            message += f" (Tables: {tables})"
        return (
            f"{message} using {format} format with compression level "
            f"{compression_level}."
        )

    @command(
        "db-restore",
        "Restore database from a backup file",
        Param("filePath", help="Input backup file path"),
        Param("clean", bool, False, help="Clean before restore (drop existing objects)"),
        Param("singleTransaction", bool, True, help="Single transaction (all or nothing)"),
        group=BACKUP,
        error_prefix="Error restoring database",
    )
    def restore(
        self, file_path: str, clean: bool = False, single_transaction: bool = True
    ) -> str:
        _, params = self.session.require_connected()
        if not Path(file_path).exists():
            raise ObjectNotFound(f"Error: Backup file '{file_path}' does not exist.")

        argv = tools.restore_args(
            params,
            file_path,
            clean=clean,
            single_transaction=single_transaction,
            paths=self.config.tools,
        )
        self.runner.run_checked(argv, params.password)
        return f"Database restored successfully from: {file_path}"

    # ------------------------------------------------------------------
    # User management
    # ------------------------------------------------------------------

    @command(
        "db-list-users",
        "List database users",
        group=USERS,
        error_prefix="Error listing database users",
    )
    def list_users(self) -> str:
        client, _ = self.session.require_connected()
        table = postgres.list_users(client)
        if table.is_empty:
            return "No database users found."
        return render(table, 120)

    @command(
        "db-create-user",
        "Create a new database user",
        Param("username", help="Username"),
        Param("password", help="Password"),
        Param("canCreateDb", bool, False, help="Can create databases"),
        Param("isSuperuser", bool, False, help="Is superuser"),
        Param("validUntil", str, "", help="Valid until (YYYY-MM-DD, empty for no expiration)"),
        group=USERS,
        error_prefix="Error creating user",
    )
    def create_user(
        self,
        username: str,
        password: str,
        can_create_db: bool = False,
        is_superuser: bool = False,
        valid_until: str = "",
    ) -> str:
        client, _ = self.session.require_connected()
        sql = statements.build_create_user(
            username,
            password,
            can_create_db=can_create_db,
            is_superuser=is_superuser,
            valid_until=valid_until,
        )
        client.execute(sql, log_as=statements.redact(sql, password))

        message = (
            f"User '{username}' created successfully with "
            f"{statements.createdb_token(can_create_db)} "
            f"{statements.superuser_token(is_superuser)}"
        )
        if valid_until.strip():
            message += f" and valid until {valid_until}"
        return message

    @command(
        "db-alter-user",
        "Modify a database user",
        Param("username", help="Username"),
        Param("newPassword", str, "", help="New password (empty to not change)"),
        Param("canCreateDb", str, "", help="true/false, empty to not change"),
        Param("isSuperuser", str, "", help="true/false, empty to not change"),
        Param("validUntil", str, "", help="YYYY-MM-DD, 'none' for no expiration, empty to not change"),
        group=USERS,
        error_prefix="Error modifying user",
    )
    def alter_user(
        self,
        username: str,
        new_password: str = "",
        can_create_db: str = "",
        is_superuser: str = "",
        valid_until: str = "",
    ) -> str:
        client, _ = self.session.require_connected()
        changes = statements.alter_user_changes(
            new_password=new_password,
            can_create_db=can_create_db,
            is_superuser=is_superuser,
            valid_until=valid_until,
        )
        sql = statements.build_alter_user(username, changes)
        if sql is None:
            return f"No changes specified for user '{username}'"

        client.execute(sql, log_as=statements.redact(sql, new_password))
        shown = [
            "PASSWORD '***'" if change.startswith("PASSWORD ") else change
            for change in changes
        ]
        return f"User '{username}' modified successfully with changes: {', '.join(shown)}"

    @command(
        "db-drop-user",
        "Delete a database user",
        Param("username", help="Username"),
        Param("ifExists", bool, False, help="Don't error if the user doesn't exist"),
        group=USERS,
        error_prefix="Error dropping user",
    )
    def drop_user(self, username: str, if_exists: bool = False) -> str:
        client, _ = self.session.require_connected()
        client.execute(statements.build_drop_user(username, if_exists=if_exists))
        return f"User '{username}' dropped successfully"

    @command(
        "db-grant",
        "Grant privileges to a user",
        Param("privileges", help="ALL, SELECT, INSERT, ... or a comma-separated list"),
        Param("objectType", help="Object type (TABLE, SEQUENCE, DATABASE, ...)"),
        Param("objectName", help="Object name"),
        Param("username", help="Username to grant privileges to"),
        group=USERS,
        error_prefix="Error granting privileges",
    )
    def grant(
        self, privileges: str, object_type: str, object_name: str, username: str
    ) -> str:
        client, _ = self.session.require_connected()
        client.execute(
            statements.build_grant(privileges, object_type, object_name, username)
        )
        formatted = statements.format_privileges(privileges)
        return f"Granted {formatted} on {object_type} {object_name} to user '{username}'"

    @command(
        "db-revoke",
        "Revoke privileges from a user",
        Param("privileges", help="ALL, SELECT, INSERT, ... or a comma-separated list"),
        Param("objectType", help="Object type (TABLE, SEQUENCE, DATABASE, ...)"),
        Param("objectName", help="Object name"),
        Param("username", help="Username to revoke privileges from"),
        group=USERS,
        error_prefix="Error revoking privileges",
    )
    def revoke(
        self, privileges: str, object_type: str, object_name: str, username: str
    ) -> str:
        client, _ = self.session.require_connected()
        client.execute(
            statements.build_revoke(privileges, object_type, object_name, username)
        )
        formatted = statements.format_privileges(privileges)
        return (
            f"Revoked {formatted} on {object_type} {object_name} "
            f"from user '{username}'"
        )

    # ------------------------------------------------------------------
    # Help
    # ------------------------------------------------------------------

    @command(
        "db-help",
        "Show this help message",
        group=HELP,
        error_prefix="Error showing help",
    )
    def help(self) -> str:
        return help_text(self.specs())


_EXAMPLES = """\
Examples:
  db-connect localhost 5432 mydb postgres password
  db-list-tables
  db-describe-table users
  db-create-table employees "id SERIAL PRIMARY KEY, name VARCHAR(100) NOT NULL, hire_date DATE"
  db-query "SELECT * FROM users WHERE id > 10" 50
  db-insert users "username,email" "john_doe,john@example.com"
  db-update users "email=new@example.com" "id=1"
  db-delete users "id=5"
  db-truncate-table users true false
  db-export-query "SELECT * FROM users" /tmp/users.csv csv
  db-export-schema /tmp/schema.sql false "users,products"
  db-copy-table users users_backup true true true
  db-backup /tmp/mydb_backup.dump custom 5
  db-restore /tmp/mydb_backup.dump false true
  db-table-stats users
  db-show-indexes users
  db-create-user new_user password123 true false 2030-12-31
  db-grant "SELECT,INSERT,UPDATE" TABLE users new_user
  db-alter-user new_user --valid-until none"""


def help_text(specs: list[CommandSpec]) -> str:
    by_group: dict[str, list[CommandSpec]] = {}
    for spec in specs:
        by_group.setdefault(spec.group, []).append(spec)

    lines = ["PostgreSQL Shell Commands:", ""]
    for group in _GROUP_ORDER:
        if group not in by_group:
            continue
        lines.append(f"{group}:")
        for spec in by_group[group]:
            lines.append(f"  {spec.usage} - {spec.summary}")
        lines.append("")
    lines.append(_EXAMPLES)
    return "\n".join(lines)
