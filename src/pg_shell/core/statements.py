"""SQL statement construction for mutating db-* commands.

Pure functions, no I/O. Values are single-quoted with embedded quotes
doubled; that is the only escaping applied. Identifiers (table, column,
user and object names) and raw WHERE fragments are interpolated
verbatim, so callers can pass schema-qualified names or arbitrary
conditions. That also means they are an injection surface: only
operators with shell access should be able to reach these commands.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pg_shell.core.exceptions import ArgumentMismatch, InvalidSetClause

if TYPE_CHECKING:
    from collections.abc import Sequence


def split_list(text: str) -> list[str]:
    """Split comma-separated operator input into trimmed items."""
    return [item.strip() for item in text.split(",")]


def quote_value(value: str) -> str:
    """Render a value as a SQL literal. ``null`` in any case becomes NULL."""
    if value.lower() == "null":
        return "NULL"
    return "'" + value.replace("'", "''") + "'"


def quote_literal(value: str) -> str:
    """Quote a string that is always a literal (passwords, dates)."""
    return "'" + value.replace("'", "''") + "'"


def build_insert(table: str, columns: Sequence[str], values: Sequence[str]) -> str:
    if len(columns) != len(values):
        msg = (
            f"Error: Number of columns ({len(columns)}) does not match "
            f"number of values ({len(values)})"
        )
        raise ArgumentMismatch(msg)

    quoted = ", ".join(quote_value(v) for v in values)
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({quoted})"


def parse_set_clause(set_clause: str) -> list[tuple[str, str]]:
    """Split ``col=value,...`` into pairs, on the first '=' of each item."""
    assignments: list[tuple[str, str]] = []
    for item in split_list(set_clause):
        column, sep, value = item.partition("=")
        if not sep:
            raise InvalidSetClause(f"Error: Invalid set clause format: {item}")
        assignments.append((column.strip(), value.strip()))
    return assignments


def build_update(table: str, set_clause: str, where_clause: str = "") -> str:
    assignments = parse_set_clause(set_clause)
    sets = ", ".join(f"{column} = {quote_value(value)}" for column, value in assignments)
    sql = f"UPDATE {table} SET {sets}"
    if where_clause.strip():
        sql += f" WHERE {where_clause}"
    return sql


def build_delete(table: str, where_clause: str) -> str:
    return f"DELETE FROM {table} WHERE {where_clause}"


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------


def build_create_table(table: str, column_definitions: str) -> str:
    return f"CREATE TABLE {table} ({column_definitions})"


def build_copy_table(
    source: str,
    destination: str,
    *,
    include_indexes: bool = True,
    include_constraints: bool = True,
) -> str:
    if include_indexes and include_constraints:
        like = f"LIKE {source} INCLUDING ALL"
    else:
        parts = ["LIKE", source]
        if include_indexes:
            parts.append("INCLUDING INDEXES")
        if include_constraints:
            parts.append("INCLUDING CONSTRAINTS")
        like = " ".join(parts)
    return f"CREATE TABLE {destination} ({like})"


def build_copy_data(source: str, destination: str) -> str:
    return f"INSERT INTO {destination} SELECT * FROM {source}"


def build_truncate(table: str, *, restart_identity: bool, cascade: bool) -> str:
    identity = "RESTART IDENTITY" if restart_identity else "CONTINUE IDENTITY"
    behavior = "CASCADE" if cascade else "RESTRICT"
    return f"TRUNCATE TABLE {table} {identity} {behavior}"


# ---------------------------------------------------------------------------
# Roles and privileges
# ---------------------------------------------------------------------------


def createdb_token(enabled: bool) -> str:
    return "CREATEDB" if enabled else "NOCREATEDB"


def superuser_token(enabled: bool) -> str:
    return "SUPERUSER" if enabled else "NOSUPERUSER"


def build_create_user(
    username: str,
    password: str,
    *,
    can_create_db: bool = False,
    is_superuser: bool = False,
    valid_until: str = "",
) -> str:
    sql = (
        f"CREATE USER {username} WITH PASSWORD {quote_literal(password)} "
        f"{createdb_token(can_create_db)} {superuser_token(is_superuser)}"
    )
    if valid_until.strip():
        sql += f" VALID UNTIL {quote_literal(valid_until)}"
    return sql


def alter_user_changes(
    *,
    new_password: str = "",
    can_create_db: str = "",
    is_superuser: str = "",
    valid_until: str = "",
) -> list[str]:
    """Collect only the requested changes. Blank arguments mean "leave as is"."""
    changes: list[str] = []
    if new_password.strip():
        changes.append(f"PASSWORD {quote_literal(new_password)}")
    if can_create_db.strip():
        changes.append(createdb_token(can_create_db.strip().lower() == "true"))
    if is_superuser.strip():
        changes.append(superuser_token(is_superuser.strip().lower() == "true"))
    if valid_until.strip():
        if valid_until.strip().lower() == "none":
            changes.append("VALID UNTIL 'infinity'")
        else:
            changes.append(f"VALID UNTIL {quote_literal(valid_until)}")
    return changes


def build_alter_user(username: str, changes: Sequence[str]) -> str | None:
    if not changes:
        return None
    return f"ALTER USER {username} WITH {' '.join(changes)}"


def build_drop_user(username: str, *, if_exists: bool = False) -> str:
    return f"DROP USER {'IF EXISTS ' if if_exists else ''}{username}"


def format_privileges(privileges: str) -> str:
    if privileges.strip().upper() == "ALL":
        return "ALL PRIVILEGES"
    return privileges


def build_grant(privileges: str, object_type: str, object_name: str, username: str) -> str:
    return (
        f"GRANT {format_privileges(privileges)} ON {object_type} {object_name} "
        f"TO {username}"
    )


def build_revoke(
    privileges: str, object_type: str, object_name: str, username: str
) -> str:
    return (
        f"REVOKE {format_privileges(privileges)} ON {object_type} {object_name} "
        f"FROM {username}"
    )


def redact(sql: str, secret: str) -> str:
    """Mask a password literal before the statement is logged."""
    if not secret:
        return sql
    return sql.replace(quote_literal(secret), "'***'")
