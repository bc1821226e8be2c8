"""External PostgreSQL client tools: pg_dump, pg_restore and psql.

Argument vectors are built here and run through ToolRunner. The password
travels only in the child's PGPASSWORD environment variable, never in
argv and never in logs.
"""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING

import sentry_sdk
import structlog

from pg_shell.core.config import ToolPaths
from pg_shell.core.exceptions import ProcessFailure, UnsupportedFormat

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pg_shell.core.models import ConnectionParams

PASSWORD_ENV_VAR = "PGPASSWORD"  # pragma: allowlist secret

# pg_dump -F takes the first letter of the format name.
BACKUP_FORMATS = ("custom", "plain", "directory", "tar")


def _connection_args(params: ConnectionParams) -> list[str]:
    return [
        "-h", params.host,
        "-p", str(params.port),
        "-U", params.username,
        "-d", params.database,
    ]  # fmt: skip


def _table_args(tables: Sequence[str]) -> list[str]:
    args: list[str] = []
    for table in tables:
        if table:
            args.extend(["-t", table])
    return args


def export_schema_args(
    params: ConnectionParams,
    file_path: str,
    *,
    include_data: bool = False,
    tables: Sequence[str] = (),
    paths: ToolPaths | None = None,
) -> list[str]:
    paths = paths or ToolPaths()
    argv = [paths.pg_dump, *_connection_args(params), "-f", file_path]
    if not include_data:
        argv.append("--schema-only")
    argv.extend(_table_args(tables))
    return argv


def backup_args(
    params: ConnectionParams,
    file_path: str,
    *,
    backup_format: str = "custom",
    compression_level: int = 5,
    tables: Sequence[str] = (),
    paths: ToolPaths | None = None,
) -> list[str]:
    fmt = backup_format.strip().lower()
    if fmt not in BACKUP_FORMATS:
        msg = (
            f"Unsupported backup format: {backup_format}. "
            f"Supported formats are: {', '.join(BACKUP_FORMATS)}"
        )
        raise UnsupportedFormat(msg)

    paths = paths or ToolPaths()
    argv = [
        paths.pg_dump,
        *_connection_args(params),
        "-f", file_path,
        "-F", fmt[0],
        "-Z", str(compression_level),
    ]  # fmt: skip
    argv.extend(_table_args(tables))
    return argv


def is_plain_sql(file_path: str) -> bool:
    """Restore tool is chosen by suffix only; file content is not inspected."""
    return file_path.endswith(".sql")


def restore_args(
    params: ConnectionParams,
    file_path: str,
    *,
    clean: bool = False,
    single_transaction: bool = True,
    paths: ToolPaths | None = None,
) -> list[str]:
    """psql for plain .sql scripts, pg_restore for archive formats.

    psql has no equivalent of --clean; a plain script must carry its own
    DROP statements (pg_dump --clean), so the flag only reaches pg_restore.
    """
    paths = paths or ToolPaths()
    if is_plain_sql(file_path):
        argv = [paths.psql, *_connection_args(params), "-f", file_path]
    else:
        argv = [paths.pg_restore, *_connection_args(params), file_path]
        if clean:
            argv.append("--clean")
    if single_transaction:
        argv.append("--single-transaction")
    return argv


@dataclass(frozen=True)
class ToolResult:
    returncode: int
    stdout: str
    stderr: str


class ToolRunner:
    """Run a client tool to completion and capture its output."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout

    def run(self, argv: Sequence[str], password: str) -> ToolResult:
        log = structlog.get_logger()
        env = dict(os.environ)
        env[PASSWORD_ENV_VAR] = password

        log.debug("running tool", argv=list(argv))
        with sentry_sdk.start_span(op="subprocess", description=argv[0]) as span:
            completed = subprocess.run(
                list(argv),
                env=env,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
            span.set_data("returncode", completed.returncode)

        log.debug("tool finished", tool=argv[0], returncode=completed.returncode)
        return ToolResult(completed.returncode, completed.stdout, completed.stderr)

    def run_checked(self, argv: Sequence[str], password: str) -> ToolResult:
        """Like run(), but a nonzero exit raises ProcessFailure with stderr."""
        result = self.run(argv, password)
        if result.returncode != 0:
            message = result.stderr.strip() or f"{argv[0]} exited with {result.returncode}"
            raise ProcessFailure(message, result.returncode)
        return result
