"""Exception hierarchy for pg-shell.

All exceptions carry an exit_code for process return value mapping.
Command handlers never let these escape: the engine turns them into
the text result of the command. Subclasses of PreconditionError are
reported verbatim, everything else gets the command's error prefix.
"""

from pg_shell.core.exit_codes import ExitCode


class PgShellError(Exception):
    """Base exception for all pg-shell errors."""

    exit_code: int = ExitCode.GENERAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class PreconditionError(PgShellError):
    """A command refused to run before touching the engine."""

    exit_code: int = ExitCode.USAGE_ERROR


class NotConnected(PreconditionError):
    """A data command was issued before a successful db-connect."""

    def __init__(
        self, message: str = "Not connected to a database. Use db-connect first."
    ) -> None:
        super().__init__(message)


class ArgumentMismatch(PreconditionError):
    """Column/value count mismatch or malformed argument list."""

    exit_code: int = ExitCode.INPUT_ERROR


class InvalidSetClause(ArgumentMismatch):
    """A set-clause item without '='."""


class ObjectAlreadyExists(PreconditionError):
    pass


class ObjectNotFound(PreconditionError):
    pass


class UnsupportedFormat(PreconditionError):
    pass


class UsageError(PreconditionError):
    """Bad command name or arguments at the dispatcher."""


class ConnectionFailure(PgShellError):
    """Connect attempt rejected by the server."""

    exit_code: int = ExitCode.NETWORK_ERROR


class EngineError(PgShellError):
    """Any failure surfaced by PostgreSQL during query, execute or introspection."""


class ProcessFailure(PgShellError):
    """Nonzero exit from pg_dump, pg_restore or psql."""

    def __init__(self, message: str, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(message)


class ConfigError(PgShellError):
    """Malformed config, missing profile."""

    exit_code: int = ExitCode.CONFIG_ERROR
