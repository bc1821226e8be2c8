"""Tests for the exception hierarchy and exit codes."""

import pytest

from pg_shell.core.exceptions import (
    ArgumentMismatch,
    ConfigError,
    ConnectionFailure,
    EngineError,
    InvalidSetClause,
    NotConnected,
    ObjectNotFound,
    PgShellError,
    PreconditionError,
    ProcessFailure,
    UsageError,
)
from pg_shell.core.exit_codes import ExitCode


@pytest.mark.unit
class TestExitCodes:
    def test_exit_code_values(self):
        assert ExitCode.SUCCESS == 0
        assert ExitCode.GENERAL_ERROR == 1
        assert ExitCode.USAGE_ERROR == 2
        assert ExitCode.INPUT_ERROR == 3
        assert ExitCode.NETWORK_ERROR == 5
        assert ExitCode.CONFIG_ERROR == 7

    def test_exit_code_is_int(self):
        for code in ExitCode:
            assert isinstance(code, int)


@pytest.mark.unit
class TestPgShellError:
    def test_base_exception(self):
        err = PgShellError("boom")
        assert str(err) == "boom"
        assert err.message == "boom"
        assert err.exit_code == ExitCode.GENERAL_ERROR

    def test_engine_error_is_general(self):
        assert EngineError("x").exit_code == ExitCode.GENERAL_ERROR


@pytest.mark.unit
class TestPreconditions:
    def test_not_connected_default_message(self):
        err = NotConnected()
        assert err.message == "Not connected to a database. Use db-connect first."
        assert isinstance(err, PreconditionError)
        assert err.exit_code == ExitCode.USAGE_ERROR

    def test_invalid_set_clause_is_argument_mismatch(self):
        err = InvalidSetClause("Error: Invalid set clause format: a")
        assert isinstance(err, ArgumentMismatch)
        assert err.exit_code == ExitCode.INPUT_ERROR

    @pytest.mark.parametrize("cls", [ObjectNotFound, UsageError])
    def test_other_preconditions(self, cls):
        assert issubclass(cls, PreconditionError)

    def test_engine_failures_are_not_preconditions(self):
        assert not issubclass(EngineError, PreconditionError)
        assert not issubclass(ConnectionFailure, PreconditionError)
        assert not issubclass(ProcessFailure, PreconditionError)


@pytest.mark.unit
class TestSpecificErrors:
    def test_connection_failure_exit_code(self):
        assert ConnectionFailure("refused").exit_code == ExitCode.NETWORK_ERROR

    def test_config_error_exit_code(self):
        assert ConfigError("bad").exit_code == ExitCode.CONFIG_ERROR

    def test_process_failure_keeps_returncode(self):
        err = ProcessFailure("pg_dump: error", 1)
        assert err.returncode == 1
        assert err.message == "pg_dump: error"
