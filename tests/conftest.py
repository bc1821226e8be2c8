"""Shared test fixtures for pg-shell."""

from pathlib import Path
from tempfile import TemporaryDirectory
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from pg_shell.cli.main import app
from pg_shell.core.engine import CommandEngine
from pg_shell.core.session import Session
from pg_shell.core.tools import ToolRunner


@pytest.fixture
def runner():
    """Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_runner(runner):
    """Invoke the CLI app with the given arguments."""

    def invoke(*args: str, **kwargs):
        return runner.invoke(app, list(args), **kwargs)

    return invoke


@pytest.fixture
def temp_dir():
    """Temporary directory for test files."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep the developer's PG* variables and config out of unit tests."""
    for var in (
        "PGHOST",
        "PGPORT",
        "PGDATABASE",
        "PGUSER",
        "PGPASSWORD",
        "PG_SHELL_PROFILE",
        "PG_SHELL_SENTRY_DSN",
        "PG_SHELL_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        "pg_shell.core.config.DEFAULT_CONFIG_PATH", tmp_path / "missing.toml"
    )


@pytest.fixture
def mock_client():
    """PgClient stand-in; execute() reports one affected row by default."""
    client = MagicMock()
    client.execute.return_value = 1
    return client


@pytest.fixture
def tool_runner():
    return MagicMock(spec=ToolRunner)


@pytest.fixture
def session(mock_client):
    return Session(client_factory=lambda params: mock_client)


@pytest.fixture
def engine(session, tool_runner):
    """Engine with no active connection."""
    return CommandEngine(session, runner=tool_runner)


@pytest.fixture
def connected_engine(engine):
    """Engine connected to app@localhost:5432/appdb through mock_client."""
    engine.session.connect("localhost", 5432, "appdb", "app", "s3cret")
    return engine
