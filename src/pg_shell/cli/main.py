"""pg-shell main entry point.

With no subcommand the interactive shell starts. ``pg-shell run <db-command>
[args...]`` executes one command and exits, for scripts.
"""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import structlog
import typer

from pg_shell.__about__ import __version__
from pg_shell.cli.dispatch import dispatch
from pg_shell.cli.repl import run_repl
from pg_shell.core.config import load_config, resolve_connection
from pg_shell.core.engine import CommandEngine
from pg_shell.core.exceptions import PgShellError
from pg_shell.core.exit_codes import ExitCode
from pg_shell.core.logging import setup_logging
from pg_shell.core.monitoring import setup_sentry
from pg_shell.core.session import Session, client_factory_from_config

app = typer.Typer(
    help="pg-shell - interactive PostgreSQL administration shell",
    invoke_without_command=True,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"pg-shell {__version__}")
        raise typer.Exit()


def get_engine(ctx: typer.Context) -> CommandEngine:
    return ctx.obj["engine"]


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    profile: Annotated[
        str | None,
        typer.Option("--profile", "-P", help="Named connection profile"),
    ] = None,
    host: Annotated[
        str | None,
        typer.Option("--host", "-H", help="PostgreSQL host"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="PostgreSQL port"),
    ] = None,
    database: Annotated[
        str | None,
        typer.Option("--database", "-d", help="Database name"),
    ] = None,
    user: Annotated[
        str | None,
        typer.Option("--user", "-U", help="User name"),
    ] = None,
    password: Annotated[
        str | None,
        typer.Option("--password", "-W", help="Password"),
    ] = None,
    dsn: Annotated[
        str | None,
        typer.Option("--dsn", help="Connection DSN"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
) -> None:
    """pg-shell - interactive PostgreSQL administration shell."""
    setup_logging(verbose)
    config = load_config(config_file)
    setup_sentry(config.sentry_dsn)

    transaction = sentry_sdk.start_transaction(
        op="cli", name=ctx.invoked_subcommand or "shell"
    )
    transaction.__enter__()

    def cleanup() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)

    session = Session(client_factory_from_config(config))
    engine = CommandEngine(session, config=config)

    params = resolve_connection(
        config,
        profile_name=profile,
        dsn=dsn,
        host=host,
        port=port,
        database=database,
        username=user,
        password=password,
    )
    if params is not None:
        typer.echo(
            engine.connect(
                params.host,
                params.port,
                params.database,
                params.username,
                params.password,
            )
        )

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config
    ctx.obj["engine"] = engine

    if ctx.invoked_subcommand is None:
        run_repl(engine)


@app.command("shell")
def shell_command(ctx: typer.Context) -> None:
    """Start the interactive shell (the default with no subcommand)."""
    run_repl(get_engine(ctx))


@app.command(
    "run",
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run_command(
    ctx: typer.Context,
    command: Annotated[str, typer.Argument(help="db-* command name, e.g. db-list-tables")],
) -> None:
    """
    Execute a single db-* command and exit.

    Arguments after the command name are passed through unchanged, so
    both positional values and --name value pairs work:

        pg-shell --dsn postgresql://app@localhost/app run db-describe-table users
    """
    engine = get_engine(ctx)
    structlog.get_logger().debug("run", command=command, argc=len(ctx.args))
    typer.echo(dispatch(engine.handlers(), [command, *ctx.args]))


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except PgShellError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(ExitCode.GENERAL_ERROR) from None
