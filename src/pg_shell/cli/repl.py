"""Interactive read-eval-print loop."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

import structlog
import typer

from pg_shell.cli.dispatch import dispatch_line

if TYPE_CHECKING:
    from collections.abc import Callable

    from pg_shell.core.engine import CommandEngine

EXIT_WORDS = frozenset({"exit", "quit", "\\q"})

BANNER = "pg-shell: type db-help for commands, exit to quit."


def _enable_line_editing() -> None:
    # readline is missing on some platforms; plain input() still works.
    with contextlib.suppress(ImportError):
        import readline  # noqa: F401


def run_repl(
    engine: CommandEngine,
    *,
    read: Callable[[str], str] = input,
    write: Callable[[str], None] = typer.echo,
    banner: bool = True,
) -> None:
    """Read commands until EOF or an exit word. Ctrl-C drops the current line."""
    log = structlog.get_logger()
    _enable_line_editing()
    handlers = engine.handlers()
    if banner:
        write(BANNER)

    while True:
        try:
            line = read(engine.session.prompt)
        except EOFError:
            write("")
            break
        except KeyboardInterrupt:
            write("")
            continue

        line = line.strip()
        if not line:
            continue
        if line.lower() in EXIT_WORDS:
            break

        log.debug("command line", line=line.split(None, 1)[0])
        write(dispatch_line(handlers, line))
