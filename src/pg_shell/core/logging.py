"""structlog setup for pg-shell.

Everything goes to stderr; stdout belongs to command results and the
prompt. Event keys that look like credentials are masked before
rendering.
"""

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL_ENV = "PG_SHELL_LOG_LEVEL"

_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}

SECRET_KEYS = frozenset({"password", "new_password", "pgpassword", "dsn"})

MASK = "***"


class _CurrentStderr:
    """Logger factory that looks up sys.stderr per logger.

    CliRunner swaps stderr between invocations; a handle captured once at
    configure() time would point at a closed stream.
    """

    def __call__(self, *args: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=sys.stderr)


def mask_secrets(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in event_dict.keys() & SECRET_KEYS:
        if event_dict[key]:
            event_dict[key] = MASK
    return event_dict


def _resolve_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    name = os.environ.get(LOG_LEVEL_ENV, "warning").strip().lower()
    return _LEVELS.get(name, logging.WARNING)


def setup_logging(verbose: bool = False) -> None:
    """Configure structlog.

    ``--verbose`` logs at DEBUG, which includes every statement sent to the
    server. Otherwise the level comes from PG_SHELL_LOG_LEVEL and defaults
    to WARNING, so the prompt is not interleaved with routine events.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            mask_secrets,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(verbose)),
        context_class=dict,
        logger_factory=_CurrentStderr(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, bound to ``name`` if given.

    Call inside functions only, after setup_logging().
    """
    logger = structlog.get_logger()
    if name:
        logger = logger.bind(logger=name)
    return logger
