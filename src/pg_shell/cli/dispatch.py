"""Turn a tokenized command line into a handler call.

Arguments are positional in declared order, or named as ``--name value``
where the name is the camelCase parameter name or its kebab-case form
(``--tableName`` and ``--table-name`` both work). A boolean option given
without a value means true. Whatever goes wrong, the caller gets text.
"""

from __future__ import annotations

import re
import shlex
from typing import TYPE_CHECKING, Any

import structlog

from pg_shell.core.exceptions import UsageError

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from pg_shell.core.engine import CommandSpec, Param

_OPTION_RE = re.compile(r"--[A-Za-z][\w-]*(=.*)?", re.DOTALL)

_TRUE = {"true", "yes", "y", "1", "on"}
_FALSE = {"false", "no", "n", "0", "off"}


def coerce(param: Param, raw: str) -> Any:
    if param.kind is bool:
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        msg = f"Invalid value for '{param.name}': '{raw}' is not a boolean (true/false)."
        raise UsageError(msg)
    if param.kind is int:
        try:
            return int(raw.strip())
        except ValueError:
            msg = f"Invalid value for '{param.name}': '{raw}' is not an integer."
            raise UsageError(msg) from None
    return raw


def _lookup(spec: CommandSpec, option: str) -> Param | None:
    for param in spec.params:
        if option in (param.option, f"--{param.name}"):
            return param
    return None


def bind(spec: CommandSpec, args: Sequence[str]) -> dict[str, Any]:
    """Map raw arguments onto keyword arguments for spec.handler."""
    usage = f"Usage: {spec.usage}"
    named: dict[str, str] = {}
    positional: list[str] = []

    i = 0
    while i < len(args):
        token = args[i]
        if _OPTION_RE.fullmatch(token):
            option, eq, inline = token.partition("=")
            param = _lookup(spec, option)
            if param is None:
                raise UsageError(f"Unknown option '{option}' for {spec.name}. {usage}")
            if eq:
                named[param.name] = inline
            elif param.kind is bool and (
                i + 1 >= len(args) or _OPTION_RE.fullmatch(args[i + 1])
            ):
                named[param.name] = "true"
            elif i + 1 < len(args):
                named[param.name] = args[i + 1]
                i += 1
            else:
                raise UsageError(f"Option '{option}' needs a value. {usage}")
        else:
            positional.append(token)
        i += 1

    kwargs: dict[str, Any] = {}
    remaining = iter(positional)
    for param in spec.params:
        if param.name in named:
            kwargs[param.keyword] = coerce(param, named[param.name])
            continue
        raw = next(remaining, None)
        if raw is not None:
            kwargs[param.keyword] = coerce(param, raw)
        elif param.required:
            raise UsageError(f"Missing required argument '{param.name}'. {usage}")
        else:
            kwargs[param.keyword] = param.default

    extra = list(remaining)
    if extra:
        raise UsageError(f"Too many arguments for {spec.name}: {' '.join(extra)}. {usage}")
    return kwargs


def dispatch(handlers: Mapping[str, CommandSpec], tokens: Sequence[str]) -> str:
    """Run one command. ``tokens[0]`` is the command name."""
    if not tokens:
        return ""
    name, args = tokens[0], tokens[1:]
    spec = handlers.get(name)
    if spec is None or spec.handler is None:
        return f"Unknown command: {name}. Type db-help for the list of commands."

    try:
        kwargs = bind(spec, args)
    except UsageError as e:
        structlog.get_logger().debug("bad arguments", command=name, error=e.message)
        return e.message
    return spec.handler(**kwargs)


def dispatch_line(handlers: Mapping[str, CommandSpec], line: str) -> str:
    try:
        tokens = shlex.split(line)
    except ValueError as e:
        return f"Could not parse command line: {e}"
    return dispatch(handlers, tokens)
