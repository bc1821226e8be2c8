"""Configuration for pg-shell.

Settings live in a TOML file (``~/.config/pg-shell/config.toml`` unless
``--config`` says otherwise). Besides shell-wide settings it holds named
connection profiles, which the front-end can use to connect at startup.

A startup connection is assembled from layers, later layers winning:
built-in defaults, the selected profile, PG* environment variables,
``--dsn``, then the individual connection flags.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

import psycopg
import structlog
from psycopg.conninfo import conninfo_to_dict
from pydantic import BaseModel, ValidationError, field_validator, model_validator

from pg_shell.core.exceptions import ConfigError
from pg_shell.core.models import ConnectionParams

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "pg-shell" / "config.toml"

PROFILE_ENV_VAR = "PG_SHELL_PROFILE"

CONNECTION_FIELDS = ("host", "port", "database", "username", "password")

# libpq keyword -> ConnectionParams field
_LIBPQ_KEYWORDS = {
    "host": "host",
    "port": "port",
    "dbname": "database",
    "user": "username",
    "password": "password",  # pragma: allowlist secret
}

_ENVIRONMENT = {
    "PGHOST": "host",
    "PGPORT": "port",
    "PGDATABASE": "database",
    "PGUSER": "username",
    "PGPASSWORD": "password",  # pragma: allowlist secret
}

_DEFAULTS: dict[str, Any] = {
    "host": "localhost",
    "port": 5432,
    "database": "postgres",
    "username": "postgres",
    "password": "",
}


def _port(value: Any, source: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        msg = f"Invalid port in {source}: '{value}'. Must be an integer"
        raise ConfigError(msg) from None


def parse_dsn(dsn: str) -> dict[str, Any]:
    """Split a libpq connection string into ConnectionParams fields.

    Accepts ``postgresql://`` / ``postgres://`` URIs and ``key=value``
    strings. Only the keys present in the DSN are returned.
    """
    scheme, sep, _ = dsn.partition("://")
    if sep and scheme not in ("postgresql", "postgres"):
        msg = f"Invalid DSN scheme: '{scheme}'. Expected 'postgresql' or 'postgres'"
        raise ConfigError(msg)
    try:
        parts = conninfo_to_dict(dsn)
    except psycopg.ProgrammingError as e:
        raise ConfigError(f"Invalid DSN: {e}") from e

    fields: dict[str, Any] = {}
    for keyword, field in _LIBPQ_KEYWORDS.items():
        value = parts.get(keyword)
        if value in (None, ""):
            continue
        fields[field] = _port(value, "DSN") if field == "port" else value
    return fields


class ConnectionProfile(BaseModel):
    """A named connection in the config file.

    ``dsn`` is expanded into the individual fields; fields written out
    explicitly next to it take precedence.
    """

    dsn: str | None = None
    host: str = _DEFAULTS["host"]
    port: int = _DEFAULTS["port"]
    database: str = _DEFAULTS["database"]
    username: str = _DEFAULTS["username"]
    password: str = _DEFAULTS["password"]

    @model_validator(mode="before")
    @classmethod
    def expand_dsn(cls, data: Any) -> Any:
        if not isinstance(data, dict) or not data.get("dsn"):
            return data
        return {**parse_dsn(data["dsn"]), **data}

    @field_validator("port")
    @classmethod
    def port_in_range(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"Invalid port: {v}. Must be 1-65535")
        return v

    def explicit_fields(self) -> dict[str, Any]:
        """Connection fields the profile actually sets, defaults excluded."""
        return {
            key: getattr(self, key)
            for key in CONNECTION_FIELDS
            if key in self.model_fields_set
        }


class ToolPaths(BaseModel):
    """Executables used by db-backup, db-restore and db-export-schema."""

    pg_dump: str = "pg_dump"
    pg_restore: str = "pg_restore"
    psql: str = "psql"


class AppConfig(BaseModel):
    default_max_rows: int = 100
    connect_timeout: int = 10
    application_name: str = "pg-shell"
    statement_timeout: float | None = None
    tool_timeout: float | None = None
    sentry_dsn: str | None = None
    default_profile: str | None = None
    tools: ToolPaths = ToolPaths()
    profiles: dict[str, ConnectionProfile] = {}

    @field_validator("default_max_rows")
    @classmethod
    def validate_max_rows(cls, v: int) -> int:
        if v < 1:
            msg = f"Invalid default_max_rows: {v}. Must be positive"
            raise ValueError(msg)
        return v

    def profile(self, name: str) -> ConnectionProfile:
        try:
            return self.profiles[name]
        except KeyError:
            available = ", ".join(sorted(self.profiles)) or "none"
            msg = f"Unknown profile: '{name}'. Available profiles: {available}"
            raise ConfigError(msg) from None


def load_config(config_path: Path | None = None) -> AppConfig:
    """Read the TOML config. A missing file means all defaults.

    Raises ConfigError for unparsable TOML or values that fail validation.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return AppConfig()

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Malformed TOML in {path}: {e}") from e

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def _environment_layer() -> dict[str, Any]:
    layer: dict[str, Any] = {}
    for var, field in _ENVIRONMENT.items():
        value = os.environ.get(var)
        if value is not None:
            layer[field] = _port(value, var) if field == "port" else value
    return layer


def resolve_connection(
    config: AppConfig,
    profile_name: str | None = None,
    dsn: str | None = None,
    **flags: Any,
) -> ConnectionParams | None:
    """Work out the startup connection, or None if none was asked for.

    Something must ask for it: a profile (argument, PG_SHELL_PROFILE or
    ``default_profile``), a DSN, or a connection flag. The PG* variables
    only fill gaps once one of those did.
    """
    flags = {
        k: v for k, v in flags.items() if v is not None and k in CONNECTION_FIELDS
    }
    profile_name = (
        profile_name or os.environ.get(PROFILE_ENV_VAR) or config.default_profile
    )
    if not (profile_name or dsn or flags):
        return None

    layers: list[tuple[str, dict[str, Any]]] = []
    if profile_name:
        profile = config.profile(profile_name)
        layers.append((f"profile:{profile_name}", profile.explicit_fields()))
    layers.append(("environment", _environment_layer()))
    if dsn:
        layers.append(("dsn", parse_dsn(dsn)))
    layers.append(("flags", flags))

    resolved = dict(_DEFAULTS)
    origin = dict.fromkeys(_DEFAULTS, "default")
    for source, layer in layers:
        resolved.update(layer)
        origin.update(dict.fromkeys(layer, source))

    origin.pop("password")
    structlog.get_logger().debug("startup connection resolved", **origin)
    return ConnectionParams(**resolved)
