"""The shell's single connection session.

Disconnected --connect ok--> Connected; a later connect either replaces
the whole session or, on failure, leaves the previous one untouched.
There is no disconnect: the session lives as long as the process.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

import structlog

from pg_shell.core.client import PgClient
from pg_shell.core.exceptions import ConnectionFailure, NotConnected, PgShellError
from pg_shell.core.models import ConnectionParams

if TYPE_CHECKING:
    from pg_shell.core.config import AppConfig


class ClientFactory(Protocol):
    def __call__(self, params: ConnectionParams) -> PgClient: ...


def client_factory_from_config(config: AppConfig) -> ClientFactory:
    def factory(params: ConnectionParams) -> PgClient:
        return PgClient(
            params,
            connect_timeout=config.connect_timeout,
            application_name=config.application_name,
            statement_timeout=config.statement_timeout,
        )

    return factory


class Session:
    """Holds the active connection parameters and query capability."""

    def __init__(self, client_factory: ClientFactory = PgClient) -> None:
        self._client_factory = client_factory
        self._lock = threading.Lock()
        self._params: ConnectionParams | None = None
        self._client: PgClient | None = None

    @property
    def connected(self) -> bool:
        with self._lock:
            return self._client is not None

    @property
    def params(self) -> ConnectionParams | None:
        with self._lock:
            return self._params

    def connect(
        self, host: str, port: int, database: str, username: str, password: str
    ) -> str:
        """Open and validate a connection, then swap it in.

        Raises ConnectionFailure with the server's message; the previous
        session, if any, stays as it was.
        """
        log = structlog.get_logger()
        params = ConnectionParams(
            host=host, port=port, database=database, username=username, password=password
        )
        client = self._client_factory(params)
        try:
            client.ping()
        except PgShellError as e:
            log.warning("connect failed", host=host, port=port, database=database)
            raise ConnectionFailure(e.message) from e

        with self._lock:
            self._params = params
            self._client = client

        log.info("connected", host=host, port=port, database=database, user=username)
        return f"Successfully connected to PostgreSQL database at {host}:{port}/{database}"

    def require_connected(self) -> tuple[PgClient, ConnectionParams]:
        with self._lock:
            if self._client is None or self._params is None:
                raise NotConnected()
            return self._client, self._params

    def status(self) -> str:
        with self._lock:
            params = self._params
        if params is None:
            return "Not connected to any database. Use db-connect to establish a connection."
        return (
            f"Connected to PostgreSQL database at {params.host}:{params.port}/"
            f"{params.database} as {params.username}"
        )

    @property
    def prompt(self) -> str:
        params = self.params
        return f"shell:{params.username if params else 'guest'}> "
