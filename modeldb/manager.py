"""Datasource registry and pool of reusable connections."""

from __future__ import annotations

import enum
import threading
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any

from .config import DatasourceConfig
from .connection import Connection, Connector, Statement
from .exceptions import ApplicationError, DatasourceConfigNotFoundError


def _type_name(db_type: Hashable) -> str:
    if isinstance(db_type, enum.Enum):
        return db_type.name
    return str(db_type)


@dataclass
class _PoolEntry:
    connection: Connection
    last_used: float


class ConnectionManager:
    """Keeps datasource configurations and a pool of idle connections per database type."""

    default_connection_timeout: int = 0
    pool_connection_timeout: float = 5

    def __init__(
        self,
        connector: Connector | None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._connector = connector
        self._clock = clock
        self._configs: dict[Hashable, DatasourceConfig] = {}
        self._config_lock = threading.Lock()
        self._pool: dict[Hashable, list[_PoolEntry]] = {}
        self._pool_lock = threading.Lock()

    def set_datasource_config(
        self, db_type: Hashable, name: str, username: str, password: str
    ) -> None:
        """Register a datasource, updating an existing configuration in place."""
        with self._config_lock:
            config = self._configs.get(db_type)
            if config is None:
                self._configs[db_type] = DatasourceConfig(name, username, password)
            else:
                config.update(name, username, password)

    def get_datasource_config(self, db_type: Hashable) -> DatasourceConfig | None:
        """Return the configuration registered for a database type, if any."""
        with self._config_lock:
            return self._configs.get(db_type)

    def create_connection(self, db_type: Hashable, timeout: int = -1) -> Connection:
        """Open a new connection; a timeout of -1 uses the default timeout."""
        config = self.get_datasource_config(db_type)
        if config is None:
            raise DatasourceConfigNotFoundError(
                "Invalid database type: " + _type_name(db_type)
            )
        if timeout == -1:
            timeout = self.default_connection_timeout
        connection = Connection(config, self._connector, timeout)
        connection.connect()
        return connection

    def create_pool_connection(self, db_type: Hashable, timeout: int = -1) -> PoolConnection:
        """Take an idle pooled connection, or open a new one if none is idle."""
        connection = self._pull_pool_connection(db_type)
        if connection is None:
            connection = self.create_connection(db_type, timeout)
        return PoolConnection(self, db_type, connection)

    def get_odbc_connection_string(self, db_type: Hashable) -> str:
        """Return the ODBC connection string for a database type, or "" if unknown."""
        config = self.get_datasource_config(db_type)
        if config is None:
            return ""
        return f"ODBC;DSN={config.name};UID={config.username};PWD={config.password}"

    def expire_unused_pool_connections(self) -> None:
        """Disconnect and drop idle connections unused for the pool timeout.

        The first idle connection of each database type is always kept.
        """
        now = self._clock()
        expired: list[Connection] = []
        with self._pool_lock:
            for entries in self._pool.values():
                kept = entries[:1]
                for entry in entries[1:]:
                    if now - entry.last_used >= self.pool_connection_timeout:
                        expired.append(entry.connection)
                    else:
                        kept.append(entry)
                entries[:] = kept
        for connection in expired:
            connection.disconnect()

    def restore_pool_connection(self, db_type: Hashable, conn: Connection) -> None:
        """Return a connection to the idle pool of its database type."""
        entry = _PoolEntry(conn, self._clock())
        with self._pool_lock:
            self._pool.setdefault(db_type, []).append(entry)

    def pool_size(self, db_type: Hashable) -> int:
        """Return how many idle connections are pooled for a database type."""
        with self._pool_lock:
            return len(self._pool.get(db_type, ()))

    def _pull_pool_connection(self, db_type: Hashable) -> Connection | None:
        with self._pool_lock:
            entries = self._pool.get(db_type)
            if not entries:
                return None
            entry = entries.pop()
            if not entries:
                del self._pool[db_type]
            return entry.connection


class PoolConnection:
    """A connection borrowed from the pool, returned to it on release."""

    def __init__(self, manager: ConnectionManager, db_type: Hashable, connection: Connection) -> None:
        self._manager = manager
        self.db_type = db_type
        self._connection = connection
        self._released = False

    @property
    def connection(self) -> Connection:
        """The borrowed connection."""
        if self._released:
            raise ApplicationError("Pool connection already released")
        return self._connection

    @property
    def released(self) -> bool:
        """Whether the connection has been returned to the pool."""
        return self._released

    def release(self) -> None:
        """Return the connection to the pool; later calls do nothing."""
        if self._released:
            return
        self._released = True
        self._manager.restore_pool_connection(self.db_type, self._connection)

    def reconnect_if_disconnected(self) -> None:
        """Reconnect the borrowed connection if it has dropped."""
        self.connection.reconnect_if_disconnected()

    def create_statement(self, query: str | None = None) -> Statement:
        """Create a statement on the borrowed connection."""
        return self.connection.create_statement(query)

    def __enter__(self) -> PoolConnection:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.release()

    def __del__(self) -> None:
        if getattr(self, "_released", True):
            return
        try:
            self.release()
        except Exception:
            pass


_instance: ConnectionManager | None = None
_instance_lock = threading.Lock()


def create(connector: Connector | None) -> ConnectionManager:
    """Create the shared manager if it does not exist yet, and return it."""
    global _instance
    with _instance_lock:
        if _instance is None:
            _instance = ConnectionManager(connector)
        return _instance


def destroy() -> None:
    """Discard the shared manager."""
    global _instance
    with _instance_lock:
        _instance = None


def get_instance() -> ConnectionManager:
    """Return the shared manager."""
    manager = _instance
    if manager is None:
        raise RuntimeError("ConnectionManager has not been created")
    return manager