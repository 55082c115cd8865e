"""Database connections that reconnect on demand, with statements and results."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from .config import DatasourceConfig
from .exceptions import ApplicationError, DatabaseError, log_database_error

_log = logging.getLogger("modeldb")

Connector = Callable[[str, str, str, int], Any]
"""Opens a driver connection from (name, username, password, timeout)."""

_NULL_CONNECTION = "Failed to connect. This usually means the connection is null"


@contextmanager
def _driver_call() -> Iterator[None]:
    """Turn any error raised by the driver into a DatabaseError."""
    try:
        yield
    except DatabaseError:
        raise
    except Exception as exc:
        raise DatabaseError(str(exc)) from exc


class Result:
    """Forward-only view over the rows produced by an executed statement.

    A result starts before its first row; call ``next`` to move onto it.
    """

    def __init__(self, cursor: Any = None) -> None:
        self._cursor = cursor
        description = getattr(cursor, "description", None) if cursor is not None else None
        self._description: Sequence[Sequence[Any]] = tuple(description or ())
        self._row: Sequence[Any] | None = None

    def next(self) -> bool:
        """Advance to the next row; return False once the rows are exhausted."""
        if not self._description:
            self._row = None
            return False
        with _driver_call():
            row = self._cursor.fetchone()
        self._row = row
        return row is not None

    def get(self, index: int) -> Any:
        """Return the value of a column in the current row."""
        if self._row is None:
            raise DatabaseError("no current row")
        return self._row[index]

    def columns(self) -> int:
        """Return the number of columns in the result."""
        return len(self._description)

    def column_name(self, index: int) -> str:
        """Return the name of a column in the result."""
        return self._description[index][0]


class Statement:
    """A query bound to the driver connection that was live when it was made."""

    def __init__(self, connection: Connection, query: str | None = None) -> None:
        self._handle = connection.handle
        self.query = query

    def execute(self, *args: Any) -> Result:
        """Run the query with the given parameters and return its result."""
        if not self.query:
            raise ApplicationError("Statement has no query")
        with _driver_call():
            cursor = self._handle.cursor()
            cursor.execute(self.query, args)
        return Result(cursor)


class Connection:
    """A database connection that can be re-established when it drops."""

    def __init__(
        self,
        config: DatasourceConfig,
        connector: Connector | None,
        timeout: int = 0,
    ) -> None:
        self.config = config
        self.timeout = timeout
        self._connector = connector
        self._handle: Any = None

    @property
    def handle(self) -> Any:
        """The live driver connection."""
        if self._handle is None:
            raise ApplicationError("Not connected")
        return self._handle

    def connected(self) -> bool:
        """Return whether a driver connection is open."""
        return self._handle is not None

    def connect(self) -> None:
        """Open a fresh driver connection, closing any existing one first."""
        if self._connector is None:
            raise ApplicationError(_NULL_CONNECTION)
        self.disconnect()
        with _driver_call():
            self._handle = self._connector(
                self.config.name,
                self.config.username,
                self.config.password,
                self.timeout,
            )

    def disconnect(self) -> None:
        """Close the driver connection if one is open."""
        handle, self._handle = self._handle, None
        if handle is not None:
            with _driver_call():
                handle.close()

    def reconnect(self) -> bool:
        """Connect if currently disconnected.

        Returns True when a new connection was made and False when the
        connection was already open. An open connection is left alone, since
        reconnecting would release and reallocate its resources.
        """
        if self._connector is None:
            raise ApplicationError(_NULL_CONNECTION)
        if self.connected():
            return False
        self.connect()
        return True

    def reconnect_if_disconnected(self) -> None:
        """Reconnect if disconnected, logging any database error before raising it."""
        try:
            if self.reconnect():
                _log.info("reconnect_if_disconnected(): reconnect successful")
        except DatabaseError as err:
            log_database_error(err, "reconnect_if_disconnected()")
            raise

    def create_statement(self, query: str | None = None) -> Statement:
        """Create a statement on this connection, reconnecting first if needed."""
        self.reconnect_if_disconnected()
        return Statement(self, query)