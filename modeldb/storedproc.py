"""Base for stored procedure wrappers that hold a pooled connection."""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any, Optional

from .connection import Connection, Statement
from .manager import get_instance


class StoredProc:
    """Borrow a pooled connection for a stored procedure's database type.

    Subclasses set ``db_type``, or pass it to the constructor. The connection
    is checked and reconnected on creation, and returned to the pool by
    ``close`` or on leaving a ``with`` block.
    """

    db_type: Optional[Hashable] = None

    def __init__(self, db_type: Hashable | None = None) -> None:
        if db_type is None:
            db_type = type(self).db_type
        if db_type is None:
            raise TypeError(f"{type(self).__name__} has no database type")
        self.db_type = db_type
        pool_conn = get_instance().create_pool_connection(db_type)
        self._pool_conn = pool_conn
        try:
            pool_conn.reconnect_if_disconnected()
        except Exception:
            pool_conn.release()
            raise

    @property
    def connection(self) -> Connection:
        """The borrowed connection."""
        return self._pool_conn.connection

    @property
    def closed(self) -> bool:
        """Whether the connection has been returned to the pool."""
        return self._pool_conn.released

    def create_statement(self, query: str | None = None) -> Statement:
        """Create a statement on the borrowed connection."""
        return self._pool_conn.create_statement(query)

    def close(self) -> None:
        """Return the connection to the pool; later calls do nothing."""
        self._pool_conn.release()

    def __enter__(self) -> StoredProc:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()