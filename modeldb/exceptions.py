"""Errors raised by the database layer and a helper for logging them."""

from __future__ import annotations

import logging

_log = logging.getLogger("modeldb")


class DatasourceConfigNotFoundError(RuntimeError):
    """Raised when no datasource configuration is registered for a database type."""


class DatabaseError(Exception):
    """An error reported by the database driver or by this library on its behalf."""

    def __init__(self, message: str, native_error: int = 0, state: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.native_error = native_error
        self.state = state

    def __str__(self) -> str:
        return self.message


class ApplicationError(DatabaseError):
    """A database error raised by the application rather than the driver."""

    def __init__(self, message: str) -> None:
        super().__init__(f"[application error] {message}")


def log_database_error(error: BaseException, source: str) -> None:
    """Log a database error, prefixed with the place it was caught."""
    _log.error("%s: %s", source, error)