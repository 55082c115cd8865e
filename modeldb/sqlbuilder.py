"""Build T-SQL statements for model types."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Protocol

_log = logging.getLogger("modeldb")


class ModelType(Protocol):
    """What a model class exposes to describe its table."""

    table_name: str
    column_names: Sequence[str]
    ordered_column_names: Sequence[str]
    primary_key: Sequence[str]
    blob_columns: Sequence[str]


def _quote(column: str) -> str:
    return f"[{column}]"


class SqlBuilder:
    """Create safe T-SQL statements for a model type.

    ``limit`` bounds the result set (0 means no limit). ``where`` is a
    caller-written clause including the ``WHERE`` keyword and takes priority
    over ``is_where_pk``, which filters by the primary key columns with
    parameter markers. ``post_where_clause`` is appended after any WHERE
    clause, e.g. an ``ORDER BY``.
    """

    def __init__(
        self,
        model_type: type,
        *,
        limit: int = 0,
        where: str = "",
        post_where_clause: str = "",
        is_where_pk: bool = False,
    ) -> None:
        self.model_type = model_type
        self.limit = limit
        self.where = where
        self.post_where_clause = post_where_clause
        self.is_where_pk = is_where_pk
        # Ordered set of columns used by select_string.
        self._select_cols: dict[str, None] = {}

    @property
    def select_columns(self) -> tuple[str, ...]:
        """The columns currently chosen for SELECT queries."""
        return tuple(self._select_cols)

    def _table(self) -> str:
        return _quote(self.model_type.table_name)

    def _primary_key(self) -> Sequence[str]:
        return tuple(self.model_type.primary_key)

    def _pk_condition(self) -> str:
        return " AND ".join(f"{_quote(col)} = ?" for col in self._primary_key())

    def _filter_clauses(self) -> str:
        query = ""
        if self.where:
            query += " " + self.where
        elif self.is_where_pk and self._primary_key():
            query += " WHERE " + self._pk_condition()
        if self.post_where_clause:
            query += " " + self.post_where_clause
        return query

    def _fill_select_columns(self) -> None:
        self._select_cols = dict.fromkeys(self.model_type.column_names)

    def select_string(self) -> str:
        """Return a SELECT query honouring the configured modifiers."""
        query = "SELECT "
        if self.limit > 0:
            query += f"TOP {self.limit} "

        if not self._select_cols:
            self._fill_select_columns()

        blob_columns = set(getattr(self.model_type, "blob_columns", ()))
        regular = [col for col in self._select_cols if col not in blob_columns]
        # Long-data columns must be fetched after all regular columns.
        deferred = [col for col in self._select_cols if col in blob_columns]

        query += ", ".join(_quote(col) for col in regular + deferred)
        query += " FROM " + self._table()
        query += self._filter_clauses()

        _log.debug("using query: %s", query)
        return query

    def select_count_string(self) -> str:
        """Return a SELECT COUNT(*) query honouring the configured modifiers."""
        query = "SELECT COUNT(*) FROM " + self._table() + self._filter_clauses()
        _log.debug("using query: %s", query)
        return query

    def insert_string(self) -> str:
        """Return an INSERT query with one parameter marker per column."""
        columns = list(self.model_type.ordered_column_names)
        names = ", ".join(_quote(col) for col in columns)
        params = ", ".join("?" for _ in columns)
        query = f"INSERT INTO {self._table()} ({names}) VALUES ({params})"
        _log.debug("using query: %s", query)
        return query

    def delete_by_id_string(self) -> str:
        """Return a DELETE query keyed on the primary key, or "" if there is none.

        ``where`` is not used here.
        """
        if not self._primary_key():
            return ""
        query = f"DELETE FROM {self._table()} WHERE {self._pk_condition()}"
        _log.debug("using query: %s", query)
        return query

    def set_select_columns(self, columns: Iterable[str]) -> None:
        """Select only the given columns; unknown names are logged and skipped."""
        valid = set(self.model_type.column_names)
        self._select_cols = {}
        for col in columns:
            if col not in valid:
                _log.warning("Invalid column name: %s.%s", self.model_type.table_name, col)
                continue
            self._select_cols[col] = None

    def exclude_columns(self, columns: Iterable[str]) -> None:
        """Remove columns from the selection, starting from all columns if none are set."""
        if not self._select_cols:
            self._fill_select_columns()
        for col in columns:
            self._select_cols.pop(col, None)