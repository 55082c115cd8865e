"""Iterate over a model table's rows through an open result set."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from .connection import Result, Statement
from .manager import PoolConnection, get_instance
from .model import BindingIndex, bind_result, index_column_name_bindings
from .sqlbuilder import SqlBuilder


class ModelRecordSet:
    """Query a model's table and step through the results one row at a time.

    Rows are bound onto ``bound_model_type``, which defaults to ``model_type``.
    With ``fetch_row_count`` the row count is queried before the select runs.
    """

    def __init__(
        self,
        model_type: type,
        bound_model_type: type | None = None,
        *,
        fetch_row_count: bool = False,
    ) -> None:
        self.model_type = model_type
        self.bound_model_type = bound_model_type or model_type
        self.fetch_row_count = fetch_row_count
        self._pool_conn: PoolConnection | None = None
        self._stmt: Statement | None = None
        self._result: Result = Result()
        self._binding_index: BindingIndex = []
        self._row_count: int | None = None
        self._column_count = 0
        self._select_count_query = ""
        self._select_limit = 0

    @property
    def row_count(self) -> int | None:
        """The result's row count, if it was requested and available."""
        return self._row_count

    @property
    def column_count(self) -> int:
        """The number of columns in the current result."""
        return self._column_count

    def close(self) -> None:
        """Drop the statement and return the connection to the pool."""
        self._stmt = None
        pool_conn, self._pool_conn = self._pool_conn, None
        if pool_conn is not None:
            pool_conn.release()

    def get(self) -> Any:
        """Bind the current row onto a new model object and return it."""
        model = self.bound_model_type()
        bind_result(self._result, model, self._binding_index)
        return model

    def get_into(self, model: Any) -> None:
        """Bind the current row onto an existing model object."""
        bind_result(self._result, model, self._binding_index)

    def next(self) -> bool:
        """Move to the next row; return False when there is none."""
        return self._result.next()

    def open(self, sql: SqlBuilder | None = None) -> None:
        """Prepare and execute a query of the model's table."""
        self.prepare(sql)
        self.execute()

    def prepare(self, sql: SqlBuilder | None = None) -> Statement:
        """Reset state, make sure a connection is held, and prepare the select."""
        if sql is None:
            sql = SqlBuilder(self.model_type)
        self._column_count = 0
        self._row_count = None

        if self._pool_conn is None:
            self._pool_conn = get_instance().create_pool_connection(self.model_type.db_type)

        self._select_count_query = sql.select_count_string() if self.fetch_row_count else ""
        query = sql.select_string()
        self._select_limit = sql.limit
        self._stmt = self._pool_conn.create_statement(query)
        return self._stmt

    def execute(self) -> None:
        """Run the prepared statement, fetching the row count first if requested."""
        if self._stmt is None or self._pool_conn is None:
            raise RuntimeError("Statement not initialized")

        if self.fetch_row_count:
            count_result = self._pool_conn.create_statement(self._select_count_query).execute()
            if count_result.next():
                count = int(count_result.get(0))
                if self._select_limit > 0:
                    count = min(count, self._select_limit)
                self._row_count = count

        self._result = self._stmt.execute()
        self._column_count = self._result.columns()
        self._binding_index = index_column_name_bindings(self._result, self.bound_model_type)

    def __iter__(self) -> Iterator[Any]:
        while self.next():
            yield self.get()

    def __enter__(self) -> ModelRecordSet:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()