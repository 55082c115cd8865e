"""Bind query results onto model objects and select models in batches."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, List, Optional, Protocol

from .connection import Result
from .manager import get_instance
from .sqlbuilder import SqlBuilder

_log = logging.getLogger("modeldb")

BindColumn = Callable[[Any, Result, int], None]
"""Copies column ``index`` of the current row of a result onto a model."""

BindingIndex = List[Optional[BindColumn]]
"""One binder per result column; None where the column has no binding."""


class _Result(Protocol):
    def get(self, index: int) -> Any: ...

    def columns(self) -> int: ...

    def column_name(self, index: int) -> str: ...


def bind_result(result: _Result, model: Any, binding_index: BindingIndex) -> None:
    """Bind the current row of a result onto a model, column by column."""
    for index, bind in enumerate(binding_index):
        if bind is not None:
            bind(model, result, index)


def index_column_name_bindings(result: _Result, model_type: type) -> BindingIndex:
    """Map each result column to the model's binder for that column name.

    Columns the model cannot bind are logged and given None.
    """
    bindings = model_type.column_bindings
    index: BindingIndex = []
    for position in range(result.columns()):
        name = result.column_name(position)
        bind = bindings.get(name)
        if bind is None:
            _log.warning("No binding found for : %s.%s", model_type.table_name, name)
        index.append(bind)
    return index


def batch_select(model_type: type, sql: SqlBuilder | None = None) -> list[Any]:
    """Select every matching row of a model's table in one trip and return the models."""
    if sql is None:
        sql = SqlBuilder(model_type)
    manager = get_instance()
    models: list[Any] = []
    with manager.create_pool_connection(model_type.db_type) as conn:
        result = conn.create_statement(sql.select_string()).execute()
        binding_index = index_column_name_bindings(result, model_type)
        while result.next():
            model = model_type()
            bind_result(result, model, binding_index)
            models.append(model)
    return models