"""Load a whole model table into a list or a keyed mapping."""

from __future__ import annotations

import enum
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Optional

from .exceptions import DatabaseError, DatasourceConfigNotFoundError
from .recordset import ModelRecordSet

ProcessFetchCallback = Callable[[ModelRecordSet], None]
"""Called with a record set positioned on its first row."""


class ErrorType(enum.Enum):
    """Why the last load failed."""

    NONE = "none"
    DATASOURCE_CONFIG = "datasource_config"
    DATABASE = "database"
    EMPTY_TABLE = "empty_table"


@dataclass
class LoadError:
    """The outcome of the last load: its error type and message."""

    type: ErrorType = ErrorType.NONE
    message: str = ""


class RecordSetLoader:
    """Open a record set over a model's table and hand it to a callback.

    The callback runs only when the table has at least one row, with the
    record set already on the first row.
    """

    def __init__(self, model_type: type, bound_model_type: type | None = None) -> None:
        self.model_type = model_type
        self.bound_model_type = bound_model_type or model_type
        self._error = LoadError()
        self._column_count = 0
        self._process_fetch_callback: Optional[ProcessFetchCallback] = None

    @property
    def error(self) -> LoadError:
        """The result of the last load."""
        return self._error

    @property
    def column_count(self) -> int:
        """The number of columns seen by the last load."""
        return self._column_count

    def set_process_fetch_callback(self, callback: ProcessFetchCallback | None) -> None:
        """Set the function that consumes the fetched rows."""
        self._process_fetch_callback = callback

    def load_allow_empty(self, fetch_row_count: bool = False) -> bool:
        """Load the table; an empty table counts as success."""
        return self._load(allow_empty=True, fetch_row_count=fetch_row_count)

    def load_forbid_empty(self, fetch_row_count: bool = False) -> bool:
        """Load the table; an empty table counts as failure."""
        return self._load(allow_empty=False, fetch_row_count=fetch_row_count)

    def _load(self, *, allow_empty: bool, fetch_row_count: bool) -> bool:
        self._column_count = 0
        try:
            with ModelRecordSet(
                self.model_type,
                self.bound_model_type,
                fetch_row_count=fetch_row_count,
            ) as recordset:
                recordset.open()
                self._column_count = recordset.column_count

                if recordset.next():
                    if self._process_fetch_callback is not None:
                        self._process_fetch_callback(recordset)
                elif not allow_empty:
                    self._error = LoadError(ErrorType.EMPTY_TABLE, "Table empty!")
                    return False

            self._error = LoadError()
            return True
        except DatasourceConfigNotFoundError as exc:
            self._error = LoadError(ErrorType.DATASOURCE_CONFIG, str(exc))
        except DatabaseError as exc:
            self._error = LoadError(ErrorType.DATABASE, str(exc))
        return False


class MapLoader(RecordSetLoader):
    """Load a table into a dict keyed by each model's ``map_key()``.

    When several rows share a key, the first one is kept. The target's
    previous contents are replaced only once all rows have been read.
    """

    def __init__(
        self,
        target: dict[Hashable, Any],
        model_type: type,
        bound_model_type: type | None = None,
    ) -> None:
        super().__init__(model_type, bound_model_type)
        self.target = target
        self.set_process_fetch_callback(self._process_fetch)

    def _process_fetch(self, recordset: ModelRecordSet) -> None:
        loaded: dict[Hashable, Any] = {}
        while True:
            model = self.bound_model_type()
            recordset.get_into(model)
            loaded.setdefault(model.map_key(), model)
            if not recordset.next():
                break
        self.target.clear()
        self.target.update(loaded)


class ListLoader(RecordSetLoader):
    """Load a table into a list of models, in result order.

    The target's previous contents are replaced only once all rows have been read.
    """

    def __init__(
        self,
        target: list[Any],
        model_type: type,
        bound_model_type: type | None = None,
    ) -> None:
        super().__init__(model_type, bound_model_type)
        self.target = target
        self.set_process_fetch_callback(self._process_fetch)

    def _process_fetch(self, recordset: ModelRecordSet) -> None:
        loaded: list[Any] = []
        while True:
            model = self.bound_model_type()
            recordset.get_into(model)
            loaded.append(model)
            if not recordset.next():
                break
        self.target[:] = loaded