import re

import pytest

from modeldb import manager
from modeldb.exceptions import DatasourceConfigNotFoundError
from modeldb.recordset import ModelRecordSet
from modeldb.sqlbuilder import SqlBuilder

PASSWORD = "password"


class FakeDb:
    def __init__(self, tables):
        self.tables = tables
        self.queries = []


class FakeCursor:
    def __init__(self, db):
        self.db = db
        self.description = None
        self._rows = []

    def execute(self, query, args):
        self.db.queries.append(query)
        m = re.match(r"SELECT (?:TOP (\d+) )?(.*?) FROM \[(\w+)\]", query)
        top, cols, table = m.groups()
        rows = self.db.tables[table]
        if cols == "COUNT(*)":
            self.description = (("",),)
            self._rows = [(len(rows),)]
            return
        names = [c.strip("[]") for c in cols.split(", ")]
        self.description = tuple((n,) for n in names)
        data = [tuple(row[n] for n in names) for row in rows]
        if top:
            data = data[: int(top)]
        self._rows = data

    def fetchone(self):
        return self._rows.pop(0) if self._rows else None


class FakeHandle:
    def __init__(self, db):
        self.db = db

    def cursor(self):
        return FakeCursor(self.db)

    def close(self):
        pass


def _setter(attr):
    def bind(model, result, index):
        setattr(model, attr, result.get(index))

    return bind


class Item:
    db_type = "main"
    table_name = "Item"
    column_names = ("id", "name")
    ordered_column_names = ("id", "name")
    primary_key = ("id",)
    blob_columns = ()
    column_bindings = {"id": _setter("id"), "name": _setter("name")}

    def __init__(self):
        self.id = 0
        self.name = ""


class Label:
    table_name = "Item"
    column_bindings = {"name": _setter("label")}

    def __init__(self):
        self.label = ""


ROWS = [
    {"id": 1, "name": "one"},
    {"id": 2, "name": "two"},
    {"id": 3, "name": "three"},
]


@pytest.fixture
def db():
    fake = FakeDb({"Item": ROWS})
    manager.destroy()
    mgr = manager.create(lambda name, username, password, timeout: FakeHandle(fake))
    mgr.set_datasource_config("main", "dsn", "user", PASSWORD)
    yield fake
    manager.destroy()


def test_iterates_all_rows(db):
    with ModelRecordSet(Item) as records:
        records.open()
        models = list(records)
    assert [(m.id, m.name) for m in models] == [(r["id"], r["name"]) for r in ROWS]


def test_column_count_and_no_row_count(db):
    records = ModelRecordSet(Item)
    records.open()
    assert records.column_count == 2
    assert records.row_count is None
    records.close()


def test_row_count_fetched(db):
    records = ModelRecordSet(Item, fetch_row_count=True)
    records.open()
    assert records.row_count == len(ROWS)
    assert sum(1 for _ in records) == len(ROWS)
    records.close()


def test_row_count_capped_by_limit(db):
    records = ModelRecordSet(Item, fetch_row_count=True)
    records.open(SqlBuilder(Item, limit=2))
    assert records.row_count == 2
    assert len(list(records)) == 2
    records.close()


def test_get_into_updates_existing_model(db):
    records = ModelRecordSet(Item)
    records.open()
    assert records.next()
    model = Item()
    records.get_into(model)
    assert (model.id, model.name) == (1, "one")
    records.close()


def test_bound_model_type(db):
    records = ModelRecordSet(Item, Label)
    records.open()
    labels = [m.label for m in records]
    assert labels == ["one", "two", "three"]
    records.close()


def test_next_before_open_is_false():
    records = ModelRecordSet(Item)
    assert records.next() is False


def test_execute_before_prepare_raises():
    records = ModelRecordSet(Item)
    with pytest.raises(RuntimeError):
        records.execute()


def test_prepare_returns_statement_with_query(db):
    records = ModelRecordSet(Item)
    sql = SqlBuilder(Item, where="WHERE [id] = 2")
    stmt = records.prepare(sql)
    assert stmt.query == SqlBuilder(Item, where="WHERE [id] = 2").select_string()
    records.close()


def test_close_returns_connection_to_pool(db):
    records = ModelRecordSet(Item)
    records.open()
    assert manager.get_instance().pool_size("main") == 0
    records.close()
    assert manager.get_instance().pool_size("main") == 1


def test_reopen_reuses_connection(db):
    records = ModelRecordSet(Item)
    records.open()
    records.open(SqlBuilder(Item, limit=1))
    assert len(list(records)) == 1
    records.close()
    assert manager.get_instance().pool_size("main") == 1


def test_unknown_datasource_raises(db):
    class Other(Item):
        db_type = "other"

    with pytest.raises(DatasourceConfigNotFoundError):
        ModelRecordSet(Other).open()