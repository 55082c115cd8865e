# modeldb

`modeldb` is a small data-access layer for model classes stored in SQL
databases. It has no dependencies of its own. You supply the database
driver as a *connector* callable.

## What it contains

| Module | Contents |
| --- | --- |
| `modeldb.sqlbuilder` | `SqlBuilder`: builds bracket-quoted T-SQL `SELECT`, `SELECT COUNT(*)`, `INSERT` and `DELETE` statements for a model type |
| `modeldb.config` | `DatasourceConfig`: a datasource name, user name and password |
| `modeldb.connection` | `Connection`, `Statement`, `Result`: a connection that reconnects when it has dropped, and the statements and results made on it |
| `modeldb.manager` | `ConnectionManager`, `PoolConnection`, and the shared-instance functions `create`, `destroy`, `get_instance` |
| `modeldb.model` | `batch_select`, `bind_result`, `index_column_name_bindings` |
| `modeldb.recordset` | `ModelRecordSet`: runs a query and moves through the rows one at a time |
| `modeldb.loader` | `RecordSetLoader`, `ListLoader`, `MapLoader`, `LoadError`, `ErrorType` |
| `modeldb.storedproc` | `StoredProc`: a base class for wrappers that borrow a pooled connection |
| `modeldb.exceptions` | `DatabaseError`, `ApplicationError`, `DatasourceConfigNotFoundError`, `log_database_error` |

## Installation

```
pip install modeldb
```

## What you provide

### A connector

A connector is a callable `(name, username, password, timeout)` that
returns an open driver connection. The connection needs `cursor()` and
`close()`. A cursor needs `execute(query, params)`, `fetchone()` and a
DB-API style `description`, whose entries start with the column name.
Any exception the driver raises is re-raised as `DatabaseError`.

### Model classes

A model class describes its table with class attributes:

- `table_name`: the table name.
- `column_names`: the columns you can select.
- `ordered_column_names`: the columns used by `insert_string`, in order.
- `primary_key`: the primary-key columns. This may be empty.
- `blob_columns` (optional): long-data columns. They are moved to the end of
  a `SELECT` column list.
- `column_bindings`: a dict from column name to a callable
  `(model, result, index)` that copies `result.get(index)` onto the model.
- `db_type`: the key of the datasource that the table lives in.

It must also be constructible with no arguments. `MapLoader` also needs a
`map_key()` method.

```python
class Item:
    table_name = "Item"
    column_names = ("Id", "Name", "Level")
    ordered_column_names = ("Id", "Name", "Level")
    primary_key = ("Id",)
    blob_columns = ()
    db_type = "game"
    column_bindings = {
        "Id": lambda m, r, i: setattr(m, "id", r.get(i)),
        "Name": lambda m, r, i: setattr(m, "name", r.get(i)),
        "Level": lambda m, r, i: setattr(m, "level", r.get(i)),
    }

    def map_key(self):
        return self.id
```

## Usage

### Set up the manager

```python
from modeldb import manager

mgr = manager.create(my_connector)   # returns the existing manager if there is one
password = "password"
mgr.set_datasource_config("game", "GameDSN", "reader", password)

print(mgr.get_odbc_connection_string("game"))
# ODBC;DSN=GameDSN;UID=reader;PWD=password
```

Calling `set_datasource_config` again for the same type updates the
existing `DatasourceConfig` in place. `get_odbc_connection_string` returns
`""` for a type that has no configuration. `manager.get_instance()` returns
the shared manager, and raises `RuntimeError` if `create` has not been
called. `manager.destroy()` discards it.

### Connections and the pool

`create_connection(db_type, timeout=-1)` opens a new `Connection`. A
timeout of `-1` uses `ConnectionManager.default_connection_timeout`, which
is 0 by default. An unknown database type raises
`DatasourceConfigNotFoundError`.

`create_pool_connection(db_type, timeout=-1)` takes an idle connection from
the pool, or opens a new one if there is none. The `PoolConnection` goes
back to the pool on `release()`, when its `with` block ends, or when it is
garbage-collected.

```python
with mgr.create_pool_connection("game") as conn:
    result = conn.create_statement("SELECT COUNT(*) FROM [Item]").execute()
    if result.next():
        print(result.get(0))
```

`create_statement` reconnects first if the connection has dropped.
`Statement.execute(*args)` passes its arguments to the driver as query
parameters. A `Result` starts before its first row. `next()` moves to the
next row and returns `False` once the rows run out. `columns()` and
`column_name(index)` describe the result's columns.

`expire_unused_pool_connections()` disconnects and drops idle connections
that have not been used for `ConnectionManager.pool_connection_timeout`
seconds (5 by default). The first idle connection of each type is always
kept. `pool_size(db_type)` reports how many connections are idle.

### Build SQL

```python
from modeldb.sqlbuilder import SqlBuilder

sql = SqlBuilder(Item, limit=10, where="WHERE [Level] > 5",
                 post_where_clause="ORDER BY [Level]")
sql.select_string()
# SELECT TOP 10 [Id], [Name], [Level] FROM [Item] WHERE [Level] > 5 ORDER BY [Level]
```

- `where` takes priority over `is_where_pk=True`. `is_where_pk` filters on
  the primary-key columns with `?` markers.
- `set_select_columns(columns)` selects only those columns. Unknown names
  are logged and skipped.
- `exclude_columns(columns)` removes columns from the selection. If no
  columns have been chosen, it starts from all of them.
- `insert_string()` builds an `INSERT` with one `?` per column.
- `delete_by_id_string()` builds a primary-key `DELETE`. It returns `""` if
  the table has no primary key, and it ignores `where`.

### Select a batch

```python
from modeldb.model import batch_select

items = batch_select(Item)          # or batch_select(Item, sql)
```

### Iterate over a record set

```python
from modeldb.recordset import ModelRecordSet

with ModelRecordSet(Item, fetch_row_count=True) as recordset:
    recordset.open(sql)
    print(recordset.row_count, recordset.column_count)
    for item in recordset:
        ...
```

`row_count` is capped by the builder's `limit`. It is `None` unless
`fetch_row_count` was set. Rows can also be read by hand, with `next()`
followed by `get()` or `get_into(model)`. Result columns that have no
binding are logged and skipped. Calling `execute()` before `prepare()`
raises `RuntimeError`.

### Load a whole table

```python
from modeldb.loader import ListLoader, MapLoader

items = []
loader = ListLoader(items, Item)
if not loader.load_forbid_empty():
    print(loader.error.type, loader.error.message)

by_id = {}
MapLoader(by_id, Item).load_allow_empty()
```

The target is replaced only after all rows have been read. `MapLoader`
keeps the first row for each key. A failed load returns `False` and sets
`error` to one of these types:

- `ErrorType.DATASOURCE_CONFIG`
- `ErrorType.DATABASE`
- `ErrorType.EMPTY_TABLE` (only from `load_forbid_empty`)

`RecordSetLoader` with `set_process_fetch_callback` lets you handle the
rows yourself.

### Stored procedures

```python
from modeldb.storedproc import StoredProc

class GetScores(StoredProc):
    db_type = "game"

with GetScores() as proc:
    proc.create_statement("{CALL GetScores(?)}").execute(42)
```

### Errors and logging

Driver failures are raised as `DatabaseError`. Failures inside this
package, such as a connection with no connector or a statement with no
query, are raised as `ApplicationError`, a subclass of `DatabaseError`.
Messages are logged to the `modeldb` logger.

## What it does not do

- It ships no database driver. Every connection goes through the connector
  you supply.
- It does not generate model classes. You write their table descriptions
  and column bindings yourself.
- It builds no `UPDATE` statements.
- The pool has no size limit, and idle connections are only expired when
  you call `expire_unused_pool_connections()`.

## Running the tests

```
pip install modeldb[test]
pytest
```