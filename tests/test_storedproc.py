import pytest

from modeldb import manager
from modeldb.exceptions import ApplicationError, DatasourceConfigNotFoundError
from modeldb.storedproc import StoredProc


class FakeHandle:
    def __init__(self):
        self.closed = False

    def cursor(self):
        raise RuntimeError("no cursor")

    def close(self):
        self.closed = True


class ItemsProc(StoredProc):
    db_type = "items"


@pytest.fixture
def mgr():
    manager.destroy()
    instance = manager.create(lambda name, user, pwd, timeout: FakeHandle())
    password = "password"
    instance.set_datasource_config("items", "dsn", "user", password)
    yield instance
    manager.destroy()


def test_holds_connected_connection_until_closed(mgr):
    proc = ItemsProc()
    assert proc.connection.connected() is True
    assert mgr.pool_size("items") == 0
    proc.close()
    assert proc.closed is True
    assert mgr.pool_size("items") == 1


def test_close_twice_returns_connection_once(mgr):
    proc = ItemsProc()
    proc.close()
    proc.close()
    assert mgr.pool_size("items") == 1


def test_context_manager_releases(mgr):
    with ItemsProc() as proc:
        assert mgr.pool_size("items") == 0
    assert proc.closed is True
    assert mgr.pool_size("items") == 1


def test_connection_unavailable_after_close(mgr):
    proc = StoredProc("items")
    proc.close()
    assert mgr.pool_size("items") == 1
    with pytest.raises(ApplicationError) as info:
        proc.connection
    assert str(info.value).startswith("[application error]")


def test_reuses_pooled_connection(mgr):
    first = StoredProc("items")
    conn = first.connection
    first.close()
    assert mgr.pool_size("items") == 1
    second = StoredProc("items")
    assert mgr.pool_size("items") == 0
    assert second.connection is conn
    second.close()
    assert mgr.pool_size("items") == 1


def test_reconnects_dropped_pooled_connection(mgr):
    first = StoredProc("items")
    first.connection.disconnect()
    first.close()
    assert mgr.pool_size("items") == 1
    second = StoredProc("items")
    assert second.connection.connected() is True
    second.close()
    assert mgr.pool_size("items") == 1


def test_db_type_given_to_constructor(mgr):
    proc = StoredProc("items")
    assert proc.db_type == "items"
    proc.close()
    assert mgr.pool_size("items") == 1


def test_missing_db_type_raises(mgr):
    with pytest.raises(TypeError):
        StoredProc()


def test_missing_config_raises(mgr):
    with pytest.raises(DatasourceConfigNotFoundError):
        StoredProc("unknown")
    assert mgr.pool_size("unknown") == 0


def test_create_statement_keeps_query(mgr):
    with StoredProc("items") as proc:
        statement = proc.create_statement("EXEC [DoThing]")
        assert statement.query == "EXEC [DoThing]"
    assert mgr.pool_size("items") == 1