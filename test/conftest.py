import pytest

from queryforge import DbClient, DbConfig

USERS_DDL = (
    "CREATE TABLE users ("
    "id INTEGER PRIMARY KEY, name TEXT NOT NULL, status TEXT, age INTEGER, deleted_at TEXT)"
)
USERS_ROWS = (
    "INSERT INTO users (id, name, status, age) VALUES "
    "(1, 'ada', 'active', 36), (2, 'bob', 'inactive', 17), "
    "(3, 'cy', 'active', 70), (4, 'dee', 'active', 25)"
)


class FakeCursor:
    """Result cursor that can fail at a chosen stage."""

    def __init__(self, columns, rows, fail_on=None, close_error=None):
        self.columns = columns
        self.rows = list(rows)
        self.fail_on = fail_on
        self.close_error = close_error
        self.closed = False
        self.fetched = 0

    def keys(self):
        if self.fail_on == "columns":
            raise RuntimeError("no metadata")
        return self.columns

    def fetchone(self):
        if self.fail_on == "iteration" and self.fetched == 1:
            raise RuntimeError("connection reset")
        if self.fetched >= len(self.rows):
            return None
        row = self.rows[self.fetched]
        self.fetched += 1
        return row

    def close(self):
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


class FakeConnection:
    """Connection that records statements and replays a prepared cursor."""

    def __init__(self, cursor=None, query_error=None, exec_error=None, rowcount=1):
        self.cursor = cursor
        self.query_error = query_error
        self.exec_error = exec_error
        self.rowcount = rowcount
        self.queries = []
        self.execs = []

    def query(self, text, params):
        self.queries.append((text, params))
        if self.query_error is not None:
            raise self.query_error
        return self.cursor

    def exec(self, text, params):
        self.execs.append((text, params))
        if self.exec_error is not None:
            raise self.exec_error
        return self.rowcount


@pytest.fixture()
def db_client(tmp_path):
    client = DbClient(DbConfig(driver="sqlite", database=str(tmp_path / "test.db")))
    with client.engine.begin() as conn:
        conn.exec_driver_sql(USERS_DDL)
        conn.exec_driver_sql(USERS_ROWS)
    yield client
    client.dispose()


@pytest.fixture()
def connection(db_client):
    with db_client.connect() as conn:
        yield conn
