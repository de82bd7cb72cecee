import pytest

from conftest import FakeConnection, FakeCursor
from queryforge import QueryBuilder, QueryExecutionError
from queryforge.core.logging import log


def ids(rows):
    return [row["id"] for row in rows]


def test_execute_returns_rows_as_dicts(connection):
    rows = (
        QueryBuilder("users")
        .select(["id", "name"])
        .where([{"status": "active"}])
        .order_by("id ASC")
        .limit(2)
        .execute(connection)
    )
    assert rows == [{"id": 1, "name": "ada"}, {"id": 3, "name": "cy"}]


def test_cursor_pagination(connection):
    builder = QueryBuilder("users").select(["id"]).where([{"status": "active"}]).order_by("id ASC").limit(2)
    first_page = builder.execute(connection)
    assert ids(first_page) == [1, 3]
    second_page = builder.cursor("id", first_page[-1]["id"]).execute(connection)
    assert ids(second_page) == [4]


@pytest.mark.parametrize(
    "conditions, operators, expected",
    [
        ([{"id": [1, 3]}], [{"id": "IN"}], [1, 3]),
        ([{"id": [1, 3]}], [{"id": "NOT IN"}], [2, 4]),
        ([{"age": [18, 40]}], [{"age": "BETWEEN"}], [1, 4]),
        ([{"name": "d%"}], [{"name": "LIKE"}], [4]),
        ([{"age": 30}], [{"age": ">"}], [1, 3]),
        ([{"status": "active", "age": 30}], [{"age": "<"}], [4]),
    ],
)
def test_operators_against_sqlite(connection, conditions, operators, expected):
    rows = QueryBuilder("users").where(conditions, operators).order_by("id").execute(connection)
    assert ids(rows) == expected


def test_no_match_is_empty(connection):
    assert QueryBuilder("users").where([{"status": "missing"}]).execute(connection) == []


def test_query_failure_carries_stage_and_statement(connection):
    with pytest.raises(QueryExecutionError) as exc:
        QueryBuilder("no_such_table").where([{"id": 1}]).execute(connection)
    assert exc.value.stage == "query"
    assert exc.value.statement == "SELECT * FROM no_such_table WHERE id = ?"
    assert exc.value.params == [1]
    assert exc.value.__cause__ is not None


def test_cursor_is_closed_after_success():
    cursor = FakeCursor(["id"], [(1,)])
    assert QueryBuilder("t").execute(FakeConnection(cursor)) == [{"id": 1}]
    assert cursor.closed


def test_cursor_is_closed_after_scan_failure():
    cursor = FakeCursor(["id", "name"], [(1,)])
    with pytest.raises(QueryExecutionError) as exc:
        QueryBuilder("t").execute(FakeConnection(cursor))
    assert exc.value.stage == "scan"
    assert exc.value.statement == "SELECT * FROM t"
    assert cursor.closed


def test_close_failure_does_not_mask_primary_error(monkeypatch):
    warnings = []
    monkeypatch.setattr(log, "warn", warnings.append)
    cursor = FakeCursor(["id"], [(1,), (2,)], fail_on="iteration", close_error=RuntimeError("close"))
    with pytest.raises(QueryExecutionError) as exc:
        QueryBuilder("t").execute(FakeConnection(cursor))
    assert exc.value.stage == "iteration"
    assert len(warnings) == 1


def test_close_failure_after_success_is_only_logged(monkeypatch):
    warnings = []
    monkeypatch.setattr(log, "warn", warnings.append)
    cursor = FakeCursor(["id"], [(1,)], close_error=RuntimeError("close"))
    assert QueryBuilder("t").execute(FakeConnection(cursor)) == [{"id": 1}]
    assert len(warnings) == 1


def test_get_or_create_returns_existing_row(connection):
    builder = QueryBuilder("users").select(["id", "name"]).where([{"name": "ada"}])
    assert builder.get_or_create(connection, {"name": "ada", "status": "new"}) == {"id": 1, "name": "ada"}
    assert QueryBuilder("users").where([{"status": "new"}]).execute(connection) == []


def test_get_or_create_inserts_and_returns_create_data(connection):
    data = {"name": "eve", "status": "active", "age": 41}
    builder = QueryBuilder("users").where([{"name": "eve"}])
    result = builder.get_or_create(connection, data)
    assert result == {"name": "eve", "status": "active", "age": 41}
    assert result is not data
    assert "id" not in result
    stored = QueryBuilder("users").select(["id", "name"]).where([{"name": "eve"}]).execute(connection)
    assert stored == [{"id": 5, "name": "eve"}]


def test_fetch_or_create_reports_whether_it_inserted(connection):
    builder = QueryBuilder("users").where([{"name": "fay"}])
    assert builder.fetch_or_create(connection, {"name": "fay"})[1] is True
    record, created = builder.fetch_or_create(connection, {"name": "fay"})
    assert created is False
    assert record["name"] == "fay"


def test_get_or_create_insert_failure():
    connection = FakeConnection(FakeCursor(["id"], []), exec_error=RuntimeError("constraint"))
    with pytest.raises(QueryExecutionError) as exc:
        QueryBuilder("t").where([{"a": 1}]).get_or_create(connection, {"a": 1})
    assert exc.value.stage == "exec"
    assert connection.execs == [("INSERT INTO t (a) VALUES (?)", [1])]


def test_insert_and_insert_many(connection):
    users = QueryBuilder("users")
    assert users.insert(connection, {"name": "gus", "age": 9}) == 1
    assert users.insert_many(connection, [{"name": "hal", "age": None}, {"name": "ivy", "age": 3}]) == 2
    rows = QueryBuilder("users").select(["name", "age"]).where([{"id": 5}], [{"id": ">="}]).order_by("id").execute(connection)
    assert rows == [
        {"name": "gus", "age": 9},
        {"name": "hal", "age": None},
        {"name": "ivy", "age": 3},
    ]


def test_insert_many_binds_null_for_missing_keys(connection):
    assert QueryBuilder("users").insert_many(connection, [{"name": "jo", "age": 4}, {"name": "kit"}]) == 2
    rows = QueryBuilder("users").select(["name", "age"]).where([{"id": 5}], [{"id": ">="}]).order_by("id").execute(connection)
    assert rows == [{"name": "jo", "age": 4}, {"name": "kit", "age": None}]


def test_update_and_delete(connection):
    active = QueryBuilder("users").where([{"status": "active"}])
    assert active.update(connection, {"status": "archived"}) == 3
    assert QueryBuilder("users").where([{"id": [1, 2]}], [{"id": "IN"}]).delete(connection) == 2
    remaining = QueryBuilder("users").select(["id", "status"]).order_by("id").execute(connection)
    assert remaining == [{"id": 3, "status": "archived"}, {"id": 4, "status": "archived"}]


def test_update_many_applies_each_row(connection):
    builder = QueryBuilder("users").where([{"id": 2}])
    assert builder.update_many(connection, [{"status": "a"}, {"age": 18}]) == 2
    assert builder.select(["status", "age"]).execute(connection) == [{"status": "a", "age": 18}]


def test_soft_delete_stamps_the_column(connection):
    builder = QueryBuilder("users").where([{"id": 3}])
    assert builder.soft_delete(connection, now="2024-05-01T00:00:00") == 1
    assert builder.select(["deleted_at"]).execute(connection) == [{"deleted_at": "2024-05-01T00:00:00"}]


def test_exec_failure_wraps_driver_error(connection):
    with pytest.raises(QueryExecutionError) as exc:
        QueryBuilder("users").insert(connection, {"nope": 1})
    assert exc.value.stage == "exec"
    assert exc.value.statement == "INSERT INTO users (nope) VALUES (?)"
