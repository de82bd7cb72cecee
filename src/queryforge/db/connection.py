"""Connection seam between the builder and a database driver.

The builder only needs two calls: run a query and get a cursor back, or run a
statement and get an affected-row count back. `SqlAlchemyConnection` provides
both on top of a SQLAlchemy connection, sending the text straight to the driver
so positional placeholders reach it untouched.
"""

from typing import Any, Dict, List, Optional, Protocol, Sequence

from sqlalchemy.engine import Connection as SAConnection


class ResultCursor(Protocol):  # pragma: no cover - structural typing helper
    def keys(self) -> Sequence[str]: ...
    def fetchone(self) -> Optional[Sequence[Any]]: ...
    def close(self) -> None: ...


class Connection(Protocol):  # pragma: no cover - structural typing helper
    def query(self, text: str, params: List[Any]) -> ResultCursor: ...
    def exec(self, text: str, params: List[Any]) -> int: ...


class SqlAlchemyConnection:
    """Adapter exposing a SQLAlchemy connection as a `Connection`.

    `execution_options` are passed on every call, e.g. a driver timeout.
    """

    def __init__(self, connection: SAConnection, execution_options: Optional[Dict[str, Any]] = None):
        self.connection = connection
        self.execution_options = execution_options or {}

    def query(self, text: str, params: List[Any]) -> ResultCursor:
        return self.connection.exec_driver_sql(
            text, tuple(params), execution_options=self.execution_options
        )

    def exec(self, text: str, params: List[Any]) -> int:
        result = self.connection.exec_driver_sql(
            text, tuple(params), execution_options=self.execution_options
        )
        try:
            return result.rowcount
        finally:
            result.close()
