# src/queryforge/query/builder.py
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from queryforge.core.config import DEFAULT_CONFIG, QueryConfig
from queryforge.core.errors import QueryConstructionError, QueryExecutionError
from queryforge.core.logging import color_palette, log
from queryforge.db.connection import Connection, ResultCursor
from queryforge.db.materialize import close_quietly, materialize, materialize_first
from queryforge.db.models import ModelSchema, resolve_schema
from queryforge.query.conditions import Condition, conditions_from_maps
from queryforge.query.render import (
    OrderSpec,
    Statement,
    render_delete,
    render_insert,
    render_select,
    render_update,
)

Record = Dict[str, Any]


class QueryBuilder:
    """
    Accumulates the parts of a single-table statement and renders them.

    Configuration calls replace earlier state and return the builder, so they
    chain. Rendering never mutates the builder: `build()` on unchanged state
    always yields the same text and parameters.

    A builder holds no locks; share one across threads only with external
    synchronization.
    """

    def __init__(self, table: str, model: Any = None, config: Optional[QueryConfig] = None):
        if not isinstance(table, str) or not table.strip():
            raise QueryConstructionError("Table name must be a non-empty string")
        self.table = table
        self.model: Optional[ModelSchema] = resolve_schema(model)
        self.config = config or DEFAULT_CONFIG
        self.columns: List[str] = []
        self.conditions: List[Condition] = []
        self.order_specs: List[OrderSpec] = []
        self.limit_count = 0
        self.cursor_field: Optional[str] = None
        self.cursor_value: Any = None

    # ===== Configuration =====

    def select(self, columns: Optional[Sequence[str]] = None) -> "QueryBuilder":
        """Columns to select; defaults to the model's fields, then to `*`."""
        if columns:
            self.columns = list(columns)
        elif self.model is not None:
            self.columns = self.model.column_names()
        else:
            self.columns = []
        return self

    def where(
        self,
        conditions: Sequence[Union[Mapping, Condition]],
        operators: Optional[Sequence[Optional[Mapping[str, str]]]] = None,
    ) -> "QueryBuilder":
        self.conditions = conditions_from_maps(conditions or [], operators)
        return self

    def order_by(self, *specs: OrderSpec) -> "QueryBuilder":
        self.order_specs = list(specs)
        return self

    def limit(self, count: Optional[int]) -> "QueryBuilder":
        """Cap the row count; None, zero and negative counts remove the cap."""
        try:
            count = int(count or 0)
        except (TypeError, ValueError):
            raise QueryConstructionError(f"Limit must be an integer, got {count!r}") from None
        self.limit_count = max(count, 0)
        return self

    def cursor(self, field: Optional[str], value: Any) -> "QueryBuilder":
        """Only return rows whose `field` is strictly greater than `value`."""
        self.cursor_field = field
        self.cursor_value = value
        return self

    @property
    def cursor_spec(self) -> Optional[Tuple[str, Any]]:
        if self.cursor_field and self.cursor_value is not None:
            return self.cursor_field, self.cursor_value
        return None

    # ===== Rendering =====

    def build(self) -> Statement:
        statement = render_select(
            self.table,
            self.columns,
            self.conditions,
            self.order_specs,
            self.limit_count,
            self.cursor_spec,
            self.config.placeholder_style,
        )
        return self._trace(statement)

    def build_insert(self, data: Mapping[str, Any]) -> Statement:
        return self._trace(render_insert(self.table, [data], self.config.placeholder_style))

    def build_insert_many(self, rows: Sequence[Mapping[str, Any]]) -> Statement:
        return self._trace(render_insert(self.table, rows, self.config.placeholder_style))

    def build_update(self, data: Mapping[str, Any]) -> Statement:
        return self._trace(
            render_update(self.table, data, self.conditions, self.config.placeholder_style)
        )

    def build_delete(self) -> Statement:
        return self._trace(render_delete(self.table, self.conditions, self.config.placeholder_style))

    def _trace(self, statement: Statement) -> Statement:
        if self.config.log_statements:
            log.debug(
                f"{color_palette['table'](self.table)}: {color_palette['keyword'](statement.text)} "
                f"{color_palette['param'](statement.params)}"
            )
        return statement

    # ===== Execution =====

    def execute(self, connection: Connection) -> List[Record]:
        """Run the SELECT and return every row as a dict."""
        statement = self.build()
        cursor = self._open(connection, statement)
        try:
            return materialize(cursor)
        except QueryExecutionError as e:
            e.statement, e.params = statement.text, statement.params
            raise
        finally:
            close_quietly(cursor)

    def first(self, connection: Connection) -> Optional[Record]:
        """Run the SELECT and return only the first row, if any."""
        statement = self.build()
        cursor = self._open(connection, statement)
        try:
            return materialize_first(cursor)
        except QueryExecutionError as e:
            e.statement, e.params = statement.text, statement.params
            raise
        finally:
            close_quietly(cursor)

    def get_or_create(self, connection: Connection, create_data: Mapping[str, Any]) -> Record:
        """
        Return the first row matching the current SELECT, inserting `create_data` if none does.

        The inserted row is not read back: the result is a copy of `create_data`,
        so generated values such as auto-increment keys are not included.
        """
        record, _ = self.fetch_or_create(connection, create_data)
        return record

    def fetch_or_create(
        self, connection: Connection, create_data: Mapping[str, Any]
    ) -> Tuple[Record, bool]:
        """Same as `get_or_create`, also reporting whether a row was inserted."""
        existing = self.first(connection)
        if existing is not None:
            return existing, False
        self.insert(connection, create_data)
        return dict(create_data), True

    def insert(self, connection: Connection, data: Mapping[str, Any]) -> int:
        return self._exec(connection, self.build_insert(data))

    def insert_many(self, connection: Connection, rows: Sequence[Mapping[str, Any]]) -> int:
        return self._exec(connection, self.build_insert_many(rows))

    def update(self, connection: Connection, data: Mapping[str, Any]) -> int:
        """Apply `data` to every row matching the current WHERE conditions."""
        return self._exec(connection, self.build_update(data))

    def update_many(self, connection: Connection, rows: Sequence[Mapping[str, Any]]) -> int:
        """Apply each entry of `rows` in turn with the current WHERE conditions."""
        if not rows:
            raise QueryConstructionError(f"No data provided for bulk update of {self.table}")
        statements = [self.build_update(data) for data in rows]
        return sum(self._exec(connection, statement) for statement in statements)

    def delete(self, connection: Connection) -> int:
        return self._exec(connection, self.build_delete())

    def soft_delete(
        self,
        connection: Connection,
        column: str = "deleted_at",
        now: Any = None,
    ) -> int:
        """Mark matching rows deleted by stamping `column` instead of removing them.

        `now` is the value written; it defaults to the current UTC time.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        return self.update(connection, {column: now})

    def _open(self, connection: Connection, statement: Statement) -> ResultCursor:
        try:
            return connection.query(statement.text, statement.params)
        except Exception as e:
            raise QueryExecutionError(
                "query", f"query execution failed: {e}", statement.text, statement.params
            ) from e

    def _exec(self, connection: Connection, statement: Statement) -> int:
        try:
            return connection.exec(statement.text, statement.params)
        except Exception as e:
            raise QueryExecutionError(
                "exec", f"statement execution failed: {e}", statement.text, statement.params
            ) from e
