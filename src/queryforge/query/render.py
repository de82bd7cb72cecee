"""Render builder state into SQL text and positional parameters.

Every function here appends to a `ParamBinder`, which hands out placeholders
in the order they are written into the text. That keeps the parameter list
aligned with the placeholders no matter which clauses are present.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Iterable, List, NamedTuple, Optional, Tuple, Union

from queryforge.core.config import PlaceholderStyle
from queryforge.core.errors import QueryConstructionError
from queryforge.query.conditions import Between, Compare, Condition, InList, Like

OrderSpec = Union[str, Mapping[str, str], Tuple[str, str]]


class Statement(NamedTuple):
    """Statement text plus its parameters, in placeholder order."""

    text: str
    params: List[Any]


class ParamBinder:
    """Allocates placeholders and records the values bound to them."""

    def __init__(self, style: PlaceholderStyle = PlaceholderStyle.QMARK):
        self.style = style
        self.params: List[Any] = []

    def bind(self, value: Any) -> str:
        self.params.append(value)
        return self.style.placeholder(len(self.params))

    def bind_all(self, values: Iterable[Any]) -> str:
        return ", ".join(self.bind(value) for value in values)


def render_condition(condition: Condition, binder: ParamBinder) -> str:
    if isinstance(condition, InList):
        return f"{condition.field} {condition.operator} ({binder.bind_all(condition.values)})"
    if isinstance(condition, Between):
        low = binder.bind(condition.low)
        high = binder.bind(condition.high)
        return f"{condition.field} BETWEEN {low} AND {high}"
    if isinstance(condition, (Like, Compare)):
        value = condition.pattern if isinstance(condition, Like) else condition.value
        return f"{condition.field} {condition.operator} {binder.bind(value)}"
    raise QueryConstructionError(f"Unknown condition type {type(condition).__name__}")


def render_where(
    conditions: Sequence[Condition],
    binder: ParamBinder,
    cursor: Optional[Tuple[str, Any]] = None,
) -> str:
    """Render the WHERE clause, or an empty string when there is nothing to filter.

    The cursor predicate, when given, is the last ANDed condition.
    """
    clauses = [render_condition(condition, binder) for condition in conditions]
    if cursor is not None:
        field, value = cursor
        clauses.append(f"{field} > {binder.bind(value)}")
    if not clauses:
        return ""
    return "WHERE " + " AND ".join(clauses)


def render_order_by(specs: Sequence[OrderSpec]) -> str:
    parts: List[str] = []
    for spec in specs:
        if isinstance(spec, str):
            parts.append(spec)
        elif isinstance(spec, Mapping):
            parts.extend(f"{field} {direction}" for field, direction in spec.items())
        elif isinstance(spec, tuple) and len(spec) == 2:
            parts.append(f"{spec[0]} {spec[1]}")
        else:
            raise QueryConstructionError(f"Unsupported ORDER BY entry {spec!r}")
    if not parts:
        return ""
    return "ORDER BY " + ", ".join(parts)


def render_limit(limit: int) -> str:
    return f"LIMIT {int(limit)}" if limit and limit > 0 else ""


def render_select(
    table: str,
    columns: Sequence[str],
    conditions: Sequence[Condition],
    order_specs: Sequence[OrderSpec],
    limit: int,
    cursor: Optional[Tuple[str, Any]],
    style: PlaceholderStyle,
) -> Statement:
    binder = ParamBinder(style)
    parts = [
        f"SELECT {', '.join(columns) if columns else '*'} FROM {table}",
        render_where(conditions, binder, cursor),
        render_order_by(order_specs),
        render_limit(limit),
    ]
    return Statement(" ".join(part for part in parts if part), binder.params)


def render_insert(table: str, rows: Sequence[Mapping[str, Any]], style: PlaceholderStyle) -> Statement:
    """Render a (possibly multi-row) INSERT.

    Columns come from the first row. Later rows may omit columns, which bind
    NULL, but may not introduce new ones.
    """
    if not rows or not rows[0]:
        raise QueryConstructionError(f"No data provided for insert into {table}")
    columns = list(rows[0].keys())
    known = set(columns)
    binder = ParamBinder(style)
    groups = []
    for index, row in enumerate(rows):
        extra = [key for key in row if key not in known]
        if extra:
            raise QueryConstructionError(
                f"Row {index} has columns not present in the first row: {', '.join(extra)}"
            )
        groups.append(f"({binder.bind_all(row.get(column) for column in columns)})")
    text = f"INSERT INTO {table} ({', '.join(columns)}) VALUES {', '.join(groups)}"
    return Statement(text, binder.params)


def render_update(
    table: str,
    data: Mapping[str, Any],
    conditions: Sequence[Condition],
    style: PlaceholderStyle,
) -> Statement:
    if not data:
        raise QueryConstructionError(f"No data provided for update of {table}")
    if not conditions:
        raise QueryConstructionError(f"Refusing to update {table} without a WHERE condition")
    binder = ParamBinder(style)
    assignments = ", ".join(f"{column} = {binder.bind(value)}" for column, value in data.items())
    return Statement(f"UPDATE {table} SET {assignments} {render_where(conditions, binder)}", binder.params)


def render_delete(table: str, conditions: Sequence[Condition], style: PlaceholderStyle) -> Statement:
    if not conditions:
        raise QueryConstructionError(f"Refusing to delete from {table} without a WHERE condition")
    binder = ParamBinder(style)
    return Statement(f"DELETE FROM {table} {render_where(conditions, binder)}", binder.params)
