"""WHERE predicates.

A predicate is one of four shapes, each carrying exactly the values its
operator needs:

    Compare(field, operator, value)   field OP ?
    InList(field, values, negated)    field [NOT] IN (?, ...)
    Between(field, low, high)         field BETWEEN ? AND ?
    Like(field, pattern, negated)     field [NOT] LIKE ?

`conditions_from_maps` turns the loose ``[{field: value}]`` / ``[{field: op}]``
form into these shapes and rejects malformed values immediately.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field as dc_field
from typing import Any, List, Optional, Tuple, Union

from queryforge.core.errors import QueryConstructionError
from queryforge.query import operators as ops


def _check_field(name: Any) -> None:
    if not isinstance(name, str) or not name.strip():
        raise QueryConstructionError(f"Condition field must be a non-empty string, got {name!r}")


def _as_values(name: str, operator: str, value: Any) -> Tuple[Any, ...]:
    if isinstance(value, (str, bytes, bytearray, Mapping)) or not isinstance(value, Sequence):
        raise QueryConstructionError(
            f"{operator} on '{name}' expects a sequence of values, got {type(value).__name__}"
        )
    return tuple(value)


def _check_scalar(name: str, operator: str, value: Any) -> None:
    if isinstance(value, (list, tuple, set, frozenset, Mapping)):
        raise QueryConstructionError(
            f"{operator} on '{name}' expects a single value, got {type(value).__name__}"
        )


@dataclass(frozen=True)
class Compare:
    field: str
    operator: str = ops.EQUAL
    value: Any = None

    def __post_init__(self):
        _check_field(self.field)
        operator = ops.normalize_operator(self.operator)
        if not ops.is_binary_operator(operator):
            raise QueryConstructionError(f"Unsupported operator {self.operator!r} on '{self.field}'")
        if operator in ops.LIST_OPERATORS or operator in ops.RANGE_OPERATORS:
            raise QueryConstructionError(f"{operator} on '{self.field}' takes more than one value")
        _check_scalar(self.field, operator, self.value)
        object.__setattr__(self, "operator", operator)

    def params(self) -> List[Any]:
        return [self.value]


@dataclass(frozen=True)
class InList:
    field: str
    values: Tuple[Any, ...] = dc_field(default_factory=tuple)
    negated: bool = False

    def __post_init__(self):
        _check_field(self.field)
        operator = ops.NOT_IN if self.negated else ops.IN
        values = _as_values(self.field, operator, self.values)
        if not values:
            raise QueryConstructionError(f"{operator} on '{self.field}' needs at least one value")
        object.__setattr__(self, "values", values)

    @property
    def operator(self) -> str:
        return ops.NOT_IN if self.negated else ops.IN

    def params(self) -> List[Any]:
        return list(self.values)


@dataclass(frozen=True)
class Between:
    field: str
    low: Any
    high: Any

    operator = ops.BETWEEN

    def __post_init__(self):
        _check_field(self.field)

    def params(self) -> List[Any]:
        return [self.low, self.high]


@dataclass(frozen=True)
class Like:
    field: str
    pattern: Any
    negated: bool = False

    def __post_init__(self):
        _check_field(self.field)
        _check_scalar(self.field, self.operator, self.pattern)

    @property
    def operator(self) -> str:
        return ops.NOT_LIKE if self.negated else ops.LIKE

    def params(self) -> List[Any]:
        return [self.pattern]


Condition = Union[Compare, InList, Between, Like]
CONDITION_TYPES = (Compare, InList, Between, Like)


def make_condition(name: str, value: Any, operator: Optional[str] = None) -> Condition:
    """Build the predicate shape matching `operator` for one field/value pair."""
    operator = ops.normalize_operator(operator)
    if operator in ops.LIST_OPERATORS:
        return InList(name, _as_values(name, operator, value), negated=operator == ops.NOT_IN)
    if operator in ops.RANGE_OPERATORS:
        values = _as_values(name, operator, value)
        if len(values) != 2:
            raise QueryConstructionError(
                f"BETWEEN on '{name}' expects exactly 2 values, got {len(values)}"
            )
        return Between(name, values[0], values[1])
    if operator in ops.PATTERN_OPERATORS:
        return Like(name, value, negated=operator == ops.NOT_LIKE)
    return Compare(name, operator, value)


def conditions_from_maps(
    conditions: Sequence[Union[Mapping[str, Any], Condition]],
    operators: Optional[Sequence[Optional[Mapping[str, str]]]] = None,
) -> List[Condition]:
    """Convert loose condition groups into predicates.

    Each group in `conditions` is paired by position with the group of the same
    index in `operators`; fields without an operator compare for equality.
    Fields whose value is None are skipped. Typed conditions pass through.
    """
    operators = operators or []
    result: List[Condition] = []
    for index, group in enumerate(conditions):
        if isinstance(group, CONDITION_TYPES):
            result.append(group)
            continue
        if not isinstance(group, Mapping):
            raise QueryConstructionError(
                f"Condition group {index} must be a mapping or condition, got {type(group).__name__}"
            )
        overrides = operators[index] if index < len(operators) and operators[index] else {}
        for name, value in group.items():
            if value is None:
                continue
            result.append(make_condition(name, value, overrides.get(name)))
    return result
