"""Dynamic SQL statement construction."""

from queryforge.query.builder import QueryBuilder
from queryforge.query.conditions import (
    Between,
    Compare,
    Condition,
    InList,
    Like,
    conditions_from_maps,
    make_condition,
)
from queryforge.query.render import ParamBinder, Statement

__all__ = [
    "QueryBuilder",
    "Statement",
    "ParamBinder",
    "Condition",
    "Compare",
    "InList",
    "Between",
    "Like",
    "make_condition",
    "conditions_from_maps",
]
