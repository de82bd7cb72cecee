"""
queryforge: parameterized single-table SQL built from loose conditions.
"""

from queryforge.core import (
    PlaceholderStyle,
    QueryConfig,
    QueryConstructionError,
    QueryExecutionError,
    QueryForgeError,
    log,
)
from queryforge.db import ModelSchema, SqlAlchemyConnection, materialize
from queryforge.query import Between, Compare, InList, Like, QueryBuilder, Statement
from queryforge.db.client import DbClient, DbConfig, PoolConfig

__version__ = "0.1.0"

__all__ = [
    "QueryBuilder",
    "Statement",
    "Compare",
    "InList",
    "Between",
    "Like",
    "QueryConfig",
    "PlaceholderStyle",
    "QueryForgeError",
    "QueryConstructionError",
    "QueryExecutionError",
    "ModelSchema",
    "SqlAlchemyConnection",
    "materialize",
    "DbClient",
    "DbConfig",
    "PoolConfig",
    "log",
]
