"""Core utilities shared by the query builder and the database layer."""

from queryforge.core.config import DEFAULT_CONFIG, PlaceholderStyle, QueryConfig
from queryforge.core.errors import (
    DatabaseUnavailableError,
    QueryConstructionError,
    QueryExecutionError,
    QueryForgeError,
)
from queryforge.core.logging import Logger, color_palette, log

__all__ = [
    "DEFAULT_CONFIG",
    "PlaceholderStyle",
    "QueryConfig",
    "QueryForgeError",
    "QueryConstructionError",
    "QueryExecutionError",
    "DatabaseUnavailableError",
    "Logger",
    "log",
    "color_palette",
]
