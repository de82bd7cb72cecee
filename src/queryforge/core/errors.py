"""Exception types raised by queryforge."""

from typing import Any, List, Optional


class QueryForgeError(Exception):
    """Base class for every error raised by queryforge."""


class QueryConstructionError(QueryForgeError, ValueError):
    """A condition or statement could not be rendered into valid SQL.

    Raised while the statement is being assembled, never during execution.
    """


class QueryExecutionError(QueryForgeError):
    """The connection rejected a statement or its result could not be read.

    `stage` names the step that failed: ``query``, ``exec``, ``columns``,
    ``scan`` or ``iteration``.
    """

    def __init__(
        self,
        stage: str,
        message: str,
        statement: Optional[str] = None,
        params: Optional[List[Any]] = None,
    ):
        super().__init__(f"{stage}: {message}")
        self.stage = stage
        self.statement = statement
        self.params = params


class DatabaseUnavailableError(QueryForgeError, ConnectionError):
    """The database could not be reached while testing the connection."""
