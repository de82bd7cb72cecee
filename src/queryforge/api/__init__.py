"""HTTP routes that expose the query builder over FastAPI."""

from queryforge.api.routes import TableRoutes, parse_filter, table_router

__all__ = ["TableRoutes", "parse_filter", "table_router"]
