# src/queryforge/api/routes.py
"""Read and get-or-create routes for a single table, backed by QueryBuilder."""

import re
from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from queryforge.core.config import QueryConfig
from queryforge.core.errors import QueryConstructionError, QueryExecutionError
from queryforge.core.logging import color_palette, log
from queryforge.query.builder import QueryBuilder
from queryforge.query.conditions import Condition, make_condition
from queryforge.query.operators import LIST_OPERATORS, OPERATOR_MAP, RANGE_OPERATORS

# `age[gte]` -> ("age", "gte"); plain `age` -> ("age", None)
_FILTER_KEY = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?:\[(?P<op>[a-z]+)\])?$")
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class GetOrCreateRequest(BaseModel):
    match: Dict[str, Any]
    data: Dict[str, Any]


class GetOrCreateResponse(BaseModel):
    created: bool
    record: Dict[str, Any]


def parse_filter(key: str, raw: str) -> Condition:
    """Turn one `field[op]=value` query parameter into a condition."""
    matched = _FILTER_KEY.match(key)
    if not matched:
        raise QueryConstructionError(f"Invalid filter parameter '{key}'")
    field, op = matched.group("field"), matched.group("op") or "eq"
    if op not in OPERATOR_MAP:
        raise QueryConstructionError(f"Unknown operator '{op}' for '{field}'")
    operator = OPERATOR_MAP[op]
    value: Any = raw
    if operator in LIST_OPERATORS or operator in RANGE_OPERATORS:
        value = [item.strip() for item in raw.split(",") if item.strip()]
    return make_condition(field, value, operator)


class TableRoutes:
    """Registers query routes for one table on a FastAPI router."""

    RESERVED_PARAMS = {"order_by", "order_dir", "limit", "after", "cursor_field"}

    def __init__(
        self,
        table: str,
        router: APIRouter,
        connection_dependency: Callable,
        model: Any = None,
        config: Optional[QueryConfig] = None,
        prefix: str = "",
    ):
        self.table = table
        self.router = router
        self.connection_dependency = connection_dependency
        self.model = model
        self.config = config
        self.prefix = prefix

    def _get_route_path(self, operation: str = "") -> str:
        """Generate route path with optional prefix."""
        base_path = f"/{self.table.lower()}"
        if operation:
            base_path = f"{base_path}/{operation}"
        return f"{self.prefix}{base_path}"

    def _builder(self) -> QueryBuilder:
        return QueryBuilder(self.table, model=self.model, config=self.config).select()

    def _filters(self, request: Request) -> List[Condition]:
        return [
            parse_filter(key, value)
            for key, value in request.query_params.multi_items()
            if key not in self.RESERVED_PARAMS
        ]

    def read(self) -> None:
        """Add READ route with filters, ordering, limit and cursor pagination."""

        @self.router.get(
            self._get_route_path(),
            response_model=List[Dict[str, Any]],
            summary=f"Get {self.table} records",
            description=f"Retrieve {self.table} records with optional filtering",
        )
        def read_records(
            request: Request,
            connection=Depends(self.connection_dependency),
            order_by: Optional[str] = None,
            order_dir: str = "asc",
            limit: int = 0,
            after: Optional[str] = None,
            cursor_field: str = "id",
        ) -> List[Dict[str, Any]]:
            if order_dir.lower() not in ("asc", "desc"):
                raise HTTPException(status_code=400, detail="order_dir must be 'asc' or 'desc'")
            for name in (order_by, cursor_field):
                if name is not None and not _IDENTIFIER.match(name):
                    raise HTTPException(status_code=400, detail=f"Invalid column name '{name}'")
            try:
                builder = self._builder().where(self._filters(request)).limit(limit)
                if order_by:
                    builder.order_by((order_by, order_dir.upper()))
                builder.cursor(cursor_field, after)
                return builder.execute(connection)
            except QueryConstructionError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except QueryExecutionError as e:
                log.error(f"Read on {color_palette['table'](self.table)} failed at {color_palette['stage'](e.stage)}")
                raise HTTPException(status_code=500, detail=f"Query failed: {e}")

    def get_or_create(self) -> None:
        """Add GET-OR-CREATE route."""

        @self.router.post(
            self._get_route_path("get-or-create"),
            response_model=GetOrCreateResponse,
            summary=f"Get or create {self.table}",
            description=f"Return the first {self.table} record matching `match`, inserting `data` if none does",
        )
        def get_or_create_record(
            payload: GetOrCreateRequest,
            connection=Depends(self.connection_dependency),
        ) -> GetOrCreateResponse:
            if not payload.match:
                raise HTTPException(status_code=400, detail="match must name at least one field")
            # null values are dropped from WHERE, which would match any row
            nulls = [name for name, value in payload.match.items() if value is None]
            if nulls:
                raise HTTPException(status_code=400, detail=f"match values cannot be null: {', '.join(nulls)}")
            for name in [*payload.match, *payload.data]:
                if not _IDENTIFIER.match(name):
                    raise HTTPException(status_code=400, detail=f"Invalid column name '{name}'")
            try:
                builder = self._builder().where([payload.match]).limit(1)
                record, created = builder.fetch_or_create(connection, payload.data)
            except QueryConstructionError as e:
                raise HTTPException(status_code=400, detail=str(e))
            except QueryExecutionError as e:
                log.error(f"Get-or-create on {color_palette['table'](self.table)} failed at {color_palette['stage'](e.stage)}")
                raise HTTPException(status_code=500, detail=f"Get-or-create failed: {e}")
            return GetOrCreateResponse(created=created, record=record)

    def generate_all(self) -> None:
        """Generate all table routes."""
        self.read()
        self.get_or_create()
        log.success(f"Generated routes for {color_palette['table'](self.table)}")


def table_router(
    tables: List[Tuple[str, Any]],
    connection_dependency: Callable,
    config: Optional[QueryConfig] = None,
    prefix: str = "",
) -> APIRouter:
    """Router exposing every `(table, model)` pair in `tables`."""
    router = APIRouter(tags=["Tables"])
    for table, model in tables:
        TableRoutes(table, router, connection_dependency, model=model, config=config, prefix=prefix).generate_all()
    return router
