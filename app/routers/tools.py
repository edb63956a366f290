from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Security
from fastapi.security import APIKeyHeader

from app.dependencies import get_catalog, get_gateway
from app.schemas import (
    CurrentDateResponse,
    DbQueryRequest,
    DbQueryResponse,
    DbSchemaResponse,
)
from app.services.temporal import current_date_context
from app.settings import get_settings
from querygate.catalog import SchemaCatalog
from querygate.executor import QueryGateway

logger = logging.getLogger(__name__)
settings = get_settings()

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def require_api_key(key: Optional[str] = Security(api_key_header)):
    """
    Simple API key check using X-API-Key header and configured API keys.

    - Settings.api_keys_raw is a comma-separated list of keys.
    - If api_keys_raw is empty → auth disabled (dev mode).
    """
    raw = settings.api_keys_raw or ""
    allowed = {k.strip() for k in raw.split(",") if k.strip()}
    if not allowed:
        return
    if not key or key not in allowed:
        raise HTTPException(status_code=401, detail="invalid API key")


router = APIRouter(prefix="/tools", dependencies=[Depends(require_api_key)])


@router.get("/db_schema", name="db_schema", response_model=DbSchemaResponse)
async def db_schema(catalog: SchemaCatalog = Depends(get_catalog)):
    """
    Schema and usage notes for the project-insights database: columns and
    indexes of field_changes / current_field_values plus a query guide.
    """
    info = await catalog.schema()
    return info.to_dict()


@router.post("/db_query", name="db_query", response_model=DbQueryResponse)
async def db_query(
    request: DbQueryRequest,
    gateway: QueryGateway = Depends(get_gateway),
):
    """
    Execute a read-only SELECT. Rows come back with LIMIT/OFFSET enforced
    (max 2000); scope by project_name and default to a 7-day lookback for
    "what's new" questions.
    """
    result = await gateway.query(
        request.sql,
        params=request.params,
        limit=request.limit,
        offset=request.offset,
        timeout_ms=request.timeout_ms,
    )
    return result.to_dict()


@router.get("/current_date", name="current_date", response_model=CurrentDateResponse)
def current_date():
    """Current date/quarter context for relative time questions."""
    return current_date_context()
