from __future__ import annotations

import logging
import re
import time
from typing import Any, Optional, Sequence

from adapters.db.base import DBAdapter
from querygate.errors import (
    GatewayError,
    ResourceExhaustionError,
    ValidationError,
)
from querygate.metrics import gateway_query_duration_ms, gateway_queries_total
from querygate.safety import Safety
from querygate.types import QueryRequest, QueryResult
from querygate.values import normalize_row

log = logging.getLogger(__name__)

DEFAULT_LIMIT = 200
MAX_LIMIT = 2000
DEFAULT_OFFSET = 0
DEFAULT_TIMEOUT_MS = 15_000
MIN_TIMEOUT_MS = 1_000
MAX_TIMEOUT_MS = 60_000

_PLACEHOLDER_RE = re.compile(r"\$(\d+)")
_SQL_PREVIEW_CHARS = 120


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return DEFAULT_LIMIT
    return max(0, min(int(limit), MAX_LIMIT))


def clamp_offset(offset: Optional[int]) -> int:
    if offset is None:
        return DEFAULT_OFFSET
    return max(0, int(offset))


def clamp_timeout_ms(timeout_ms: Optional[int]) -> int:
    if timeout_ms is None:
        return DEFAULT_TIMEOUT_MS
    return max(MIN_TIMEOUT_MS, min(int(timeout_ms), MAX_TIMEOUT_MS))


def max_placeholder_index(sql: str) -> int:
    """Highest $n referenced literally in the text (0 when none)."""
    return max((int(m.group(1)) for m in _PLACEHOLDER_RE.finditer(sql)), default=0)


def wrap_sql(sql: str, base: int) -> str:
    """
    Wrap validated SQL as a subquery with LIMIT/OFFSET bound to $base+1/$base+2.

    The inner query is never parsed; its own LIMIT/OFFSET stay untouched.
    """
    return f"select * from ( {sql} ) as t limit ${base + 1} offset ${base + 2}"


class QueryGateway:
    """
    Safe query gateway: validate, bound, wrap, execute, return an envelope.

    Stateless across calls; the only shared resource is the adapter's pool.
    """

    name = "executor"

    def __init__(self, db: DBAdapter, safety: Optional[Safety] = None) -> None:
        self.db = db
        self.safety = safety or Safety()

    async def query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        limit: Optional[int] = DEFAULT_LIMIT,
        offset: Optional[int] = DEFAULT_OFFSET,
        timeout_ms: Optional[int] = DEFAULT_TIMEOUT_MS,
    ) -> QueryResult:
        return await self.run(
            QueryRequest(
                sql=sql,
                params=list(params or []),
                limit=limit,
                offset=offset,
                timeout_ms=timeout_ms,
            )
        )

    async def run(self, request: QueryRequest) -> QueryResult:
        t0 = time.perf_counter()
        preview = (request.sql or "")[:_SQL_PREVIEW_CHARS]
        log.info(
            "db_query start",
            extra={
                "limit": request.limit,
                "offset": request.offset,
                "timeout_ms": request.timeout_ms,
                "sql_preview": preview,
            },
        )
        try:
            result = await self._run(request)
        except GatewayError as exc:
            elapsed = (time.perf_counter() - t0) * 1000
            gateway_queries_total.labels(status=_status_of(exc)).inc()
            gateway_query_duration_ms.observe(elapsed)
            log.warning(
                "db_query error",
                extra={
                    "elapsed_ms": round(elapsed, 1),
                    "code": exc.code.value,
                    "error": exc.message,
                },
            )
            raise

        elapsed = (time.perf_counter() - t0) * 1000
        gateway_queries_total.labels(status="ok").inc()
        gateway_query_duration_ms.observe(elapsed)
        log.info(
            "db_query success",
            extra={
                "elapsed_ms": round(elapsed, 1),
                "rows": result.row_count,
                "limit": result.applied_limit,
                "offset": result.applied_offset,
            },
        )
        return result

    async def _run(self, request: QueryRequest) -> QueryResult:
        # Validation happens before any pool or network activity.
        safe_sql = self.safety.validate(request.sql)

        params = list(request.params or [])
        limit = clamp_limit(request.limit)
        offset = clamp_offset(request.offset)
        timeout_ms = clamp_timeout_ms(request.timeout_ms)

        base = max(max_placeholder_index(safe_sql), len(params))
        wrapped = wrap_sql(safe_sql, base)

        async with self.db.read_only_transaction() as session:
            # timeout_ms is a clamped int, safe to inline; SET cannot take binds
            await session.execute(f"SET LOCAL statement_timeout TO '{timeout_ms}ms'")
            raw_rows, _cols = await session.fetch(wrapped, [*params, limit, offset])

        rows = [normalize_row(r) for r in raw_rows]
        return QueryResult(
            row_count=len(rows),
            rows=rows,
            applied_limit=limit,
            applied_offset=offset,
        )


def _status_of(exc: GatewayError) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, ResourceExhaustionError):
        return "resource_exhausted"
    return "execution_error"
