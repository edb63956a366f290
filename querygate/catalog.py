from __future__ import annotations

import logging
import time

from adapters.db.base import DBAdapter
from querygate.errors import DataStoreConnectionError, GatewayError
from querygate.metrics import catalog_requests_total
from querygate.types import Column, Index, SchemaInfo

log = logging.getLogger(__name__)

KNOWN_TABLES = ("field_changes", "current_field_values")

# Hand-maintained: column meanings and query patterns not visible via introspection.
KNOWN_SCHEMA_SUMMARY = """
Tables:

1) field_changes (append-only)
  - id BIGSERIAL PRIMARY KEY
  - project_node_id TEXT NOT NULL
  - project_name TEXT
  - item_node_id TEXT NOT NULL
  - content_node_id TEXT
  - content_type TEXT
  - content_title TEXT
  - content_url TEXT
  - repository_name TEXT
  - field_name TEXT NOT NULL
  - field_type TEXT NOT NULL
  - old_value JSONB
  - new_value JSONB
  - changed_at TIMESTAMPTZ NOT NULL
  - detected_at TIMESTAMPTZ DEFAULT NOW()
  - actor_login TEXT
  - UNIQUE(item_node_id, field_name, changed_at)
  - Item deletion is a synthetic event: field_name = '_item_deleted',
    field_type = 'system_event', old_value = true, new_value = null
  Indexes: project_node_id, project_name, repository_name, item_node_id, changed_at

2) current_field_values (current snapshot)
  - project_node_id TEXT NOT NULL
  - project_name TEXT
  - item_node_id TEXT NOT NULL
  - content_node_id TEXT
  - content_type TEXT
  - content_title TEXT
  - content_url TEXT
  - repository_name TEXT
  - field_name TEXT NOT NULL
  - field_type TEXT NOT NULL
  - field_value JSONB
  - updated_at TIMESTAMPTZ DEFAULT NOW()
  - PRIMARY KEY (item_node_id, field_name)
  - No rows for an item means it was never observed or has been deleted.
  Indexes: project_node_id, project_name, repository_name

Usage patterns:
- "What's new / what changed" -> query field_changes filtered by project_name (or project_node_id) with changed_at >= now() - interval '7 days'.
- "Current state" -> query current_field_values filtered by project_name (or project_node_id).
- "Filter by repo + field" -> field_changes where project_name = $1 and repository_name = $2 and field_name = $3 order by changed_at desc.
- Common filters: repository_name, field_name (e.g. Status), actor_login, content_type.
- field_changes.changed_at is the authoritative change timestamp; current_field_values.updated_at is only when the snapshot was recorded.
"""

_COLUMNS_SQL = """
select c.table_name as "table",
       c.column_name as name,
       c.data_type as data_type,
       (c.is_nullable = 'YES') as is_nullable
from information_schema.columns c
where c.table_schema = 'public'
  and c.table_name::text = any($1::text[])
order by c.table_name, c.ordinal_position
"""

_INDEXES_SQL = """
select tablename as "table", indexname as name, indexdef as definition
from pg_indexes
where schemaname = 'public'
  and tablename::text = any($1::text[])
order by tablename, indexname
"""


class SchemaCatalog:
    """Live column/index metadata for the two known tables plus usage notes."""

    name = "catalog"

    def __init__(self, db: DBAdapter, summary: str = KNOWN_SCHEMA_SUMMARY) -> None:
        self.db = db
        self.summary = summary

    async def schema(self) -> SchemaInfo:
        t0 = time.perf_counter()
        try:
            async with self.db.read_only_transaction() as session:
                col_rows, _ = await session.fetch(_COLUMNS_SQL, [list(KNOWN_TABLES)])
                idx_rows, _ = await session.fetch(_INDEXES_SQL, [list(KNOWN_TABLES)])
        except GatewayError as exc:
            catalog_requests_total.labels(status="error").inc()
            log.warning(
                "db_schema error",
                extra={
                    "elapsed_ms": round((time.perf_counter() - t0) * 1000, 1),
                    "error": exc.message,
                },
            )
            raise DataStoreConnectionError(
                message=f"Schema introspection failed: {exc.message}",
                details=list(exc.details or [exc.message]),
                extra={"cause": exc.code.value, **exc.extra},
            ) from exc

        columns = [
            Column(
                table=r["table"],
                name=r["name"],
                data_type=r["data_type"],
                is_nullable=bool(r["is_nullable"]),
            )
            for r in col_rows
        ]
        indexes = [
            Index(table=r["table"], name=r["name"], definition=r["definition"])
            for r in idx_rows
        ]

        catalog_requests_total.labels(status="ok").inc()
        log.info(
            "db_schema success",
            extra={
                "elapsed_ms": round((time.perf_counter() - t0) * 1000, 1),
                "columns": len(columns),
                "indexes": len(indexes),
            },
        )
        return SchemaInfo(columns=columns, indexes=indexes, summary=self.summary)
