from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from querygate.errors.codes import ErrorCode
from querygate.values import JSONValue


# =====================
# Tracing / Observability
# =====================


@dataclass(frozen=True)
class StageTrace:
    stage: str
    duration_ms: float
    notes: Optional[Dict[str, Any]] = None


# =====================
# Stage-level contract
# =====================


@dataclass(frozen=True)
class StageResult:
    ok: bool

    data: Optional[Any] = None
    trace: Optional[StageTrace] = None

    # Human-readable error messages
    error: Optional[List[str]] = None

    error_code: Optional[ErrorCode] = None


# =====================
# Gateway request / result
# =====================


@dataclass(frozen=True)
class QueryRequest:
    sql: str
    params: List[Any] = field(default_factory=list)
    limit: Optional[int] = None
    offset: Optional[int] = None
    timeout_ms: Optional[int] = None


@dataclass(frozen=True)
class QueryResult:
    """
    Uniform envelope returned by the gateway.

    ``applied_limit`` / ``applied_offset`` are the values after clamping, so a
    caller can tell when its requested paging was adjusted.
    """

    row_count: int
    rows: List[Dict[str, JSONValue]]
    applied_limit: int
    applied_offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rowCount": self.row_count,
            "rows": self.rows,
            "appliedLimit": self.applied_limit,
            "appliedOffset": self.applied_offset,
        }


# =====================
# Schema catalog
# =====================


@dataclass(frozen=True)
class Column:
    table: str
    name: str
    data_type: str
    is_nullable: bool


@dataclass(frozen=True)
class Index:
    table: str
    name: str
    definition: str


@dataclass(frozen=True)
class SchemaInfo:
    columns: List[Column]
    indexes: List[Index]
    summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [
                {
                    "table": c.table,
                    "name": c.name,
                    "dataType": c.data_type,
                    "isNullable": c.is_nullable,
                }
                for c in self.columns
            ],
            "indexes": [
                {"table": i.table, "name": i.name, "definition": i.definition}
                for i in self.indexes
            ],
            "summary": self.summary,
        }
