from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class DbQueryRequest(BaseModel):
    """Declared tool input contract; the gateway re-clamps independently."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sql: str = Field(description="A single SELECT (or WITH ... SELECT) statement.")
    params: List[Any] = Field(default_factory=list)
    limit: int = Field(default=200, ge=1, le=2000)
    offset: int = Field(default=0, ge=0)
    timeout_ms: int = Field(default=15000, ge=1000, le=60000, alias="timeoutMs")


class DbQueryResponse(BaseModel):
    rowCount: int
    rows: List[Dict[str, Any]] = Field(default_factory=list)
    appliedLimit: int
    appliedOffset: int


class ColumnModel(BaseModel):
    table: str
    name: str
    dataType: str
    isNullable: bool


class IndexModel(BaseModel):
    table: str
    name: str
    definition: str


class DbSchemaResponse(BaseModel):
    columns: List[ColumnModel] = Field(default_factory=list)
    indexes: List[IndexModel] = Field(default_factory=list)
    summary: str


class CurrentDateResponse(BaseModel):
    current_date: str
    current_datetime: str
    current_year: int
    current_month: int
    current_quarter: str
    current_quarter_start: str
    current_quarter_end: str
    next_quarter: str
    next_quarter_start: str
    next_quarter_end: str
    timezone: str
    day_of_week: str
    week_of_year: int
