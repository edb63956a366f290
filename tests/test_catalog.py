from __future__ import annotations

import pytest

from querygate.catalog import KNOWN_SCHEMA_SUMMARY, KNOWN_TABLES, SchemaCatalog
from querygate.errors import (
    DataStoreConnectionError,
    ErrorCode,
    ExecutionError,
    ResourceExhaustionError,
)
from tests.fakes import FakeDB

COLUMN_ROWS = [
    {"table": "current_field_values", "name": "item_node_id", "data_type": "text", "is_nullable": False},
    {"table": "current_field_values", "name": "field_value", "data_type": "jsonb", "is_nullable": True},
    {"table": "field_changes", "name": "id", "data_type": "bigint", "is_nullable": False},
    {"table": "field_changes", "name": "changed_at", "data_type": "timestamp with time zone", "is_nullable": False},
]

INDEX_ROWS = [
    {
        "table": "field_changes",
        "name": "idx_fc_changed_at",
        "definition": "CREATE INDEX idx_fc_changed_at ON public.field_changes USING btree (changed_at)",
    },
]


def _catalog_handler(sql, params):
    if "information_schema.columns" in sql:
        return list(COLUMN_ROWS)
    if "pg_indexes" in sql:
        return list(INDEX_ROWS)
    raise AssertionError(f"unexpected catalog query: {sql}")


@pytest.mark.asyncio
async def test_schema_returns_columns_indexes_and_summary():
    db = FakeDB(handler=_catalog_handler)
    info = await SchemaCatalog(db).schema()

    assert [(c.table, c.name) for c in info.columns] == [
        ("current_field_values", "item_node_id"),
        ("current_field_values", "field_value"),
        ("field_changes", "id"),
        ("field_changes", "changed_at"),
    ]
    assert info.columns[1].is_nullable is True
    assert info.columns[0].data_type == "text"
    assert info.indexes[0].name == "idx_fc_changed_at"
    assert info.summary == KNOWN_SCHEMA_SUMMARY

    # both introspection queries share one read-only transaction
    assert db.acquired == 1
    assert db.commits == 1
    assert len(db.calls) == 2


@pytest.mark.asyncio
async def test_schema_to_dict_uses_wire_keys():
    info = await SchemaCatalog(FakeDB(handler=_catalog_handler)).schema()
    out = info.to_dict()

    assert out["columns"][0] == {
        "table": "current_field_values",
        "name": "item_node_id",
        "dataType": "text",
        "isNullable": False,
    }
    assert out["indexes"][0]["table"] == "field_changes"
    assert {c["table"] for c in out["columns"]} == set(KNOWN_TABLES)


def test_summary_covers_both_tables_and_query_patterns():
    for table in KNOWN_TABLES:
        assert table in KNOWN_SCHEMA_SUMMARY
    assert "What's new" in KNOWN_SCHEMA_SUMMARY
    assert "Current state" in KNOWN_SCHEMA_SUMMARY
    assert "repository_name = $2" in KNOWN_SCHEMA_SUMMARY
    assert "_item_deleted" in KNOWN_SCHEMA_SUMMARY


def test_introspection_queries_are_read_only_selects():
    from querygate.catalog import _COLUMNS_SQL, _INDEXES_SQL
    from querygate.safety import Safety

    assert Safety().check(_COLUMNS_SQL).ok
    assert Safety().check(_INDEXES_SQL).ok


@pytest.mark.asyncio
async def test_unreachable_store_raises_connection_error():
    db = FakeDB(acquire_error=ResourceExhaustionError(message="pool timeout"))
    with pytest.raises(DataStoreConnectionError) as ei:
        await SchemaCatalog(db).schema()

    assert ei.value.code == ErrorCode.DB_UNREACHABLE
    assert "pool timeout" in ei.value.message
    assert isinstance(ei.value.__cause__, ResourceExhaustionError)


@pytest.mark.asyncio
async def test_driver_failure_rolls_back_and_returns_nothing():
    db = FakeDB(
        fail_with=ExecutionError(message='password authentication failed for user "x"')
    )
    with pytest.raises(DataStoreConnectionError) as ei:
        await SchemaCatalog(db).schema()

    assert "password authentication failed" in ei.value.message
    assert db.rollbacks == 1
    assert db.released == 1


@pytest.mark.asyncio
async def test_known_tables_are_bound_not_inlined():
    db = FakeDB(handler=_catalog_handler)
    await SchemaCatalog(db).schema()

    for sql, params in db.calls:
        assert "$1" in sql
        assert params == [list(KNOWN_TABLES)]
