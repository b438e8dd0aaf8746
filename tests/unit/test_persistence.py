"""
Unit Tests for the persistence gateway and the DuckDB key/value store
"""

import json

import pytest

from jobtracker.db import DuckDBKeyValueStore
from jobtracker.services.persistence import PersistenceGateway

KEY = "jobApplications"


@pytest.mark.asyncio
async def test_load_missing_blob_is_empty(gateway):
    assert await gateway.load() == []
    assert gateway.last_sync is None


@pytest.mark.asyncio
@pytest.mark.parametrize("blob", ["not json", "[]", '{"applications": "nope"}', "null"])
async def test_load_corrupt_blob_is_empty(kv_store, gateway, blob):
    kv_store.data[KEY] = blob
    assert await gateway.load() == []


@pytest.mark.asyncio
async def test_load_survives_store_errors(kv_store, gateway):
    kv_store.fail_on_get = True
    assert await gateway.load() == []


@pytest.mark.asyncio
async def test_save_then_load(kv_store, gateway, make_app):
    apps = [make_app(company="Acme"), make_app(company="Initech", platform=None)]
    assert await gateway.save(apps) is True
    assert gateway.last_sync is not None

    blob = json.loads(kv_store.data[KEY])
    assert set(blob) == {"applications", "lastSync"}
    assert blob["applications"][0]["dateApplied"] == "2026-10-01"

    loaded = await PersistenceGateway(kv_store, KEY).load()
    assert loaded == apps


@pytest.mark.asyncio
async def test_load_skips_unreadable_records_and_reads_old_shapes(kv_store, gateway):
    kv_store.data[KEY] = json.dumps(
        {
            "applications": [
                {"id": 1729382400000, "company": "Example Tech", "position": "Support",
                 "dateApplied": "2024-10-20", "followUpDate": ""},
                "garbage",
            ],
            "lastSync": "2024-10-21T08:00:00.000Z",
        }
    )
    [app] = await gateway.load()
    assert app.id == "1729382400000"
    assert app.resolved_platform == "LinkedIn"
    assert gateway.last_sync.year == 2024


@pytest.mark.asyncio
async def test_save_failure_returns_false(kv_store, gateway, make_app):
    kv_store.fail_on_set = True
    assert await gateway.save([make_app()]) is False
    assert gateway.last_sync is None


@pytest.mark.asyncio
async def test_duckdb_store_get_set_overwrite():
    store = DuckDBKeyValueStore(":memory:")
    try:
        assert await store.get(KEY) is None
        await store.set(KEY, "first")
        await store.set(KEY, "second")
        assert await store.get(KEY) == "second"
    finally:
        store.close()


@pytest.mark.asyncio
async def test_gateway_over_duckdb_file(tmp_path, make_app):
    db_file = tmp_path / "tracker.duckdb"
    store = DuckDBKeyValueStore(db_file)
    apps = [make_app()]
    assert await PersistenceGateway(store, KEY).save(apps)
    store.close()

    reopened = DuckDBKeyValueStore(db_file)
    try:
        assert await PersistenceGateway(reopened, KEY).load() == apps
    finally:
        reopened.close()
