"""
Pytest Configuration and Shared Fixtures

Key Components:
--------------
1. Storage doubles:
   - In-memory key/value store that records every save and can be told to fail
2. Store wiring:
   - PersistenceGateway and ApplicationStore with a short debounce window
3. Record helpers:
   - Factory for Application records with sensible defaults

Fixtures:
---------
- kv_store: In-memory key/value store
- gateway: PersistenceGateway over kv_store
- store: ApplicationStore with a 10 ms debounce
- make_app: Factory for Application records
- today: The current date

Notes:
------
- Async tests use pytest-asyncio (@pytest.mark.asyncio)
"""

from datetime import date

import pytest

from jobtracker.models.application import Application, generate_id
from jobtracker.services.application_store import ApplicationStore
from jobtracker.services.persistence import PersistenceGateway

STORAGE_KEY = "jobApplications"
DEBOUNCE = 0.01


class MemoryKeyValueStore:
    """Dict-backed store; every set() attempt is recorded, even failing ones."""

    def __init__(self):
        self.data = {}
        self.set_calls = []
        self.fail_on_get = False
        self.fail_on_set = False

    async def get(self, key):
        if self.fail_on_get:
            raise RuntimeError("storage unavailable")
        return self.data.get(key)

    async def set(self, key, value):
        self.set_calls.append(value)
        if self.fail_on_set:
            raise OSError("quota exceeded")
        self.data[key] = value


@pytest.fixture
def today():
    return date.today()


@pytest.fixture
def kv_store():
    return MemoryKeyValueStore()


@pytest.fixture
def gateway(kv_store):
    return PersistenceGateway(kv_store, STORAGE_KEY)


@pytest.fixture
def store(gateway):
    return ApplicationStore(gateway, debounce_seconds=DEBOUNCE, csv_dialect="standard")


@pytest.fixture
def make_app():
    """Build an Application; keyword arguments override the defaults."""

    def _make(**overrides):
        data = {
            "id": generate_id(),
            "company": "Acme Cloud",
            "position": "Azure Support Engineer",
            "platform": "LinkedIn",
            "date_applied": date(2026, 10, 1),
            "status": "Applied",
            "cv_version": "Support",
            "last_update": date(2026, 10, 1),
        }
        data.update(overrides)
        return Application.model_validate(data)

    return _make
