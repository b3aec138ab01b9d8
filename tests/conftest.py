"""
Shared test fixtures for Dice Config tests.
"""
import os
import tempfile
import uuid
from pathlib import Path

import pytest

# Point every data path at a scratch directory BEFORE any backend/frontend imports
_TEST_DATA_DIR = Path(tempfile.mkdtemp(prefix="dice-config-tests-"))
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DATA_DIR / 'test_dice_config.db'}"
os.environ["DATA_DIR"] = str(_TEST_DATA_DIR)
os.environ["LOG_DIR"] = str(_TEST_DATA_DIR / "logs")
os.environ["STORAGE_DIR"] = str(_TEST_DATA_DIR / "storage")

from backend.config import get_settings
get_settings.cache_clear()

from frontend.sync import MemoryStorage, NullNotifier, DiceConfigStore
from frontend.utils.exceptions import StorageError


class FakeClock:
    """Controllable epoch-millisecond clock for store tests."""

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += ms
        return self.now


class BrokenStorage(MemoryStorage):
    """Medium whose every operation fails, like a disabled browser storage."""

    def set(self, key, value):
        raise StorageError("storage disabled", storage_type=self.storage_type.value, key=key)

    def get(self, key):
        raise StorageError("storage disabled", storage_type=self.storage_type.value, key=key)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def broken_storage():
    """Factory for media that reject every operation."""
    return BrokenStorage


@pytest.fixture
def shared_storage():
    """Stand-in for the shared medium, as seen by several stores."""
    storage = MemoryStorage()
    return storage


@pytest.fixture
def make_store(clock, shared_storage):
    """Factory for stores sharing one primary medium and the fake clock."""
    stores = []

    def _make(primary=shared_storage, fallback=None, notifier=None, **kwargs):
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("poll_interval", 0.05)
        store = DiceConfigStore(
            primary=primary,
            fallback=fallback if fallback is not None else MemoryStorage(),
            notifier=notifier if notifier is not None else NullNotifier(),
            **kwargs,
        )
        stores.append(store)
        return store

    yield _make

    for store in stores:
        store.close()


@pytest.fixture
def session_id():
    """A valid X-Session-ID value."""
    return str(uuid.uuid4())


@pytest.fixture
def api_client():
    """FastAPI test client with the app lifespan (tables created)."""
    from fastapi.testclient import TestClient
    from backend.main import app

    with TestClient(app) as client:
        yield client
