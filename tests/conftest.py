import pytest
from fastapi.testclient import TestClient

from disaster_alert.db import MemoryRecordStore
from disaster_alert.dependencies import get_store
from disaster_alert.main import app


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_payload():
    return {
        "phone": "9999999999",
        "email": "user@example.com",
        "city": "Ludhiana",
        "locality": "Model Town",
        "fullAddress": "12 Mall Road, Model Town, Ludhiana",
    }
