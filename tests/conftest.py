"""Shared fixtures: a fresh SQLite file per test and an app wired to it."""
import pytest
from fastapi.testclient import TestClient

from hardware_store.config import Settings
from hardware_store.database import create_database
from hardware_store.main import create_app
from hardware_store.schema import init_db
from hardware_store.schemas.inventory import InventoryItemCreate
from hardware_store.services import inventory

ADMIN_PASSWORD = "test-admin-pass"


# =============================================================================
# TEST FIXTURES
# =============================================================================

@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=None,
        SQLITE_PATH=str(tmp_path / "test.db"),
        SECRET_KEY="test-secret-key",
        DEFAULT_ADMIN_USERNAME="admin",
        DEFAULT_ADMIN_PASSWORD=ADMIN_PASSWORD,
        BACKUP_DIR=str(tmp_path / "backups"),
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def db(settings):
    """Initialized SQLite database handle."""
    database = create_database(settings)
    init_db(database, settings)
    yield database
    database.close()


@pytest.fixture
def make_item(db):
    """Factory for inventory items with sensible defaults."""
    def _make(**overrides):
        data = {"name": "Hammer", "quantity": 10, "min_quantity": 0, "unit_price": 12.5}
        data.update(overrides)
        return inventory.create_item(db, InventoryItemCreate(**data))
    return _make


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": ADMIN_PASSWORD})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
