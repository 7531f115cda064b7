import json

import pytest

from hardware_store.database import create_database
from hardware_store.errors import ValidationError
from hardware_store.schema import init_db
from hardware_store.schemas.budget import BudgetCreate
from hardware_store.schemas.sale import SaleCreate
from hardware_store.services import backup, budget, inventory, sales


@pytest.fixture
def other_db(tmp_path, settings):
    target_settings = settings.model_copy(update={"SQLITE_PATH": str(tmp_path / "restored.db")})
    database = create_database(target_settings)
    init_db(database, target_settings)
    yield database
    database.close()


@pytest.fixture
def populated(db, make_item):
    item = make_item(name="Ball valve", quantity=8)
    sales.create_sale(db, SaleCreate(item_id=item.id, quantity=3, unit_price=9.0, customer_name="Ann"))
    budget.create_budget(db, BudgetCreate(category="Valves", amount=300, period="2024-03"))
    return db


def test_export_shape(populated):
    exported = backup.export_tables(populated)

    assert exported["version"] == "1.0"
    assert exported["source"] == "sqlite"
    assert set(exported["data"]) == set(backup.BUSINESS_TABLES)
    assert "users" not in exported["data"]
    row = exported["data"]["budget"][0]
    assert row["period"] == "2024-03"
    assert "month_year" not in row
    json.dumps(exported)


def test_export_can_include_users(populated):
    exported = backup.export_tables(populated, include_users=True)
    assert [u["username"] for u in exported["data"]["users"]] == ["admin"]


def test_restore_into_fresh_database(populated, other_db):
    results = backup.restore_tables(other_db, backup.export_tables(populated))

    assert results["inventory"] == {"status": "completed", "restored": 1, "total": 1}
    assert results["staff"]["status"] == "skipped"
    item = inventory.list_items(other_db)[0]
    assert (item.name, item.quantity) == ("Ball valve", 5)
    assert budget.list_budgets(other_db)[0].period == "2024-03"
    assert sales.list_sales(other_db)[0].item_name == "Ball valve"


def test_restore_replaces_existing_rows(populated, other_db, make_item):
    snapshot = backup.export_tables(populated)
    make_item(name="Temporary")

    backup.restore_tables(populated, snapshot)

    assert [i.name for i in inventory.list_items(populated)] == ["Ball valve"]


def test_restore_accepts_legacy_period_keys(other_db):
    data = {"data": {"budget": [{"id": 7, "category": "Pumps", "amount": 10, "spent": 0, "month": 2, "year": 2023}]}}

    results = backup.restore_tables(other_db, data)

    assert results["budget"]["status"] == "completed"
    assert budget.get_budget(other_db, 7).period == "2023-02"


def test_one_failing_table_does_not_stop_the_rest(other_db):
    data = {
        "data": {
            "categories": [{"id": 100, "name": "Paint"}, {"id": 101, "name": "PAINT"}],
            "staff": [{"id": 1, "name": "Sam", "status": "active"}],
        }
    }

    results = backup.restore_tables(other_db, data)

    assert results["categories"]["status"] == "failed"
    assert results["staff"] == {"status": "completed", "restored": 1, "total": 1}
    assert other_db.all("SELECT id FROM categories") == []


def test_restore_rejects_garbage(other_db):
    with pytest.raises(ValidationError):
        backup.restore_tables(other_db, {"nothing": True})


def test_migrate_between_databases(populated, other_db):
    results = backup.migrate(populated, other_db)

    assert all(r["status"] in ("completed", "skipped") for r in results.values())
    assert backup.table_counts(other_db) == backup.table_counts(populated)


def test_write_and_load_backup(populated, tmp_path):
    path = backup.write_backup(backup.export_tables(populated), str(tmp_path / "out"))
    assert backup.load_backup(str(path))["data"]["inventory"][0]["name"] == "Ball valve"


def test_read_table_rejects_unknown_names(populated):
    with pytest.raises(ValidationError):
        backup.read_table(populated, "sqlite_master")
