from hardware_store.schema import DEFAULT_CATEGORIES, apply_upgrades, init_db, seed_defaults
from hardware_store.utils.hashing import verify_password

from conftest import ADMIN_PASSWORD


def _count(db, table):
    return db.get(f"SELECT COUNT(*) AS count FROM {table}")["count"]


def test_init_creates_tables_and_seeds(db):
    names = {r["name"] for r in db.all("SELECT name FROM categories")}
    assert names == set(DEFAULT_CATEGORIES)
    for table in ("users", "staff", "inventory", "sales", "budget", "transactions"):
        assert _count(db, table) >= 0


def test_init_is_idempotent(db, settings):
    init_db(db, settings)
    init_db(db, settings)

    assert _count(db, "categories") == len(DEFAULT_CATEGORIES)
    assert _count(db, "users") == 1


def test_seed_skips_categories_present_in_other_case(db, settings):
    db.run("DELETE FROM categories WHERE name = ?", ["Tools"])
    db.run("INSERT INTO categories (name) VALUES (?)", ["TOOLS"])

    seed_defaults(db, settings)

    rows = db.all("SELECT name FROM categories WHERE LOWER(name) = ?", ["tools"])
    assert [r["name"] for r in rows] == ["TOOLS"]


def test_admin_password_is_hashed(db):
    admin = db.get("SELECT password, role FROM users WHERE username = ?", ["admin"])
    assert admin["role"] == "admin"
    assert admin["password"] != ADMIN_PASSWORD
    assert verify_password(ADMIN_PASSWORD, admin["password"])


def test_failing_upgrades_are_swallowed(db):
    # Every column already exists, so the ADD COLUMN statements fail quietly
    applied = apply_upgrades(db)
    assert applied < 7
