import pytest

from hardware_store.database import (
    PostgresDatabase,
    RunResult,
    SqliteDatabase,
    to_numbered_placeholders,
    with_returning_id,
)
from hardware_store.errors import BackendError


class FakeResult:
    def __init__(self, rowcount=1, row=None):
        self.rowcount = rowcount
        self._row = row

    def first(self):
        return self._row


class FakeConnection:
    """Records what the hosted backend hands to SQLAlchemy."""

    def __init__(self, result):
        self.result = result
        self.statements = []

    def execute(self, statement, binds):
        self.statements.append((str(statement), binds))
        return self.result


# =============================================================================
# Placeholder translation
# =============================================================================

def test_placeholders_are_numbered_left_to_right():
    sql, count = to_numbered_placeholders("SELECT * FROM sales WHERE staff_id = ? AND quantity > ?")
    assert sql == "SELECT * FROM sales WHERE staff_id = :p1 AND quantity > :p2"
    assert count == 2


def test_question_mark_inside_literal_is_left_alone():
    sql, count = to_numbered_placeholders("UPDATE inventory SET notes = 'why?' WHERE id = ?")
    assert sql == "UPDATE inventory SET notes = 'why?' WHERE id = :p1"
    assert count == 1


def test_insert_gets_returning_id():
    sql, added = with_returning_id("INSERT INTO categories (name) VALUES (?)")
    assert sql.endswith("RETURNING id")
    assert added is True


def test_insert_with_returning_is_unchanged():
    original = "INSERT INTO categories (name) VALUES (?) RETURNING name"
    assert with_returning_id(original) == (original, False)


def test_update_never_gets_returning():
    original = "UPDATE inventory SET quantity = ? WHERE id = ?"
    assert with_returning_id(original) == (original, False)


# =============================================================================
# Hosted backend
# =============================================================================

def test_postgres_run_reports_inserted_id():
    db = PostgresDatabase(engine=None)
    connection = FakeConnection(FakeResult(rowcount=1, row=(42,)))

    result = db._run(connection, "INSERT INTO categories (name, description) VALUES (?, ?)", ["Tools", None])

    assert result == RunResult(affected_count=1, inserted_id=42)
    statement, binds = connection.statements[0]
    assert statement == "INSERT INTO categories (name, description) VALUES (:p1, :p2) RETURNING id"
    assert binds == {"p1": "Tools", "p2": None}


def test_postgres_update_reports_affected_rows_only():
    db = PostgresDatabase(engine=None)
    connection = FakeConnection(FakeResult(rowcount=3))

    result = db._run(connection, "UPDATE inventory SET quantity = ?", [0])

    assert result == RunResult(affected_count=3, inserted_id=None)


def test_postgres_parameter_count_mismatch():
    db = PostgresDatabase(engine=None)
    with pytest.raises(BackendError) as exc:
        db._bind("SELECT * FROM staff WHERE id = ? AND status = ?", [1])
    assert exc.value.code == "PARAMS"


def test_postgres_period_translation():
    db = PostgresDatabase(engine=None)
    assert db.period_params("2024-03") == (3, 2024)
    assert db.period_label({"month": 3, "year": 2024}) == "2024-03"
    assert db.period_clause("b") == "b.month = ? AND b.year = ?"


def test_sqlite_period_translation():
    db = SqliteDatabase(engine=None)
    assert db.period_params("2024/03") == ("2024-03",)
    assert db.period_label({"month_year": "2024-03"}) == "2024-03"
    assert db.period_clause() == "month_year = ?"


# =============================================================================
# Embedded backend
# =============================================================================

def test_sqlite_run_get_all(db):
    inserted = db.run("INSERT INTO categories (name, description) VALUES (?, ?)", ["Paint", "Interior"])
    assert inserted.affected_count == 1
    assert inserted.inserted_id is not None

    row = db.get("SELECT name, description FROM categories WHERE id = ?", [inserted.inserted_id])
    assert row == {"name": "Paint", "description": "Interior"}

    assert db.get("SELECT * FROM categories WHERE id = ?", [-1]) is None
    names = [r["name"] for r in db.all("SELECT name FROM categories ORDER BY name")]
    assert "Paint" in names

    updated = db.run("UPDATE categories SET description = ? WHERE name = ?", ["Walls", "Paint"])
    assert updated.affected_count == 1
    assert updated.inserted_id is None


def test_sqlite_unique_violation_is_reported(db):
    with pytest.raises(BackendError) as exc:
        db.run("INSERT INTO users (username, password) VALUES (?, ?)", ["admin", "x"])
    assert exc.value.is_unique_violation


def test_bad_statement_raises_backend_error(db):
    with pytest.raises(BackendError):
        db.all("SELECT * FROM no_such_table")


def test_transaction_rolls_back_on_error(db):
    with pytest.raises(RuntimeError):
        with db.transaction() as unit:
            unit.run("INSERT INTO categories (name) VALUES (?)", ["Garden"])
            raise RuntimeError("boom")

    assert db.get("SELECT id FROM categories WHERE name = ?", ["Garden"]) is None


def test_ping(db):
    db.ping()
