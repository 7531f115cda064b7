from datetime import datetime

import pytest

from hardware_store.errors import DuplicateName, NotFound
from hardware_store.schemas.budget import BudgetCreate, BudgetUpdate, TransactionCreate
from hardware_store.services import budget
from hardware_store.utils.period import current_period


def _budget(db, category="Tools", amount=1000.0, period="2024-03", spent=0.0):
    return budget.create_budget(db, BudgetCreate(category=category, amount=amount, period=period, spent=spent))


def test_record_expense_increments_spent(db):
    created = _budget(db)

    touched = budget.record_expense(db, "Tools", "2024-03", 150.0)

    assert touched == 1
    assert budget.get_budget(db, created.id).spent == 150.0


def test_record_expense_without_budget_is_noop(db):
    _budget(db, period="2024-03")

    assert budget.record_expense(db, "Tools", "2024-04", 150.0) == 0
    assert budget.record_expense(db, "Valves", "2024-03", 150.0) == 0
    assert budget.budget_summary(db).total_spent == 0


def test_period_accepts_legacy_key_and_formats(db):
    created = budget.create_budget(db, BudgetCreate(category="Pumps", amount=50, month_year="2024/07"))
    assert created.period == "2024-07"


def test_duplicate_budget_for_period(db):
    _budget(db)
    with pytest.raises(DuplicateName):
        _budget(db, amount=5)


def test_summary(db):
    _budget(db, category="Tools", amount=1000, spent=250)
    _budget(db, category="Valves", amount=500, spent=100)

    summary = budget.budget_summary(db)

    assert summary.total_budget == 1500
    assert summary.total_spent == 350
    assert summary.remaining_budget == 1150
    assert summary.total_categories == 2


def test_empty_summary(db):
    summary = budget.budget_summary(db)
    assert (summary.total_budget, summary.total_spent, summary.total_categories) == (0, 0, 0)


def test_list_sorted_newest_period_first(db):
    _budget(db, category="Valves", period="2024-02")
    _budget(db, category="Tools", period="2024-03")
    _budget(db, category="Pumps", period="2024-03")

    listed = [(b.period, b.category) for b in budget.list_budgets(db)]

    assert listed == [("2024-03", "Pumps"), ("2024-03", "Tools"), ("2024-02", "Valves")]
    assert [b.category for b in budget.list_budgets(db, period="2024-02")] == ["Valves"]


def test_update_and_delete(db):
    created = _budget(db)

    updated = budget.update_budget(db, created.id, BudgetUpdate(amount=1200, period="2024-05"))
    assert updated.amount == 1200
    assert updated.period == "2024-05"
    assert updated.remaining == 1200

    budget.delete_budget(db, created.id)
    with pytest.raises(NotFound):
        budget.get_budget(db, created.id)


def test_expense_transaction_updates_current_budget(db):
    period = current_period()
    created = _budget(db, category="Tools", period=period)

    transaction_id, updated = budget.add_transaction(
        db, TransactionCreate(type="expense", amount=150.0, description="Drill bits", category="Tools")
    )

    assert transaction_id is not None
    assert updated is True
    assert budget.get_budget(db, created.id).spent == 150.0


def test_income_transaction_leaves_budget(db):
    period = current_period()
    created = _budget(db, category="Tools", period=period)

    _, updated = budget.add_transaction(
        db, TransactionCreate(type="income", amount=90.0, description="Refund", category="Tools")
    )

    assert updated is False
    assert budget.get_budget(db, created.id).spent == 0


def test_expense_without_budget_is_still_recorded(db):
    _, updated = budget.add_transaction(
        db,
        TransactionCreate(type="expense", amount=10.0, description="Coffee", category="Other"),
        now=datetime(2023, 1, 5),
    )

    assert updated is False
    assert [t.description for t in budget.list_transactions(db, type="expense")] == ["Coffee"]


def test_budget_vs_actual(db):
    _budget(db, amount=200, spent=50, period="2024-03")

    report = budget.budget_vs_actual(db, "Tools", "2024-03")

    assert report.remaining == 150
    assert report.percentage_used == 25.0
    with pytest.raises(NotFound):
        budget.budget_vs_actual(db, "Tools", "2024-04")
