import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from hardware_store.database import Database, Row, Unit
from hardware_store.errors import BackendError, DuplicateName, NotFound, ValidationError
from hardware_store.schemas.budget import (
    BudgetCreate,
    BudgetOut,
    BudgetSummary,
    BudgetUpdate,
    BudgetVsActual,
    TransactionCreate,
    TransactionOut,
)
from hardware_store.utils.period import current_period, normalize_period

logger = logging.getLogger(__name__)

TRANSACTION_SELECT = """
    SELECT t.*, s.name AS staff_name
    FROM transactions t
    LEFT JOIN staff s ON t.staff_id = s.id
"""


def _to_budget(db: Database, row: Row) -> BudgetOut:
    data = dict(row)
    data["period"] = db.period_label(row)
    return BudgetOut.model_validate(data)


def _find(db: Database, category: str, period: str) -> Optional[Row]:
    return db.get(
        f"SELECT * FROM budget WHERE category = ? AND {db.period_clause()}",
        [category, *db.period_params(period)],
    )


# ---- Budgets ----
def list_budgets(db: Database, category: Optional[str] = None, period: Optional[str] = None) -> List[BudgetOut]:
    conditions, params = [], []
    if category:
        conditions.append("category = ?")
        params.append(category)
    if period:
        conditions.append(db.period_clause())
        params.extend(db.period_params(period))

    sql = "SELECT * FROM budget"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    budgets = [_to_budget(db, r) for r in db.all(sql, params)]
    # Newest period first, then alphabetical, the same on both backends
    budgets.sort(key=lambda b: b.category)
    budgets.sort(key=lambda b: b.period or "", reverse=True)
    return budgets


def get_budget(db: Database, budget_id: int) -> BudgetOut:
    row = db.get("SELECT * FROM budget WHERE id = ?", [budget_id])
    if row is None:
        raise NotFound("Budget", budget_id)
    return _to_budget(db, row)


def create_budget(db: Database, payload: BudgetCreate) -> BudgetOut:
    if _find(db, payload.category, payload.period) is not None:
        raise DuplicateName(f"A budget for {payload.category} in {payload.period} already exists.")

    columns = ["category", "amount", "spent", *db.period_columns]
    values = [payload.category, payload.amount, payload.spent, *db.period_params(payload.period)]
    try:
        result = db.run(
            f"INSERT INTO budget ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
            values,
        )
    except BackendError as e:
        if e.is_unique_violation:
            raise DuplicateName(f"A budget for {payload.category} in {payload.period} already exists.") from e
        raise
    return get_budget(db, result.inserted_id)


def update_budget(db: Database, budget_id: int, payload: BudgetUpdate) -> BudgetOut:
    fields: Dict[str, Any] = {k: v for k, v in payload.model_dump(exclude_unset=True).items() if v is not None}
    if not fields:
        raise ValidationError("No fields to update")

    assignments, values = [], []
    period = fields.pop("period", None)
    for column, value in fields.items():
        assignments.append(f"{column} = ?")
        values.append(value)
    if period is not None:
        assignments.extend(f"{column} = ?" for column in db.period_columns)
        values.extend(db.period_params(period))

    try:
        result = db.run(f"UPDATE budget SET {', '.join(assignments)} WHERE id = ?", [*values, budget_id])
    except BackendError as e:
        if e.is_unique_violation:
            raise DuplicateName("A budget for that category and period already exists.") from e
        raise
    if result.affected_count == 0:
        raise NotFound("Budget", budget_id)
    return get_budget(db, budget_id)


def delete_budget(db: Database, budget_id: int) -> None:
    result = db.run("DELETE FROM budget WHERE id = ?", [budget_id])
    if result.affected_count == 0:
        raise NotFound("Budget", budget_id)


def record_expense(db: Database, category: str, period: str, amount: float, unit: Optional[Unit] = None) -> int:
    """Add ``amount`` to the spent total of the category's budget for ``period``.

    Returns the number of budget rows touched; 0 when no budget exists yet,
    which is not an error.
    """
    target = unit or db
    result = target.run(
        f"UPDATE budget SET spent = spent + ? WHERE category = ? AND {db.period_clause()}",
        [amount, category, *db.period_params(period)],
    )
    if result.affected_count == 0:
        logger.debug("No budget for %s in %s, expense not tracked", category, period)
    return result.affected_count


def budget_summary(db: Database) -> BudgetSummary:
    row = db.get(
        """
        SELECT COALESCE(SUM(amount), 0) AS total_budget,
               COALESCE(SUM(spent), 0) AS total_spent,
               COUNT(*) AS total_categories
        FROM budget
        """
    )
    total_budget = float(row["total_budget"])
    total_spent = float(row["total_spent"])
    return BudgetSummary(
        total_budget=round(total_budget, 2),
        total_spent=round(total_spent, 2),
        remaining_budget=round(total_budget - total_spent, 2),
        total_categories=int(row["total_categories"]),
    )


def budget_vs_actual(db: Database, category: str, period: Optional[str] = None) -> BudgetVsActual:
    period = normalize_period(period) if period else current_period()
    row = _find(db, category, period)
    if row is None:
        raise NotFound(f"Budget for {category} in {period}")
    amount = float(row["amount"] or 0)
    spent = float(row["spent"] or 0)
    return BudgetVsActual(
        category=category,
        period=period,
        budget_amount=amount,
        actual_spent=spent,
        remaining=round(amount - spent, 2),
        percentage_used=round(spent / amount * 100, 2) if amount else None,
    )


# ---- Transactions ----
def add_transaction(db: Database, payload: TransactionCreate, now: Optional[datetime] = None) -> Tuple[int, bool]:
    """Store a ledger entry; expenses also count against this month's budget."""
    with db.transaction() as unit:
        result = unit.run(
            "INSERT INTO transactions (type, amount, description, category, staff_id) VALUES (?, ?, ?, ?, ?)",
            [payload.type, payload.amount, payload.description, payload.category, payload.staff_id],
        )
        touched = 0
        if payload.type == "expense":
            touched = record_expense(db, payload.category, current_period(now), payload.amount, unit=unit)
    return result.inserted_id, touched > 0


def list_transactions(db: Database, type: Optional[str] = None, category: Optional[str] = None) -> List[TransactionOut]:
    conditions, params = [], []
    if type:
        conditions.append("t.type = ?")
        params.append(type)
    if category:
        conditions.append("t.category = ?")
        params.append(category)

    sql = TRANSACTION_SELECT
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY t.date DESC, t.id DESC"
    return [TransactionOut.model_validate(r) for r in db.all(sql, params)]
