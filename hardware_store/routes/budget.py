# hardware_store/routes/budget.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hardware_store.database import Database, get_db
from hardware_store.schemas import budget as schemas
from hardware_store.services import budget as service
from hardware_store.utils.period import normalize_period
from hardware_store.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/api/budget", tags=["Budget"], dependencies=[Depends(get_current_user)])


# =========================
# Budgets
# =========================
@router.get("", response_model=List[schemas.BudgetOut])
def list_budgets(
    category: Optional[str] = Query(None),
    period: Optional[str] = Query(None, description="YYYY-MM"),
    db: Database = Depends(get_db),
):
    return service.list_budgets(db, category=category, period=normalize_period(period) if period else None)


@router.get("/summary", response_model=schemas.BudgetSummary)
def budget_summary(db: Database = Depends(get_db)):
    return service.budget_summary(db)


@router.get("/vs-actual/{category}", response_model=schemas.BudgetVsActual)
def budget_vs_actual(category: str, period: Optional[str] = Query(None), db: Database = Depends(get_db)):
    return service.budget_vs_actual(db, category, period)


# =========================
# Transactions
# =========================
@router.get("/transactions", response_model=List[schemas.TransactionOut])
def list_transactions(
    type: Optional[schemas.TransactionType] = Query(None),
    category: Optional[str] = Query(None),
    db: Database = Depends(get_db),
):
    return service.list_transactions(db, type=type, category=category)


@router.post("/transactions", response_model=schemas.TransactionCreated, status_code=status.HTTP_201_CREATED)
def add_transaction(payload: schemas.TransactionCreate, db: Database = Depends(get_db)):
    transaction_id, budget_updated = service.add_transaction(db, payload)
    return {"id": transaction_id, "budget_updated": budget_updated}


@router.get("/{budget_id}", response_model=schemas.BudgetOut)
def get_budget(budget_id: int, db: Database = Depends(get_db)):
    return service.get_budget(db, budget_id)


@router.post("", response_model=schemas.BudgetOut, status_code=status.HTTP_201_CREATED)
def create_budget(payload: schemas.BudgetCreate, db: Database = Depends(get_db)):
    return service.create_budget(db, payload)


@router.put("/{budget_id}", response_model=schemas.BudgetOut)
def update_budget(budget_id: int, payload: schemas.BudgetUpdate, db: Database = Depends(get_db)):
    return service.update_budget(db, budget_id, payload)


@router.delete("/{budget_id}")
def delete_budget(budget_id: int, db: Database = Depends(get_db)):
    service.delete_budget(db, budget_id)
    return {"message": "Budget deleted successfully"}
