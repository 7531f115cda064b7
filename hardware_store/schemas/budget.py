# hardware_store/schemas/budget.py
from pydantic import AliasChoices, BaseModel, Field, ConfigDict, computed_field, field_validator
from datetime import datetime
from typing import Optional, Literal

from hardware_store.utils.period import normalize_period

TransactionType = Literal["expense", "income"]


class BudgetBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True, populate_by_name=True)


class BudgetCreate(BudgetBase):
    category: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)
    spent: float = Field(0.0, ge=0)
    # Accepts the legacy "month_year" key as well
    period: str = Field(..., validation_alias=AliasChoices("period", "month_year"))

    @field_validator("period")
    @classmethod
    def _normalize_period(cls, value: str) -> str:
        return normalize_period(value)


class BudgetUpdate(BudgetBase):
    category: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, ge=0)
    spent: Optional[float] = Field(None, ge=0)
    period: Optional[str] = Field(None, validation_alias=AliasChoices("period", "month_year"))

    @field_validator("period")
    @classmethod
    def _normalize_period(cls, value: Optional[str]) -> Optional[str]:
        return normalize_period(value) if value is not None else None


class BudgetOut(BudgetBase):
    id: int
    category: str
    amount: float
    spent: float = 0.0
    period: Optional[str] = None
    created_at: Optional[datetime] = None

    @computed_field
    @property
    def remaining(self) -> float:
        return round(self.amount - self.spent, 2)


class BudgetSummary(BaseModel):
    total_budget: float
    total_spent: float
    remaining_budget: float
    total_categories: int


class BudgetVsActual(BaseModel):
    category: str
    period: str
    budget_amount: float
    actual_spent: float
    remaining: float
    percentage_used: Optional[float] = None


# ---- Transactions ----
class TransactionCreate(BudgetBase):
    type: TransactionType
    amount: float = Field(..., ge=0)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    staff_id: Optional[int] = None


class TransactionOut(BudgetBase):
    id: int
    type: str
    amount: float
    description: Optional[str] = None
    category: Optional[str] = None
    date: Optional[datetime] = None
    staff_id: Optional[int] = None
    staff_name: Optional[str] = None


class TransactionCreated(BaseModel):
    message: str = "Transaction added successfully"
    id: int
    budget_updated: bool = False
