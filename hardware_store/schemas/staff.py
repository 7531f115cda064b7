# hardware_store/schemas/staff.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import date, datetime
from typing import List, Optional, Literal

StaffStatus = Literal["active", "inactive", "terminated"]


class StaffBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)


class StaffCreate(StaffBase):
    name: str = Field(..., min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None
    salary: Optional[float] = Field(None, ge=0)


class StaffUpdate(StaffBase):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None
    salary: Optional[float] = Field(None, ge=0)
    status: Optional[StaffStatus] = None


class StaffOut(StaffBase):
    id: int
    name: str
    # Stored as plain text, so rows written before validation existed are still readable
    email: Optional[str] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    hire_date: Optional[date] = None
    salary: Optional[float] = None
    status: Optional[str] = "active"
    created_at: Optional[datetime] = None


class StatusUpdate(BaseModel):
    status: StaffStatus


class StaffSale(BaseModel):
    sale_id: int
    sale_date: Optional[datetime] = None
    item_name: Optional[str] = None
    quantity: int
    total_price: float
    customer_name: Optional[str] = None


class PerformanceSummary(BaseModel):
    total_sales: float
    total_items: int
    total_transactions: int


class StaffPerformance(BaseModel):
    staff_id: int
    sales: List[StaffSale]
    summary: PerformanceSummary
