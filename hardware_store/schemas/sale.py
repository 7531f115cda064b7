# hardware_store/schemas/sale.py
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional

from hardware_store.schemas.inventory import MAX_QUANTITY


class SaleBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)


# Schema for recording a new sale
class SaleCreate(SaleBase):
    item_id: int
    quantity: int = Field(..., ge=1, le=MAX_QUANTITY)
    unit_price: float = Field(..., ge=0)
    customer_name: str = Field(..., min_length=1)
    customer_phone: Optional[str] = None
    staff_id: Optional[int] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


# Partial update - stock is never touched by an update
class SaleUpdate(SaleBase):
    quantity: Optional[int] = Field(None, ge=1, le=MAX_QUANTITY)
    unit_price: Optional[float] = Field(None, ge=0)
    customer_name: Optional[str] = Field(None, min_length=1)
    customer_phone: Optional[str] = None
    staff_id: Optional[int] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None


class SaleOut(SaleBase):
    id: int
    item_id: Optional[int] = None
    item_name: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    staff_id: Optional[int] = None
    staff_name: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    sale_date: Optional[datetime] = None


class SaleCreated(BaseModel):
    message: str = "Sale recorded successfully"
    sale_id: int
    new_quantity: int


class SalesSummary(BaseModel):
    total_sales: int
    total_revenue: float
    total_items_sold: int
    average_sale_value: float


class TopItem(BaseModel):
    item_id: int
    item_name: str
    total_quantity_sold: int
    total_revenue: float
    number_of_sales: int
