# hardware_store/schemas/inventory.py
from pydantic import BaseModel, Field, ConfigDict, computed_field
from datetime import datetime
from typing import Optional, List, Literal

# Largest quantity both backends store in an INTEGER column
MAX_QUANTITY = 2**31 - 1


# Base configuration shared by all row-backed models
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, str_strip_whitespace=True)


# ---- Categories ----
class CategoryCreate(ORMBase):
    name: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = None


class CategoryUpdate(ORMBase):
    name: str = Field(..., min_length=2, max_length=50)
    description: Optional[str] = None


class CategoryOut(ORMBase):
    id: int
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None


# ---- Inventory items ----
class InventoryItemBase(ORMBase):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    category_id: Optional[int] = None
    sku: Optional[str] = None
    quantity: int = Field(0, ge=0, le=MAX_QUANTITY)
    min_quantity: int = Field(0, ge=0, le=MAX_QUANTITY)
    unit_price: float = Field(0.0, ge=0)
    supplier: Optional[str] = None
    location: Optional[str] = None


# Schema for creating a new inventory item
class InventoryItemCreate(InventoryItemBase):
    pass


# Schema for partial item updates - all fields optional
class InventoryItemUpdate(ORMBase):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category_id: Optional[int] = None
    sku: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    min_quantity: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    unit_price: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None
    location: Optional[str] = None


class InventoryItemOut(InventoryItemBase):
    id: int
    category_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @computed_field
    @property
    def is_low_stock(self) -> bool:
        return self.min_quantity > 0 and self.quantity <= self.min_quantity


# ---- Stock adjustments ----
StockOperation = Literal["add", "subtract", "set"]


class StockAdjust(BaseModel):
    quantity: int = Field(..., ge=0, le=MAX_QUANTITY)
    operation: StockOperation


class StockAdjustResult(BaseModel):
    message: str = "Stock updated successfully"
    item_id: int
    new_quantity: int


class LowStockItem(ORMBase):
    id: int
    name: str
    sku: Optional[str] = None
    quantity: int
    min_quantity: int
    category_name: Optional[str] = None


class ItemList(BaseModel):
    items: List[InventoryItemOut]
    total: int
