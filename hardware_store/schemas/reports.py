# hardware_store/schemas/reports.py
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel

# Schemas for stock reporting
class InventorySummary(BaseModel):
    total_items: int
    total_stock: int
    total_value: float
    low_stock_items: int

class CategoryStock(BaseModel):
    category: str
    item_count: int
    total_stock: int
    total_value: float

class SupplierStock(BaseModel):
    supplier: str
    items_count: int
    total_stock: int
    total_value: float

class ProfitMargin(BaseModel):
    item_id: int
    name: str
    unit_price: float
    avg_sale_price: float
    profit_per_unit: float
    profit_margin: Optional[float] = None

class LowStockAlert(BaseModel):
    name: str
    quantity: int
    min_quantity: int
    category_name: Optional[str] = None

# Schemas for sales reporting
class DailySales(BaseModel):
    date: date
    sales_count: int
    revenue: float
    items_sold: int

class MonthlyTrend(BaseModel):
    month: str
    revenue: float
    sales_count: int

class YearlyRevenue(BaseModel):
    year: int
    revenue: float
    sales_count: int

class CategorySales(BaseModel):
    category: str
    revenue: float
    sales_count: int

class CustomerPurchase(BaseModel):
    sale_date: Optional[datetime] = None
    item_name: Optional[str] = None
    quantity: int
    total_price: float
    payment_method: Optional[str] = None

class StaffRanking(BaseModel):
    staff_id: int
    staff_name: str
    total_sales: int
    revenue: float
    average_sale: float
    items_sold: int

# Dashboard
class ComprehensiveReport(BaseModel):
    inventory: InventorySummary
    total_sales: int
    total_revenue: float
    average_sale: float
    active_staff: int
    budget_total: float
    budget_spent: float
    timestamp: datetime

class SalesByDateRange(BaseModel):
    items: List[DailySales]
    total_revenue: float
    date_from: date
    date_to: date
