# hardware_store/routes/reports.py
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Path, Query

from hardware_store.database import Database, get_db
from hardware_store.schemas import reports as schemas
from hardware_store.schemas.sale import SalesSummary
from hardware_store.services import reports as service
from hardware_store.services.sales import sales_summary
from hardware_store.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/api/reports", tags=["Reports"], dependencies=[Depends(get_current_user)])


# -----------------------------
# Inventory
# -----------------------------
@router.get("/inventory-summary", response_model=schemas.InventorySummary)
def inventory_summary(db: Database = Depends(get_db)):
    return service.inventory_summary(db)


@router.get("/inventory-by-category", response_model=List[schemas.CategoryStock])
def inventory_by_category(db: Database = Depends(get_db)):
    return service.inventory_by_category(db)


@router.get("/low-stock-alert", response_model=List[schemas.LowStockAlert])
def low_stock_alert(db: Database = Depends(get_db)):
    return service.low_stock_alert(db)


@router.get("/profit-margin", response_model=List[schemas.ProfitMargin])
def profit_margin(db: Database = Depends(get_db)):
    return service.profit_margin(db)


@router.get("/supplier-performance", response_model=List[schemas.SupplierStock])
def supplier_performance(db: Database = Depends(get_db)):
    return service.supplier_performance(db)


# -----------------------------
# Sales
# -----------------------------
@router.get("/sales-summary", response_model=SalesSummary)
def report_sales_summary(db: Database = Depends(get_db)):
    return sales_summary(db)


@router.get("/sales-by-date/{start}/{end}", response_model=schemas.SalesByDateRange)
def sales_by_date(start: date, end: date, db: Database = Depends(get_db)):
    return service.sales_by_date_range(db, start, end)


@router.get("/monthly-trend/{year}", response_model=List[schemas.MonthlyTrend])
def monthly_trend(year: int = Path(..., ge=1, le=9998), db: Database = Depends(get_db)):
    return service.monthly_trend(db, year)


@router.get("/daily-sales", response_model=List[schemas.DailySales])
def daily_sales(days: int = Query(30, ge=1, le=366), db: Database = Depends(get_db)):
    return service.daily_sales(db, days=days)


@router.get("/yearly-revenue", response_model=List[schemas.YearlyRevenue])
def yearly_revenue(db: Database = Depends(get_db)):
    return service.yearly_revenue(db)


@router.get("/sales-by-category", response_model=List[schemas.CategorySales])
def sales_by_category(db: Database = Depends(get_db)):
    return service.sales_by_category(db)


@router.get("/customer-history/{customer_name}", response_model=List[schemas.CustomerPurchase])
def customer_history(customer_name: str, db: Database = Depends(get_db)):
    return service.customer_history(db, customer_name)


# -----------------------------
# Staff & dashboard
# -----------------------------
@router.get("/staff-performance", response_model=List[schemas.StaffRanking])
def staff_performance(db: Database = Depends(get_db)):
    return service.staff_rankings(db)


@router.get("/comprehensive", response_model=schemas.ComprehensiveReport)
def comprehensive(db: Database = Depends(get_db)):
    return service.comprehensive(db)
