"""
Read-only aggregates for the dashboard and report pages.

Anything bucketed by day, month or year is grouped here in Python on parsed
datetimes rather than with backend date functions, so both backends return
the same shapes.
"""
import calendar
import logging
from collections import OrderedDict
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from hardware_store.database import Database, Row
from hardware_store.errors import ValidationError
from hardware_store.schemas.reports import (
    CategorySales,
    CategoryStock,
    ComprehensiveReport,
    CustomerPurchase,
    DailySales,
    InventorySummary,
    LowStockAlert,
    MonthlyTrend,
    ProfitMargin,
    SalesByDateRange,
    StaffRanking,
    SupplierStock,
    YearlyRevenue,
)
from hardware_store.services.budget import budget_summary
from hardware_store.services.inventory import LOW_STOCK_CONDITION

logger = logging.getLogger(__name__)


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        logger.warning("Unparseable timestamp in sales: %r", value)
        return None


def _money(value: Any) -> float:
    return round(float(value or 0), 2)


def _sales_between(db: Database, start: Optional[date] = None, end: Optional[date] = None) -> List[Row]:
    """Sale rows with sale_date in [start, end], both days inclusive."""
    conditions, params = [], []
    if start is not None:
        conditions.append("sale_date >= ?")
        params.append(start.isoformat())
    if end is not None:
        conditions.append("sale_date < ?")
        params.append((end + timedelta(days=1)).isoformat())
    sql = "SELECT id, sale_date, quantity, total_price FROM sales"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    return db.all(sql, params)


def _bucket_by_day(rows: Iterable[Row]) -> List[DailySales]:
    buckets: Dict[date, Dict[str, Any]] = {}
    for row in rows:
        sold_at = _as_datetime(row["sale_date"])
        if sold_at is None:
            continue
        bucket = buckets.setdefault(sold_at.date(), {"sales_count": 0, "revenue": 0.0, "items_sold": 0})
        bucket["sales_count"] += 1
        bucket["revenue"] += float(row["total_price"] or 0)
        bucket["items_sold"] += int(row["quantity"] or 0)
    return [
        DailySales(date=day, sales_count=b["sales_count"], revenue=round(b["revenue"], 2), items_sold=b["items_sold"])
        for day, b in sorted(buckets.items())
    ]


# ---- Inventory ----
def inventory_summary(db: Database) -> InventorySummary:
    row = db.get(
        f"""
        SELECT COUNT(*) AS total_items,
               COALESCE(SUM(i.quantity), 0) AS total_stock,
               COALESCE(SUM(i.quantity * i.unit_price), 0) AS total_value,
               COALESCE(SUM(CASE WHEN {LOW_STOCK_CONDITION} THEN 1 ELSE 0 END), 0) AS low_stock_items
        FROM inventory i
        """
    )
    return InventorySummary(
        total_items=int(row["total_items"]),
        total_stock=int(row["total_stock"]),
        total_value=_money(row["total_value"]),
        low_stock_items=int(row["low_stock_items"]),
    )


def inventory_by_category(db: Database) -> List[CategoryStock]:
    rows = db.all(
        """
        SELECT c.name AS category,
               COUNT(i.id) AS item_count,
               COALESCE(SUM(i.quantity), 0) AS total_stock,
               COALESCE(SUM(i.quantity * i.unit_price), 0) AS total_value
        FROM categories c
        LEFT JOIN inventory i ON c.id = i.category_id
        GROUP BY c.id, c.name
        ORDER BY total_value DESC, c.name
        """
    )
    return [
        CategoryStock(
            category=r["category"],
            item_count=int(r["item_count"]),
            total_stock=int(r["total_stock"]),
            total_value=_money(r["total_value"]),
        )
        for r in rows
    ]


def supplier_performance(db: Database) -> List[SupplierStock]:
    rows = db.all(
        """
        SELECT supplier,
               COUNT(*) AS items_count,
               COALESCE(SUM(quantity), 0) AS total_stock,
               COALESCE(SUM(quantity * unit_price), 0) AS total_value
        FROM inventory
        WHERE supplier IS NOT NULL AND supplier <> ''
        GROUP BY supplier
        ORDER BY total_value DESC
        """
    )
    return [
        SupplierStock(
            supplier=r["supplier"],
            items_count=int(r["items_count"]),
            total_stock=int(r["total_stock"]),
            total_value=_money(r["total_value"]),
        )
        for r in rows
    ]


def profit_margin(db: Database) -> List[ProfitMargin]:
    rows = db.all(
        """
        SELECT i.id AS item_id, i.name, i.unit_price, AVG(s.unit_price) AS avg_sale_price
        FROM inventory i
        JOIN sales s ON i.id = s.item_id
        GROUP BY i.id, i.name, i.unit_price
        """
    )
    margins = []
    for r in rows:
        cost = float(r["unit_price"] or 0)
        avg_price = float(r["avg_sale_price"] or 0)
        per_unit = avg_price - cost
        margins.append(
            ProfitMargin(
                item_id=r["item_id"],
                name=r["name"],
                unit_price=round(cost, 2),
                avg_sale_price=round(avg_price, 2),
                profit_per_unit=round(per_unit, 2),
                profit_margin=round(per_unit / cost * 100, 2) if cost else None,
            )
        )
    margins.sort(key=lambda m: m.profit_margin if m.profit_margin is not None else float("-inf"), reverse=True)
    return margins


def low_stock_alert(db: Database) -> List[LowStockAlert]:
    rows = db.all(
        f"""
        SELECT i.name, i.quantity, i.min_quantity, c.name AS category_name
        FROM inventory i
        LEFT JOIN categories c ON i.category_id = c.id
        WHERE {LOW_STOCK_CONDITION}
        ORDER BY i.quantity ASC, i.name
        """
    )
    return [LowStockAlert.model_validate(r) for r in rows]


# ---- Sales ----
def sales_by_date_range(db: Database, start: date, end: date) -> SalesByDateRange:
    if end < start:
        raise ValidationError("End date must not be before start date")
    days = _bucket_by_day(_sales_between(db, start, end))
    return SalesByDateRange(
        items=days,
        total_revenue=round(sum(d.revenue for d in days), 2),
        date_from=start,
        date_to=end,
    )


def daily_sales(db: Database, days: int = 30, today: Optional[date] = None) -> List[DailySales]:
    """Per-day totals for the last ``days`` days, newest first."""
    today = today or date.today()
    buckets = _bucket_by_day(_sales_between(db, today - timedelta(days=days), today))
    return list(reversed(buckets))[:days]


def monthly_trend(db: Database, year: int) -> List[MonthlyTrend]:
    """Revenue per month of ``year``; months without sales are left out."""
    if not 1 <= year <= 9998:
        raise ValidationError(f"Year out of range: {year}")
    rows = _sales_between(db, date(year, 1, 1), date(year, 12, 31))
    months: Dict[int, Dict[str, Any]] = OrderedDict()
    for row in rows:
        sold_at = _as_datetime(row["sale_date"])
        if sold_at is None:
            continue
        bucket = months.setdefault(sold_at.month, {"revenue": 0.0, "sales_count": 0})
        bucket["revenue"] += float(row["total_price"] or 0)
        bucket["sales_count"] += 1
    return [
        MonthlyTrend(month=calendar.month_name[m], revenue=round(b["revenue"], 2), sales_count=b["sales_count"])
        for m, b in sorted(months.items())
    ]


def yearly_revenue(db: Database) -> List[YearlyRevenue]:
    years: Dict[int, Dict[str, Any]] = {}
    for row in _sales_between(db):
        sold_at = _as_datetime(row["sale_date"])
        if sold_at is None:
            continue
        bucket = years.setdefault(sold_at.year, {"revenue": 0.0, "sales_count": 0})
        bucket["revenue"] += float(row["total_price"] or 0)
        bucket["sales_count"] += 1
    return [
        YearlyRevenue(year=y, revenue=round(b["revenue"], 2), sales_count=b["sales_count"])
        for y, b in sorted(years.items())
    ]


def sales_by_category(db: Database) -> List[CategorySales]:
    rows = db.all(
        """
        SELECT c.name AS category,
               COALESCE(SUM(s.total_price), 0) AS revenue,
               COUNT(s.id) AS sales_count
        FROM sales s
        JOIN inventory i ON s.item_id = i.id
        JOIN categories c ON i.category_id = c.id
        GROUP BY c.id, c.name
        ORDER BY revenue DESC
        """
    )
    return [
        CategorySales(category=r["category"], revenue=_money(r["revenue"]), sales_count=int(r["sales_count"]))
        for r in rows
    ]


def customer_history(db: Database, customer_name: str) -> List[CustomerPurchase]:
    rows = db.all(
        """
        SELECT s.sale_date, i.name AS item_name, s.quantity, s.total_price, s.payment_method
        FROM sales s
        LEFT JOIN inventory i ON s.item_id = i.id
        WHERE LOWER(s.customer_name) LIKE LOWER(?)
        ORDER BY s.sale_date DESC, s.id DESC
        """,
        [f"%{customer_name.strip()}%"],
    )
    return [CustomerPurchase.model_validate(r) for r in rows]


# ---- Staff ----
def staff_rankings(db: Database) -> List[StaffRanking]:
    rows = db.all(
        """
        SELECT st.id AS staff_id, st.name AS staff_name,
               COUNT(s.id) AS total_sales,
               COALESCE(SUM(s.total_price), 0) AS revenue,
               COALESCE(AVG(s.total_price), 0) AS average_sale,
               COALESCE(SUM(s.quantity), 0) AS items_sold
        FROM staff st
        LEFT JOIN sales s ON st.id = s.staff_id
        WHERE st.status = ?
        GROUP BY st.id, st.name
        ORDER BY revenue DESC, st.name
        """,
        ["active"],
    )
    return [
        StaffRanking(
            staff_id=r["staff_id"],
            staff_name=r["staff_name"],
            total_sales=int(r["total_sales"]),
            revenue=_money(r["revenue"]),
            average_sale=_money(r["average_sale"]),
            items_sold=int(r["items_sold"]),
        )
        for r in rows
    ]


def comprehensive(db: Database, now: Optional[datetime] = None) -> ComprehensiveReport:
    sales = db.get(
        """
        SELECT COUNT(*) AS total_sales,
               COALESCE(SUM(total_price), 0) AS total_revenue,
               COALESCE(AVG(total_price), 0) AS average_sale
        FROM sales
        """
    )
    staff = db.get("SELECT COUNT(*) AS active_staff FROM staff WHERE status = ?", ["active"])
    budget = budget_summary(db)
    return ComprehensiveReport(
        inventory=inventory_summary(db),
        total_sales=int(sales["total_sales"]),
        total_revenue=_money(sales["total_revenue"]),
        average_sale=_money(sales["average_sale"]),
        active_staff=int(staff["active_staff"]),
        budget_total=budget.total_budget,
        budget_spent=budget.total_spent,
        timestamp=now or datetime.utcnow(),
    )
