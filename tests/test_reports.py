from datetime import date

import pytest

from hardware_store.errors import ValidationError
from hardware_store.schemas.staff import StaffCreate
from hardware_store.services import categories, reports, staff


def _sale_on(db, item_id, when, quantity=1, unit_price=10.0, customer="Ann", staff_id=None):
    db.run(
        "INSERT INTO sales (item_id, quantity, unit_price, total_price, customer_name, staff_id, sale_date) "
        "VALUES (?, ?, ?, ?, ?, ?, ?)",
        [item_id, quantity, unit_price, quantity * unit_price, customer, staff_id, when],
    )


@pytest.fixture
def shop(db, make_item):
    tools = categories.find_category_by_name(db, "Tools")
    valves = categories.find_category_by_name(db, "Valves")
    hammer = make_item(name="Hammer", quantity=10, min_quantity=12, unit_price=8.0, category_id=tools.id, supplier="Acme")
    valve = make_item(name="Valve", quantity=4, min_quantity=0, unit_price=5.0, category_id=valves.id, supplier="Flow")
    clerk = staff.create_staff(db, StaffCreate(name="Sam"))
    _sale_on(db, hammer.id, "2024-03-01 09:00:00", quantity=2, unit_price=10.0, staff_id=clerk.id)
    _sale_on(db, hammer.id, "2024-03-01 17:30:00", quantity=1, unit_price=10.0)
    _sale_on(db, valve.id, "2024-05-10 12:00:00", quantity=3, unit_price=6.0, customer="Bob")
    _sale_on(db, valve.id, "2023-12-31 23:59:59", quantity=1, unit_price=6.0)
    return {"hammer": hammer, "valve": valve, "clerk": clerk}


def test_inventory_summary(db, shop):
    summary = reports.inventory_summary(db)

    assert summary.total_items == 2
    assert summary.total_stock == 14
    assert summary.total_value == 100.0
    # Valve has no minimum, so only the hammer counts as low
    assert summary.low_stock_items == 1


def test_low_stock_alert_matches_listing(db, shop):
    assert [a.name for a in reports.low_stock_alert(db)] == ["Hammer"]


def test_inventory_by_category(db, shop):
    by_category = {c.category: c for c in reports.inventory_by_category(db)}

    assert by_category["Tools"].total_value == 80.0
    assert by_category["Plumbing Supplies"].item_count == 0


def test_sales_by_date_range_is_inclusive(db, shop):
    report = reports.sales_by_date_range(db, date(2024, 3, 1), date(2024, 5, 10))

    assert [(d.date, d.sales_count) for d in report.items] == [(date(2024, 3, 1), 2), (date(2024, 5, 10), 1)]
    assert report.total_revenue == 48.0


def test_sales_by_date_range_rejects_reversed_dates(db):
    with pytest.raises(ValidationError):
        reports.sales_by_date_range(db, date(2024, 5, 1), date(2024, 4, 1))


def test_monthly_trend_uses_month_names(db, shop):
    trend = reports.monthly_trend(db, 2024)

    assert [(m.month, m.sales_count, m.revenue) for m in trend] == [("March", 2, 30.0), ("May", 1, 18.0)]


def test_yearly_revenue(db, shop):
    assert [(y.year, y.revenue) for y in reports.yearly_revenue(db)] == [(2023, 6.0), (2024, 48.0)]


def test_daily_sales_window(db, shop):
    days = reports.daily_sales(db, days=30, today=date(2024, 3, 15))
    assert [d.date for d in days] == [date(2024, 3, 1)]


def test_sales_by_category(db, shop):
    rows = {r.category: r.revenue for r in reports.sales_by_category(db)}
    assert rows == {"Tools": 30.0, "Valves": 24.0}


def test_customer_history(db, shop):
    history = reports.customer_history(db, "bob")
    assert [(h.item_name, h.quantity) for h in history] == [("Valve", 3)]


def test_staff_rankings_only_active(db, shop):
    rankings = reports.staff_rankings(db)
    assert [(r.staff_name, r.total_sales, r.revenue) for r in rankings] == [("Sam", 1, 20.0)]

    staff.set_status(db, shop["clerk"].id, "inactive")
    assert reports.staff_rankings(db) == []


def test_profit_margin(db, shop):
    margins = {m.name: m for m in reports.profit_margin(db)}

    assert margins["Hammer"].profit_per_unit == 2.0
    assert margins["Hammer"].profit_margin == 25.0
    assert margins["Valve"].profit_margin == 20.0


def test_supplier_performance(db, shop):
    assert [s.supplier for s in reports.supplier_performance(db)] == ["Acme", "Flow"]


def test_comprehensive(db, shop):
    report = reports.comprehensive(db)

    assert report.total_sales == 4
    assert report.total_revenue == 54.0
    assert report.active_staff == 1
    assert report.inventory.low_stock_items == 1


@pytest.mark.parametrize("year", [0, 9999])
def test_monthly_trend_rejects_years_out_of_range(db, year):
    with pytest.raises(ValidationError):
        reports.monthly_trend(db, year)
