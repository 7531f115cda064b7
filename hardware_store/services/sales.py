"""
Sale recording coupled with the stock it consumes.

Creating a sale checks stock, inserts the sale and decrements the item in one
unit of work, so a failure part-way leaves neither the sale nor the
decrement behind. Deleting a sale puts its quantity back on the item.
Updating a sale never touches stock.
"""
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from hardware_store.database import Database
from hardware_store.errors import InsufficientStock, NotFound, ValidationError
from hardware_store.schemas.sale import SaleCreate, SaleOut, SalesSummary, SaleUpdate, TopItem

logger = logging.getLogger(__name__)

SALE_SELECT = """
    SELECT s.*, i.name AS item_name, st.name AS staff_name
    FROM sales s
    LEFT JOIN inventory i ON s.item_id = i.id
    LEFT JOIN staff st ON s.staff_id = st.id
"""

NULLABLE_FIELDS = {"customer_phone", "staff_id", "payment_method", "notes"}


def _total(quantity, unit_price) -> float:
    return round(int(quantity) * float(unit_price), 2)


def create_sale(db: Database, payload: SaleCreate) -> Tuple[int, int]:
    """Record a sale and take its quantity off the shelf.

    Returns (sale_id, item quantity after the sale).

    Raises:
        NotFound: the item (or the given staff member) does not exist
        InsufficientStock: more units requested than are on hand
    """
    total_price = _total(payload.quantity, payload.unit_price)

    with db.transaction() as unit:
        item = unit.get("SELECT id, quantity FROM inventory WHERE id = ?", [payload.item_id])
        if item is None:
            raise NotFound("Item", payload.item_id)

        available = int(item["quantity"] or 0)
        if payload.quantity > available:
            raise InsufficientStock(payload.item_id, payload.quantity, available)

        if payload.staff_id is not None:
            if unit.get("SELECT id FROM staff WHERE id = ?", [payload.staff_id]) is None:
                raise NotFound("Staff member", payload.staff_id)

        result = unit.run(
            """
            INSERT INTO sales (item_id, quantity, unit_price, total_price, customer_name,
                               customer_phone, staff_id, payment_method, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                payload.item_id,
                payload.quantity,
                payload.unit_price,
                total_price,
                payload.customer_name,
                payload.customer_phone,
                payload.staff_id,
                payload.payment_method,
                payload.notes,
            ],
        )
        # The stock check above already guarantees this cannot go negative
        unit.run(
            "UPDATE inventory SET quantity = quantity - ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            [payload.quantity, payload.item_id],
        )

    new_quantity = available - payload.quantity
    logger.info(
        "Sale #%s recorded: item %s x%s, stock %s -> %s",
        result.inserted_id, payload.item_id, payload.quantity, available, new_quantity,
    )
    return result.inserted_id, new_quantity


def delete_sale(db: Database, sale_id: int) -> None:
    with db.transaction() as unit:
        sale = unit.get("SELECT item_id, quantity FROM sales WHERE id = ?", [sale_id])
        if sale is None:
            raise NotFound("Sale", sale_id)

        unit.run("DELETE FROM sales WHERE id = ?", [sale_id])
        unit.run(
            "UPDATE inventory SET quantity = quantity + ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            [sale["quantity"], sale["item_id"]],
        )
    logger.info("Sale #%s deleted, %s units returned to item %s", sale_id, sale["quantity"], sale["item_id"])


def update_sale(db: Database, sale_id: int, payload: SaleUpdate) -> SaleOut:
    fields: Dict[str, Any] = {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    if not fields:
        raise ValidationError("No fields to update")

    with db.transaction() as unit:
        current = unit.get("SELECT quantity, unit_price FROM sales WHERE id = ?", [sale_id])
        if current is None:
            raise NotFound("Sale", sale_id)

        if "quantity" in fields or "unit_price" in fields:
            fields["total_price"] = _total(
                fields.get("quantity", current["quantity"]),
                fields.get("unit_price", current["unit_price"]),
            )

        assignments = ", ".join(f"{column} = ?" for column in fields)
        unit.run(f"UPDATE sales SET {assignments} WHERE id = ?", [*fields.values(), sale_id])

    return get_sale(db, sale_id)


def get_sale(db: Database, sale_id: int) -> SaleOut:
    row = db.get(SALE_SELECT + " WHERE s.id = ?", [sale_id])
    if row is None:
        raise NotFound("Sale", sale_id)
    return SaleOut.model_validate(row)


def list_sales(
    db: Database,
    start: Optional[date] = None,
    end: Optional[date] = None,
    payment_method: Optional[str] = None,
    staff_id: Optional[int] = None,
) -> List[SaleOut]:
    """Newest first; ``end`` is inclusive of the whole day."""
    conditions, params = [], []
    if start is not None:
        conditions.append("s.sale_date >= ?")
        params.append(start.isoformat())
    if end is not None:
        conditions.append("s.sale_date < ?")
        params.append((end + timedelta(days=1)).isoformat())
    if payment_method:
        conditions.append("s.payment_method = ?")
        params.append(payment_method)
    if staff_id is not None:
        conditions.append("s.staff_id = ?")
        params.append(staff_id)

    sql = SALE_SELECT
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY s.sale_date DESC, s.id DESC"
    return [SaleOut.model_validate(r) for r in db.all(sql, params)]


def sales_summary(db: Database) -> SalesSummary:
    row = db.get(
        """
        SELECT COUNT(*) AS total_sales,
               COALESCE(SUM(total_price), 0) AS total_revenue,
               COALESCE(SUM(quantity), 0) AS total_items_sold,
               COALESCE(AVG(total_price), 0) AS average_sale_value
        FROM sales
        """
    )
    return SalesSummary(
        total_sales=int(row["total_sales"]),
        total_revenue=round(float(row["total_revenue"]), 2),
        total_items_sold=int(row["total_items_sold"]),
        average_sale_value=round(float(row["average_sale_value"]), 2),
    )


def top_items(db: Database, limit: int = 10) -> List[TopItem]:
    rows = db.all(
        """
        SELECT s.item_id AS item_id,
               i.name AS item_name,
               SUM(s.quantity) AS total_quantity_sold,
               SUM(s.total_price) AS total_revenue,
               COUNT(s.id) AS number_of_sales
        FROM sales s
        JOIN inventory i ON s.item_id = i.id
        GROUP BY s.item_id, i.name
        ORDER BY total_quantity_sold DESC
        LIMIT ?
        """,
        [limit],
    )
    return [
        TopItem(
            item_id=r["item_id"],
            item_name=r["item_name"],
            total_quantity_sold=int(r["total_quantity_sold"] or 0),
            total_revenue=round(float(r["total_revenue"] or 0), 2),
            number_of_sales=int(r["number_of_sales"]),
        )
        for r in rows
    ]
