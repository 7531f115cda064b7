"""Inventory items and the stock ledger.

``adjust_stock`` is the only place that rewrites an item's quantity outside
of a plain field edit or a sale; it clamps at zero so stock never goes
negative.
"""
import logging
from typing import Any, Dict, List

from hardware_store.database import Database
from hardware_store.errors import ItemInUse, NotFound, ValidationError
from hardware_store.schemas.inventory import (
    MAX_QUANTITY,
    InventoryItemCreate,
    InventoryItemOut,
    InventoryItemUpdate,
    LowStockItem,
)

logger = logging.getLogger(__name__)

ITEM_SELECT = """
    SELECT i.*, c.name AS category_name
    FROM inventory i
    LEFT JOIN categories c ON i.category_id = c.id
"""

# One rule for every low-stock view: items without a minimum are never "low"
LOW_STOCK_CONDITION = "i.quantity <= i.min_quantity AND i.min_quantity > 0"

# Columns that may be explicitly cleared by an update
NULLABLE_FIELDS = {"description", "category_id", "sku", "supplier", "location"}


def compute_new_quantity(current: int, operation: str, amount: int) -> int:
    if operation == "add":
        return min(MAX_QUANTITY, max(0, current + amount))
    if operation == "subtract":
        return max(0, current - amount)
    if operation == "set":
        return min(MAX_QUANTITY, max(0, amount))
    raise ValidationError("Operation must be add, subtract, or set")


def _ensure_category(db: Database, category_id) -> None:
    if category_id is None:
        return
    if db.get("SELECT id FROM categories WHERE id = ?", [category_id]) is None:
        raise NotFound("Category", category_id)


def list_items(db: Database) -> List[InventoryItemOut]:
    rows = db.all(ITEM_SELECT + " ORDER BY i.name")
    return [InventoryItemOut.model_validate(r) for r in rows]


def get_item(db: Database, item_id: int) -> InventoryItemOut:
    row = db.get(ITEM_SELECT + " WHERE i.id = ?", [item_id])
    if row is None:
        raise NotFound("Item", item_id)
    return InventoryItemOut.model_validate(row)


def search_items(db: Database, term: str) -> List[InventoryItemOut]:
    like = f"%{term.strip()}%"
    rows = db.all(
        ITEM_SELECT
        + " WHERE LOWER(i.name) LIKE LOWER(?) OR LOWER(i.description) LIKE LOWER(?)"
        + " OR LOWER(i.sku) LIKE LOWER(?) ORDER BY i.name",
        [like, like, like],
    )
    return [InventoryItemOut.model_validate(r) for r in rows]


def low_stock_items(db: Database) -> List[LowStockItem]:
    rows = db.all(
        ITEM_SELECT
        + f" WHERE {LOW_STOCK_CONDITION} ORDER BY (i.quantity - i.min_quantity) ASC, i.name"
    )
    return [LowStockItem.model_validate(r) for r in rows]


def create_item(db: Database, payload: InventoryItemCreate) -> InventoryItemOut:
    _ensure_category(db, payload.category_id)
    data = payload.model_dump()
    # sku is UNIQUE, so blank values are stored as NULL
    data["sku"] = data.get("sku") or None
    columns = list(data.keys())
    result = db.run(
        f"INSERT INTO inventory ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
        [data[c] for c in columns],
    )
    logger.info("Inventory item created: %s (id=%s)", payload.name, result.inserted_id)
    return get_item(db, result.inserted_id)


def update_item(db: Database, item_id: int, payload: InventoryItemUpdate) -> InventoryItemOut:
    fields: Dict[str, Any] = {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    if not fields:
        raise ValidationError("No fields to update")
    if "category_id" in fields:
        _ensure_category(db, fields["category_id"])

    assignments = [f"{column} = ?" for column in fields]
    assignments.append("updated_at = CURRENT_TIMESTAMP")
    result = db.run(
        f"UPDATE inventory SET {', '.join(assignments)} WHERE id = ?",
        [*fields.values(), item_id],
    )
    if result.affected_count == 0:
        raise NotFound("Item", item_id)
    return get_item(db, item_id)


def delete_item(db: Database, item_id: int) -> None:
    with db.transaction() as unit:
        usage = unit.get("SELECT COUNT(*) AS count FROM sales WHERE item_id = ?", [item_id])
        if usage and int(usage["count"]) > 0:
            raise ItemInUse("Cannot delete item - it has recorded sales")
        result = unit.run("DELETE FROM inventory WHERE id = ?", [item_id])
        if result.affected_count == 0:
            raise NotFound("Item", item_id)
    logger.info("Inventory item %s deleted", item_id)


def adjust_stock(db: Database, item_id: int, operation: str, amount: int) -> int:
    """Apply an add/subtract/set adjustment and return the new quantity."""
    with db.transaction() as unit:
        row = unit.get("SELECT quantity FROM inventory WHERE id = ?", [item_id])
        if row is None:
            raise NotFound("Item", item_id)
        new_quantity = compute_new_quantity(int(row["quantity"] or 0), operation, amount)
        unit.run(
            "UPDATE inventory SET quantity = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            [new_quantity, item_id],
        )
    logger.info("Stock %s %s on item %s -> %s", operation, amount, item_id, new_quantity)
    return new_quantity
