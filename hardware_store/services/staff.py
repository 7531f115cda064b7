import logging
from typing import Any, Dict, List, Optional

from hardware_store.database import Database
from hardware_store.errors import NotFound, ValidationError
from hardware_store.schemas.staff import (
    PerformanceSummary,
    StaffCreate,
    StaffOut,
    StaffPerformance,
    StaffSale,
    StaffUpdate,
)

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"email", "phone", "position", "department", "hire_date", "salary"}


def list_staff(db: Database, active_only: bool = False, department: Optional[str] = None) -> List[StaffOut]:
    conditions, params = [], []
    if active_only:
        conditions.append("status = ?")
        params.append("active")
    if department:
        conditions.append("department = ?")
        params.append(department)

    sql = "SELECT * FROM staff"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY name"
    return [StaffOut.model_validate(r) for r in db.all(sql, params)]


def get_staff(db: Database, staff_id: int) -> StaffOut:
    row = db.get("SELECT * FROM staff WHERE id = ?", [staff_id])
    if row is None:
        raise NotFound("Staff member", staff_id)
    return StaffOut.model_validate(row)


def create_staff(db: Database, payload: StaffCreate) -> StaffOut:
    data = payload.model_dump()
    if data.get("hire_date") is not None:
        data["hire_date"] = data["hire_date"].isoformat()
    columns = list(data.keys())
    result = db.run(
        f"INSERT INTO staff ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
        [data[c] for c in columns],
    )
    logger.info("Staff member added: %s (id=%s)", payload.name, result.inserted_id)
    return get_staff(db, result.inserted_id)


def update_staff(db: Database, staff_id: int, payload: StaffUpdate) -> StaffOut:
    fields: Dict[str, Any] = {
        k: v
        for k, v in payload.model_dump(exclude_unset=True).items()
        if v is not None or k in NULLABLE_FIELDS
    }
    if not fields:
        raise ValidationError("No fields to update")
    if fields.get("hire_date") is not None:
        fields["hire_date"] = fields["hire_date"].isoformat()

    assignments = ", ".join(f"{column} = ?" for column in fields)
    result = db.run(f"UPDATE staff SET {assignments} WHERE id = ?", [*fields.values(), staff_id])
    if result.affected_count == 0:
        raise NotFound("Staff member", staff_id)
    return get_staff(db, staff_id)


def set_status(db: Database, staff_id: int, status: str) -> StaffOut:
    if status not in ("active", "inactive", "terminated"):
        raise ValidationError("Status must be active, inactive, or terminated")
    result = db.run("UPDATE staff SET status = ? WHERE id = ?", [status, staff_id])
    if result.affected_count == 0:
        raise NotFound("Staff member", staff_id)
    logger.info("Staff member %s is now %s", staff_id, status)
    return get_staff(db, staff_id)


def delete_staff(db: Database, staff_id: int) -> None:
    result = db.run("DELETE FROM staff WHERE id = ?", [staff_id])
    if result.affected_count == 0:
        raise NotFound("Staff member", staff_id)
    logger.info("Staff member %s deleted", staff_id)


def staff_performance(db: Database, staff_id: int) -> StaffPerformance:
    get_staff(db, staff_id)
    rows = db.all(
        """
        SELECT s.id AS sale_id, s.sale_date, i.name AS item_name,
               s.quantity, s.total_price, s.customer_name
        FROM sales s
        LEFT JOIN inventory i ON s.item_id = i.id
        WHERE s.staff_id = ?
        ORDER BY s.sale_date DESC, s.id DESC
        """,
        [staff_id],
    )
    sales = [StaffSale.model_validate(r) for r in rows]
    summary = PerformanceSummary(
        total_sales=round(sum(s.total_price for s in sales), 2),
        total_items=sum(s.quantity for s in sales),
        total_transactions=len(sales),
    )
    return StaffPerformance(staff_id=staff_id, sales=sales, summary=summary)
