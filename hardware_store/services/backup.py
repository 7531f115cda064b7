"""
JSON export / restore of the business tables, and migration between backends.

Exports are backend-neutral: budget rows carry a ``period`` label instead of
``month_year`` or ``month``/``year``, and the restoring backend maps it back
onto its own columns.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from fastapi.encoders import jsonable_encoder

from hardware_store.database import Database, Row
from hardware_store.errors import BackendError, ValidationError
from hardware_store.utils.period import format_period

logger = logging.getLogger(__name__)

BACKUP_VERSION = "1.0"

# Parents first; restore deletes in the reverse order
BUSINESS_TABLES = ["categories", "staff", "inventory", "sales", "budget", "transactions"]

TABLE_COLUMNS: Dict[str, List[str]] = {
    "users": ["id", "username", "email", "password", "role", "created_at"],
    "categories": ["id", "name", "description", "created_at"],
    "staff": ["id", "name", "email", "phone", "position", "department", "hire_date", "salary", "status", "created_at"],
    "inventory": [
        "id", "name", "description", "category_id", "sku", "quantity", "min_quantity",
        "unit_price", "supplier", "location", "created_at", "updated_at",
    ],
    "sales": [
        "id", "item_id", "quantity", "unit_price", "total_price", "customer_name",
        "customer_phone", "staff_id", "sale_date", "payment_method", "notes",
    ],
    "budget": ["id", "category", "amount", "spent", "created_at"],
    "transactions": ["id", "type", "amount", "description", "category", "date", "staff_id"],
}


def tables_for(include_users: bool = False) -> List[str]:
    return (["users"] if include_users else []) + BUSINESS_TABLES


def _portable_budget(db: Database, row: Row) -> Row:
    data = {k: v for k, v in row.items() if k not in ("month_year", "month", "year")}
    data["period"] = db.period_label(row)
    return data


def _record_period(record: Dict[str, Any]) -> Optional[str]:
    if record.get("period"):
        return record["period"]
    if record.get("month_year"):
        return record["month_year"]
    if record.get("month") is not None and record.get("year") is not None:
        return format_period(record["year"], record["month"])
    return None


def read_table(db: Database, table: str, limit: Optional[int] = None) -> List[Row]:
    if table not in TABLE_COLUMNS:
        raise ValidationError("Invalid table name")
    sql = f"SELECT * FROM {table} ORDER BY id"
    params: List[Any] = []
    if limit is not None:
        sql += " LIMIT ?"
        params.append(limit)
    rows = db.all(sql, params)
    if table == "budget":
        rows = [_portable_budget(db, r) for r in rows]
    return rows


def export_tables(db: Database, include_users: bool = False, source: Optional[str] = None) -> Dict[str, Any]:
    backup: Dict[str, Any] = {
        "timestamp": datetime.utcnow().isoformat(),
        "version": BACKUP_VERSION,
        "source": source or db.dialect,
        "data": {},
    }
    for table in tables_for(include_users):
        try:
            backup["data"][table] = read_table(db, table)
        except BackendError as e:
            logger.warning("Could not back up %s: %s", table, e.message)
            backup["data"][table] = []
    return jsonable_encoder(backup)


def table_counts(db: Database) -> List[Dict[str, Any]]:
    counts = []
    for table in BUSINESS_TABLES:
        row = db.get(f"SELECT COUNT(*) AS count FROM {table}")
        counts.append({"table": table, "count": int(row["count"]) if row else 0})
    return counts


def _insert_rows(db: Database, unit, table: str, records: Sequence[Dict[str, Any]]) -> int:
    allowed = TABLE_COLUMNS[table]
    for record in records:
        columns = [c for c in allowed if c in record]
        values = [record[c] for c in columns]
        if table == "budget":
            period = _record_period(record)
            if period is None:
                raise ValidationError(f"Budget row {record.get('id')} has no period")
            columns.extend(db.period_columns)
            values.extend(db.period_params(period))
        unit.run(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join('?' for _ in columns)})",
            values,
        )
    db.after_restore(unit, table)
    return len(records)


def restore_tables(db: Database, backup: Dict[str, Any], include_users: bool = False) -> Dict[str, Dict[str, Any]]:
    """Replace the business tables with the rows in ``backup``.

    Each table is cleared and refilled on its own; a failing table is
    reported and the others still go through.
    """
    data = (backup or {}).get("data")
    if not isinstance(data, dict):
        raise ValidationError("Invalid backup data format")

    tables = tables_for(include_users)
    for table in reversed(tables):
        try:
            db.run(f"DELETE FROM {table}")
        except BackendError as e:
            logger.warning("Could not clear %s: %s", table, e.message)

    results: Dict[str, Dict[str, Any]] = {}
    for table in tables:
        records = data.get(table) or []
        if not records:
            results[table] = {"status": "skipped", "restored": 0, "total": 0}
            continue
        try:
            with db.transaction() as unit:
                restored = _insert_rows(db, unit, table, records)
            results[table] = {"status": "completed", "restored": restored, "total": len(records)}
            logger.info("Restored %s rows into %s", restored, table)
        except (BackendError, ValidationError) as e:
            logger.error("Restore of %s failed: %s", table, e.message)
            results[table] = {"status": "failed", "restored": 0, "total": len(records), "error": e.message}
    return results


def migrate(source: Database, target: Database, include_users: bool = False) -> Dict[str, Dict[str, Any]]:
    logger.info("Migrating data from %s to %s", source.dialect, target.dialect)
    return restore_tables(target, export_tables(source, include_users=include_users), include_users=include_users)


def write_backup(backup: Dict[str, Any], directory: str) -> Path:
    path = Path(directory)
    path.mkdir(parents=True, exist_ok=True)
    target = path / f"backup-{datetime.utcnow().strftime('%Y-%m-%d-%H%M%S')}.json"
    target.write_text(json.dumps(backup, indent=2), encoding="utf-8")
    return target


def load_backup(file_path: str) -> Dict[str, Any]:
    with open(file_path, encoding="utf-8") as fh:
        return json.load(fh)
