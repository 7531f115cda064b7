# hardware_store/routes/backup.py
from datetime import datetime
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from hardware_store.database import Database, get_db
from hardware_store.errors import ValidationError
from hardware_store.services import backup as service
from hardware_store.utils.tokenJWT import get_current_user, role_required

router = APIRouter(prefix="/api/backup", tags=["Backup"], dependencies=[Depends(get_current_user)])


# Full JSON export as a file download
@router.get("/download")
def download(db: Database = Depends(get_db)):
    backup = service.export_tables(db)
    filename = f"backup-{datetime.utcnow().strftime('%Y-%m-%d')}.json"
    return JSONResponse(
        content=backup,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/info")
def info(db: Database = Depends(get_db)):
    tables = service.table_counts(db)
    return {
        "timestamp": datetime.utcnow().isoformat(),
        "source": db.dialect,
        "tables": tables,
        "total_records": sum(t["count"] for t in tables),
    }


# First 100 rows of one business table
@router.get("/view/{table}")
def view_table(table: str, db: Database = Depends(get_db)):
    if table not in service.BUSINESS_TABLES:
        raise ValidationError("Invalid table name")
    rows = service.read_table(db, table, limit=100)
    return {"table": table, "count": len(rows), "data": rows}


@router.post("/restore", dependencies=[Depends(role_required("admin"))])
def restore(backup: Dict[str, Any] = Body(...), db: Database = Depends(get_db)):
    results = service.restore_tables(db, backup)
    return {
        "message": "Database restore completed",
        "timestamp": datetime.utcnow().isoformat(),
        "results": results,
    }
