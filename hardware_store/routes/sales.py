# hardware_store/routes/sales.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hardware_store.database import Database, get_db
from hardware_store.schemas import sale as schemas
from hardware_store.services import sales as service
from hardware_store.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/api/sales", tags=["Sales"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[schemas.SaleOut])
def list_sales(
    start: Optional[date] = Query(None, description="First day (inclusive)"),
    end: Optional[date] = Query(None, description="Last day (inclusive)"),
    payment_method: Optional[str] = Query(None),
    staff_id: Optional[int] = Query(None),
    db: Database = Depends(get_db),
):
    return service.list_sales(db, start=start, end=end, payment_method=payment_method, staff_id=staff_id)


@router.get("/summary", response_model=schemas.SalesSummary)
def sales_summary(db: Database = Depends(get_db)):
    return service.sales_summary(db)


@router.get("/top-items", response_model=List[schemas.TopItem])
def top_items(limit: int = Query(10, ge=1, le=100), db: Database = Depends(get_db)):
    return service.top_items(db, limit=limit)


@router.get("/{sale_id}", response_model=schemas.SaleOut)
def get_sale(sale_id: int, db: Database = Depends(get_db)):
    return service.get_sale(db, sale_id)


# Record a sale and decrement stock
@router.post("", response_model=schemas.SaleCreated, status_code=status.HTTP_201_CREATED)
def create_sale(payload: schemas.SaleCreate, db: Database = Depends(get_db)):
    sale_id, new_quantity = service.create_sale(db, payload)
    return {"sale_id": sale_id, "new_quantity": new_quantity}


@router.put("/{sale_id}", response_model=schemas.SaleOut)
def update_sale(sale_id: int, payload: schemas.SaleUpdate, db: Database = Depends(get_db)):
    return service.update_sale(db, sale_id, payload)


# Delete a sale and put its quantity back on the shelf
@router.delete("/{sale_id}")
def delete_sale(sale_id: int, db: Database = Depends(get_db)):
    service.delete_sale(db, sale_id)
    return {"message": "Sale deleted successfully"}
