# hardware_store/routes/inventory.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hardware_store.database import Database, get_db
from hardware_store.schemas import inventory as schemas
from hardware_store.services import categories as category_service
from hardware_store.services import inventory as service
from hardware_store.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/api/inventory", tags=["Inventory"], dependencies=[Depends(get_current_user)])


# =========================
# Categories
# =========================
@router.get("/categories", response_model=List[schemas.CategoryOut])
def list_categories(name: Optional[str] = Query(None), db: Database = Depends(get_db)):
    return category_service.list_categories(db, name=name)


@router.get("/categories/{category_id}", response_model=schemas.CategoryOut)
def get_category(category_id: int, db: Database = Depends(get_db)):
    return category_service.get_category(db, category_id)


@router.post("/categories", response_model=schemas.CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(payload: schemas.CategoryCreate, db: Database = Depends(get_db)):
    return category_service.create_category(db, payload)


@router.put("/categories/{category_id}", response_model=schemas.CategoryOut)
def update_category(category_id: int, payload: schemas.CategoryUpdate, db: Database = Depends(get_db)):
    return category_service.update_category(db, category_id, payload)


@router.delete("/categories/{category_id}")
def delete_category(category_id: int, db: Database = Depends(get_db)):
    category_service.delete_category(db, category_id)
    return {"message": "Category deleted successfully"}


# =========================
# Items
# =========================
@router.get("", response_model=List[schemas.InventoryItemOut])
def list_items(db: Database = Depends(get_db)):
    return service.list_items(db)


@router.get("/search", response_model=List[schemas.InventoryItemOut])
def search_items(q: str = Query(..., min_length=1), db: Database = Depends(get_db)):
    return service.search_items(db, q)


@router.get("/low-stock", response_model=List[schemas.LowStockItem])
def low_stock(db: Database = Depends(get_db)):
    return service.low_stock_items(db)


@router.get("/{item_id}", response_model=schemas.InventoryItemOut)
def get_item(item_id: int, db: Database = Depends(get_db)):
    return service.get_item(db, item_id)


@router.post("", response_model=schemas.InventoryItemOut, status_code=status.HTTP_201_CREATED)
def create_item(payload: schemas.InventoryItemCreate, db: Database = Depends(get_db)):
    return service.create_item(db, payload)


@router.put("/{item_id}", response_model=schemas.InventoryItemOut)
def update_item(item_id: int, payload: schemas.InventoryItemUpdate, db: Database = Depends(get_db)):
    return service.update_item(db, item_id, payload)


@router.delete("/{item_id}")
def delete_item(item_id: int, db: Database = Depends(get_db)):
    service.delete_item(db, item_id)
    return {"message": "Item deleted successfully"}


# Stock adjustment: add / subtract / set, never below zero
@router.patch("/{item_id}/stock", response_model=schemas.StockAdjustResult)
def adjust_stock(item_id: int, payload: schemas.StockAdjust, db: Database = Depends(get_db)):
    new_quantity = service.adjust_stock(db, item_id, payload.operation, payload.quantity)
    return {"item_id": item_id, "new_quantity": new_quantity}
