# hardware_store/routes/staff.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from hardware_store.database import Database, get_db
from hardware_store.schemas import staff as schemas
from hardware_store.services import staff as service
from hardware_store.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/api/staff", tags=["Staff"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[schemas.StaffOut])
def list_staff(department: Optional[str] = Query(None), db: Database = Depends(get_db)):
    return service.list_staff(db, department=department)


@router.get("/active", response_model=List[schemas.StaffOut])
def list_active_staff(db: Database = Depends(get_db)):
    return service.list_staff(db, active_only=True)


@router.get("/department/{department}", response_model=List[schemas.StaffOut])
def list_by_department(department: str, db: Database = Depends(get_db)):
    return service.list_staff(db, department=department)


@router.get("/{staff_id}", response_model=schemas.StaffOut)
def get_staff(staff_id: int, db: Database = Depends(get_db)):
    return service.get_staff(db, staff_id)


@router.get("/{staff_id}/performance", response_model=schemas.StaffPerformance)
def staff_performance(staff_id: int, db: Database = Depends(get_db)):
    return service.staff_performance(db, staff_id)


@router.post("", response_model=schemas.StaffOut, status_code=status.HTTP_201_CREATED)
def create_staff(payload: schemas.StaffCreate, db: Database = Depends(get_db)):
    return service.create_staff(db, payload)


@router.put("/{staff_id}", response_model=schemas.StaffOut)
def update_staff(staff_id: int, payload: schemas.StaffUpdate, db: Database = Depends(get_db)):
    return service.update_staff(db, staff_id, payload)


@router.patch("/{staff_id}/status", response_model=schemas.StaffOut)
def update_status(staff_id: int, payload: schemas.StatusUpdate, db: Database = Depends(get_db)):
    return service.set_status(db, staff_id, payload.status)


@router.delete("/{staff_id}")
def delete_staff(staff_id: int, db: Database = Depends(get_db)):
    service.delete_staff(db, staff_id)
    return {"message": "Staff member deleted successfully"}
