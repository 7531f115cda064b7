# hardware_store/routes/auth.py
from fastapi import APIRouter, Depends, status

from hardware_store.config import Settings
from hardware_store.database import Database, get_db
from hardware_store.schemas import user as schemas
from hardware_store.services import users as service
from hardware_store.utils.tokenJWT import create_access_token, get_current_user, get_settings, role_required

router = APIRouter(prefix="/api/auth", tags=["Auth"])


# Authenticate user and issue JWT token
@router.post("/login", response_model=schemas.Token)
def login(payload: schemas.UserLogin, db: Database = Depends(get_db), settings: Settings = Depends(get_settings)):
    user = service.authenticate(db, payload.username, payload.password)
    access_token = create_access_token(data={"sub": user.username, "role": user.role}, settings=settings)
    return {"access_token": access_token, "token_type": "bearer", "user": user}


# Register a new user (administrators only)
@router.post("/register", response_model=schemas.UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: schemas.UserCreate,
    db: Database = Depends(get_db),
    current_user: schemas.UserResponse = Depends(role_required("admin")),
):
    return service.create_user(db, payload)


# Retrieve current authenticated user details
@router.get("/me", response_model=schemas.UserResponse)
def me(current_user: schemas.UserResponse = Depends(get_current_user)):
    return current_user


@router.post("/change-password")
def change_password(
    payload: schemas.PasswordChange,
    db: Database = Depends(get_db),
    current_user: schemas.UserResponse = Depends(get_current_user),
):
    service.change_password(db, current_user.id, payload.current_password, payload.new_password)
    return {"message": "Password changed successfully"}
