import logging
from typing import Optional

from hardware_store.database import Database
from hardware_store.errors import AuthError, BackendError, DuplicateName, NotFound, ValidationError
from hardware_store.schemas.user import UserCreate, UserResponse
from hardware_store.utils.hashing import get_password_hash, verify_password

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, username, role, email, created_at"


def get_user_by_username(db: Database, username: str) -> Optional[UserResponse]:
    row = db.get(f"SELECT {USER_COLUMNS} FROM users WHERE username = ?", [username])
    return UserResponse.model_validate(row) if row else None


def get_user(db: Database, user_id: int) -> UserResponse:
    row = db.get(f"SELECT {USER_COLUMNS} FROM users WHERE id = ?", [user_id])
    if row is None:
        raise NotFound("User", user_id)
    return UserResponse.model_validate(row)


def authenticate(db: Database, username: str, password: str) -> UserResponse:
    row = db.get("SELECT * FROM users WHERE username = ?", [username.strip()])
    if row is None or not verify_password(password, row["password"]):
        logger.warning("Failed login for %s", username)
        raise AuthError("Invalid username or password")
    return UserResponse.model_validate(row)


def create_user(db: Database, payload: UserCreate) -> UserResponse:
    username = payload.username.strip()
    if get_user_by_username(db, username) is not None:
        raise DuplicateName("Username already exists")
    try:
        result = db.run(
            "INSERT INTO users (username, email, password, role) VALUES (?, ?, ?, ?)",
            [username, payload.email, get_password_hash(payload.password), payload.role],
        )
    except BackendError as e:
        if e.is_unique_violation:
            raise DuplicateName("Username already exists") from e
        raise
    logger.info("User registered: %s (%s)", username, payload.role)
    return get_user(db, result.inserted_id)


def change_password(db: Database, user_id: int, current_password: str, new_password: str) -> None:
    row = db.get("SELECT password FROM users WHERE id = ?", [user_id])
    if row is None:
        raise NotFound("User", user_id)
    if not verify_password(current_password, row["password"]):
        raise ValidationError("Current password is incorrect")
    db.run("UPDATE users SET password = ? WHERE id = ?", [get_password_hash(new_password), user_id])
    logger.info("Password changed for user %s", user_id)
