# hardware_store/errors.py
from typing import Optional

# Unique-constraint diagnostic codes reported by each backend
UNIQUE_VIOLATION_CODES = {"SQLITE_CONSTRAINT_UNIQUE", "23505"}


class StoreError(Exception):
    """Base class for every error a service can report to its caller."""
    kind = "Error"

    def __init__(self, message: str = ""):
        self.message = message or self.kind
        super().__init__(self.message)


class BackendError(StoreError):
    """A statement failed inside the persistence backend."""
    kind = "Database error"

    def __init__(self, message: str, code: Optional[str] = None, unique_violation: bool = False):
        super().__init__(message)
        self.code = code
        self.unique_violation = unique_violation

    @property
    def is_unique_violation(self) -> bool:
        return self.unique_violation or self.code in UNIQUE_VIOLATION_CODES


class NotFound(StoreError):
    kind = "Not found"

    def __init__(self, entity: str, entity_id=None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found")


class ValidationError(StoreError, ValueError):
    kind = "Validation failed"


class InsufficientStock(StoreError):
    kind = "Insufficient stock"

    def __init__(self, item_id: int, requested: int, available: int):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient stock for item {item_id}: requested {requested}, available {available}"
        )


class DuplicateName(StoreError):
    kind = "Name already exists"


class CategoryInUse(StoreError):
    kind = "Category in use"


class AuthError(StoreError):
    kind = "Invalid credentials"


class ItemInUse(StoreError):
    kind = "Item in use"
