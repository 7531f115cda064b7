import logging
from typing import List, Optional

from hardware_store.database import Database
from hardware_store.errors import BackendError, CategoryInUse, DuplicateName, NotFound
from hardware_store.schemas.inventory import CategoryCreate, CategoryOut, CategoryUpdate

logger = logging.getLogger(__name__)


def _duplicate(name: str) -> DuplicateName:
    return DuplicateName(f'A category with the name "{name}" already exists.')


def list_categories(db: Database, name: Optional[str] = None) -> List[CategoryOut]:
    if name:
        rows = db.all(
            "SELECT * FROM categories WHERE LOWER(TRIM(name)) = LOWER(?) ORDER BY name",
            [name.strip()],
        )
    else:
        rows = db.all("SELECT * FROM categories ORDER BY name")
    return [CategoryOut.model_validate(r) for r in rows]


def get_category(db: Database, category_id: int) -> CategoryOut:
    row = db.get("SELECT * FROM categories WHERE id = ?", [category_id])
    if row is None:
        raise NotFound("Category", category_id)
    return CategoryOut.model_validate(row)


def find_category_by_name(db: Database, name: str) -> Optional[CategoryOut]:
    """Case-insensitive lookup on the trimmed name."""
    row = db.get("SELECT * FROM categories WHERE LOWER(TRIM(name)) = LOWER(?)", [name.strip()])
    return CategoryOut.model_validate(row) if row else None


def create_category(db: Database, payload: CategoryCreate) -> CategoryOut:
    name = payload.name.strip()
    if find_category_by_name(db, name) is not None:
        raise _duplicate(name)

    description = (payload.description or "").strip() or None
    try:
        result = db.run(
            "INSERT INTO categories (name, description) VALUES (?, ?)", [name, description]
        )
    except BackendError as e:
        # Another request inserted the same name between the check and the insert
        if e.is_unique_violation:
            raise _duplicate(name) from e
        raise
    logger.info("Category created: %s", name)
    return get_category(db, result.inserted_id)


def update_category(db: Database, category_id: int, payload: CategoryUpdate) -> CategoryOut:
    name = payload.name.strip()
    clash = find_category_by_name(db, name)
    if clash is not None and clash.id != category_id:
        raise _duplicate(name)

    try:
        result = db.run(
            "UPDATE categories SET name = ?, description = ? WHERE id = ?",
            [name, payload.description, category_id],
        )
    except BackendError as e:
        if e.is_unique_violation:
            raise _duplicate(name) from e
        raise
    if result.affected_count == 0:
        raise NotFound("Category", category_id)
    return get_category(db, category_id)


def delete_category(db: Database, category_id: int) -> None:
    with db.transaction() as unit:
        usage = unit.get(
            "SELECT COUNT(*) AS count FROM inventory WHERE category_id = ?", [category_id]
        )
        if usage and int(usage["count"]) > 0:
            raise CategoryInUse(
                "Cannot delete category - it is being used by inventory items"
            )
        result = unit.run("DELETE FROM categories WHERE id = ?", [category_id])
        if result.affected_count == 0:
            raise NotFound("Category", category_id)
    logger.info("Category %s deleted", category_id)
