import pytest

from hardware_store.errors import CategoryInUse, DuplicateName, ItemInUse, NotFound, ValidationError
from hardware_store.schemas.inventory import CategoryCreate, CategoryUpdate, InventoryItemUpdate
from hardware_store.schemas.sale import SaleCreate
from hardware_store.services import categories, inventory, sales


# =============================================================================
# Stock ledger
# =============================================================================

@pytest.mark.parametrize(
    "current, operation, amount, expected",
    [
        (10, "add", 5, 15),
        (10, "add", -25, 0),
        (10, "subtract", 3, 7),
        (10, "subtract", 15, 0),
        (10, "set", 4, 4),
        (10, "set", -2, 0),
    ],
)
def test_compute_new_quantity(current, operation, amount, expected):
    assert inventory.compute_new_quantity(current, operation, amount) == expected


def test_unknown_operation():
    with pytest.raises(ValidationError):
        inventory.compute_new_quantity(10, "multiply", 2)


def test_adjust_stock_subtract_clamps_at_zero(db, make_item):
    item = make_item(quantity=10)

    assert inventory.adjust_stock(db, item.id, "subtract", 15) == 0
    assert inventory.get_item(db, item.id).quantity == 0


def test_adjust_stock_negative_add_never_goes_below_zero(db, make_item):
    item = make_item(quantity=10)

    assert inventory.adjust_stock(db, item.id, "add", -25) == 0
    assert inventory.list_items(db)[0].quantity == 0


def test_adjust_stock_refreshes_updated_at(db, make_item):
    item = make_item(quantity=10)
    db.run("UPDATE inventory SET updated_at = ? WHERE id = ?", ["2000-01-01 00:00:00", item.id])

    inventory.adjust_stock(db, item.id, "add", 1)

    assert inventory.get_item(db, item.id).updated_at.year > 2000


def test_adjust_stock_unknown_item(db):
    with pytest.raises(NotFound):
        inventory.adjust_stock(db, 9999, "add", 1)


# =============================================================================
# Items
# =============================================================================

def test_create_item_with_category(db, make_item):
    tools = categories.find_category_by_name(db, "tools")
    item = make_item(name="Pipe wrench", category_id=tools.id, sku="PW-1")

    assert item.category_name == "Tools"
    assert item.sku == "PW-1"


def test_create_item_unknown_category(db, make_item):
    with pytest.raises(NotFound):
        make_item(category_id=9999)


def test_update_item_partial(db, make_item):
    item = make_item(quantity=5)

    updated = inventory.update_item(db, item.id, InventoryItemUpdate(unit_price=20.0, location="A1"))

    assert updated.unit_price == 20.0
    assert updated.location == "A1"
    assert updated.quantity == 5


def test_update_item_empty_payload(db, make_item):
    item = make_item()
    with pytest.raises(ValidationError):
        inventory.update_item(db, item.id, InventoryItemUpdate())


def test_update_missing_item(db):
    with pytest.raises(NotFound):
        inventory.update_item(db, 9999, InventoryItemUpdate(name="Ghost"))


def test_low_stock_rule(db, make_item):
    make_item(name="Washers", quantity=2, min_quantity=5)
    make_item(name="Bolts", quantity=5, min_quantity=5)
    make_item(name="Nails", quantity=0, min_quantity=0)
    make_item(name="Screws", quantity=50, min_quantity=5)

    names = {i.name for i in inventory.low_stock_items(db)}

    assert names == {"Washers", "Bolts"}


def test_search_items(db, make_item):
    make_item(name="Copper pipe", description="15mm")
    make_item(name="Drill", sku="DR-15")
    make_item(name="Saw")

    names = {i.name for i in inventory.search_items(db, "15")}

    assert names == {"Copper pipe", "Drill"}


def test_delete_item(db, make_item):
    item = make_item()
    inventory.delete_item(db, item.id)
    with pytest.raises(NotFound):
        inventory.get_item(db, item.id)


def test_item_with_sales_cannot_be_deleted(db, make_item):
    item = make_item(quantity=10)
    sales.create_sale(db, SaleCreate(item_id=item.id, quantity=2, unit_price=1.0, customer_name="Jo"))

    with pytest.raises(ItemInUse):
        inventory.delete_item(db, item.id)
    assert inventory.get_item(db, item.id).quantity == 8


# =============================================================================
# Categories
# =============================================================================

def test_duplicate_category_is_case_insensitive(db):
    with pytest.raises(DuplicateName):
        categories.create_category(db, CategoryCreate(name="tools "))


def test_create_category_trims_name(db):
    created = categories.create_category(db, CategoryCreate(name="  Garden  ", description=" Outdoor "))

    assert created.name == "Garden"
    assert categories.list_categories(db, name="GARDEN")[0].id == created.id


def test_rename_category_onto_existing_name(db):
    garden = categories.create_category(db, CategoryCreate(name="Garden"))
    with pytest.raises(DuplicateName):
        categories.update_category(db, garden.id, CategoryUpdate(name="Valves"))


def test_category_in_use_cannot_be_deleted(db, make_item):
    tools = categories.find_category_by_name(db, "Tools")
    make_item(category_id=tools.id)

    with pytest.raises(CategoryInUse):
        categories.delete_category(db, tools.id)
    assert categories.get_category(db, tools.id).name == "Tools"


def test_delete_unused_category(db):
    other = categories.find_category_by_name(db, "Other")
    categories.delete_category(db, other.id)

    with pytest.raises(NotFound):
        categories.delete_category(db, other.id)
