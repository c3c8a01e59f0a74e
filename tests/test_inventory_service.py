import csv

import pytest

from core.models.invoice import LineItem
from core.models.product import Product


def test_add_and_find(inventory, shirt):
    assert inventory.get_product(shirt.id).name == "Chemise lin"
    assert inventory.find_by_barcode(" 8901234500011 ").id == shirt.id
    assert inventory.find_by_barcode("CH-001").id == shirt.id
    assert inventory.find_by_barcode("nope") is None
    assert inventory.find_by_barcode("") is None


def test_unique_code_wins_over_barcode(inventory, shirt):
    clone = inventory.restock(shirt.id, "CH-002")
    assert inventory.find_by_barcode("CH-002").id == clone.id


def test_duplicate_barcode_rejected(inventory, shirt):
    with pytest.raises(ValueError):
        inventory.add_product(Product(name="Autre", barcode=shirt.barcode))


def test_update_and_quantity_clamp(inventory, shirt):
    p = inventory.update_product(shirt.id, price=1200.0)
    assert p.price == 1200.0
    assert inventory.set_quantity(shirt.id, -4).quantity == 0
    with pytest.raises(ValueError):
        inventory.update_product("missing", price=1.0)


def test_bulk_operations(inventory, shirt, scarf):
    updated = inventory.bulk_update([shirt.id, scarf.id], sale_percentage=20.0)
    assert all(p.sale_percentage == 20.0 for p in updated)
    assert inventory.bulk_remove([shirt.id, scarf.id, "ghost"]) == 2
    assert inventory.list_products() == []


def test_delete_product(inventory, shirt):
    assert inventory.delete_product(shirt.id) is True
    assert inventory.delete_product(shirt.id) is False


def test_restock_same_code_increments(inventory, shirt):
    p = inventory.restock(shirt.id, "CH-001")
    assert p.id == shirt.id
    assert p.quantity == 4


def test_restock_new_code_clones(inventory, shirt):
    clone = inventory.restock(shirt.id, "CH-777")
    assert clone.id != shirt.id
    assert clone.quantity == 1
    assert clone.name == shirt.name
    assert clone.price == shirt.price
    assert len(inventory.list_products()) == 2
    with pytest.raises(ValueError):
        inventory.restock(shirt.id, "   ")


def test_sold_out_lists_zero_stock(inventory, shirt, scarf):
    assert inventory.sold_out() == []
    inventory.set_quantity(scarf.id, 0)
    assert [p.id for p in inventory.sold_out()] == [scarf.id]


def test_remove_sold_out(inventory, shirt, scarf):
    inventory.set_quantity(scarf.id, 0)
    assert inventory.remove_sold_out() == 1
    assert [p.id for p in inventory.list_products()] == [shirt.id]
    assert inventory.remove_sold_out() == 0


def test_restock_sold_item(inventory, scarf):
    inventory.set_quantity(scarf.id, 0)
    again = inventory.restock(scarf.id, "FO-001")
    assert again.quantity == 1
    fresh = inventory.restock(scarf.id, "FO-002")
    assert fresh.id != scarf.id and fresh.quantity == 1
    assert inventory.sold_out() == []


def test_decrement_stock_floors_at_zero(inventory, shirt, scarf):
    inventory.decrement_stock([
        LineItem(description="a", quantity=2, unit_price=1.0, product_id=shirt.id),
        LineItem(description="b", quantity=5, unit_price=1.0, product_id=scarf.id),
        LineItem(description="libre", quantity=1, unit_price=1.0),
    ])
    assert inventory.get_product(shirt.id).quantity == 1
    assert inventory.get_product(scarf.id).quantity == 0


def test_import_csv_adds_and_updates(inventory, shirt, tmp_path):
    path = tmp_path / "stock.csv"
    path.write_text(
        "barcode,name,price,cost,uniqueProductCode,quantity\n"
        f"{shirt.barcode},Chemise lin bleue,\"1100,00\",600,CH-001,7\n"
        "8901234500099,Ceinture,300,120,CE-001,\n",
        encoding="utf-8",
    )
    assert inventory.import_csv(path) == (1, 1)
    updated = inventory.get_product(shirt.id)
    assert updated.name == "Chemise lin bleue"
    assert updated.price == 1100.0
    assert updated.quantity == 7
    belt = inventory.find_by_barcode("8901234500099")
    assert belt.quantity == 1
    assert belt.unique_product_code == "CE-001"


def test_import_csv_missing_columns(inventory, tmp_path):
    path = tmp_path / "bad.csv"
    path.write_text("barcode,name\n1,x\n", encoding="utf-8")
    with pytest.raises(ValueError, match="price"):
        inventory.import_csv(path)


def test_export_csv(inventory, shirt, tmp_path):
    out = inventory.export_csv(tmp_path / "out" / "inv.csv")
    with open(out, encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert rows == [{
        "product_id": shirt.id, "product_name": "Chemise lin", "quantity": "3",
        "price": "1050.00", "barcode": shirt.barcode,
    }]


def test_export_csv_empty(inventory, tmp_path):
    with pytest.raises(ValueError):
        inventory.export_csv(tmp_path / "inv.csv")


def test_stats_and_top(inventory, shirt, scarf):
    inventory.set_quantity(scarf.id, 0)
    assert inventory.stats() == {"total_products": 2, "total_items": 3, "out_of_stock": 1}
    assert inventory.top_stocked(1) == [("Chemise lin", 3)]


def test_invalid_rows_are_skipped(inventory, shirt):
    inventory.repo.add({"id": "broken", "name": "x"})
    assert [p.id for p in inventory.list_products()] == [shirt.id]
