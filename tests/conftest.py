import pytest

from core.models.product import Product
from core.services.inventory_service import InventoryService
from core.services.invoice_service import InvoiceService
from core.services.settings_service import SettingsService


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    d = tmp_path / "data"
    d.mkdir()
    monkeypatch.setenv("POS_DATA_DIR", str(d))
    # pas de wkhtmltopdf réel pendant les tests
    monkeypatch.delenv("WKHTMLTOPDF", raising=False)
    monkeypatch.delenv("WKHTMLTOPDF_PATH", raising=False)
    return d


@pytest.fixture
def settings(data_dir):
    return SettingsService(data_dir)


@pytest.fixture
def inventory(data_dir):
    return InventoryService(data_dir=data_dir)


@pytest.fixture
def invoices(data_dir, settings, inventory):
    return InvoiceService(data_dir=data_dir, settings=settings, inventory=inventory)


@pytest.fixture
def shirt(inventory):
    return inventory.add_product(Product(
        name="Chemise lin", barcode="8901234500011", unique_product_code="CH-001",
        price=1050.0, cost=600.0, quantity=3,
    ))


@pytest.fixture
def scarf(inventory):
    return inventory.add_product(Product(
        name="Foulard soie", barcode="8901234500028", unique_product_code="FO-001",
        price=525.0, cost=200.0, quantity=1,
    ))
