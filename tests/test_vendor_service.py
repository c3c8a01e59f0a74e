import pytest

from core.models.vendor import Vendor
from core.services.vendor_service import VendorService


@pytest.fixture
def vendors(data_dir):
    return VendorService(data_dir=data_dir)


def _weaver(**kw):
    data = dict(
        name="Tisserands de Phulia", contact="9830012345",
        sourcing_details="Tant coton, Nadia", fabric_cost=350.0, stitching_cost=120.0,
    )
    data.update(kw)
    return Vendor(**data)


def test_add_and_list(vendors):
    v = vendors.add_vendor(_weaver())
    (listed,) = vendors.list_vendors()
    assert listed.id == v.id
    assert listed.total_cost == pytest.approx(470.0)
    assert listed.notes == ""


@pytest.mark.parametrize("field,value", [
    ("name", "A"),
    ("contact", "98300"),
    ("sourcing_details", "ab"),
    ("fabric_cost", -1.0),
    ("stitching_cost", -0.5),
])
def test_vendor_validation(field, value):
    with pytest.raises(ValueError):
        _weaver(**{field: value})


def test_update_vendor(vendors):
    v = vendors.add_vendor(_weaver())
    updated = vendors.update_vendor(v.id, stitching_cost=150.0, notes="Livraison lente")
    assert vendors.get_vendor(v.id).stitching_cost == 150.0
    assert updated.notes == "Livraison lente"
    with pytest.raises(ValueError):
        vendors.update_vendor(v.id, contact="123")
    with pytest.raises(ValueError):
        vendors.update_vendor("missing", notes="x")


def test_delete_vendor(vendors):
    v = vendors.add_vendor(_weaver())
    assert vendors.delete_vendor(v.id) is True
    assert vendors.list_vendors() == []
    assert vendors.delete_vendor(v.id) is False


def test_invalid_rows_are_skipped(vendors):
    v = vendors.add_vendor(_weaver())
    vendors.repo.add({"id": "bad", "name": "X"})
    assert [x.id for x in vendors.list_vendors()] == [v.id]
