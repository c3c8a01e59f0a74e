import pytest

from core.models.common import to_amount
from core.models.invoice import LineItem
from core.services.totals_engine import InvoiceTotalsEngine, tax_exclusive_price


def _engine(*lines, rate=0.05):
    items = [LineItem(description=f"l{i}", quantity=q, unit_price=p) for i, (q, p) in enumerate(lines)]
    return InvoiceTotalsEngine(rate, items)


def test_reference_example():
    eng = _engine((1, 1000.0), rate=0.05)
    t = eng.set_discount_percentage(10)
    assert t.subtotal == pytest.approx(1000.0)
    assert t.discount_amount == pytest.approx(100.0)
    assert t.post_discount == pytest.approx(900.0)
    assert t.tax_amount == pytest.approx(45.0)
    assert t.grand_total == pytest.approx(945.0)


def test_subtotal_is_sum_of_lines():
    eng = _engine((2, 199.5), (3, 10.0), (0, 999.0))
    assert eng.totals.subtotal == pytest.approx(2 * 199.5 + 3 * 10.0)


def test_line_items_change_keeps_percentage():
    eng = _engine((1, 100.0))
    eng.set_discount_percentage(20)
    t = eng.set_line_items([LineItem(description="x", quantity=2, unit_price=100.0)])
    assert t.discount_percentage == pytest.approx(20)
    assert t.discount_amount == pytest.approx(40.0)


@pytest.mark.parametrize("given, expected", [(150, 100.0), (-5, 0.0), (100, 100.0), (0, 0.0)])
def test_percentage_is_clamped(given, expected):
    eng = _engine((1, 500.0))
    t = eng.set_discount_percentage(given)
    assert t.discount_percentage == expected
    assert 0.0 <= t.discount_amount <= t.subtotal


def test_full_discount_zeroes_total():
    eng = _engine((1, 500.0))
    t = eng.set_discount_percentage(100)
    assert t.grand_total == pytest.approx(0.0)
    assert t.tax_amount == pytest.approx(0.0)


def test_discount_amount_inverts_to_percentage():
    eng = _engine((1, 1000.0))
    t = eng.set_discount_amount(250)
    assert t.discount_percentage == pytest.approx(25.0)
    assert t.grand_total == pytest.approx(750.0 * 1.05)
    assert eng.last_edited == "discount_amount"


def test_discount_amount_clamped_to_subtotal():
    eng = _engine((1, 1000.0))
    assert eng.set_discount_amount(5000).discount_amount == pytest.approx(1000.0)
    assert eng.set_discount_amount(-10).discount_amount == pytest.approx(0.0)


def test_grand_total_inverts_to_percentage():
    eng = _engine((1, 1000.0))
    t = eng.set_grand_total(945)
    assert t.discount_percentage == pytest.approx(10.0)
    assert t.grand_total == pytest.approx(945.0)
    assert eng.last_edited == "grand_total"


def test_infeasible_grand_total_snaps_to_nearest():
    eng = _engine((1, 1000.0))
    assert eng.set_grand_total(5000).grand_total == pytest.approx(1050.0)
    assert eng.set_grand_total(-1).grand_total == pytest.approx(0.0)


@pytest.mark.parametrize("field", ["discount_amount", "grand_total"])
def test_zero_subtotal_makes_inverse_setters_noops(field):
    eng = _engine()
    before = eng.totals
    after = eng.apply_edit(field, 50)
    assert after == before
    assert eng.last_edited == "discount_percentage"


def test_setters_are_idempotent():
    eng = _engine((3, 333.33), (1, 17.5))
    first = eng.set_discount_percentage(12.5)
    again = eng.set_discount_amount(first.discount_amount)
    assert again.discount_percentage == pytest.approx(first.discount_percentage, abs=1e-6)
    again = eng.set_grand_total(first.grand_total)
    assert again.discount_percentage == pytest.approx(first.discount_percentage, abs=1e-6)
    assert again.grand_total == pytest.approx(first.grand_total, abs=1e-6)


@pytest.mark.parametrize("raw", ["abc", "", None, float("nan"), float("inf")])
def test_non_numeric_input_reads_as_zero(raw):
    eng = _engine((1, 200.0))
    eng.set_discount_percentage(10)
    t = eng.set_discount_percentage(raw)
    assert t.discount_percentage == 0.0
    assert t.grand_total == pytest.approx(210.0)


def test_comma_decimal_input():
    eng = _engine((1, 200.0))
    assert eng.set_discount_percentage("12,5").discount_percentage == pytest.approx(12.5)


def test_apply_edit_unknown_field():
    with pytest.raises(ValueError):
        _engine((1, 1.0)).apply_edit("tax_amount", 3)  # type: ignore[arg-type]


def test_invalid_tax_rate_rejected():
    with pytest.raises(ValueError):
        InvoiceTotalsEngine(1.5)


def test_items_are_copies():
    eng = _engine((1, 10.0))
    items = eng.items
    items[0].quantity = 99
    assert eng.totals.subtotal == pytest.approx(10.0)


def test_tax_exclusive_price():
    assert tax_exclusive_price(1050.0, 0.05) == pytest.approx(1000.0)


@pytest.mark.parametrize("raw, expected", [
    ("1 499,50", 1499.5), ("₹250", 250.0), (" 7 ", 7.0), ("", 0.0), ("x", 0.0),
])
def test_amount_parsing(raw, expected):
    assert to_amount(raw) == pytest.approx(expected)
