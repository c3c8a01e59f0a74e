import json

import pytest

from core.models.settings import DEFAULT_INVOICE_START_NUMBER, ShopSettings
from core.services.settings_service import SettingsService, default_data_dir


def test_defaults_when_missing(settings):
    s = settings.load()
    assert s.currency_symbol == "₹"
    assert s.tax_rate_for("standard") == 0.05
    assert s.scanner.gap_ms == 50
    assert s.price_tags.per_page == 12
    assert settings.peek_invoice_number() == DEFAULT_INVOICE_START_NUMBER


def test_corrupt_or_invalid_file_falls_back(settings):
    settings.path.write_text("{not json", encoding="utf-8")
    assert settings.load() == ShopSettings()
    settings.path.write_text(json.dumps({"tax_rates": {"standard": 3}}), encoding="utf-8")
    assert settings.load().tax_rate_for("standard") == 0.05


def test_save_roundtrip(settings):
    s = settings.load()
    s.shop.name = "Boutique Asha"
    s.tax_rates["custom"] = 0.12
    settings.save(s)
    again = settings.load()
    assert again.shop.name == "Boutique Asha"
    assert again.tax_rate_for("custom") == 0.12


def test_unknown_invoice_type():
    with pytest.raises(ValueError):
        ShopSettings().tax_rate_for("credit_note")


def test_invoice_numbering(settings):
    assert settings.next_invoice_number() == DEFAULT_INVOICE_START_NUMBER
    assert settings.next_invoice_number() == DEFAULT_INVOICE_START_NUMBER + 1
    assert settings.reset_invoice_number(500) == 500
    assert settings.next_invoice_number() == 500
    assert settings.reset_invoice_number() == DEFAULT_INVOICE_START_NUMBER
    with pytest.raises(ValueError):
        settings.reset_invoice_number(0)


def test_data_dir_from_env(data_dir):
    assert default_data_dir() == data_dir
    assert SettingsService().path == data_dir / "settings.json"


def test_find_wkhtmltopdf(settings, tmp_path, monkeypatch):
    fake = tmp_path / "wkhtmltopdf"
    fake.write_text("", encoding="utf-8")
    monkeypatch.setenv("WKHTMLTOPDF", str(fake))
    assert settings.find_wkhtmltopdf() == str(fake)

    monkeypatch.delenv("WKHTMLTOPDF")
    monkeypatch.setenv("PATH", "")
    s = settings.load()
    s.pdf.wkhtmltopdf_path = str(fake)
    settings.save(s)
    assert settings.find_wkhtmltopdf() == str(fake)

    s.pdf.wkhtmltopdf_path = None
    settings.save(s)
    assert settings.find_wkhtmltopdf() is None
