from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Optional

DEFAULT_INVOICE_START_NUMBER = 20250600001


class ShopInfo(BaseModel):
    name: str = "Ma Boutique"
    address_lines: List[str] = Field(default_factory=list)
    phone: str = ""
    gstin: str = ""


class ScannerSettings(BaseModel):
    gap_ms: float = Field(50.0, gt=0)
    min_length: int = Field(3, ge=0)


class NumberingSettings(BaseModel):
    next_invoice_number: int = Field(DEFAULT_INVOICE_START_NUMBER, ge=1)


class PdfSettings(BaseModel):
    wkhtmltopdf_path: Optional[str] = None


class PriceTagSettings(BaseModel):
    per_page: int = Field(12, ge=1)


class ShopSettings(BaseModel):
    shop: ShopInfo = Field(default_factory=ShopInfo)
    currency_symbol: str = "₹"
    # un taux fixe par type de facture, jamais modifiable depuis la caisse
    tax_rates: Dict[str, float] = Field(default_factory=lambda: {"standard": 0.05, "custom": 0.05})
    scanner: ScannerSettings = Field(default_factory=ScannerSettings)
    numbering: NumberingSettings = Field(default_factory=NumberingSettings)
    pdf: PdfSettings = Field(default_factory=PdfSettings)
    price_tags: PriceTagSettings = Field(default_factory=PriceTagSettings)
    # évènement en cours ; None = stock principal (dossier data)
    active_event_id: Optional[str] = None

    @field_validator("tax_rates")
    @classmethod
    def _check_rates(cls, v: Dict[str, float]) -> Dict[str, float]:
        for kind, rate in v.items():
            if not 0.0 <= float(rate) <= 1.0:
                raise ValueError(f"tax rate for '{kind}' must be within [0, 1], got {rate}")
        return {k: float(r) for k, r in v.items()}

    def tax_rate_for(self, invoice_type: str) -> float:
        if invoice_type not in self.tax_rates:
            raise ValueError(f"No tax rate configured for invoice type '{invoice_type}'")
        return self.tax_rates[invoice_type]
