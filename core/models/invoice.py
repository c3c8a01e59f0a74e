from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import datetime
from .common import gen_id

InvoiceType = Literal["standard", "custom"]
EditedField = Literal["discount_percentage", "discount_amount", "grand_total"]


class LineItem(BaseModel):
    description: str = ""
    quantity: int = Field(1, ge=0)
    unit_price: float = Field(0.0, ge=0)  # hors taxe
    product_id: Optional[str] = None

    @property
    def total(self) -> float:
        return self.quantity * self.unit_price


class InvoiceTotals(BaseModel):
    """Montants dérivés d'un brouillon de facture (jamais stockés seuls)."""
    model_config = ConfigDict(frozen=True)

    subtotal: float = 0.0
    discount_percentage: float = 0.0
    discount_amount: float = 0.0
    tax_amount: float = 0.0
    grand_total: float = 0.0

    @property
    def post_discount(self) -> float:
        return self.subtotal - self.discount_amount


class Invoice(BaseModel):
    id: str = Field(default_factory=gen_id)
    number: int
    date: datetime = Field(default_factory=datetime.now)
    type: InvoiceType = "standard"
    title: Optional[str] = None

    customer_name: str
    customer_phone: str

    items: List[LineItem] = Field(default_factory=list)
    tax_rate: float = 0.05

    subtotal: float = 0.0
    discount_percentage: float = 0.0
    discount_amount: float = 0.0
    tax_amount: float = 0.0
    grand_total: float = 0.0

    model_config = ConfigDict(extra="ignore")  # tolère d'anciennes clés dans les JSON

    @classmethod
    def from_totals(cls, totals: InvoiceTotals, **fields) -> "Invoice":
        return cls(
            subtotal=totals.subtotal,
            discount_percentage=totals.discount_percentage,
            discount_amount=totals.discount_amount,
            tax_amount=totals.tax_amount,
            grand_total=totals.grand_total,
            **fields,
        )

    @property
    def totals(self) -> InvoiceTotals:
        return InvoiceTotals(
            subtotal=self.subtotal,
            discount_percentage=self.discount_percentage,
            discount_amount=self.discount_amount,
            tax_amount=self.tax_amount,
            grand_total=self.grand_total,
        )
