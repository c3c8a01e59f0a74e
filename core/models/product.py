from __future__ import annotations
from pydantic import Field, field_validator
from typing import Optional
from .common import gen_id, TimeStamped


class Product(TimeStamped):
    id: str = Field(default_factory=gen_id)
    name: str
    description: str = ""
    barcode: str
    # code individuel (une pièce = un code), imprimé sur l'étiquette
    unique_product_code: str = ""
    price: float = 0.0  # TTC
    cost: float = 0.0
    quantity: int = 0
    possible_discount: Optional[float] = None
    sale_percentage: Optional[float] = None

    @field_validator("barcode", "unique_product_code", mode="before")
    @classmethod
    def _strip_code(cls, v):
        return "" if v is None else str(v).strip()

    @field_validator("quantity", mode="before")
    @classmethod
    def _non_negative_qty(cls, v):
        try:
            return max(0, int(v))
        except (TypeError, ValueError):
            return 0
