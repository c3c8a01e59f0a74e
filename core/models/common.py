from __future__ import annotations
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Optional
import math
import uuid

# symboles tolérés dans une saisie de montant
_AMOUNT_NOISE = ("₹", "Rs.", "Rs", "\u00a0", " ")


def gen_id() -> str:
    return str(uuid.uuid4())


def to_amount(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Lecture tolérante d'un montant saisi ou importé :
    '1 499,50', '₹1499.5', 1499.5 -> 1499.5. Vide, invalide, NaN ou inf -> default.
    """
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip()
        for noise in _AMOUNT_NOISE:
            text = text.replace(noise, "")
        if not text:
            return default
        value = text.replace(",", ".")
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    return f if math.isfinite(f) else default


class TimeStamped(BaseModel):
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    def touch(self) -> "TimeStamped":
        object.__setattr__(self, "updated_at", datetime.now())
        return self
