from __future__ import annotations
from pydantic import Field, field_validator
from .common import gen_id, TimeStamped


class Event(TimeStamped):
    """Salon, pop-up ou saison : stock, factures et fournisseurs propres."""
    id: str = Field(default_factory=gen_id)
    name: str = Field(min_length=3)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, v):
        return "" if v is None else str(v).strip()
