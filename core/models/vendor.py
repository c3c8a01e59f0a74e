from __future__ import annotations
from pydantic import Field, field_validator
from .common import gen_id, TimeStamped


class Vendor(TimeStamped):
    id: str = Field(default_factory=gen_id)
    name: str = Field(min_length=2)
    contact: str = Field(min_length=10)
    # tissu, atelier, ville d'achat...
    sourcing_details: str = Field(min_length=3)
    fabric_cost: float = Field(0.0, ge=0)
    stitching_cost: float = Field(0.0, ge=0)
    notes: str = ""

    @field_validator("name", "contact", "sourcing_details", "notes", mode="before")
    @classmethod
    def _strip(cls, v):
        return "" if v is None else str(v).strip()

    @property
    def total_cost(self) -> float:
        return self.fabric_cost + self.stitching_cost
