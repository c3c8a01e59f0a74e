from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from core.models.vendor import Vendor
from core.services.settings_service import default_data_dir
from core.storage.json_repo import JsonRepository

logger = logging.getLogger(__name__)


class VendorService:
    def __init__(self, data_dir: Optional[os.PathLike | str] = None) -> None:
        base = Path(data_dir) if data_dir else default_data_dir()
        base.mkdir(parents=True, exist_ok=True)
        self.repo = JsonRepository(base / "vendors.json", entity_name="vendor", key="id")

    def list_vendors(self) -> List[Vendor]:
        out: List[Vendor] = []
        for d in self.repo.list_all():
            try:
                out.append(Vendor.model_validate(d))
            except ValidationError:
                # On ignore les entrées invalides pour ne pas casser l'UI
                logger.warning("Skipping invalid vendor row %s", d.get("id"))
        return sorted(out, key=lambda v: v.created_at, reverse=True)

    def get_vendor(self, vendor_id: str) -> Optional[Vendor]:
        row = self.repo.get_by_id(vendor_id)
        if row is None:
            return None
        try:
            return Vendor.model_validate(row)
        except ValidationError:
            return None

    def add_vendor(self, vendor: Vendor) -> Vendor:
        self.repo.add(vendor)
        logger.info("Vendor added: %s", vendor.name)
        return vendor

    def update_vendor(self, vendor_id: str, **fields: Any) -> Vendor:
        current = self.get_vendor(vendor_id)
        if current is None:
            raise ValueError(f"vendor with id={vendor_id} not found")
        updated = Vendor.model_validate({**current.model_dump(), **fields, "id": current.id})
        updated.touch()
        self.repo.update(updated)
        return updated

    def delete_vendor(self, vendor_id: str) -> bool:
        return self.repo.delete(vendor_id)
