from __future__ import annotations

import csv
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from core.models.common import to_amount
from core.models.invoice import LineItem
from core.models.product import Product
from core.services.settings_service import default_data_dir
from core.storage.json_repo import JsonRepository

logger = logging.getLogger(__name__)

REQUIRED_IMPORT_COLUMNS = ("barcode", "name", "price", "cost", "unique_product_code")
# en-têtes camelCase des anciens exports
_COLUMN_ALIASES = {
    "uniqueproductcode": "unique_product_code",
    "possiblediscount": "possible_discount",
    "salepercentage": "sale_percentage",
}
EXPORT_COLUMNS = ["product_id", "product_name", "quantity", "price", "barcode"]


def _normalize_header(h: str) -> str:
    h = (h or "").strip()
    return _COLUMN_ALIASES.get(h.lower(), h.lower())


class InventoryService:
    """
    Stock boutique (data/products.json).
    - Recherche par code-barres ou code unique (scan)
    - Réassort, ajustement de quantité, actions groupées
    - Import / export CSV
    """

    def __init__(
        self,
        products_repo: Optional[JsonRepository] = None,
        data_dir: Optional[os.PathLike | str] = None,
    ) -> None:
        base = Path(data_dir) if data_dir else default_data_dir()
        base.mkdir(parents=True, exist_ok=True)
        self.repo = products_repo or JsonRepository(base / "products.json", entity_name="product", key="id")

    # ---------- Lecture ---------- #

    def list_products(self) -> List[Product]:
        out: List[Product] = []
        for d in self.repo.list_all():
            try:
                out.append(Product.model_validate(d))
            except ValidationError:
                logger.warning("Skipping invalid product row %s", d.get("id"))
                continue
        return out

    def get_product(self, product_id: str) -> Optional[Product]:
        row = self.repo.get_by_id(product_id)
        if row is None:
            return None
        try:
            return Product.model_validate(row)
        except ValidationError:
            return None

    def _require(self, product_id: str) -> Product:
        p = self.get_product(product_id)
        if p is None:
            raise ValueError(f"product with id={product_id} not found")
        return p

    def find_by_barcode(self, code: str) -> Optional[Product]:
        """Code-barres ou code unique ; le code unique l'emporte (pièce précise)."""
        code = (code or "").strip()
        if not code:
            return None
        products = self.list_products()
        for p in products:
            if p.unique_product_code == code:
                return p
        for p in products:
            if p.barcode == code:
                return p
        return None

    # ---------- Ecriture ---------- #

    def add_product(self, product: Product) -> Product:
        if any(p.barcode == product.barcode for p in self.list_products()):
            raise ValueError(f'A product with the barcode "{product.barcode}" already exists.')
        self.repo.add(product)
        logger.info("Product added: %s (%s)", product.name, product.barcode)
        return product

    def update_product(self, product_id: str, **fields: Any) -> Product:
        current = self._require(product_id)
        updated = Product.model_validate({**current.model_dump(), **fields, "id": current.id})
        updated.touch()
        self.repo.update(updated)
        return updated

    def delete_product(self, product_id: str) -> bool:
        return self.repo.delete(product_id)

    def bulk_update(self, product_ids: Iterable[str], **fields: Any) -> List[Product]:
        return [self.update_product(pid, **fields) for pid in product_ids]

    def bulk_remove(self, product_ids: Iterable[str]) -> int:
        removed = self.repo.delete_many(product_ids)
        logger.info("%d product(s) removed from inventory", removed)
        return removed

    def set_quantity(self, product_id: str, quantity: int) -> Product:
        return self.update_product(product_id, quantity=max(0, int(quantity)))

    def restock(self, product_id: str, unique_product_code: str) -> Product:
        """
        Même code unique -> +1 en stock.
        Nouveau code -> nouvelle pièce copiée de l'originale, quantité 1.
        """
        code = (unique_product_code or "").strip()
        if not code:
            raise ValueError("Unique product code cannot be empty.")
        original = self._require(product_id)
        if code == original.unique_product_code:
            return self.set_quantity(product_id, original.quantity + 1)

        clone = Product(
            **original.model_dump(exclude={"id", "created_at", "updated_at", "quantity", "unique_product_code"}),
            unique_product_code=code,
            quantity=1,
        )
        self.repo.add(clone)
        logger.info("Restocked %s as new item %s", original.name, code)
        return clone

    # ---------- Pièces vendues ---------- #

    def sold_out(self) -> List[Product]:
        return [p for p in self.list_products() if p.quantity == 0]

    def remove_sold_out(self) -> int:
        """Supprime les fiches à 0 ; les factures gardent leurs lignes."""
        with self.repo.transaction() as rows:
            before = len(rows)
            rows[:] = [r for r in rows if int(r.get("quantity") or 0) > 0]
            removed = before - len(rows)
        logger.info("%d sold-out product(s) removed", removed)
        return removed

    def decrement_stock(self, items: Iterable[LineItem]) -> None:
        """Sortie de stock après facturation (plancher à 0)."""
        wanted: Dict[str, int] = {}
        for it in items:
            if it.product_id:
                wanted[it.product_id] = wanted.get(it.product_id, 0) + it.quantity
        if not wanted:
            return
        with self.repo.transaction() as rows:
            for row in rows:
                pid = str(row.get("id"))
                if pid in wanted:
                    row["quantity"] = max(0, int(row.get("quantity") or 0) - wanted[pid])
        logger.info("Stock decremented for %d product(s)", len(wanted))

    # ---------- Import / export ---------- #

    def import_csv(self, path: os.PathLike | str) -> Tuple[int, int]:
        """Retourne (ajoutés, mis à jour). Un code-barres connu met à jour la fiche."""
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            headers = [_normalize_header(h) for h in (reader.fieldnames or [])]
            missing = [c for c in REQUIRED_IMPORT_COLUMNS if c not in headers]
            if missing:
                raise ValueError(f"Missing required columns: {', '.join(missing)}")
            raw_rows = [{_normalize_header(k): v for k, v in r.items() if k} for r in reader]

        added = updated = 0
        with self.repo.transaction() as rows:
            by_barcode = {str(r.get("barcode")): i for i, r in enumerate(rows)}
            for r in raw_rows:
                barcode = (r.get("barcode") or "").strip()
                if not barcode:
                    continue
                payload: Dict[str, Any] = {
                    "barcode": barcode,
                    "name": (r.get("name") or "").strip(),
                    "description": (r.get("description") or "").strip(),
                    "unique_product_code": (r.get("unique_product_code") or "").strip(),
                    "price": to_amount(r.get("price")),
                    "cost": to_amount(r.get("cost")),
                }
                for opt in ("possible_discount", "sale_percentage"):
                    val = to_amount(r.get(opt), None)
                    if val is not None:
                        payload[opt] = val
                qty = to_amount(r.get("quantity"), None)
                if qty is not None:
                    payload["quantity"] = int(qty)

                if barcode in by_barcode:
                    idx = by_barcode[barcode]
                    rows[idx] = Product.model_validate({**rows[idx], **payload}).model_dump(mode="json")
                    updated += 1
                else:
                    payload.setdefault("quantity", 1)
                    rows.append(Product.model_validate(payload).model_dump(mode="json"))
                    by_barcode[barcode] = len(rows) - 1
                    added += 1
        logger.info("Inventory import: %d added, %d updated", added, updated)
        return added, updated

    def export_csv(self, path: os.PathLike | str) -> str:
        products = self.list_products()
        if not products:
            raise ValueError("No inventory to export")
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=EXPORT_COLUMNS)
            writer.writeheader()
            for p in products:
                writer.writerow({
                    "product_id": p.id,
                    "product_name": p.name,
                    "quantity": p.quantity,
                    "price": f"{p.price:.2f}",
                    "barcode": p.barcode,
                })
        return str(out)

    # ---------- Tableau de bord ---------- #

    def stats(self) -> Dict[str, int]:
        products = self.list_products()
        return {
            "total_products": len(products),
            "total_items": sum(p.quantity for p in products),
            "out_of_stock": sum(1 for p in products if p.quantity == 0),
        }

    def top_stocked(self, n: int = 5) -> List[Tuple[str, int]]:
        products = sorted(self.list_products(), key=lambda p: p.quantity, reverse=True)
        return [(p.name, p.quantity) for p in products[:n]]
