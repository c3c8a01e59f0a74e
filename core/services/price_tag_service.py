from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from core.models.product import Product
from core.services.invoice_service import format_money, template_env, write_pdf
from core.services.settings_service import EXPORTS_DIR, SettingsService

logger = logging.getLogger(__name__)


def paginate(products: Sequence[Product], per_page: int) -> List[List[Product]]:
    if per_page < 1:
        raise ValueError("per_page must be >= 1")
    return [list(products[i:i + per_page]) for i in range(0, len(products), per_page)]


class PriceTagService:
    """Planches d'étiquettes prix (A4, 12 par page par défaut)."""

    def __init__(self, settings: Optional[SettingsService] = None) -> None:
        self.settings = settings or SettingsService()

    def render_html(self, products: Sequence[Product]) -> str:
        if not products:
            raise ValueError("Please select at least one product to generate price tags.")
        s = self.settings.load()
        pages: List[List[Dict[str, Any]]] = [
            [
                {
                    "name": p.name,
                    # code unique imprimé pour identifier la pièce au scan
                    "code": p.unique_product_code or p.barcode,
                    "price": format_money(p.price, s.currency_symbol),
                }
                for p in page
            ]
            for page in paginate(products, s.price_tags.per_page)
        ]
        return template_env().get_template("price_tags.html").render(pages=pages)

    def export_pdf(self, products: Sequence[Product], out_path: Optional[str] = None) -> str:
        html = self.render_html(products)
        path = Path(out_path) if out_path else EXPORTS_DIR / "price-tags.pdf"
        logger.info("Generating %d price tag(s) -> %s", len(products), path)
        return write_pdf(html, path, self.settings)
