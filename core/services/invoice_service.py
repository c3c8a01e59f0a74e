# core/services/invoice_service.py
from __future__ import annotations

import csv
import logging
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import pdfkit  # utilisé si wkhtmltopdf dispo
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pydantic import ValidationError

from core.models.invoice import Invoice, InvoiceType, LineItem
from core.models.product import Product
from core.services.inventory_service import InventoryService
from core.services.settings_service import EXPORTS_DIR, TEMPLATES_DIR, SettingsService, default_data_dir
from core.services.totals_engine import InvoiceTotalsEngine, tax_exclusive_price
from core.storage.json_repo import JsonRepository

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^\d{10}$")

INVOICE_CSV_COLUMNS = [
    "invoice_id", "invoice_number", "invoice_date", "customer_name", "customer_phone",
    "product_id", "product_name", "quantity", "price",
    "subtotal", "discount", "gst", "total",
]


class InvoiceValidationError(ValueError):
    """Saisie incomplète au moment de valider la facture."""


# ---------- Formats ----------
def format_money(amount: float, symbol: str = "₹") -> str:
    try:
        return f"{symbol}{float(amount):.2f}"
    except (TypeError, ValueError):
        return f"{symbol}0.00"


def _slug(text: str) -> str:
    text = (text or "").strip()
    text = re.sub(r'[\\/:*?"<>|\n\r\t]', "_", text)
    text = re.sub(r"\s+", " ", text)
    return text or "Invoice"


def _render_pdf_with_weasyprint(html: str, out_path: Path, base_url: Optional[str]) -> None:
    """Fallback WeasyPrint (si wkhtmltopdf absent)."""
    try:
        from weasyprint import HTML, CSS
    except ImportError as e:
        raise RuntimeError(
            "Aucun wkhtmltopdf trouvé et WeasyPrint n'est pas installé. "
            "Installe WeasyPrint (pip install weasyprint) ou configure wkhtmltopdf.\n"
            f"Détails: {e}"
        ) from e

    css_file = TEMPLATES_DIR / "stylesheet.css"
    styles = [CSS(filename=str(css_file))] if css_file.exists() else None
    HTML(string=html, base_url=base_url).write_pdf(str(out_path), stylesheets=styles)


def write_pdf(html: str, out_path: Path, settings: SettingsService) -> str:
    """wkhtmltopdf (pdfkit) en priorité, sinon WeasyPrint."""
    out_path.parent.mkdir(parents=True, exist_ok=True)
    wkhtml = settings.find_wkhtmltopdf()
    if wkhtml:
        try:
            config = pdfkit.configuration(wkhtmltopdf=wkhtml)
            options = {
                "enable-local-file-access": None,
                "quiet": "",
                "encoding": "UTF-8",
            }
            css_path = TEMPLATES_DIR / "stylesheet.css"
            pdfkit.from_string(
                html, str(out_path), options=options, configuration=config,
                css=str(css_path) if css_path.exists() else None,
            )
            return str(out_path)
        except OSError as e:
            logger.warning("wkhtmltopdf failed (%s), falling back to WeasyPrint", e)

    _render_pdf_with_weasyprint(html, out_path, base_url=str(TEMPLATES_DIR.resolve()))
    return str(out_path)


def template_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


# ---------- Service ----------
class InvoiceService:
    def __init__(
        self,
        data_dir: Optional[os.PathLike | str] = None,
        settings: Optional[SettingsService] = None,
        inventory: Optional[InventoryService] = None,
    ) -> None:
        base = Path(data_dir) if data_dir else default_data_dir()
        self.settings = settings or SettingsService(base)
        self.inventory = inventory or InventoryService(data_dir=base)
        self.repo = JsonRepository(base / "invoices.json", entity_name="invoice", key="id")

    # ----------- calcul -----------
    def engine_for(self, invoice_type: InvoiceType, items: Iterable[LineItem] = ()) -> InvoiceTotalsEngine:
        rate = self.settings.load().tax_rate_for(invoice_type)
        return InvoiceTotalsEngine(rate, items)

    @staticmethod
    def draft_from_products(products: Sequence[Product], tax_rate: float) -> List[LineItem]:
        """Une pièce = une ligne ; prix catalogue TTC ramené en HT."""
        return [
            LineItem(
                description=p.name,
                quantity=1,
                unit_price=tax_exclusive_price(p.price, tax_rate),
                product_id=p.id,
            )
            for p in products
        ]

    # ----------- validation (au moment de l'envoi) -----------
    @staticmethod
    def validate_submission(
        customer_name: str,
        customer_phone: str,
        items: Iterable[LineItem],
        *,
        invoice_type: InvoiceType = "standard",
        title: Optional[str] = None,
    ) -> List[LineItem]:
        if not (customer_name or "").strip() or not (customer_phone or "").strip():
            raise InvoiceValidationError("Please enter customer name and phone number.")
        if invoice_type == "custom" and not (title or "").strip():
            raise InvoiceValidationError("Please enter an invoice title.")
        if not PHONE_RE.match(customer_phone.strip()):
            raise InvoiceValidationError("Phone number must be 10 digits.")

        valid = [
            it for it in items
            if it.quantity > 0 and it.unit_price > 0
            and (invoice_type != "custom" or it.description.strip())
        ]
        if not valid:
            raise InvoiceValidationError("Add at least one valid line item.")
        return valid

    # ----------- création -----------
    def create_invoice(
        self,
        *,
        customer_name: str,
        customer_phone: str,
        items: Iterable[LineItem],
        discount_percentage: float = 0.0,
        invoice_type: InvoiceType = "standard",
        title: Optional[str] = None,
    ) -> Invoice:
        valid = self.validate_submission(
            customer_name, customer_phone, items, invoice_type=invoice_type, title=title
        )
        engine = self.engine_for(invoice_type, valid)
        totals = engine.set_discount_percentage(discount_percentage)

        inv = Invoice.from_totals(
            totals,
            number=self.settings.next_invoice_number(),
            type=invoice_type,
            title=(title or "").strip() or None,
            customer_name=customer_name.strip(),
            customer_phone=customer_phone.strip(),
            items=engine.items,
            tax_rate=engine.tax_rate,
        )
        self.repo.add(inv)
        if invoice_type == "standard":
            self.inventory.decrement_stock(inv.items)
        logger.info("Invoice %s created for %s (total %.2f)", inv.number, inv.customer_name, inv.grand_total)
        return inv

    # ----------- lecture -----------
    def list_invoices(self) -> List[Invoice]:
        out: List[Invoice] = []
        for d in self.repo.list_all():
            try:
                out.append(Invoice.model_validate(d))
            except ValidationError:
                logger.warning("Skipping invalid invoice row %s", d.get("id"))
                continue
        return sorted(out, key=lambda i: i.date, reverse=True)

    def get_by_id(self, invoice_id: str) -> Optional[Invoice]:
        d = self.repo.get_by_id(invoice_id)
        if not d:
            return None
        try:
            return Invoice.model_validate(d)
        except ValidationError:
            return None

    def total_revenue(self) -> float:
        return sum(inv.grand_total for inv in self.list_invoices())

    def clear_all(self) -> int:
        n = len(self.repo.list_all())
        self.repo.replace_all([])
        logger.warning("All invoices cleared (%d)", n)
        return n

    # ----------- export CSV ----------
    def export_csv(self, path: os.PathLike | str) -> str:
        invoices = self.list_invoices()
        rows = [
            {
                "invoice_id": inv.id,
                "invoice_number": inv.number,
                "invoice_date": inv.date.strftime("%Y-%m-%d"),
                "customer_name": inv.customer_name,
                "customer_phone": inv.customer_phone,
                "product_id": it.product_id or "",
                "product_name": it.description,
                "quantity": it.quantity,
                "price": f"{it.unit_price:.2f}",
                "subtotal": f"{inv.subtotal:.2f}",
                "discount": f"{inv.discount_amount:.2f}",
                "gst": f"{inv.tax_amount:.2f}",
                "total": f"{inv.grand_total:.2f}",
            }
            for inv in invoices
            for it in inv.items
        ]
        if not rows:
            raise ValueError("No invoices to export")
        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=INVOICE_CSV_COLUMNS)
            writer.writeheader()
            writer.writerows(rows)
        return str(out)

    # ----------- export PDF ----------
    def render_invoice_html(self, inv: Invoice) -> str:
        """Rend le HTML de facture en mémoire via Jinja2: templates/pdf/invoice.html"""
        s = self.settings.load()
        def money(v: float) -> str:
            return format_money(v, s.currency_symbol)

        tpl = template_env().get_template("invoice.html")
        ctx = {
            "invoice": {
                "number": inv.number,
                "title": inv.title or "Invoice",
                "date": inv.date.strftime("%d/%m/%Y"),
                "lines": [
                    {
                        "index": i,
                        "description": it.description,
                        "qty": it.quantity,
                        "unit_price": money(it.unit_price),
                        "total": money(it.total),
                    }
                    for i, it in enumerate(inv.items, start=1)
                ],
                "subtotal": money(inv.subtotal),
                "has_discount": inv.discount_amount > 0,
                "discount_pct": f"{inv.discount_percentage:.2f}",
                "discount": money(inv.discount_amount),
                "tax_label": f"GST ({inv.tax_rate * 100:g}%)",
                "tax": money(inv.tax_amount),
                "grand_total": money(inv.grand_total),
            },
            "customer": {"name": inv.customer_name, "phone": inv.customer_phone},
            "shop": s.shop.model_dump(),
        }
        return tpl.render(**ctx)

    def export_invoice_pdf(self, inv: Invoice, out_dir: Optional[str] = None) -> str:
        html = self.render_invoice_html(inv)
        exports_dir = Path(out_dir) if out_dir else (EXPORTS_DIR / "invoices")
        prefix = _slug(inv.title) if inv.type == "custom" and inv.title else "Invoice"
        out_path = exports_dir / f"{prefix}-{inv.number}.pdf"
        return write_pdf(html, out_path, self.settings)
