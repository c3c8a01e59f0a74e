from __future__ import annotations
from typing import Any, Dict, Optional

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QFormLayout, QLineEdit, QTextEdit,
    QPushButton, QWidget, QSpinBox
)

from core.models.common import to_amount
from core.models.product import Product
from core.services.barcode_scanner import BarcodeScanner
from ui.widgets.scanner_filter import attach_scanner


def _price(text: str) -> float:
    return round(to_amount(text) or 0.0, 2)


class ProductForm(QDialog):
    """
    Formulaire produit (ajout / édition).
    - Prix saisi TTC.
    - Un scan remplit le code-barres (ou le code unique si le code-barres est déjà rempli).
    - Retourne un dict prêt pour InventoryService.
    """
    def __init__(self, parent: Optional[QWidget] = None, product: Optional[Product] = None,
                 scanner_gap_ms: float = 50.0):
        super().__init__(parent)
        self.setWindowTitle("Modifier le produit" if product else "Nouveau produit")
        self.product = product

        self.ed_name = QLineEdit()
        self.ed_desc = QTextEdit()
        self.ed_barcode = QLineEdit()
        self.ed_unique = QLineEdit()
        self.ed_price = QLineEdit(); self.ed_price.setPlaceholderText("ex: 1499,00")
        self.ed_cost = QLineEdit()
        self.sp_qty = QSpinBox(); self.sp_qty.setRange(0, 1_000_000); self.sp_qty.setValue(1)
        self.ed_possible_discount = QLineEdit()
        self.ed_sale_pct = QLineEdit()

        if product:
            self._populate(product)

        form = QFormLayout()
        form.addRow("Nom*", self.ed_name)
        form.addRow("Code-barres*", self.ed_barcode)
        form.addRow("Code unique", self.ed_unique)
        form.addRow("Prix TTC*", self.ed_price)
        form.addRow("Coût", self.ed_cost)
        form.addRow("Quantité", self.sp_qty)
        form.addRow("Remise possible", self.ed_possible_discount)
        form.addRow("Soldes (%)", self.ed_sale_pct)
        form.addRow("Description", self.ed_desc)

        btn_ok = QPushButton("Valider")
        btn_cancel = QPushButton("Annuler")
        btn_ok.clicked.connect(self.accept)
        btn_cancel.clicked.connect(self.reject)
        bar = QHBoxLayout()
        bar.addStretch(1)
        bar.addWidget(btn_cancel)
        bar.addWidget(btn_ok)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addLayout(bar)

        self.scanner = BarcodeScanner(self._on_scan, gap_ms=scanner_gap_ms)
        self._key_source = attach_scanner(self, self.scanner)
        self.finished.connect(lambda *_: self.scanner.detach())
        self.resize(520, 460)

    def _populate(self, p: Product) -> None:
        self.ed_name.setText(p.name)
        self.ed_desc.setPlainText(p.description or "")
        self.ed_barcode.setText(p.barcode)
        self.ed_unique.setText(p.unique_product_code)
        self.ed_price.setText(f"{p.price:.2f}")
        self.ed_cost.setText(f"{p.cost:.2f}")
        self.sp_qty.setValue(p.quantity)
        if p.possible_discount is not None:
            self.ed_possible_discount.setText(f"{p.possible_discount:g}")
        if p.sale_percentage is not None:
            self.ed_sale_pct.setText(f"{p.sale_percentage:g}")

    def _on_scan(self, code: str) -> None:
        target = self.ed_barcode if not self.ed_barcode.text().strip() else self.ed_unique
        target.setText(code)

    def get_payload(self) -> Optional[Dict[str, Any]]:
        name = self.ed_name.text().strip()
        barcode = self.ed_barcode.text().strip()
        if not name or not barcode:
            return None
        return {
            "name": name,
            "description": self.ed_desc.toPlainText().strip(),
            "barcode": barcode,
            "unique_product_code": self.ed_unique.text().strip(),
            "price": _price(self.ed_price.text()),
            "cost": _price(self.ed_cost.text()),
            "quantity": int(self.sp_qty.value()),
            "possible_discount": to_amount(self.ed_possible_discount.text(), None),
            "sale_percentage": to_amount(self.ed_sale_pct.text(), None),
        }
