from __future__ import annotations
from typing import Optional

from PySide6.QtWidgets import QDialog, QVBoxLayout, QFormLayout, QLineEdit, QDialogButtonBox, QLabel

from core.models.product import Product
from core.services.barcode_scanner import BarcodeScanner
from ui.widgets.scanner_filter import attach_scanner


class RestockDialog(QDialog):
    """Réassort : ressaisir le code d'origine (+1) ou scanner un nouveau code (nouvelle pièce)."""
    def __init__(self, parent=None, product: Optional[Product] = None, scanner_gap_ms: float = 50.0):
        super().__init__(parent)
        self.setWindowTitle("Réassort")
        self.setModal(True)

        self.ed_code = QLineEdit()
        self.ed_code.setPlaceholderText("Scanner ou saisir le code unique")
        if product:
            self.ed_code.setText(product.unique_product_code)

        form = QFormLayout()
        form.addRow(QLabel(product.name if product else ""))
        form.addRow("Code unique", self.ed_code)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

        self.scanner = BarcodeScanner(self.ed_code.setText, gap_ms=scanner_gap_ms)
        self._key_source = attach_scanner(self, self.scanner)
        self.finished.connect(lambda *_: self.scanner.detach())

    def get_code(self) -> Optional[str]:
        return self.ed_code.text().strip() or None
