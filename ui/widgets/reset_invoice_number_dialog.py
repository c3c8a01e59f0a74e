from __future__ import annotations
from typing import Optional

from PySide6.QtWidgets import QDialog, QVBoxLayout, QFormLayout, QLineEdit, QDialogButtonBox, QLabel, QPushButton

from core.models.settings import DEFAULT_INVOICE_START_NUMBER


class ResetInvoiceNumberDialog(QDialog):
    def __init__(self, parent=None, current: int = DEFAULT_INVOICE_START_NUMBER):
        super().__init__(parent)
        self.setWindowTitle("Compteur de factures")
        self.setModal(True)

        self.ed_number = QLineEdit()
        self.ed_number.setPlaceholderText(f"ex: {DEFAULT_INVOICE_START_NUMBER + 99}")
        btn_default = QPushButton(f"Revenir à {DEFAULT_INVOICE_START_NUMBER}")
        btn_default.clicked.connect(lambda: self.ed_number.setText(str(DEFAULT_INVOICE_START_NUMBER)))

        form = QFormLayout()
        form.addRow(QLabel(f"Prochain numéro actuel : {current}"))
        form.addRow("Nouveau départ", self.ed_number)
        form.addRow(btn_default)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

    def get_number(self) -> Optional[int]:
        try:
            n = int(self.ed_number.text().strip())
        except ValueError:
            return None
        return n if n > 0 else None
