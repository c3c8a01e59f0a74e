from __future__ import annotations
from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QLineEdit, QTextEdit, QDialogButtonBox, QDoubleSpinBox
)
from typing import Any, Dict, Optional

from core.models.vendor import Vendor


class VendorForm(QDialog):
    def __init__(self, parent=None, vendor: Optional[Vendor] = None):
        super().__init__(parent)
        self.setWindowTitle("Fournisseur")
        self.setModal(True)

        self.ed_name = QLineEdit()
        self.ed_contact = QLineEdit()
        self.ed_contact.setPlaceholderText("Téléphone ou e-mail")
        self.ed_sourcing = QTextEdit()
        self.sp_fabric = QDoubleSpinBox(); self.sp_fabric.setRange(0, 10_000_000); self.sp_fabric.setDecimals(2)
        self.sp_stitching = QDoubleSpinBox(); self.sp_stitching.setRange(0, 10_000_000); self.sp_stitching.setDecimals(2)
        self.ed_notes = QTextEdit()

        form = QFormLayout()
        form.addRow("Nom (obligatoire)", self.ed_name)
        form.addRow("Contact", self.ed_contact)
        form.addRow("Approvisionnement", self.ed_sourcing)
        form.addRow("Coût tissu", self.sp_fabric)
        form.addRow("Coût couture", self.sp_stitching)
        form.addRow("Notes", self.ed_notes)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(btns)

        if vendor:
            self.ed_name.setText(vendor.name)
            self.ed_contact.setText(vendor.contact)
            self.ed_sourcing.setPlainText(vendor.sourcing_details)
            self.sp_fabric.setValue(vendor.fabric_cost)
            self.sp_stitching.setValue(vendor.stitching_cost)
            self.ed_notes.setPlainText(vendor.notes)

    def get_payload(self) -> Dict[str, Any]:
        return {
            "name": self.ed_name.text().strip(),
            "contact": self.ed_contact.text().strip(),
            "sourcing_details": self.ed_sourcing.toPlainText().strip(),
            "fabric_cost": round(self.sp_fabric.value(), 2),
            "stitching_cost": round(self.sp_stitching.value(), 2),
            "notes": self.ed_notes.toPlainText().strip(),
        }
