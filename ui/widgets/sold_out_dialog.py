from __future__ import annotations
from typing import List, Optional

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QTableWidget,
    QTableWidgetItem, QHeaderView, QMessageBox
)

from core.models.product import Product
from core.services.inventory_service import InventoryService
from ui.widgets.restock_dialog import RestockDialog


class SoldOutDialog(QDialog):
    """Pièces vendues (stock à 0) : réassort ou suppression groupée. Les factures ne bougent pas."""
    def __init__(self, parent=None, inventory: Optional[InventoryService] = None, scanner_gap_ms: float = 50.0):
        super().__init__(parent)
        self.setWindowTitle("Pièces vendues")
        self.setModal(True)
        self.resize(640, 420)
        self.inventory = inventory or InventoryService()
        self.scanner_gap_ms = scanner_gap_ms
        self.changed = False
        self._products: List[Product] = []

        self.tbl = QTableWidget(0, 2)
        self.tbl.setHorizontalHeaderLabels(["Produit", "Code unique"])
        self.tbl.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl.setSelectionBehavior(self.tbl.SelectionBehavior.SelectRows)
        self.tbl.setEditTriggers(self.tbl.EditTrigger.NoEditTriggers)

        self.btn_restock = QPushButton("Réassort…")
        self.btn_delete_all = QPushButton("Supprimer toutes les pièces vendues")
        btn_close = QPushButton("Fermer")
        bar = QHBoxLayout()
        bar.addWidget(self.btn_delete_all)
        bar.addStretch(1)
        bar.addWidget(self.btn_restock)
        bar.addWidget(btn_close)

        lay = QVBoxLayout(self)
        lay.addWidget(QLabel("Le réassort crée une nouvelle fiche ; la suppression n'affecte pas les factures."))
        lay.addWidget(self.tbl, 1)
        lay.addLayout(bar)

        self.btn_restock.clicked.connect(self._restock)
        self.btn_delete_all.clicked.connect(self._delete_all)
        btn_close.clicked.connect(self.accept)

        self.refresh()

    def refresh(self):
        self._products = self.inventory.sold_out()
        self.tbl.setRowCount(0)
        for p in self._products:
            r = self.tbl.rowCount(); self.tbl.insertRow(r)
            self.tbl.setItem(r, 0, QTableWidgetItem(p.name))
            self.tbl.setItem(r, 1, QTableWidgetItem(p.unique_product_code))
        self.btn_delete_all.setEnabled(bool(self._products))

    def _restock(self):
        row = self.tbl.currentRow()
        if row < 0 or row >= len(self._products):
            QMessageBox.information(self, "Réassort", "Sélectionne une pièce."); return
        product = self._products[row]
        dlg = RestockDialog(self, product=product, scanner_gap_ms=self.scanner_gap_ms)
        if dlg.exec() != QDialog.Accepted:
            return
        code = dlg.get_code()
        if not code:
            QMessageBox.warning(self, "Réassort", "Code unique obligatoire."); return
        self.inventory.restock(product.id, code)
        self.changed = True
        self.refresh()

    def delete_all(self) -> int:
        removed = self.inventory.remove_sold_out()
        self.changed = self.changed or removed > 0
        self.refresh()
        return removed

    def _delete_all(self):
        n = len(self._products)
        if QMessageBox.question(
            self, "Suppression",
            f"Supprimer définitivement {n} pièce(s) vendue(s) ? Les factures sont conservées.",
        ) == QMessageBox.Yes:
            self.delete_all()
