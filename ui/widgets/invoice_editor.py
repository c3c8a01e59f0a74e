from __future__ import annotations
from typing import List, Optional, Sequence

from PySide6.QtWidgets import (
    QDialog, QVBoxLayout, QFormLayout, QDialogButtonBox, QHBoxLayout,
    QPushButton, QTableWidget, QTableWidgetItem, QHeaderView, QDoubleSpinBox,
    QLabel, QLineEdit, QMessageBox
)

from core.models.invoice import Invoice, InvoiceType, LineItem
from core.models.product import Product
from core.services.invoice_service import InvoiceService, InvoiceValidationError, format_money
from core.services.totals_engine import InvoiceTotalsEngine


class InvoiceEditor(QDialog):
    """
    Brouillon de facture.
    - standard : lignes issues des pièces scannées/sélectionnées (prix HT, qté 1)
    - custom : lignes libres (description / qté / prix)
    Remise %, montant de remise et total TTC sont tous éditables ; le moteur
    recalcule les deux autres à chaque saisie.
    """
    COLS = ["Description", "Qté", "PU HT", "Total HT"]

    def __init__(self, parent=None, service: InvoiceService | None = None,
                 products: Sequence[Product] = (), invoice_type: InvoiceType = "standard"):
        super().__init__(parent)
        self.service = service or InvoiceService()
        self.invoice_type = invoice_type
        self.setWindowTitle("Facture libre" if invoice_type == "custom" else "Nouvelle facture")
        self.setModal(True)

        settings = self.service.settings.load()
        self._currency = settings.currency_symbol
        self.engine: InvoiceTotalsEngine = self.service.engine_for(invoice_type)
        self.created: Optional[Invoice] = None
        if products:
            self.engine.set_line_items(self.service.draft_from_products(products, self.engine.tax_rate))

        self.ed_title = QLineEdit("Invoice")
        self.ed_name = QLineEdit()
        self.ed_phone = QLineEdit(); self.ed_phone.setPlaceholderText("1234567890")

        self.tbl = QTableWidget(0, len(self.COLS))
        self.tbl.setHorizontalHeaderLabels(self.COLS)
        self.tbl.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.tbl.setSelectionBehavior(self.tbl.SelectionBehavior.SelectRows)
        if invoice_type != "custom":
            self.tbl.setEditTriggers(self.tbl.EditTrigger.NoEditTriggers)

        self.lab_subtotal = QLabel()
        self.sp_pct = QDoubleSpinBox(); self.sp_pct.setRange(0.0, 100.0); self.sp_pct.setDecimals(2); self.sp_pct.setSuffix(" %")
        self.sp_amount = QDoubleSpinBox(); self.sp_amount.setRange(0.0, 1e9); self.sp_amount.setDecimals(2)
        self.lab_tax = QLabel()
        self.sp_total = QDoubleSpinBox(); self.sp_total.setRange(0.0, 1e9); self.sp_total.setDecimals(2)

        top = QFormLayout()
        if invoice_type == "custom":
            top.addRow("Titre", self.ed_title)
        top.addRow("Client", self.ed_name)
        top.addRow("Téléphone", self.ed_phone)

        totals = QFormLayout()
        totals.addRow("Sous-total (HT)", self.lab_subtotal)
        totals.addRow("Remise", self.sp_pct)
        totals.addRow("Montant remise", self.sp_amount)
        totals.addRow(f"GST ({self.engine.tax_rate * 100:g}%)", self.lab_tax)
        totals.addRow("Total TTC", self.sp_total)

        lay = QVBoxLayout(self)
        lay.addLayout(top)
        if invoice_type == "custom":
            bar = QHBoxLayout()
            btn_add = QPushButton("Ajouter une ligne")
            btn_del = QPushButton("Supprimer la ligne")
            btn_add.clicked.connect(self._add_line)
            btn_del.clicked.connect(self._del_line)
            bar.addWidget(btn_add); bar.addWidget(btn_del); bar.addStretch(1)
            lay.addLayout(bar)
        lay.addWidget(self.tbl)
        lay.addLayout(totals)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.button(QDialogButtonBox.Ok).setText("Créer la facture")
        btns.accepted.connect(self._submit)
        btns.rejected.connect(self.reject)
        lay.addWidget(btns)

        # une saisie = un point d'entrée du moteur
        self.sp_pct.valueChanged.connect(lambda v: self._apply("discount_percentage", v))
        self.sp_amount.valueChanged.connect(lambda v: self._apply("discount_amount", v))
        self.sp_total.valueChanged.connect(lambda v: self._apply("grand_total", v))
        self.tbl.itemChanged.connect(self._on_item_changed)

        if invoice_type == "custom" and not products:
            self._add_line()
        self._refresh_table()
        self.resize(760, 560)

    # -------- lignes --------
    def _money(self, v: float) -> str:
        return format_money(v, self._currency)

    def _refresh_table(self):
        self.tbl.blockSignals(True)
        self.tbl.setRowCount(0)
        for ln in self.engine.items:
            r = self.tbl.rowCount()
            self.tbl.insertRow(r)
            self.tbl.setItem(r, 0, QTableWidgetItem(ln.description))
            self.tbl.setItem(r, 1, QTableWidgetItem(str(ln.quantity)))
            self.tbl.setItem(r, 2, QTableWidgetItem(f"{ln.unit_price:.2f}"))
            self.tbl.setItem(r, 3, QTableWidgetItem(self._money(ln.total)))
        self.tbl.blockSignals(False)
        self.tbl.resizeRowsToContents()
        self._show_totals()

    def _lines_from_table(self) -> List[LineItem]:
        current = self.engine.items
        out: List[LineItem] = []
        for r in range(self.tbl.rowCount()):
            def cell(c: int) -> str:
                it = self.tbl.item(r, c)
                return it.text().strip() if it else ""
            try:
                qty = max(0, int(float(cell(1).replace(",", ".") or 0)))
            except ValueError:
                qty = 0
            try:
                price = max(0.0, float(cell(2).replace(",", ".") or 0))
            except ValueError:
                price = 0.0
            pid = current[r].product_id if r < len(current) else None
            out.append(LineItem(description=cell(0), quantity=qty, unit_price=price, product_id=pid))
        return out

    def _on_item_changed(self, _item):
        self.engine.set_line_items(self._lines_from_table())
        self._refresh_table()

    def _add_line(self):
        self.engine.set_line_items(self.engine.items + [LineItem(description="", quantity=1, unit_price=0.0)])
        self._refresh_table()

    def _del_line(self):
        row = self.tbl.currentRow()
        if row < 0: return
        items = self.engine.items
        del items[row]
        self.engine.set_line_items(items)
        self._refresh_table()

    # -------- totaux --------
    def _apply(self, field: str, value: float):
        self.engine.apply_edit(field, value)  # type: ignore[arg-type]
        self._show_totals()

    def _show_totals(self):
        t = self.engine.totals
        self.lab_subtotal.setText(self._money(t.subtotal))
        self.lab_tax.setText(self._money(t.tax_amount))
        # on ne réécrit pas le champ en cours de saisie
        edited = self.engine.last_edited
        for field, spin, value in (
            ("discount_percentage", self.sp_pct, t.discount_percentage),
            ("discount_amount", self.sp_amount, t.discount_amount),
            ("grand_total", self.sp_total, t.grand_total),
        ):
            if field == edited and spin.hasFocus():
                continue
            spin.blockSignals(True)
            spin.setValue(round(value, 2))
            spin.blockSignals(False)

    # -------- envoi --------
    def _submit(self):
        try:
            self.created = self.service.create_invoice(
                customer_name=self.ed_name.text(),
                customer_phone=self.ed_phone.text(),
                items=self.engine.items,
                discount_percentage=self.engine.totals.discount_percentage,
                invoice_type=self.invoice_type,
                title=self.ed_title.text() if self.invoice_type == "custom" else None,
            )
        except InvoiceValidationError as e:
            QMessageBox.warning(self, "Facture", str(e))
            return
        self.accept()
