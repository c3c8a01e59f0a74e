from __future__ import annotations
from PySide6.QtWidgets import (
    QMainWindow, QWidget, QTabWidget, QVBoxLayout, QHBoxLayout,
    QLabel, QPushButton, QFileDialog, QMessageBox, QTableWidget,
    QTableWidgetItem, QHeaderView, QGroupBox, QDialog, QLineEdit, QListWidget,
    QComboBox, QInputDialog
)
import logging
import os
from typing import List, Optional

from core.models.product import Product
from core.models.vendor import Vendor
from core.services.barcode_scanner import BarcodeScanner
from core.services.event_service import EventService
from core.services.inventory_service import InventoryService
from core.services.invoice_service import InvoiceService, format_money
from core.services.price_tag_service import PriceTagService
from core.services.settings_service import EXPORTS_DIR, SettingsService, default_data_dir
from core.services.vendor_service import VendorService
from ui.widgets.invoice_editor import InvoiceEditor
from ui.widgets.product_form import ProductForm
from ui.widgets.reset_invoice_number_dialog import ResetInvoiceNumberDialog
from ui.widgets.restock_dialog import RestockDialog
from ui.widgets.scanner_filter import attach_scanner
from ui.widgets.sold_out_dialog import SoldOutDialog
from ui.widgets.vendor_form import VendorForm

logger = logging.getLogger(__name__)

DATA_DIR = str(default_data_dir())


def _readonly_table(cols: List[str]) -> QTableWidget:
    tbl = QTableWidget(0, len(cols))
    tbl.setHorizontalHeaderLabels(cols)
    tbl.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
    tbl.setSelectionBehavior(tbl.SelectionBehavior.SelectRows)
    tbl.setEditTriggers(tbl.EditTrigger.NoEditTriggers)
    return tbl


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.resize(1280, 800)

        self.settings_service = SettingsService()
        self.event_service = EventService(settings=self.settings_service)
        self.price_tag_service = PriceTagService(settings=self.settings_service)
        self._bind_services()
        self.settings = self.settings_service.load()
        self.currency = self.settings.currency_symbol

        # pièces scannées en attente de facturation
        self.scan_session: List[Product] = []

        central = QWidget()
        lay = QVBoxLayout(central)
        lay.addLayout(self._event_bar())
        self.tabs = QTabWidget()
        lay.addWidget(self.tabs, 1)
        self.setCentralWidget(central)

        self.tabs.addTab(self._inventory_tab(), "Inventaire")
        self.tabs.addTab(self._invoices_tab(), "Factures")
        self.tabs.addTab(self._vendors_tab(), "Fournisseurs")
        self.tabs.addTab(self._dashboard_tab(), "Tableau de bord")
        self.tabs.addTab(self._settings_tab(), "Paramètres")
        self.tabs.currentChanged.connect(self._on_tab_changed)

    def _money(self, v: float) -> str:
        return format_money(v, self.currency)

    def _bind_services(self):
        """Services branchés sur le dossier de l'évènement actif."""
        workdir = self.event_service.workspace_dir()
        self.inventory_service = InventoryService(data_dir=workdir)
        self.invoice_service = InvoiceService(
            data_dir=workdir, settings=self.settings_service, inventory=self.inventory_service
        )
        self.vendor_service = VendorService(data_dir=workdir)
        event = self.event_service.active_event()
        self.setWindowTitle(f"Boutique - {event.name}" if event else "Boutique - Stock & Factures")

    # ==================== ÉVÈNEMENTS ====================
    def _event_bar(self):
        bar = QHBoxLayout()
        self.cmb_event = QComboBox()
        self.cmb_event.setMinimumWidth(220)
        btn_new_event = QPushButton("Nouvel évènement…")
        bar.addWidget(QLabel("Évènement :"))
        bar.addWidget(self.cmb_event)
        bar.addWidget(btn_new_event)
        bar.addStretch(1)

        self._fill_events()
        self.cmb_event.currentIndexChanged.connect(self._on_event_changed)
        btn_new_event.clicked.connect(self._event_new)
        return bar

    def _fill_events(self):
        active = self.event_service.active_event()
        self.cmb_event.blockSignals(True)
        self.cmb_event.clear()
        self.cmb_event.addItem("Stock principal", None)
        for ev in self.event_service.list_events():
            self.cmb_event.addItem(ev.name, ev.id)
        idx = self.cmb_event.findData(active.id) if active else 0
        self.cmb_event.setCurrentIndex(max(0, idx))
        self.cmb_event.blockSignals(False)

    def _on_event_changed(self, index: int):
        self.switch_event(self.cmb_event.itemData(index))

    def switch_event(self, event_id: Optional[str]):
        try:
            self.event_service.switch_event(event_id)
        except ValueError as e:
            QMessageBox.warning(self, "Évènement", str(e))
            self._fill_events(); return
        self._bind_services()
        self._fill_events()
        self._clear_session()
        self._refresh_products()
        self._refresh_invoices()
        self._refresh_vendors()
        self._refresh_dashboard()

    def _event_new(self):
        name, ok = QInputDialog.getText(self, "Nouvel évènement", "Nom de l'évènement (3 caractères minimum)")
        if not ok: return
        try:
            event = self.event_service.create_event(name)
        except ValueError:
            QMessageBox.warning(self, "Évènement", "Le nom doit faire au moins 3 caractères."); return
        self.switch_event(event.id)

    # ==================== INVENTAIRE ====================
    def _inventory_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)

        bar = QHBoxLayout()
        btn_new = QPushButton("Nouveau produit")
        btn_edit = QPushButton("Modifier")
        btn_del = QPushButton("Supprimer")
        btn_plus = QPushButton("+1")
        btn_minus = QPushButton("-1")
        btn_restock = QPushButton("Réassort")
        btn_sold = QPushButton("Pièces vendues…")
        for b in (btn_new, btn_edit, btn_del, btn_plus, btn_minus, btn_restock, btn_sold): bar.addWidget(b)
        bar.addStretch(1)
        btn_import = QPushButton("Importer CSV")
        btn_export = QPushButton("Exporter CSV")
        btn_tags = QPushButton("Étiquettes prix")
        for b in (btn_import, btn_export, btn_tags): bar.addWidget(b)
        root.addLayout(bar)

        search = QHBoxLayout()
        self.ed_search = QLineEdit()
        self.ed_search.setPlaceholderText("Rechercher (nom, code-barres, code unique) ou scanner…")
        search.addWidget(QLabel("Recherche:"))
        search.addWidget(self.ed_search, 1)
        root.addLayout(search)

        self.tbl_products = _readonly_table(
            ["Nom", "Code-barres", "Code unique", "Prix TTC", "Qté", "ID"]
        )
        root.addWidget(self.tbl_products, 1)

        grp = QGroupBox("Scans en cours")
        lay_g = QHBoxLayout(grp)
        self.lst_session = QListWidget()
        lay_g.addWidget(self.lst_session, 1)
        col = QVBoxLayout()
        btn_bill_scans = QPushButton("Facturer les scans")
        btn_bill_sel = QPushButton("Facturer la sélection")
        btn_clear_scans = QPushButton("Vider")
        for b in (btn_bill_scans, btn_bill_sel, btn_clear_scans): col.addWidget(b)
        col.addStretch(1)
        lay_g.addLayout(col)
        root.addWidget(grp)

        btn_new.clicked.connect(self._product_new)
        btn_edit.clicked.connect(self._product_edit)
        btn_del.clicked.connect(self._product_delete)
        btn_plus.clicked.connect(lambda: self._product_adjust(+1))
        btn_minus.clicked.connect(lambda: self._product_adjust(-1))
        btn_restock.clicked.connect(self._product_restock)
        btn_sold.clicked.connect(self._manage_sold_out)
        btn_import.clicked.connect(self._inventory_import)
        btn_export.clicked.connect(self._inventory_export)
        btn_tags.clicked.connect(self._price_tags)
        btn_bill_scans.clicked.connect(lambda: self._bill(self.scan_session))
        btn_bill_sel.clicked.connect(lambda: self._bill(self._selected_products()))
        btn_clear_scans.clicked.connect(self._clear_session)
        self.ed_search.textChanged.connect(lambda _t: self._refresh_products())

        # la douchette alimente la session ; la frappe manuelle reste dans la recherche
        self.inventory_scanner = BarcodeScanner(
            self._on_inventory_scan,
            gap_ms=self.settings.scanner.gap_ms,
            min_length=self.settings.scanner.min_length,
        )
        self._inventory_keys = attach_scanner(w, self.inventory_scanner)

        self._refresh_products()
        return w

    def _refresh_products(self):
        term = self.ed_search.text().strip().lower()
        products = self.inventory_service.list_products()
        if term:
            products = [
                p for p in products
                if term in p.name.lower() or term in p.barcode.lower() or term in p.unique_product_code.lower()
            ]
        self.tbl_products.setRowCount(0)
        for p in products:
            r = self.tbl_products.rowCount(); self.tbl_products.insertRow(r)
            self.tbl_products.setItem(r, 0, QTableWidgetItem(p.name))
            self.tbl_products.setItem(r, 1, QTableWidgetItem(p.barcode))
            self.tbl_products.setItem(r, 2, QTableWidgetItem(p.unique_product_code))
            self.tbl_products.setItem(r, 3, QTableWidgetItem(self._money(p.price)))
            self.tbl_products.setItem(r, 4, QTableWidgetItem(str(p.quantity)))
            self.tbl_products.setItem(r, 5, QTableWidgetItem(p.id))
        self.tbl_products.resizeRowsToContents()

    def _selected_product_ids(self) -> List[str]:
        rows = sorted({i.row() for i in self.tbl_products.selectedIndexes()})
        return [self.tbl_products.item(r, 5).text() for r in rows]

    def _selected_product_id(self) -> Optional[str]:
        row = self.tbl_products.currentRow()
        if row < 0: return None
        return self.tbl_products.item(row, 5).text()

    def _selected_products(self) -> List[Product]:
        out = []
        for pid in self._selected_product_ids():
            p = self.inventory_service.get_product(pid)
            if p: out.append(p)
        return out

    def _on_inventory_scan(self, code: str):
        # la douchette a aussi tapé le code dans la recherche
        text = self.ed_search.text()
        if text.endswith(code):
            self.ed_search.setText(text[: -len(code)])
        p = self.inventory_service.find_by_barcode(code)
        if not p:
            logger.info("Scanned code not in inventory: %s", code)
            self.statusBar().showMessage(f"Code inconnu : {code}", 4000)
            return
        if p.quantity <= 0:
            QMessageBox.warning(self, "Scan", f"{p.name} est en rupture de stock.")
            return
        if any(s.id == p.id for s in self.scan_session):
            self.statusBar().showMessage(f"Déjà scanné : {p.name}", 4000)
            return
        self.scan_session.append(p)
        self.lst_session.addItem(f"{p.name} - {p.unique_product_code or p.barcode} - {self._money(p.price)}")

    def _clear_session(self):
        self.scan_session = []
        self.lst_session.clear()

    def _product_new(self):
        dlg = ProductForm(self, scanner_gap_ms=self.settings.scanner.gap_ms)
        if dlg.exec() == QDialog.Accepted:
            payload = dlg.get_payload()
            if not payload:
                QMessageBox.warning(self, "Validation", "Nom et code-barres obligatoires."); return
            try:
                self.inventory_service.add_product(Product(**payload))
            except ValueError as e:
                QMessageBox.warning(self, "Inventaire", str(e)); return
            self._refresh_products()

    def _product_edit(self):
        pid = self._selected_product_id()
        if not pid:
            QMessageBox.information(self, "Inventaire", "Sélectionne une ligne d’abord."); return
        current = self.inventory_service.get_product(pid)
        if not current:
            QMessageBox.warning(self, "Inventaire", "Impossible de charger ce produit."); return
        dlg = ProductForm(self, product=current, scanner_gap_ms=self.settings.scanner.gap_ms)
        if dlg.exec() == QDialog.Accepted:
            payload = dlg.get_payload()
            if not payload:
                QMessageBox.warning(self, "Validation", "Nom et code-barres obligatoires."); return
            self.inventory_service.update_product(pid, **payload)
            self._refresh_products()

    def _product_delete(self):
        ids = self._selected_product_ids()
        if not ids:
            QMessageBox.information(self, "Inventaire", "Sélectionne une ligne d’abord."); return
        if QMessageBox.question(self, "Suppression", f"Supprimer {len(ids)} produit(s) ?") == QMessageBox.Yes:
            self.inventory_service.bulk_remove(ids)
            self._refresh_products()

    def _product_adjust(self, delta: int):
        pid = self._selected_product_id()
        if not pid:
            QMessageBox.information(self, "Inventaire", "Sélectionne une ligne d’abord."); return
        p = self.inventory_service.get_product(pid)
        if not p: return
        self.inventory_service.set_quantity(pid, p.quantity + delta)
        self._refresh_products()

    def _product_restock(self):
        pid = self._selected_product_id()
        if not pid:
            QMessageBox.information(self, "Inventaire", "Sélectionne une ligne d’abord."); return
        p = self.inventory_service.get_product(pid)
        if not p: return
        dlg = RestockDialog(self, product=p, scanner_gap_ms=self.settings.scanner.gap_ms)
        if dlg.exec() != QDialog.Accepted:
            return
        code = dlg.get_code()
        if not code:
            QMessageBox.warning(self, "Réassort", "Code unique obligatoire."); return
        self.inventory_service.restock(pid, code)
        self._refresh_products()

    def _manage_sold_out(self):
        dlg = SoldOutDialog(self, inventory=self.inventory_service, scanner_gap_ms=self.settings.scanner.gap_ms)
        dlg.exec()
        if dlg.changed:
            self._refresh_products()

    def _inventory_import(self):
        path, _ = QFileDialog.getOpenFileName(self, "Importer un CSV", DATA_DIR, "CSV (*.csv)")
        if not path: return
        try:
            added, updated = self.inventory_service.import_csv(path)
        except (OSError, ValueError) as e:
            QMessageBox.critical(self, "Import CSV", str(e)); return
        self._refresh_products()
        QMessageBox.information(self, "Import CSV", f"{added} ajouté(s), {updated} mis à jour.")

    def _inventory_export(self):
        default = str(EXPORTS_DIR / "inventory.csv")
        path, _ = QFileDialog.getSaveFileName(self, "Exporter l'inventaire", default, "CSV (*.csv)")
        if not path: return
        try:
            out = self.inventory_service.export_csv(path)
        except (OSError, ValueError) as e:
            QMessageBox.warning(self, "Export CSV", str(e)); return
        QMessageBox.information(self, "Export CSV", f"Fichier généré :\n{out}")

    def _price_tags(self):
        products = self._selected_products()
        try:
            out = self.price_tag_service.export_pdf(products)
        except (OSError, RuntimeError, ValueError) as e:
            QMessageBox.warning(self, "Étiquettes", str(e)); return
        QMessageBox.information(self, "Étiquettes", f"Fichier généré :\n{out}")

    def _bill(self, products: List[Product]):
        if not products:
            QMessageBox.information(self, "Facture", "Aucune pièce à facturer."); return
        self._open_invoice_editor(products, "standard")

    def _open_invoice_editor(self, products: List[Product], invoice_type: str):
        # la session d'inventaire ne doit pas capter les touches du dialogue
        self.inventory_scanner.enabled = False
        try:
            dlg = InvoiceEditor(self, service=self.invoice_service, products=products, invoice_type=invoice_type)
            accepted = dlg.exec() == QDialog.Accepted
        finally:
            self.inventory_scanner.enabled = True
        if accepted and dlg.created:
            if invoice_type == "standard":
                self._clear_session()
            self._refresh_products()
            self._refresh_invoices()
            QMessageBox.information(self, "Facture", f"Facture n°{dlg.created.number} créée.")

    # ==================== FACTURES ====================
    def _invoices_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)

        bar = QHBoxLayout()
        btn_custom = QPushButton("Facture libre")
        btn_pdf = QPushButton("Générer PDF")
        btn_csv = QPushButton("Exporter CSV")
        btn_clear = QPushButton("Tout effacer")
        btn_reset = QPushButton("Compteur…")
        bar.addWidget(btn_custom); bar.addWidget(btn_pdf)
        bar.addStretch(1)
        for b in (btn_csv, btn_reset, btn_clear): bar.addWidget(b)
        root.addLayout(bar)

        self.tbl_invoices = _readonly_table(["Numéro", "Date", "Client", "Téléphone", "Type", "Total TTC", "ID"])
        root.addWidget(self.tbl_invoices, 1)

        btn_custom.clicked.connect(lambda: self._open_invoice_editor([], "custom"))
        btn_pdf.clicked.connect(self._invoice_export_pdf)
        btn_csv.clicked.connect(self._invoices_export_csv)
        btn_clear.clicked.connect(self._invoices_clear)
        btn_reset.clicked.connect(self._invoice_reset_number)

        self._refresh_invoices()
        return w

    def _refresh_invoices(self):
        invoices = self.invoice_service.list_invoices()
        self.tbl_invoices.setRowCount(0)
        for inv in invoices:
            r = self.tbl_invoices.rowCount(); self.tbl_invoices.insertRow(r)
            self.tbl_invoices.setItem(r, 0, QTableWidgetItem(str(inv.number)))
            self.tbl_invoices.setItem(r, 1, QTableWidgetItem(inv.date.strftime("%Y-%m-%d")))
            self.tbl_invoices.setItem(r, 2, QTableWidgetItem(inv.customer_name))
            self.tbl_invoices.setItem(r, 3, QTableWidgetItem(inv.customer_phone))
            self.tbl_invoices.setItem(r, 4, QTableWidgetItem(inv.title or inv.type))
            self.tbl_invoices.setItem(r, 5, QTableWidgetItem(self._money(inv.grand_total)))
            self.tbl_invoices.setItem(r, 6, QTableWidgetItem(inv.id))
        self.tbl_invoices.resizeRowsToContents()

    def _invoice_export_pdf(self):
        row = self.tbl_invoices.currentRow()
        if row < 0:
            QMessageBox.information(self, "Factures", "Sélectionne une facture."); return
        inv = self.invoice_service.get_by_id(self.tbl_invoices.item(row, 6).text())
        if not inv:
            QMessageBox.warning(self, "Factures", "Impossible de charger cette facture."); return
        try:
            out = self.invoice_service.export_invoice_pdf(inv)
            QMessageBox.information(self, "PDF facture", f"Fichier généré :\n{out}")
        except (OSError, RuntimeError) as e:
            QMessageBox.critical(self, "PDF facture", str(e))

    def _invoices_export_csv(self):
        default = str(EXPORTS_DIR / "invoices.csv")
        path, _ = QFileDialog.getSaveFileName(self, "Exporter les factures", default, "CSV (*.csv)")
        if not path: return
        try:
            out = self.invoice_service.export_csv(path)
        except (OSError, ValueError) as e:
            QMessageBox.warning(self, "Export CSV", str(e)); return
        QMessageBox.information(self, "Export CSV", f"Fichier généré :\n{out}")

    def _invoices_clear(self):
        if QMessageBox.question(self, "Suppression", "Effacer toutes les factures ?") == QMessageBox.Yes:
            self.invoice_service.clear_all()
            self._refresh_invoices()

    def _invoice_reset_number(self):
        dlg = ResetInvoiceNumberDialog(self, current=self.settings_service.peek_invoice_number())
        if dlg.exec() != QDialog.Accepted:
            return
        number = dlg.get_number()
        if number is None:
            QMessageBox.warning(self, "Compteur", "Numéro invalide."); return
        self.settings_service.reset_invoice_number(number)
        QMessageBox.information(self, "Compteur", f"Prochaine facture : {number}")

    # ==================== FOURNISSEURS ====================
    def _vendors_tab(self):
        w = QWidget()
        root = QVBoxLayout(w)

        bar = QHBoxLayout()
        btn_new = QPushButton("Nouveau fournisseur")
        btn_edit = QPushButton("Modifier")
        btn_del = QPushButton("Supprimer")
        for b in (btn_new, btn_edit, btn_del): bar.addWidget(b)
        bar.addStretch(1)
        root.addLayout(bar)

        self.tbl_vendors = _readonly_table(
            ["Nom", "Contact", "Approvisionnement", "Tissu", "Couture", "Notes", "ID"]
        )
        root.addWidget(self.tbl_vendors, 1)

        btn_new.clicked.connect(self._vendor_new)
        btn_edit.clicked.connect(self._vendor_edit)
        btn_del.clicked.connect(self._vendor_delete)

        self._refresh_vendors()
        return w

    def _refresh_vendors(self):
        self.tbl_vendors.setRowCount(0)
        for v in self.vendor_service.list_vendors():
            r = self.tbl_vendors.rowCount(); self.tbl_vendors.insertRow(r)
            self.tbl_vendors.setItem(r, 0, QTableWidgetItem(v.name))
            self.tbl_vendors.setItem(r, 1, QTableWidgetItem(v.contact))
            self.tbl_vendors.setItem(r, 2, QTableWidgetItem(v.sourcing_details))
            self.tbl_vendors.setItem(r, 3, QTableWidgetItem(self._money(v.fabric_cost)))
            self.tbl_vendors.setItem(r, 4, QTableWidgetItem(self._money(v.stitching_cost)))
            self.tbl_vendors.setItem(r, 5, QTableWidgetItem(v.notes))
            self.tbl_vendors.setItem(r, 6, QTableWidgetItem(v.id))
        self.tbl_vendors.resizeRowsToContents()

    def _selected_vendor_id(self) -> Optional[str]:
        row = self.tbl_vendors.currentRow()
        if row < 0: return None
        return self.tbl_vendors.item(row, 6).text()

    def _vendor_new(self):
        dlg = VendorForm(self)
        if dlg.exec() != QDialog.Accepted:
            return
        try:
            self.vendor_service.add_vendor(Vendor.model_validate(dlg.get_payload()))
        except ValueError as e:
            QMessageBox.warning(self, "Fournisseur", str(e)); return
        self._refresh_vendors()

    def _vendor_edit(self):
        vid = self._selected_vendor_id()
        if not vid:
            QMessageBox.information(self, "Fournisseurs", "Sélectionne une ligne d’abord."); return
        current = self.vendor_service.get_vendor(vid)
        if not current:
            QMessageBox.warning(self, "Fournisseurs", "Impossible de charger ce fournisseur."); return
        dlg = VendorForm(self, vendor=current)
        if dlg.exec() != QDialog.Accepted:
            return
        try:
            self.vendor_service.update_vendor(vid, **dlg.get_payload())
        except ValueError as e:
            QMessageBox.warning(self, "Fournisseur", str(e)); return
        self._refresh_vendors()

    def _vendor_delete(self):
        vid = self._selected_vendor_id()
        if not vid:
            QMessageBox.information(self, "Fournisseurs", "Sélectionne une ligne d’abord."); return
        if QMessageBox.question(self, "Suppression", "Supprimer ce fournisseur ?") == QMessageBox.Yes:
            self.vendor_service.delete_vendor(vid)
            self._refresh_vendors()

    # ==================== TABLEAU DE BORD ====================
    def _dashboard_tab(self):
        w = QWidget(); lay = QVBoxLayout(w)
        self.lbl_stats = QLabel()
        self.lbl_revenue = QLabel()
        self.tbl_top = _readonly_table(["Produit", "Qté"])
        lay.addWidget(self.lbl_stats)
        lay.addWidget(self.lbl_revenue)
        lay.addWidget(QLabel("Top 5 en stock"))
        lay.addWidget(self.tbl_top, 1)
        self._refresh_dashboard()
        return w

    def _refresh_dashboard(self):
        s = self.inventory_service.stats()
        self.lbl_stats.setText(
            f"Produits : {s['total_products']} | Pièces en stock : {s['total_items']} | Ruptures : {s['out_of_stock']}"
        )
        self.lbl_revenue.setText(f"Chiffre d'affaires : {self._money(self.invoice_service.total_revenue())}")
        self.tbl_top.setRowCount(0)
        for name, qty in self.inventory_service.top_stocked(5):
            r = self.tbl_top.rowCount(); self.tbl_top.insertRow(r)
            self.tbl_top.setItem(r, 0, QTableWidgetItem(name))
            self.tbl_top.setItem(r, 1, QTableWidgetItem(str(qty)))

    # ==================== PARAMÈTRES ====================
    def _settings_tab(self):
        w = QWidget(); lay = QVBoxLayout(w)
        path = os.path.join(DATA_DIR, "settings.json")
        lay.addWidget(QLabel(f"Paramètres: {path}"))
        wk = self.settings_service.find_wkhtmltopdf()
        lay.addWidget(QLabel(f"wkhtmltopdf : {wk or 'introuvable (WeasyPrint utilisé)'}"))
        btn_open = QPushButton("Ouvrir dossier data…")
        btn_open.clicked.connect(lambda: QFileDialog.getOpenFileName(self, "Ouvrir un fichier", DATA_DIR))
        lay.addWidget(btn_open)
        lay.addStretch(1)
        return w

    def _on_tab_changed(self, index: int):
        if self.tabs.tabText(index) == "Tableau de bord":
            self._refresh_dashboard()
