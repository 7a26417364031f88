from PyQt5.QtWidgets import (
    QMainWindow,
    QMessageBox,
    QStackedWidget,
    QDialog,
    QFileDialog,
    QWidget,
    QHBoxLayout,
)
from PyQt5.QtCore import Qt
import logging
import os

from view import PosScreen, ProductsPanel, ProductEditorDialog, ReceiptDialog, Sidebar
from datavisualization import VizPanel
from invoice import build_invoice, ReceiptGenerator
from products import ProductNotFoundError
from services import CartService, CheckoutService, ReportService, BackupService
from constants import tr

logger = logging.getLogger(__name__)


class MainController(QMainWindow):
    def __init__(self, catalog, ledger, settings, receipts_dir=None):
        super().__init__()
        self.resize(1280, 800)

        # Owned state, injected by main()
        self.catalog = catalog
        self.ledger = ledger
        self.settings = settings
        self.cart_service = CartService(catalog)
        self.checkout_service = CheckoutService(ledger)
        self.reports = ReportService(ledger)
        self.backup = BackupService(catalog, ledger)
        self.receipts_dir = receipts_dir
        self.search_text = ""

        # Screens
        self.sidebar = Sidebar()
        self.stack = QStackedWidget()
        self.pos = PosScreen()
        self.products_panel = ProductsPanel()
        self.viz = VizPanel(self.reports, settings.language)
        self.stack.addWidget(self.pos)
        self.stack.addWidget(self.products_panel)
        self.stack.addWidget(self.viz)

        central = QWidget()
        root = QHBoxLayout()
        root.setContentsMargins(0, 0, 0, 0)
        root.addWidget(self.sidebar)
        root.addWidget(self.stack, 1)
        central.setLayout(root)
        self.setCentralWidget(central)

        # Connect Signals
        self.sidebar.view_selected.connect(self.show_view)
        self.sidebar.language_toggled.connect(self.toggle_language)
        self.sidebar.download_requested.connect(self.download_data)
        self.pos.search_query.connect(self.filter_search)
        self.pos.scan_submitted.connect(self.handle_scan)
        self.pos.item_added.connect(self.add_to_cart)
        self.pos.update_qty.connect(self.update_cart_qty)
        self.pos.remove_item.connect(self.remove_from_cart)
        self.pos.clear_cart_requested.connect(self.clear_cart)
        self.pos.checkout_requested.connect(self.initiate_checkout)
        self.products_panel.add_requested.connect(lambda: self.open_product_editor(None))
        self.products_panel.edit_requested.connect(self.open_product_editor)
        self.products_panel.delete_requested.connect(self.delete_product)

        self.cart_service.subscribe(lambda _service: self.update_cart_ui())

        # Initial Load
        self.apply_language()
        self.load_products()

    # --- NAV ---
    def show_view(self, key):
        widget = {'pos': self.pos, 'products': self.products_panel, 'reports': self.viz}[key]
        if key == 'reports':
            self.viz.refresh_charts()
        self.stack.setCurrentWidget(widget)
        self.sidebar.set_current(key)

    # --- LANGUAGE ---
    def toggle_language(self):
        self.settings.toggle_language()
        self.apply_language()
        self.load_products()

    def apply_language(self):
        lang = self.settings.language
        self.setWindowTitle(tr('app_title', lang))
        self.setLayoutDirection(Qt.RightToLeft if lang == 'ar' else Qt.LeftToRight)
        self.sidebar.retranslate(lang)
        self.pos.retranslate(lang)
        self.products_panel.retranslate(lang)
        self.viz.set_language(lang)
        self.update_cart_ui()

    # --- DATA ---
    def load_products(self):
        self.pos.update_grid(self.catalog.search(self.search_text))
        self.products_panel.populate(self.catalog.list_products())

    def filter_search(self, text):
        self.search_text = text
        self.pos.update_grid(self.catalog.search(text))

    def handle_scan(self, text):
        if self.cart_service.scan(text):
            self.pos.clear_search()

    # --- CART LOGIC ---
    def add_to_cart(self, product_id):
        self.cart_service.add_by_id(product_id)

    def update_cart_qty(self, product_id, change):
        self.cart_service.set_quantity_delta(product_id, change)

    def remove_from_cart(self, product_id):
        self.cart_service.remove(product_id)

    def clear_cart(self):
        self.cart_service.clear()

    def update_cart_ui(self):
        self.pos.update_cart_display(self.cart_service.items, self.cart_service.compute_totals())

    # --- CHECKOUT ---
    def initiate_checkout(self):
        transaction = self.checkout_service.checkout(self.cart_service)
        if transaction is None:
            return None
        self.show_invoice(transaction)
        return transaction

    def render_invoice(self, transaction):
        invoice = build_invoice(transaction, self.settings.language)
        return ReceiptGenerator.generate(invoice, self.receipts_dir)

    def show_invoice(self, transaction):
        try:
            png = self.render_invoice(transaction)
        except (OSError, ValueError) as e:
            # the sale is already recorded; only the receipt image failed
            logger.exception("Could not render invoice for %s", transaction.id)
            QMessageBox.warning(self, "Receipt", f"Sale saved, but the receipt could not be rendered:\n{e}")
            return None
        dlg = ReceiptDialog(png_path=png, lang=self.settings.language)
        dlg.exec_()
        return png

    # --- CATALOG ---
    def open_product_editor(self, product_id=None):
        product = self.catalog.get_product(product_id) if product_id else None
        dlg = ProductEditorDialog(catalog=self.catalog, product=product, lang=self.settings.language)
        if dlg.exec_() != QDialog.Accepted:
            return
        self.save_product(dlg.result_product, is_new=product is None)

    def save_product(self, product, is_new):
        try:
            if is_new:
                self.catalog.add_product(product)
            else:
                self.catalog.update_product(product)
        except ProductNotFoundError:
            QMessageBox.warning(self, "Products", "This product no longer exists.")
        self.load_products()

    def delete_product(self, product_id):
        self.catalog.delete_product(product_id)
        self.load_products()

    # --- EXPORT ---
    def download_data(self):
        lang = self.settings.language
        # the file is always named pos_backup_<date>.json; only the folder is asked for
        directory = QFileDialog.getExistingDirectory(self, tr('downloadData', lang), os.path.expanduser("~"))
        if not directory:
            return
        try:
            path = self.backup.write_backup(directory)
        except OSError as e:
            logger.exception("Backup failed")
            QMessageBox.critical(self, "Error", f"Could not save data: {e}")
            return
        QMessageBox.information(self, tr('downloadData', lang), path)
