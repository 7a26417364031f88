from PyQt5.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QGridLayout,
    QScrollArea, QFrame, QLineEdit, QHeaderView, QTableWidget, QTableWidgetItem,
    QDialog, QMessageBox, QSizePolicy, QComboBox, QFormLayout
)
from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QPixmap, QPainter, QFont
from PyQt5.QtPrintSupport import QPrinter, QPrintDialog
import os

from constants import CATEGORIES, DEFAULT_CATEGORY, tr
from products import ProductValidationError, validate_product_form

# --- CUSTOM WIDGETS ---

class ProductTile(QFrame):
    clicked = pyqtSignal(str) # emits product id

    def __init__(self, product, lang='en'):
        super().__init__()
        self.setObjectName("ProductTile")
        self.product_id = product.id
        self.setFixedSize(200, 170)
        self.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Fixed)
        self.setCursor(Qt.PointingHandCursor)

        layout = QVBoxLayout()
        layout.setContentsMargins(10, 10, 10, 10)

        self.lbl_name = QLabel(product.name(lang))
        self.lbl_name.setObjectName("ProductName")
        self.lbl_name.setWordWrap(True)
        self.lbl_name.setFont(QFont("Segoe UI", 12, QFont.Bold))

        self.lbl_category = QLabel(product.category)
        self.lbl_category.setStyleSheet("color: #7F8C8D;")

        self.lbl_price = QLabel(f"{product.price:.2f} {tr('currency', lang)}")
        self.lbl_price.setObjectName("ProductPrice")
        self.lbl_price.setStyleSheet("color: #10b981; font-weight: bold; font-size: 13pt;")

        layout.addWidget(self.lbl_name)
        layout.addWidget(self.lbl_category)
        layout.addStretch()
        layout.addWidget(self.lbl_price)
        self.setLayout(layout)

    def mousePressEvent(self, event):
        self.clicked.emit(self.product_id)

# --- SCREENS ---

class PosScreen(QWidget):
    # Signals to Controller
    search_query = pyqtSignal(str)
    scan_submitted = pyqtSignal(str)
    item_added = pyqtSignal(str) # product id
    remove_item = pyqtSignal(str)
    update_qty = pyqtSignal(str, int) # product id, change (+1/-1)
    clear_cart_requested = pyqtSignal()
    checkout_requested = pyqtSignal()

    GRID_COLUMNS = 3

    def __init__(self):
        super().__init__()
        self.setObjectName("PosScreen")
        self.lang = 'en'

        content_layout = QHBoxLayout()

        # Left side: search field + product grid
        left_panel = QWidget()
        left_vbox = QVBoxLayout()

        self.search_input = QLineEdit()
        self.search_input.setMinimumHeight(50)
        self.search_input.textChanged.connect(self.search_query.emit)
        # scanners type the code and send Enter
        self.search_input.returnPressed.connect(lambda: self.scan_submitted.emit(self.search_input.text()))

        self.grid_layout = QGridLayout()
        self.grid_layout.setSpacing(16)
        self.grid_layout.setAlignment(Qt.AlignTop | Qt.AlignLeft)
        grid_widget = QWidget()
        grid_widget.setLayout(self.grid_layout)
        grid_scroll = QScrollArea()
        grid_scroll.setWidgetResizable(True)
        grid_scroll.setWidget(grid_widget)

        left_vbox.addWidget(self.search_input)
        left_vbox.addWidget(grid_scroll)
        left_panel.setLayout(left_vbox)

        # Right side: cart
        self.cart_panel = QWidget()
        self.cart_panel.setObjectName("CartPanel")
        self.cart_panel.setMinimumWidth(420)
        cart_layout = QVBoxLayout()

        head = QHBoxLayout()
        self.lbl_cart = QLabel()
        self.lbl_cart.setFont(QFont("Segoe UI", 18, QFont.Bold))
        self.btn_clear = QPushButton()
        self.btn_clear.setStyleSheet("color: #E74C3C;")
        self.btn_clear.clicked.connect(self.clear_cart_requested.emit)
        head.addWidget(self.lbl_cart)
        head.addStretch()
        head.addWidget(self.btn_clear)

        self.cart_table = QTableWidget()
        self.cart_table.setColumnCount(4)
        self.cart_table.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        self.cart_table.horizontalHeader().setSectionResizeMode(1, QHeaderView.ResizeToContents)
        self.cart_table.horizontalHeader().setSectionResizeMode(2, QHeaderView.ResizeToContents)
        self.cart_table.horizontalHeader().setSectionResizeMode(3, QHeaderView.Fixed)
        self.cart_table.setColumnWidth(3, 60)
        self.cart_table.verticalHeader().setVisible(False)

        self.lbl_empty = QLabel()
        self.lbl_empty.setAlignment(Qt.AlignCenter)
        self.lbl_empty.setStyleSheet("color: #95A5A6;")

        self.lbl_subtotal = QLabel()
        self.lbl_vat = QLabel()
        self.lbl_total = QLabel()
        self.lbl_total.setStyleSheet("font-size: 20pt; font-weight: bold;")

        self.btn_checkout = QPushButton()
        self.btn_checkout.setObjectName("CheckoutBtn")
        self.btn_checkout.setMinimumHeight(50)
        self.btn_checkout.clicked.connect(self.checkout_requested.emit)

        cart_layout.addLayout(head)
        cart_layout.addWidget(self.cart_table)
        cart_layout.addWidget(self.lbl_empty)
        cart_layout.addWidget(self.lbl_subtotal)
        cart_layout.addWidget(self.lbl_vat)
        cart_layout.addWidget(self.lbl_total)
        cart_layout.addWidget(self.btn_checkout)
        self.cart_panel.setLayout(cart_layout)

        content_layout.addWidget(left_panel, 1)
        content_layout.addWidget(self.cart_panel, 0)
        self.setLayout(content_layout)

        self.retranslate('en')
        self.update_cart_display([], {'subtotal': 0.0, 'vat': 0.0, 'total': 0.0})

    def retranslate(self, lang):
        self.lang = lang
        self.search_input.setPlaceholderText(tr('searchPlaceholder', lang))
        self.lbl_cart.setText(tr('pos', lang))
        self.btn_clear.setText(tr('clearCart', lang))
        self.btn_checkout.setText(tr('checkout', lang))
        self.lbl_empty.setText(tr('emptyCart', lang))
        self.cart_table.setHorizontalHeaderLabels([tr('item', lang), tr('qty', lang), tr('total', lang), tr('actions', lang)])

    def clear_search(self):
        # blockSignals keeps the clear from re-running the search twice
        self.search_input.blockSignals(True)
        self.search_input.clear()
        self.search_input.blockSignals(False)
        self.search_query.emit('')

    def update_grid(self, products):
        while self.grid_layout.count():
            child = self.grid_layout.takeAt(0)
            if child.widget():
                child.widget().deleteLater()

        for idx, product in enumerate(products):
            tile = ProductTile(product, self.lang)
            tile.clicked.connect(self.item_added.emit)
            self.grid_layout.addWidget(tile, idx // self.GRID_COLUMNS, idx % self.GRID_COLUMNS)

    def update_cart_display(self, cart_items, totals):
        lang = self.lang
        currency = tr('currency', lang)
        self.cart_table.setRowCount(0)
        self.cart_table.setRowCount(len(cart_items))

        for row, item in enumerate(cart_items):
            name_item = QTableWidgetItem(f"{item.product.name(lang)}\n{item.price:.2f} x {item.quantity}")
            self.cart_table.setItem(row, 0, name_item)

            qty_widget = QWidget()
            qty_lay = QHBoxLayout()
            qty_lay.setContentsMargins(0, 0, 0, 0)
            btn_minus = QPushButton("-")
            btn_minus.setFixedSize(32, 32)
            btn_minus.clicked.connect(lambda ch, i=item.id: self.update_qty.emit(i, -1))
            lbl_q = QLabel(str(item.quantity))
            lbl_q.setFixedWidth(36)
            lbl_q.setAlignment(Qt.AlignCenter)
            btn_plus = QPushButton("+")
            btn_plus.setFixedSize(32, 32)
            btn_plus.clicked.connect(lambda ch, i=item.id: self.update_qty.emit(i, 1))
            qty_lay.addWidget(btn_minus)
            qty_lay.addWidget(lbl_q)
            qty_lay.addWidget(btn_plus)
            qty_widget.setLayout(qty_lay)
            self.cart_table.setCellWidget(row, 1, qty_widget)

            self.cart_table.setItem(row, 2, QTableWidgetItem(f"{item.line_total:.2f}"))

            btn_rem = QPushButton("x")
            btn_rem.setStyleSheet("background-color: #E74C3C; color: white;")
            btn_rem.clicked.connect(lambda ch, i=item.id: self.remove_item.emit(i))
            self.cart_table.setCellWidget(row, 3, btn_rem)

        self.cart_table.resizeRowsToContents()
        self.lbl_empty.setVisible(not cart_items)
        self.btn_checkout.setEnabled(bool(cart_items))

        self.lbl_subtotal.setText(f"{tr('subtotal', lang)}: {totals['subtotal']:,.2f} {currency}")
        self.lbl_vat.setText(f"{tr('vat', lang)}: {totals['vat']:,.2f} {currency}")
        self.lbl_total.setText(f"{tr('total', lang)}: {totals['total']:,.2f} {currency}")


class ProductsPanel(QWidget):
    add_requested = pyqtSignal()
    edit_requested = pyqtSignal(str)
    delete_requested = pyqtSignal(str)

    def __init__(self):
        super().__init__()
        self.lang = 'en'
        layout = QVBoxLayout()

        ctrl = QHBoxLayout()
        self.lbl_title = QLabel()
        self.lbl_title.setStyleSheet("font-size: 20pt; font-weight: bold;")
        self.btn_add = QPushButton()
        self.btn_edit = QPushButton()
        self.btn_del = QPushButton()
        ctrl.addWidget(self.lbl_title)
        ctrl.addStretch()
        ctrl.addWidget(self.btn_add)
        ctrl.addWidget(self.btn_edit)
        ctrl.addWidget(self.btn_del)

        self.table = QTableWidget()
        self.table.setColumnCount(6)
        self.table.setSelectionBehavior(QTableWidget.SelectRows)
        self.table.setSelectionMode(QTableWidget.SingleSelection)
        self.table.setEditTriggers(QTableWidget.NoEditTriggers)
        self.table.horizontalHeader().setSectionResizeMode(QHeaderView.Stretch)
        self.table.verticalHeader().setVisible(False)

        layout.addLayout(ctrl)
        layout.addWidget(self.table)
        self.setLayout(layout)

        self.btn_add.clicked.connect(self.add_requested.emit)
        self.btn_edit.clicked.connect(self._on_edit)
        self.btn_del.clicked.connect(self._on_delete)

        self.retranslate('en')

    def retranslate(self, lang):
        self.lang = lang
        self.lbl_title.setText(tr('products', lang))
        self.btn_add.setText(tr('addProduct', lang))
        self.btn_edit.setText(tr('edit', lang))
        self.btn_del.setText(tr('delete', lang))
        self.table.setHorizontalHeaderLabels([
            tr('barcode', lang), tr('nameEn', lang), tr('nameAr', lang),
            tr('price', lang), tr('category', lang), "ID",
        ])

    def populate(self, products):
        self.table.setRowCount(0)
        for row, p in enumerate(products):
            self.table.insertRow(row)
            self.table.setItem(row, 0, QTableWidgetItem(p.barcode))
            self.table.setItem(row, 1, QTableWidgetItem(p.name_en))
            self.table.setItem(row, 2, QTableWidgetItem(p.name_ar))
            self.table.setItem(row, 3, QTableWidgetItem(f"{p.price:.2f}"))
            self.table.setItem(row, 4, QTableWidgetItem(p.category))
            self.table.setItem(row, 5, QTableWidgetItem(p.id))

    def _selected_id(self):
        sel = self.table.currentRow()
        if sel < 0:
            return None
        item = self.table.item(sel, 5)
        return item.text() if item else None

    def _on_edit(self):
        sel_id = self._selected_id()
        if sel_id is None:
            QMessageBox.warning(self, tr('edit', self.lang), tr('selectProduct', self.lang))
            return
        self.edit_requested.emit(sel_id)

    def _on_delete(self):
        sel_id = self._selected_id()
        if sel_id is None:
            QMessageBox.warning(self, tr('delete', self.lang), tr('selectProduct', self.lang))
            return
        if QMessageBox.question(self, tr('delete', self.lang), tr('confirmDelete', self.lang),
                                QMessageBox.Yes | QMessageBox.No) == QMessageBox.Yes:
            self.delete_requested.emit(sel_id)


class ProductEditorDialog(QDialog):
    """Add/edit form. Input is validated here, before it reaches the catalog."""

    def __init__(self, catalog=None, product=None, lang='en'):
        super().__init__()
        self.catalog = catalog
        self.product = product
        self.lang = lang
        self.result_product = None
        self.setWindowTitle(tr('edit', lang) if product else tr('addProduct', lang))
        self.setMinimumSize(480, 300)

        layout = QVBoxLayout()
        form = QFormLayout()

        self.input_barcode = QLineEdit()
        self.input_price = QLineEdit()
        self.input_name_en = QLineEdit()
        self.input_name_ar = QLineEdit()
        self.input_name_ar.setLayoutDirection(Qt.RightToLeft)
        self.input_cat = QComboBox()
        self.input_cat.addItems(CATEGORIES)
        self.input_cat.setCurrentText(DEFAULT_CATEGORY)

        form.addRow(tr('barcode', lang), self.input_barcode)
        form.addRow(tr('price', lang), self.input_price)
        form.addRow(tr('nameEn', lang), self.input_name_en)
        form.addRow(tr('nameAr', lang), self.input_name_ar)
        form.addRow(tr('category', lang), self.input_cat)

        btns = QHBoxLayout()
        btn_cancel = QPushButton(tr('cancel', lang))
        btn_save = QPushButton(tr('save', lang))
        btn_save.setDefault(True)
        btn_save.clicked.connect(self._on_save)
        btn_cancel.clicked.connect(self.reject)
        btns.addWidget(btn_cancel)
        btns.addWidget(btn_save)

        layout.addLayout(form)
        layout.addLayout(btns)
        self.setLayout(layout)

        if self.product:
            self.input_barcode.setText(self.product.barcode)
            self.input_price.setText(f"{self.product.price:.2f}")
            self.input_name_en.setText(self.product.name_en)
            self.input_name_ar.setText(self.product.name_ar)
            if self.product.category in CATEGORIES:
                self.input_cat.setCurrentText(self.product.category)

    def form_data(self):
        return {
            'barcode': self.input_barcode.text(),
            'price': self.input_price.text(),
            'name_en': self.input_name_en.text(),
            'name_ar': self.input_name_ar.text(),
            'category': self.input_cat.currentText(),
        }

    def _on_save(self):
        try:
            self.result_product = validate_product_form(
                self.form_data(),
                product_id=self.product.id if self.product else None,
                catalog=self.catalog,
            )
        except ProductValidationError as e:
            QMessageBox.warning(self, "Validation", "\n".join(e.errors.values()))
            return
        self.accept()


class ReceiptDialog(QDialog):
    def __init__(self, png_path=None, lang='en'):
        super().__init__()
        self.png_path = png_path
        self.setWindowTitle(tr('invoice', lang))
        self.setMinimumSize(440, 660)
        layout = QVBoxLayout()

        self._pixmap = QPixmap(png_path) if png_path and os.path.exists(png_path) else QPixmap()
        lbl = QLabel()
        lbl.setAlignment(Qt.AlignCenter)
        if not self._pixmap.isNull():
            lbl.setPixmap(self._pixmap.scaled(400, 580, Qt.KeepAspectRatio, Qt.SmoothTransformation))
        else:
            lbl.setText("Receipt preview not available")
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(lbl)
        layout.addWidget(scroll)

        btns = QHBoxLayout()
        self.btn_print = QPushButton(tr('print', lang))
        self.btn_print.setEnabled(not self._pixmap.isNull())
        btn_close = QPushButton(tr('close', lang))
        btns.addWidget(self.btn_print)
        btns.addWidget(btn_close)
        layout.addLayout(btns)

        self.btn_print.clicked.connect(self.print_receipt)
        btn_close.clicked.connect(self.accept)
        self.setLayout(layout)

    def print_receipt(self):
        printer = QPrinter(QPrinter.HighResolution)
        dlg = QPrintDialog(printer, self)
        if dlg.exec_() != QDialog.Accepted:
            return
        painter = QPainter(printer)
        try:
            rect = painter.viewport()
            size = self._pixmap.size()
            size.scale(rect.size(), Qt.KeepAspectRatio)
            painter.setViewport(rect.x(), rect.y(), size.width(), size.height())
            painter.setWindow(self._pixmap.rect())
            painter.drawPixmap(0, 0, self._pixmap)
        finally:
            painter.end()


class Sidebar(QWidget):
    view_selected = pyqtSignal(str) # 'pos' | 'products' | 'reports'
    language_toggled = pyqtSignal()
    download_requested = pyqtSignal()

    def __init__(self):
        super().__init__()
        self.setObjectName("Sidebar")
        self.setFixedWidth(200)
        layout = QVBoxLayout()

        self.lbl_brand = QLabel()
        self.lbl_brand.setFont(QFont("Segoe UI", 16, QFont.Bold))
        layout.addWidget(self.lbl_brand)
        layout.addSpacing(20)

        self.nav_buttons = {}
        for key in ('pos', 'products', 'reports'):
            btn = QPushButton()
            btn.setCheckable(True)
            btn.setMinimumHeight(44)
            btn.clicked.connect(lambda ch, k=key: self.view_selected.emit(k))
            self.nav_buttons[key] = btn
            layout.addWidget(btn)
        layout.addStretch()

        self.btn_lang = QPushButton()
        self.btn_lang.clicked.connect(self.language_toggled.emit)
        self.btn_download = QPushButton()
        self.btn_download.clicked.connect(self.download_requested.emit)
        layout.addWidget(self.btn_lang)
        layout.addWidget(self.btn_download)
        self.setLayout(layout)

        self.retranslate('en')
        self.set_current('pos')

    def retranslate(self, lang):
        self.lbl_brand.setText(tr('app_title', lang))
        for key, btn in self.nav_buttons.items():
            btn.setText(tr(key, lang))
        self.btn_lang.setText(tr('language', lang))
        self.btn_download.setText(tr('downloadData', lang))

    def set_current(self, key):
        for k, btn in self.nav_buttons.items():
            btn.setChecked(k == key)
