from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox, QHBoxLayout, QLabel, QLineEdit, QPushButton, QSplitter, QVBoxLayout, QWidget,
)

from ...constants import ORIGIN_PO, ORIGIN_ST
from ...widgets.banner import ErrorBanner
from ...widgets.pager import Pager
from ...widgets.table_view import TableView
from .details import DeliveryDetails

TYPE_ALL = "ALL"


class DeliveryView(QWidget):
    def __init__(self, parent=None, *, is_admin: bool = False):
        super().__init__(parent)
        root = QVBoxLayout(self)

        row = QHBoxLayout()
        self.btn_checklist = QPushButton("Receive Items…")
        self.btn_upload = QPushButton("Upload Receipts…")
        self.btn_delete = QPushButton("Delete")
        self.btn_delete_all = QPushButton("Delete All")
        self.btn_delete_all.setStyleSheet("color:#b10000;")
        self.btn_refresh = QPushButton("Refresh")
        for b in (self.btn_checklist, self.btn_upload, self.btn_delete, self.btn_delete_all):
            row.addWidget(b)
        row.addStretch(1)
        row.addWidget(QLabel("Type:"))
        self.cmb_type = QComboBox()
        self.cmb_type.addItem("All", TYPE_ALL)
        self.cmb_type.addItem("Purchase Orders", ORIGIN_PO)
        self.cmb_type.addItem("Site Transfers", ORIGIN_ST)
        row.addWidget(self.cmb_type)
        row.addWidget(QLabel("Search:"))
        self.search = QLineEdit()
        self.search.setPlaceholderText("Reference, site…")
        self.search.setMaximumWidth(220)
        row.addWidget(self.search)
        row.addWidget(self.btn_refresh)
        root.addLayout(row)

        for b in (self.btn_delete, self.btn_delete_all):
            b.setVisible(is_admin)

        self.banner = ErrorBanner()
        root.addWidget(self.banner)

        split = QSplitter(Qt.Horizontal)
        self.table = TableView()
        split.addWidget(self.table)
        self.details = DeliveryDetails()
        split.addWidget(self.details)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)
        root.addWidget(split, 1)

        self.pager = Pager()
        root.addWidget(self.pager)

    def type_filter(self) -> str:
        return self.cmb_type.currentData() or TYPE_ALL

    def set_busy(self, busy: bool) -> None:
        for b in (self.btn_checklist, self.btn_upload, self.btn_delete, self.btn_delete_all,
                  self.btn_refresh, self.pager):
            b.setEnabled(not busy)
