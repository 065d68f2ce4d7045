from PySide6.QtCore import Qt
from PySide6.QtWidgets import QHBoxLayout, QLabel, QLineEdit, QPushButton, QSplitter, QVBoxLayout, QWidget

from ...widgets.banner import ErrorBanner
from ...widgets.pager import Pager
from ...widgets.table_view import TableView
from .details import IntentDetails


class IntentView(QWidget):
    def __init__(self, parent=None, *, is_admin: bool = False):
        super().__init__(parent)
        root = QVBoxLayout(self)

        row = QHBoxLayout()
        self.btn_add = QPushButton("New Intent")
        self.btn_status = QPushButton("Update Status")
        self.btn_delete = QPushButton("Delete")
        self.btn_del_attachment = QPushButton("Delete Attachment")
        self.btn_refresh = QPushButton("Refresh")
        for b in (self.btn_add, self.btn_status, self.btn_delete, self.btn_del_attachment):
            row.addWidget(b)
        row.addStretch(1)
        row.addWidget(QLabel("Search:"))
        self.search = QLineEdit()
        self.search.setPlaceholderText("Intent ID, site, requester…")
        self.search.setMaximumWidth(240)
        row.addWidget(self.search)
        row.addWidget(self.btn_refresh)
        root.addLayout(row)

        # admin-only actions
        for b in (self.btn_status, self.btn_delete, self.btn_del_attachment):
            b.setVisible(is_admin)

        self.banner = ErrorBanner()
        root.addWidget(self.banner)

        split = QSplitter(Qt.Horizontal)
        self.table = TableView()
        split.addWidget(self.table)
        self.details = IntentDetails()
        split.addWidget(self.details)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)
        root.addWidget(split, 1)

        self.pager = Pager()
        root.addWidget(self.pager)

    def set_busy(self, busy: bool) -> None:
        for b in (self.btn_add, self.btn_status, self.btn_delete, self.btn_del_attachment, self.btn_refresh, self.pager):
            b.setEnabled(not busy)
