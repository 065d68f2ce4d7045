from PySide6.QtCore import Signal
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QWidget


class Pager(QWidget):
    page_requested = Signal(int)

    def __init__(self, parent=None):
        super().__init__(parent)
        self.page = 1
        self.total_pages = 1
        self.btn_prev = QPushButton("‹ Prev")
        self.btn_next = QPushButton("Next ›")
        self.lbl = QLabel("Page 1 of 1")
        self.btn_prev.clicked.connect(lambda: self.page_requested.emit(self.page - 1))
        self.btn_next.clicked.connect(lambda: self.page_requested.emit(self.page + 1))

        lay = QHBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addStretch(1)
        lay.addWidget(self.btn_prev)
        lay.addWidget(self.lbl)
        lay.addWidget(self.btn_next)
        self.set_page(1, 1, 0)

    def set_page(self, page: int, total_pages: int, total: int) -> None:
        self.page = max(1, int(page or 1))
        self.total_pages = max(1, int(total_pages or 1))
        self.lbl.setText(f"Page {self.page} of {self.total_pages} ({total} records)")
        self.btn_prev.setEnabled(self.page > 1)
        self.btn_next.setEnabled(self.page < self.total_pages)
