from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCheckBox, QComboBox, QDateEdit, QHBoxLayout, QLabel, QLineEdit, QPushButton, QSplitter,
    QVBoxLayout, QWidget,
)

from ...constants import ORIGIN_PO, ORIGIN_ST
from ...widgets.banner import ErrorBanner
from ...widgets.table_view import TableView
from ..delivery_utilities.grn import GrnFilters
from .analytics import GrnAnalyticsPanel


class GrnView(QWidget):
    def __init__(self, parent=None, *, can_bill: bool = True):
        super().__init__(parent)
        root = QVBoxLayout(self)

        actions = QHBoxLayout()
        self.btn_billing = QPushButton("Billing…")
        self.btn_billing.setVisible(can_bill)
        self.btn_export_pdf = QPushButton("Export PDF")
        self.btn_export_xlsx = QPushButton("Export Excel")
        self.btn_refresh = QPushButton("Refresh")
        for b in (self.btn_billing, self.btn_export_pdf, self.btn_export_xlsx):
            actions.addWidget(b)
        actions.addStretch(1)
        actions.addWidget(self.btn_refresh)
        root.addLayout(actions)

        # ---- filters ----
        filters = QHBoxLayout()
        self.search = QLineEdit()
        self.search.setPlaceholderText("GRN, site, invoice…")
        self.cmb_site = QComboBox()
        self.cmb_site.addItem("All sites", "")
        self.cmb_origin = QComboBox()
        self.cmb_origin.addItem("All", "")
        self.cmb_origin.addItem("PO", ORIGIN_PO)
        self.cmb_origin.addItem("ST", ORIGIN_ST)
        self.txt_invoice = QLineEdit()
        self.txt_invoice.setPlaceholderText("Invoice no.")
        self.chk_dates = QCheckBox("From")
        self.date_from = QDateEdit(QDate.currentDate().addMonths(-1))
        self.date_to = QDateEdit(QDate.currentDate())
        for d in (self.date_from, self.date_to):
            d.setCalendarPopup(True)
            d.setEnabled(False)
        self.chk_dates.toggled.connect(self.date_from.setEnabled)
        self.chk_dates.toggled.connect(self.date_to.setEnabled)
        self.btn_clear = QPushButton("Clear")

        filters.addWidget(QLabel("Search:"))
        filters.addWidget(self.search, 2)
        filters.addWidget(QLabel("Site:"))
        filters.addWidget(self.cmb_site, 1)
        filters.addWidget(QLabel("Type:"))
        filters.addWidget(self.cmb_origin)
        filters.addWidget(self.txt_invoice, 1)
        filters.addWidget(self.chk_dates)
        filters.addWidget(self.date_from)
        filters.addWidget(QLabel("to"))
        filters.addWidget(self.date_to)
        filters.addWidget(self.btn_clear)
        root.addLayout(filters)

        self.banner = ErrorBanner()
        root.addWidget(self.banner)

        split = QSplitter(Qt.Vertical)
        self.table = TableView()
        split.addWidget(self.table)
        self.analytics = GrnAnalyticsPanel()
        split.addWidget(self.analytics)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)
        root.addWidget(split, 1)

    def filters(self) -> GrnFilters:
        use_dates = self.chk_dates.isChecked()
        return GrnFilters(
            search=self.search.text(),
            site=self.cmb_site.currentData() or "",
            origin_kind=self.cmb_origin.currentData() or "",
            invoice_number=self.txt_invoice.text(),
            date_from=self.date_from.date().toPython() if use_dates else None,
            date_to=self.date_to.date().toPython() if use_dates else None,
        )

    def clear_filters(self) -> None:
        for w in (self.search, self.txt_invoice):
            w.clear()
        self.cmb_site.setCurrentIndex(0)
        self.cmb_origin.setCurrentIndex(0)
        self.chk_dates.setChecked(False)

    def set_sites(self, sites) -> None:
        current = self.cmb_site.currentData() or ""
        self.cmb_site.blockSignals(True)
        self.cmb_site.clear()
        self.cmb_site.addItem("All sites", "")
        for s in sites:
            self.cmb_site.addItem(s, s)
        idx = self.cmb_site.findData(current)
        self.cmb_site.setCurrentIndex(idx if idx >= 0 else 0)
        self.cmb_site.blockSignals(False)

    def set_busy(self, busy: bool) -> None:
        for b in (self.btn_billing, self.btn_export_pdf, self.btn_export_xlsx, self.btn_refresh):
            b.setEnabled(not busy)
