from PySide6.QtWidgets import (
    QFrame, QHBoxLayout, QHeaderView, QLabel, QTableWidget, QTableWidgetItem, QTabWidget,
    QVBoxLayout, QWidget,
)

from ...utils.helpers import fmt_money, fmt_qty


def _card(caption: str) -> tuple[QFrame, QLabel]:
    frame = QFrame()
    frame.setFrameShape(QFrame.StyledPanel)
    lay = QVBoxLayout(frame)
    cap = QLabel(caption)
    cap.setStyleSheet("color:#6b7280;")
    value = QLabel("0")
    value.setStyleSheet("font-size:16px; font-weight:600;")
    lay.addWidget(cap)
    lay.addWidget(value)
    return frame, value


def _table(headers) -> QTableWidget:
    tbl = QTableWidget(0, len(headers))
    tbl.setHorizontalHeaderLabels(headers)
    tbl.setEditTriggers(QTableWidget.NoEditTriggers)
    tbl.verticalHeader().setVisible(False)
    tbl.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
    return tbl


def _fill(tbl: QTableWidget, rows) -> None:
    tbl.setRowCount(0)
    for values in rows:
        r = tbl.rowCount()
        tbl.insertRow(r)
        for c, v in enumerate(values):
            tbl.setItem(r, c, QTableWidgetItem(str(v)))


class GrnAnalyticsPanel(QWidget):
    """Headline cards plus site / invoice / material breakdowns for the filtered GRNs."""

    def __init__(self, parent=None):
        super().__init__(parent)
        cards = QHBoxLayout()
        f1, self.val_grns = _card("Total GRNs")
        f2, self.val_invoices = _card("Invoices")
        f3, self.val_spend = _card("Total Spend")
        f4, self.val_materials = _card("Materials")
        for f in (f1, f2, f3, f4):
            cards.addWidget(f)

        self.tbl_sites = _table(["Site", "GRNs", "Invoices", "Materials", "Amount"])
        self.tbl_invoices = _table(["Invoice", "GRNs", "Materials", "Amount"])
        self.tbl_materials = _table(["Material", "Qty", "Price", "Discount", "Cost", "GRNs"])
        self.tabs = QTabWidget()
        self.tabs.addTab(self.tbl_sites, "By Site")
        self.tabs.addTab(self.tbl_invoices, "By Invoice")
        self.tabs.addTab(self.tbl_materials, "By Material")

        lay = QVBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addLayout(cards)
        lay.addWidget(self.tabs, 1)

    def set_data(self, a) -> None:
        self.val_grns.setText(str(a.total_grns))
        self.val_invoices.setText(str(a.total_invoices))
        self.val_spend.setText(fmt_money(a.total_spend))
        self.val_materials.setText(str(a.total_materials))
        _fill(self.tbl_sites, [
            (s.site_name, s.grn_count, s.invoice_count, s.material_count, fmt_money(s.total_amount))
            for s in a.site_summary
        ])
        _fill(self.tbl_invoices, [
            (i.invoice_number, i.grn_count, i.material_count, fmt_money(i.total_amount))
            for i in a.invoice_summary
        ])
        _fill(self.tbl_materials, [
            (m.material_name, fmt_qty(m.total_quantity), fmt_money(m.total_price),
             fmt_money(m.total_discount), fmt_money(m.total_cost), m.grn_count)
            for m in a.material_summary
        ])
