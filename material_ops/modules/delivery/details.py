from PySide6.QtWidgets import (
    QFormLayout, QGroupBox, QHeaderView, QLabel, QListWidget, QTableWidget,
    QTableWidgetItem, QVBoxLayout, QWidget,
)

from ...utils.helpers import fmt_date, fmt_money, fmt_qty
from ...widgets.status_badge import StatusBadge
from ..delivery_utilities.status import display_status


class DeliveryDetails(QWidget):
    ITEM_COLS = ["Material", "ST Qty", "Received", "UOM", "✓"]

    def __init__(self, parent=None):
        super().__init__(parent)
        box = QGroupBox("Delivery")
        f = QFormLayout(box)
        self.badge = StatusBadge()
        self.lab_ref = QLabel("-")
        self.lab_type = QLabel("-")
        self.lab_route = QLabel("-")
        self.lab_date = QLabel("-")
        self.lab_by = QLabel("-")
        self.lab_invoice = QLabel("-")
        self.lab_amount = QLabel("-")
        f.addRow("Status:", self.badge)
        f.addRow("Reference:", self.lab_ref)
        f.addRow("Type:", self.lab_type)
        f.addRow("Route:", self.lab_route)
        f.addRow("Date:", self.lab_date)
        f.addRow("Created By:", self.lab_by)
        f.addRow("Invoice:", self.lab_invoice)
        f.addRow("Bill Amount:", self.lab_amount)

        self.items = QTableWidget(0, len(self.ITEM_COLS))
        self.items.setHorizontalHeaderLabels(self.ITEM_COLS)
        self.items.setEditTriggers(QTableWidget.NoEditTriggers)
        self.items.verticalHeader().setVisible(False)
        self.items.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)

        self.attachments = QListWidget()
        self.attachments.setMaximumHeight(70)

        root = QVBoxLayout(self)
        root.addWidget(box)
        root.addWidget(QLabel("Items"))
        root.addWidget(self.items, 1)
        root.addWidget(QLabel("Receipts / Attachments"))
        root.addWidget(self.attachments)

    def set_data(self, d) -> None:
        if d is None:
            self.clear()
            return
        self.badge.set_status(display_status(d))
        self.lab_ref.setText(d.reference or "-")
        self.lab_type.setText(d.type or "Unknown")
        self.lab_route.setText(f"{d.from_site or '?'} → {d.to_site or '?'}")
        self.lab_date.setText(fmt_date(d.date or d.created_at))
        self.lab_by.setText(d.created_by or "-")
        billing = d.billing
        self.lab_invoice.setText(billing.invoice_number if billing and billing.invoice_number else "-")
        self.lab_amount.setText(fmt_money(billing.final_amount) if billing else "-")

        self.items.setRowCount(0)
        for it in d.items:
            r = self.items.rowCount()
            self.items.insertRow(r)
            values = (it.name, fmt_qty(it.st_quantity), fmt_qty(it.received_quantity), it.uom, "Yes" if it.is_received else "")
            for c, v in enumerate(values):
                self.items.setItem(r, c, QTableWidgetItem(v))
        self.attachments.clear()
        self.attachments.addItems(d.attachments)

    def clear(self) -> None:
        self.badge.set_status(None)
        for lab in (self.lab_ref, self.lab_type, self.lab_route, self.lab_date, self.lab_by,
                    self.lab_invoice, self.lab_amount):
            lab.setText("-")
        self.items.setRowCount(0)
        self.attachments.clear()
