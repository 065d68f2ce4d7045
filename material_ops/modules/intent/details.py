from PySide6.QtWidgets import QFormLayout, QGroupBox, QLabel, QListWidget, QVBoxLayout, QWidget

from ...utils.helpers import fmt_date
from ...widgets.material_lines import MaterialsTable


class IntentDetails(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        box = QGroupBox("Intent Details")
        f = QFormLayout(box)
        self.lab_id = QLabel("-")
        self.lab_site = QLabel("-")
        self.lab_requested = QLabel("-")
        self.lab_status = QLabel("-")
        self.lab_date = QLabel("-")
        self.lab_remarks = QLabel("-")
        self.lab_remarks.setWordWrap(True)
        f.addRow("Intent ID:", self.lab_id)
        f.addRow("Delivery Site:", self.lab_site)
        f.addRow("Requested By:", self.lab_requested)
        f.addRow("Status:", self.lab_status)
        f.addRow("Date:", self.lab_date)
        f.addRow("Remarks:", self.lab_remarks)

        self.materials = MaterialsTable()
        self.attachments = QListWidget()
        self.attachments.setMaximumHeight(80)

        root = QVBoxLayout(self)
        root.addWidget(box)
        root.addWidget(QLabel("Materials"))
        root.addWidget(self.materials, 1)
        root.addWidget(QLabel("Attachments"))
        root.addWidget(self.attachments)

    def set_data(self, po) -> None:
        if po is None:
            self.clear()
            return
        self.lab_id.setText(po.purchase_order_id or po.id or "-")
        self.lab_site.setText(po.delivery_site or "-")
        self.lab_requested.setText(po.requested_by or "-")
        self.lab_status.setText(po.status.title() or "-")
        self.lab_date.setText(fmt_date(po.request_date, with_time=True))
        self.lab_remarks.setText(po.remarks or "-")
        self.materials.set_materials(po.materials)
        self.attachments.clear()
        self.attachments.addItems(po.attachments)

    def clear(self) -> None:
        for lab in (self.lab_id, self.lab_site, self.lab_requested, self.lab_status, self.lab_date, self.lab_remarks):
            lab.setText("-")
        self.materials.setRowCount(0)
        self.attachments.clear()

    def selected_attachment(self) -> int | None:
        row = self.attachments.currentRow()
        return row if row >= 0 else None
