from PySide6.QtWidgets import QFormLayout, QGroupBox, QLabel, QListWidget, QVBoxLayout, QWidget

from ...utils.helpers import fmt_date
from ...widgets.material_lines import MaterialsTable


class SiteTransferDetails(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        box = QGroupBox("Site Transfer")
        f = QFormLayout(box)
        self.lab_id = QLabel("-")
        self.lab_route = QLabel("-")
        self.lab_requested = QLabel("-")
        self.lab_status = QLabel("-")
        self.lab_date = QLabel("-")
        self.lab_remarks = QLabel("-")
        self.lab_remarks.setWordWrap(True)
        f.addRow("Transfer ID:", self.lab_id)
        f.addRow("Route:", self.lab_route)
        f.addRow("Checked By:", self.lab_requested)
        f.addRow("Status:", self.lab_status)
        f.addRow("Created:", self.lab_date)
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

    def set_data(self, st) -> None:
        if st is None:
            self.clear()
            return
        self.lab_id.setText(st.site_transfer_id or st.id or "-")
        self.lab_route.setText(f"{st.from_site or '?'} → {st.to_site or '?'}")
        self.lab_requested.setText(st.requested_by or "-")
        self.lab_status.setText(st.status.title() or "-")
        self.lab_date.setText(fmt_date(st.created_at, with_time=True))
        self.lab_remarks.setText(st.remarks or "-")
        self.materials.set_materials(st.materials)
        self.attachments.clear()
        self.attachments.addItems(st.attachments)

    def clear(self) -> None:
        for lab in (self.lab_id, self.lab_route, self.lab_requested, self.lab_status, self.lab_date, self.lab_remarks):
            lab.setText("-")
        self.materials.setRowCount(0)
        self.attachments.clear()

    def selected_attachment(self) -> int | None:
        row = self.attachments.currentRow()
        return row if row >= 0 else None
