from PySide6.QtWidgets import (
    QComboBox, QDialog, QDialogButtonBox, QFormLayout, QLabel, QPlainTextEdit, QVBoxLayout,
)

from ..modules.delivery_utilities.errors import StatusTransitionError
from ..modules.delivery_utilities.transitions import ensure_transition, next_statuses


class StatusEditDialog(QDialog):
    """Admin status/remarks edit for an intent or site transfer."""

    def __init__(self, parent=None, *, title: str = "Update Status", current: str = "", remarks: str = ""):
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self._current = current
        self._payload = None

        self.cmb_status = QComboBox()
        for s in next_statuses(current):
            self.cmb_status.addItem(s.title(), s)
        self.txt_remarks = QPlainTextEdit(remarks or "")
        self.txt_remarks.setPlaceholderText("Remarks (optional)")
        self.lbl_error = QLabel()
        self.lbl_error.setStyleSheet("color:#b10000;")
        self.lbl_error.setVisible(False)

        form = QFormLayout()
        form.addRow("Current:", QLabel((current or "-").title()))
        form.addRow("New status*", self.cmb_status)
        form.addRow("Remarks", self.txt_remarks)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(self.lbl_error)
        lay.addWidget(self.buttons)

    def accept(self):
        try:
            status = ensure_transition(self._current, self.cmb_status.currentData())
        except StatusTransitionError as exc:
            self.lbl_error.setText(exc.message)
            self.lbl_error.setVisible(True)
            return
        self._payload = {"status": status, "remarks": self.txt_remarks.toPlainText().strip()}
        super().accept()

    def payload(self) -> dict | None:
        return self._payload
