from PySide6.QtWidgets import (
    QComboBox, QDialog, QDialogButtonBox, QFormLayout, QGroupBox, QLabel,
    QLineEdit, QPlainTextEdit, QVBoxLayout,
)

from ...widgets.attachments import AttachmentPicker
from ...widgets.material_lines import MaterialLinesEditor
from ..delivery_utilities.validation import validate_intent_form


class IntentForm(QDialog):
    """New purchase intent: delivery site, requester, material lines and attachments."""

    def __init__(self, parent=None, *, sites=(), catalog=None, requested_by: str = ""):
        super().__init__(parent)
        self.setWindowTitle("New Intent")
        self.setModal(True)
        self.resize(760, 560)
        self._payload = None

        self.cmb_site = QComboBox()
        self.cmb_site.setEditable(True)
        self.cmb_site.addItem("")
        self.cmb_site.addItems(list(sites))
        self.txt_requested = QLineEdit(requested_by)
        self.txt_remarks = QPlainTextEdit()
        self.txt_remarks.setPlaceholderText("Remarks (optional)")
        self.txt_remarks.setMaximumHeight(60)

        form = QFormLayout()
        form.addRow("Delivery Site*", self.cmb_site)
        form.addRow("Requested By*", self.txt_requested)
        form.addRow("Remarks", self.txt_remarks)

        self.materials = MaterialLinesEditor(catalog=catalog)
        mat_box = QGroupBox("Materials*")
        QVBoxLayout(mat_box).addWidget(self.materials)

        self.attachments = AttachmentPicker(title="Attach intent photos")
        att_box = QGroupBox("Attachments")
        QVBoxLayout(att_box).addWidget(self.attachments)

        self.lbl_error = QLabel()
        self.lbl_error.setWordWrap(True)
        self.lbl_error.setStyleSheet("color:#b10000;")
        self.lbl_error.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.buttons.button(QDialogButtonBox.Ok).setText("Submit")
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(form)
        lay.addWidget(mat_box, 1)
        lay.addWidget(att_box)
        lay.addWidget(self.lbl_error)
        lay.addWidget(self.buttons)

    def accept(self):
        site = self.cmb_site.currentText().strip()
        requested_by = self.txt_requested.text().strip()
        materials = self.materials.lines()
        problems = validate_intent_form(site, requested_by, materials)
        if problems:
            self.lbl_error.setText("\n".join(problems))
            self.lbl_error.setVisible(True)
            return
        self._payload = {
            "delivery_site": site,
            "requested_by": requested_by,
            "materials": materials,
            "remarks": self.txt_remarks.toPlainText().strip(),
            "attachments": self.attachments.paths(),
        }
        super().accept()

    def payload(self) -> dict | None:
        return self._payload
