from PySide6.QtWidgets import (
    QComboBox, QDialog, QDialogButtonBox, QFormLayout, QGroupBox, QLabel,
    QLineEdit, QPlainTextEdit, QVBoxLayout,
)

from ...widgets.attachments import AttachmentPicker
from ...widgets.material_lines import MaterialLinesEditor
from ..delivery_utilities.validation import validate_site_transfer_form


class SiteTransferForm(QDialog):
    """
    Move material between two sites. Both sites come from the branch list
    but stay editable; they must differ (case and surrounding spaces ignored)
    and every material needs its full category path.
    """

    def __init__(self, parent=None, *, sites=(), catalog=None, requested_by: str = "", from_site: str = ""):
        super().__init__(parent)
        self.setWindowTitle("New Site Transfer")
        self.setModal(True)
        self.resize(760, 580)
        self._payload = None

        self.cmb_from = self._site_combo(sites)
        self.cmb_from.setCurrentText(from_site)
        self.cmb_to = self._site_combo(sites)
        self.txt_requested = QLineEdit(requested_by)
        self.txt_requested.setPlaceholderText("Auto-filled from login")
        self.txt_remarks = QPlainTextEdit()
        self.txt_remarks.setMaximumHeight(60)

        form = QFormLayout()
        form.addRow("From Site*", self.cmb_from)
        form.addRow("Transfer To*", self.cmb_to)
        form.addRow("Checked By*", self.txt_requested)
        form.addRow("Remarks", self.txt_remarks)

        self.materials = MaterialLinesEditor(catalog=catalog)
        mat_box = QGroupBox("Materials*")
        QVBoxLayout(mat_box).addWidget(self.materials)

        self.attachments = AttachmentPicker(title="Attach transfer photos")
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

    @staticmethod
    def _site_combo(sites) -> QComboBox:
        cmb = QComboBox()
        cmb.setEditable(True)
        cmb.addItem("")
        cmb.addItems(list(sites))
        return cmb

    def problems(self) -> list[str]:
        return validate_site_transfer_form(
            self.cmb_from.currentText(),
            self.cmb_to.currentText(),
            self.txt_requested.text(),
            self.materials.lines(),
        )

    def accept(self):
        problems = self.problems()
        if problems:
            self.lbl_error.setText("\n".join(problems))
            self.lbl_error.setVisible(True)
            return
        self._payload = {
            "from_site": self.cmb_from.currentText().strip(),
            "to_site": self.cmb_to.currentText().strip(),
            "requested_by": self.txt_requested.text().strip(),
            "materials": self.materials.lines(),
            "remarks": self.txt_remarks.toPlainText().strip(),
            "attachments": self.attachments.paths(),
        }
        super().accept()

    def payload(self) -> dict | None:
        return self._payload
