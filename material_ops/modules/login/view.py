# material_ops/modules/login/view.py
from __future__ import annotations

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QCheckBox, QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout, QLabel, QLineEdit, QVBoxLayout, QWidget,
)

from ...constants import APP_NAME
from ...widgets.banner import ErrorBanner, InfoBanner


class LoginDialog(QDialog):
    """
    Sign-in dialog for the logistics desk.

    Sign in (or Enter in the password box) emits `login_requested`; the
    controller calls accept() only once the server has issued a token, so a
    rejected attempt stays on screen with its message.
    """

    login_requested = Signal(str, str)

    def __init__(self, parent: QWidget | None = None, *, server: str = "") -> None:
        super().__init__(parent)
        self.setWindowTitle(f"{APP_NAME}: Sign in")
        self.setModal(True)
        self.setMinimumWidth(380)

        self.lbl_info = InfoBanner()
        self.lbl_error = ErrorBanner()

        self.username = QLineEdit()
        self.username.setPlaceholderText("Site username")
        self.password = QLineEdit()
        self.password.setEchoMode(QLineEdit.Password)
        self.password.returnPressed.connect(self._on_submit)
        self.chk_show = QCheckBox("Show")
        self.chk_show.toggled.connect(
            lambda on: self.password.setEchoMode(QLineEdit.Normal if on else QLineEdit.Password)
        )

        secret = QWidget()
        row = QHBoxLayout(secret)
        row.setContentsMargins(0, 0, 0, 0)
        row.addWidget(self.password, 1)
        row.addWidget(self.chk_show)

        form = QFormLayout()
        form.setLabelAlignment(Qt.AlignRight)
        form.addRow("Username", self.username)
        form.addRow("Password", secret)
        if server:
            where = QLabel(server)
            where.setTextInteractionFlags(Qt.TextSelectableByMouse)
            where.setStyleSheet("color:#6b7280;")
            form.addRow("Server", where)

        self.lbl_busy = QLabel("Signing in...")
        self.lbl_busy.setVisible(False)

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.btn_sign_in = self.buttons.button(QDialogButtonBox.Ok)
        self.btn_sign_in.setText("Sign in")
        self.btn_sign_in.setAutoDefault(False)
        self.buttons.accepted.connect(self._on_submit)
        self.buttons.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addWidget(self.lbl_info)
        lay.addWidget(self.lbl_error)
        lay.addLayout(form)
        lay.addWidget(self.lbl_busy)
        lay.addWidget(self.buttons)

        self.username.setFocus()

    def get_values(self) -> tuple[str, str]:
        """(username, password); only the username is trimmed."""
        return self.username.text().strip(), self.password.text()

    def set_error(self, msg: str | None) -> None:
        self.lbl_error.show_message(msg)

    def set_info(self, msg: str | None) -> None:
        self.lbl_info.show_message(msg)

    def show_busy(self, is_busy: bool) -> None:
        self.lbl_busy.setVisible(is_busy)
        for w in (self.username, self.password, self.chk_show, self.btn_sign_in):
            w.setEnabled(not is_busy)

    def _on_submit(self) -> None:
        if not self.btn_sign_in.isEnabled():
            return
        self.login_requested.emit(*self.get_values())
