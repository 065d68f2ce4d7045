from PySide6.QtWidgets import QWidget, QVBoxLayout, QMessageBox
from PySide6.QtCore import Qt

GENERIC_FAILURE = "Something went wrong. Please try again."


def wrap_center(w: QWidget) -> QWidget:
    host = QWidget()
    lay = QVBoxLayout(host)
    lay.addStretch(1)
    lay.addWidget(w, 0, Qt.AlignCenter)
    lay.addStretch(1)
    return host


def info(parent: QWidget, title: str, text: str):
    QMessageBox.information(parent, title, text)


def error(parent: QWidget, title: str, text: str):
    QMessageBox.critical(parent, title, text)


def confirm(parent: QWidget, title: str, text: str) -> bool:
    return QMessageBox.question(parent, title, text) == QMessageBox.Yes


def error_text(exc: BaseException) -> str:
    """Server message when the error carries one, else a generic line."""
    msg = getattr(exc, "message", None) or str(exc)
    return msg.strip() if msg and msg.strip() else GENERIC_FAILURE


def retry_error(parent: QWidget, title: str, exc: BaseException) -> bool:
    """Show a failure with Retry/Cancel; returns True when the operator picks Retry."""
    box = QMessageBox(QMessageBox.Critical, title, error_text(exc), QMessageBox.Retry | QMessageBox.Cancel, parent)
    return box.exec() == QMessageBox.Retry
