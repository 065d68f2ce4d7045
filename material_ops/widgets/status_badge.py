from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel

from ..modules.delivery_utilities.status import description, label, style_tokens


class StatusBadge(QLabel):
    """Pill-shaped label: Pending grey, Partial orange, Transferred green."""

    def __init__(self, status: str = "", parent=None):
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.status = ""
        self.set_status(status)

    def set_status(self, status: str | None) -> None:
        self.status = label(status or "")
        if not self.status:
            self.clear()
            self.setStyleSheet("")
            self.setToolTip("")
            return
        tok = style_tokens(self.status)
        self.setText(self.status)
        self.setToolTip(description(self.status))
        self.setStyleSheet(
            f"QLabel {{background:{tok['bg']}; color:{tok['fg']}; border-radius:8px;"
            " padding:2px 10px; font-weight:600;}"
        )
