from PySide6.QtWidgets import QLabel


class ErrorBanner(QLabel):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWordWrap(True)
        self.setVisible(False)
        self.setStyleSheet(
            "QLabel {background:#fcebea; color:#b10000; border:1px solid #f5c6cb; border-radius:6px; padding:6px;}"
        )

    def show_message(self, msg: str | None) -> None:
        if msg:
            self.setText(msg)
            self.setVisible(True)
        else:
            self.clear()
            self.setVisible(False)


class InfoBanner(ErrorBanner):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setStyleSheet(
            "QLabel {background:#e8f4fd; color:#0b4f79; border:1px solid #b6dcf5; border-radius:6px; padding:6px;}"
        )
