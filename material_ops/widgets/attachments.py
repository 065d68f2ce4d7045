from pathlib import Path

from PySide6.QtWidgets import QFileDialog, QHBoxLayout, QListWidget, QPushButton, QVBoxLayout, QWidget

FILE_FILTER = "Images and documents (*.png *.jpg *.jpeg *.pdf);;All files (*)"


class AttachmentPicker(QWidget):
    """Local files chosen for upload with a create request."""

    def __init__(self, parent=None, title: str = "Select attachments"):
        super().__init__(parent)
        self._title = title
        self.lst = QListWidget()
        self.lst.setMaximumHeight(90)
        self.btn_add = QPushButton("Add Files…")
        self.btn_remove = QPushButton("Remove")
        self.btn_add.clicked.connect(self._browse)
        self.btn_remove.clicked.connect(self._remove)

        row = QHBoxLayout()
        row.addWidget(self.btn_add)
        row.addWidget(self.btn_remove)
        row.addStretch(1)

        lay = QVBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.lst)
        lay.addLayout(row)

    def _browse(self):
        files, _ = QFileDialog.getOpenFileNames(self, self._title, "", FILE_FILTER)
        self.add_paths(files)

    def add_paths(self, paths) -> None:
        known = set(self.paths())
        for p in paths:
            if p and p not in known and Path(p).is_file():
                self.lst.addItem(p)
                known.add(p)

    def _remove(self):
        for item in self.lst.selectedItems():
            self.lst.takeItem(self.lst.row(item))

    def paths(self) -> list[str]:
        return [self.lst.item(i).text() for i in range(self.lst.count())]
