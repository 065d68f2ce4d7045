from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt
from PySide6.QtGui import QBrush, QColor

from ...utils.helpers import fmt_date
from ..delivery_utilities.status import display_status, style_tokens


class DeliveriesTableModel(QAbstractTableModel):
    HEADERS = ["Reference", "Type", "From", "To", "Items", "Status", "Date"]
    STATUS_COL = 5

    def __init__(self, rows=None):
        super().__init__()
        self._rows = list(rows or [])

    def set_rows(self, rows) -> None:
        self.beginResetModel()
        self._rows = list(rows or [])
        self.endResetModel()

    def at(self, row: int):
        return self._rows[row]

    def row_of(self, record_id: str) -> int | None:
        return next((i for i, r in enumerate(self._rows) if r.id == record_id), None)

    # Required overrides ----
    def rowCount(self, parent=QModelIndex()):  # type: ignore[override]
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        d = self._rows[index.row()]
        col = index.column()
        if role == Qt.DisplayRole:
            return [
                d.reference,
                d.type or "-",
                d.from_site,
                d.to_site,
                len(d.items),
                display_status(d),
                fmt_date(d.date or d.created_at),
            ][col]
        if col == self.STATUS_COL and role in (Qt.BackgroundRole, Qt.ForegroundRole):
            tok = style_tokens(display_status(d))
            return QBrush(QColor(tok["bg"] if role == Qt.BackgroundRole else tok["fg"]))
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)
