from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_date


class IntentsTableModel(QAbstractTableModel):
    HEADERS = ["Intent ID", "Delivery Site", "Requested By", "Materials", "Status", "Date"]

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
        for i, r in enumerate(self._rows):
            if r.id == record_id:
                return i
        return None

    # Required overrides ----
    def rowCount(self, parent=QModelIndex()):  # type: ignore[override]
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):  # type: ignore[override]
        return len(self.HEADERS)

    def data(self, index, role=Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid():
            return None
        po = self._rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                po.purchase_order_id or po.id,
                po.delivery_site,
                po.requested_by,
                len(po.materials),
                po.status.title(),
                fmt_date(po.request_date),
            ][index.column()]
        if role == Qt.TextAlignmentRole and index.column() == 3:
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)
