from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_date


class SiteTransfersTableModel(QAbstractTableModel):
    HEADERS = ["Transfer ID", "From", "To", "Requested By", "Materials", "Status", "Date"]

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
        st = self._rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            return [
                st.site_transfer_id or st.id,
                st.from_site,
                st.to_site,
                st.requested_by,
                len(st.materials),
                st.status.title(),
                fmt_date(st.created_at),
            ][index.column()]
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)
