from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt

from ...utils.helpers import fmt_date, fmt_money
from ..delivery_utilities.grn import invoice_of


class GrnTableModel(QAbstractTableModel):
    HEADERS = ["GRN", "Invoice No", "Type", "Vendor / From", "Project / To", "Items", "Amount", "Date"]

    def __init__(self, rows=None):
        super().__init__()
        self._rows = list(rows or [])

    def set_rows(self, rows) -> None:
        self.beginResetModel()
        self._rows = list(rows or [])
        self.endResetModel()

    def rows(self) -> list:
        return list(self._rows)

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
        if role == Qt.DisplayRole:
            billing = d.billing
            return [
                d.reference,
                invoice_of(d) or "Not billed",
                d.type or "-",
                d.from_site,
                d.to_site,
                len(d.items),
                fmt_money(billing.final_amount) if billing else "-",
                fmt_date(billing.bill_date if billing and billing.bill_date else d.created_at),
            ][index.column()]
        if role == Qt.TextAlignmentRole and index.column() in (5, 6):
            return int(Qt.AlignRight | Qt.AlignVCenter)
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):  # type: ignore[override]
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)
