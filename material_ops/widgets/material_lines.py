from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QAbstractItemView, QComboBox, QHBoxLayout, QHeaderView, QLineEdit,
    QPushButton, QSpinBox, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from ..api.purchase_orders_api import MaterialLine, compose_item_name
from ..constants import DEFAULT_UOM
from ..utils.helpers import fmt_qty

MAX_QUANTITY = 1_000_000


class MaterialLinesEditor(QWidget):
    """
    Editable material lines for the intent / site transfer forms.

    Category combos cascade from the material catalog when one is set
    (category -> sub category -> sub category 1); every combo stays editable
    so materials missing from the catalog can still be typed in.
    """
    COLS = ["Category", "Sub category", "Sub category 1", "Qty", "UOM", "Remarks"]
    changed = Signal()

    def __init__(self, parent=None, catalog=None):
        super().__init__(parent)
        self._catalog = catalog

        self.tbl = QTableWidget(0, len(self.COLS))
        self.tbl.setHorizontalHeaderLabels(self.COLS)
        self.tbl.setSelectionBehavior(QAbstractItemView.SelectRows)
        self.tbl.verticalHeader().setVisible(False)
        hh = self.tbl.horizontalHeader()
        for c in range(3):
            hh.setSectionResizeMode(c, QHeaderView.Stretch)
        hh.setSectionResizeMode(5, QHeaderView.Stretch)

        self.btn_add = QPushButton("Add Material")
        self.btn_remove = QPushButton("Remove")
        self.btn_add.clicked.connect(lambda: self.add_row())
        self.btn_remove.clicked.connect(self.remove_selected)

        buttons = QHBoxLayout()
        buttons.addWidget(self.btn_add)
        buttons.addWidget(self.btn_remove)
        buttons.addStretch(1)

        lay = QVBoxLayout(self)
        lay.setContentsMargins(0, 0, 0, 0)
        lay.addWidget(self.tbl, 1)
        lay.addLayout(buttons)

        self.add_row()

    # ---------- catalog ----------
    def set_catalog(self, catalog) -> None:
        self._catalog = catalog
        for r in range(self.tbl.rowCount()):
            cmb = self.tbl.cellWidget(r, 0)
            current = cmb.currentText()
            self._fill(cmb, catalog.categories() if catalog else [], current)

    @staticmethod
    def _fill(cmb: QComboBox, options, keep: str = "") -> None:
        cmb.blockSignals(True)
        cmb.clear()
        cmb.addItem("")
        cmb.addItems(list(options))
        cmb.setCurrentText(keep)
        cmb.blockSignals(False)

    def _combo(self) -> QComboBox:
        cmb = QComboBox()
        cmb.setEditable(True)
        cmb.setInsertPolicy(QComboBox.NoInsert)
        return cmb

    # ---------- rows ----------
    def add_row(self, line: MaterialLine | None = None) -> int:
        r = self.tbl.rowCount()
        self.tbl.insertRow(r)

        cat, sub, sub1 = self._combo(), self._combo(), self._combo()
        self._fill(cat, self._catalog.categories() if self._catalog else [])
        qty = QSpinBox()
        qty.setRange(0, MAX_QUANTITY)
        uom = QLineEdit(DEFAULT_UOM)
        remarks = QLineEdit()

        for c, w in enumerate((cat, sub, sub1, qty, uom, remarks)):
            self.tbl.setCellWidget(r, c, w)

        cat.currentTextChanged.connect(lambda text, s=sub, s1=sub1: self._on_category(text, s, s1))
        sub.currentTextChanged.connect(lambda text, c=cat, s1=sub1: self._on_sub_category(c.currentText(), text, s1))
        for w in (cat, sub, sub1):
            w.currentTextChanged.connect(lambda *_: self.changed.emit())
        qty.valueChanged.connect(lambda *_: self.changed.emit())

        if line is not None:
            cat.setCurrentText(line.category)
            sub.setCurrentText(line.sub_category)
            sub1.setCurrentText(line.sub_category1)
            qty.setValue(int(line.quantity))
            uom.setText(line.uom or DEFAULT_UOM)
            remarks.setText(line.remarks)
        self.changed.emit()
        return r

    def remove_selected(self) -> None:
        rows = sorted({i.row() for i in self.tbl.selectionModel().selectedRows()}, reverse=True)
        if not rows and self.tbl.rowCount():
            rows = [self.tbl.rowCount() - 1]
        for r in rows:
            self.tbl.removeRow(r)
        self.changed.emit()

    def _on_category(self, category: str, sub: QComboBox, sub1: QComboBox) -> None:
        if self._catalog is None:
            return
        self._fill(sub, self._catalog.sub_categories(category))
        self._fill(sub1, [])

    def _on_sub_category(self, category: str, sub_category: str, sub1: QComboBox) -> None:
        if self._catalog is None:
            return
        self._fill(sub1, self._catalog.sub_categories1(category, sub_category))

    # ---------- output ----------
    def lines(self) -> list[MaterialLine]:
        out = []
        for r in range(self.tbl.rowCount()):
            cat = self.tbl.cellWidget(r, 0).currentText().strip()
            sub = self.tbl.cellWidget(r, 1).currentText().strip()
            sub1 = self.tbl.cellWidget(r, 2).currentText().strip()
            out.append(MaterialLine(
                item_name=compose_item_name(cat, sub, sub1),
                category=cat,
                sub_category=sub,
                sub_category1=sub1,
                quantity=self.tbl.cellWidget(r, 3).value(),
                uom=self.tbl.cellWidget(r, 4).text().strip() or DEFAULT_UOM,
                remarks=self.tbl.cellWidget(r, 5).text().strip(),
            ))
        return out


class MaterialsTable(QTableWidget):
    """Read-only material lines for the details panes."""

    def __init__(self, parent=None):
        super().__init__(0, 4, parent)
        self.setHorizontalHeaderLabels(["Material", "Qty", "UOM", "Remarks"])
        self.setEditTriggers(QTableWidget.NoEditTriggers)
        self.verticalHeader().setVisible(False)
        self.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)

    def set_materials(self, materials) -> None:
        self.setRowCount(0)
        for m in materials:
            r = self.rowCount()
            self.insertRow(r)
            for c, v in enumerate((m.item_name or m.category, fmt_qty(m.quantity), m.uom, m.remarks or "")):
                self.setItem(r, c, QTableWidgetItem(str(v)))
