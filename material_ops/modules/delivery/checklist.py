"""
Delivery checklist: the operator enters what actually arrived.

Quantities are validated as they are typed (inline message per row, Submit
disabled while any row is invalid). Ticking "Received" on a short row asks
whether to auto-fill the ST quantity or keep the lesser quantity; the answer
is passed to DeliveryReconciler as that item's Resolution.
"""
from dataclasses import replace

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QCheckBox, QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout, QHeaderView, QLabel,
    QMessageBox, QSpinBox, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from ...utils import ui_helpers as uih
from ...utils.helpers import fmt_date, fmt_qty
from ...utils.loggers import get_logger
from ...utils.tasks import run_task
from ...widgets.banner import ErrorBanner
from ...widgets.status_badge import StatusBadge
from ..delivery_utilities.errors import ConfirmationRequired, QuantityValidationError
from ..delivery_utilities.status import all_transferred, display_status, summarize
from ..delivery_utilities.validation import Resolution, item_key, validate_quantity

_log = get_logger(__name__)

MAX_QUANTITY = 1_000_000


class DeliveryChecklistDialog(QDialog):
    COLS = ["Material", "ST Qty", "Received Qty", "Received", ""]
    COL_QTY, COL_CHECK, COL_ERROR = 2, 3, 4

    def __init__(self, delivery, reconciler, parent=None):
        super().__init__(parent)
        self.setWindowTitle(f"Delivery Checklist: {delivery.reference}")
        self.setModal(True)
        self.resize(720, 520)
        self.delivery = delivery
        self.reconciler = reconciler
        self.result_record = None
        self._resolutions: dict[str, Resolution] = {}
        self._row_errors: dict[int, str] = {}
        self._spins: list[QSpinBox] = []
        self._checks: list[QCheckBox] = []

        head = QFormLayout()
        self.badge = StatusBadge(display_status(delivery))
        head.addRow("Status:", self.badge)
        head.addRow("Route:", QLabel(f"{delivery.from_site or '?'} → {delivery.to_site or '?'}"))
        head.addRow("Type:", QLabel(delivery.type or "Unknown"))
        head.addRow("Date:", QLabel(fmt_date(delivery.date or delivery.created_at)))

        self.tbl = QTableWidget(0, len(self.COLS))
        self.tbl.setHorizontalHeaderLabels(self.COLS)
        self.tbl.verticalHeader().setVisible(False)
        self.tbl.setSelectionMode(QTableWidget.NoSelection)
        self.tbl.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        self.tbl.horizontalHeader().setSectionResizeMode(self.COL_ERROR, QHeaderView.ResizeToContents)

        self.lbl_submitted = QLabel("0")
        self.lbl_received = QLabel("0")
        self.lbl_missing = QLabel("0")
        summary = QHBoxLayout()
        for caption, lab in (("Submitted", self.lbl_submitted), ("Received", self.lbl_received), ("Missing", self.lbl_missing)):
            summary.addWidget(QLabel(f"{caption}:"))
            lab.setStyleSheet("font-weight:600;")
            summary.addWidget(lab)
            summary.addSpacing(16)
        summary.addStretch(1)

        self.lbl_all_done = QLabel("✓ All items transferred")
        self.lbl_all_done.setStyleSheet(
            "QLabel {background:#D1FAE5; color:#065F46; border-radius:6px; padding:6px; font-weight:600;}"
        )
        self.lbl_all_done.setVisible(False)

        self.banner = ErrorBanner()

        self.buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self.btn_submit = self.buttons.button(QDialogButtonBox.Ok)
        self.btn_submit.setText("Submit Changes")
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(head)
        lay.addWidget(self.tbl, 1)
        lay.addLayout(summary)
        lay.addWidget(self.lbl_all_done)
        lay.addWidget(self.banner)
        lay.addWidget(self.buttons)

        self._build_rows()
        self._refresh_summary()

    # ---------- rows ----------
    def _build_rows(self):
        for r, item in enumerate(self.delivery.items):
            self.tbl.insertRow(r)
            name = QTableWidgetItem(f"{item.name} ({item.uom})" if item.uom else item.name)
            name.setFlags(name.flags() & ~Qt.ItemIsEditable)
            st = QTableWidgetItem(fmt_qty(item.st_quantity))
            st.setFlags(st.flags() & ~Qt.ItemIsEditable)
            self.tbl.setItem(r, 0, name)
            self.tbl.setItem(r, 1, st)

            spin = QSpinBox()
            spin.setRange(0, MAX_QUANTITY)
            spin.setValue(int(item.received_quantity or 0))
            spin.valueChanged.connect(lambda _v, row=r: self._on_quantity_changed(row))
            self.tbl.setCellWidget(r, self.COL_QTY, spin)
            self._spins.append(spin)

            chk = QCheckBox()
            chk.setChecked(bool(item.is_received))
            chk.toggled.connect(lambda checked, row=r: self._on_checkbox(row, checked))
            host = QWidget()
            hl = QHBoxLayout(host)
            hl.setContentsMargins(0, 0, 0, 0)
            hl.addWidget(chk, 0, Qt.AlignCenter)
            self.tbl.setCellWidget(r, self.COL_CHECK, host)
            self._checks.append(chk)

            err = QTableWidgetItem("")
            err.setFlags(Qt.ItemIsEnabled)
            err.setForeground(QBrush(QColor("#b10000")))
            self.tbl.setItem(r, self.COL_ERROR, err)

    def current_items(self):
        return [
            replace(item, received_quantity=self._spins[r].value(), is_received=self._checks[r].isChecked())
            for r, item in enumerate(self.delivery.items)
        ]

    def edits(self) -> dict:
        return {
            it.item_id: {"received_quantity": it.received_quantity, "is_received": it.is_received}
            for it in self.current_items()
        }

    # ---------- live validation ----------
    def _on_quantity_changed(self, row: int):
        item = self.delivery.items[row]
        # an earlier auto-fill / keep answer no longer matches the typed quantity
        self._resolutions.pop(item.item_id, None)
        msg = validate_quantity(self._spins[row].value(), item.st_quantity)
        self._set_row_error(row, msg)
        self._refresh_summary()

    def _set_row_error(self, row: int, msg: str | None):
        self.tbl.item(row, self.COL_ERROR).setText(msg or "")
        if msg:
            self._row_errors[row] = msg
        else:
            self._row_errors.pop(row, None)
        self.btn_submit.setEnabled(not self._row_errors)

    def _on_checkbox(self, row: int, checked: bool):
        item = self.delivery.items[row]
        if not checked:
            self._resolutions.pop(item.item_id, None)
        elif self._spins[row].value() < item.st_quantity:
            choice = self.ask_resolution()
            if choice is Resolution.AUTO_FILL:
                self._spins[row].setValue(int(item.st_quantity))
            else:
                self._resolutions[item.item_id] = choice
        self._refresh_summary()

    def ask_resolution(self) -> Resolution:
        box = QMessageBox(self)
        box.setIcon(QMessageBox.Question)
        box.setWindowTitle("Mark as Fully Received?")
        box.setText(
            "The received quantity is less than the ST quantity. Do you want to automatically "
            "set received quantity equal to ST quantity?"
        )
        box.addButton("No, Keep Current", QMessageBox.RejectRole)
        btn_fill = box.addButton("Yes, Auto-fill", QMessageBox.AcceptRole)
        box.setDefaultButton(btn_fill)
        box.exec()
        return Resolution.AUTO_FILL if box.clickedButton() is btn_fill else Resolution.KEEP_QUANTITY

    def _refresh_summary(self):
        items = self.current_items()
        s = summarize(items)
        self.lbl_submitted.setText(fmt_qty(s["submitted"]))
        self.lbl_received.setText(fmt_qty(s["received"]))
        self.lbl_missing.setText(fmt_qty(s["missing"]))
        self.lbl_all_done.setVisible(all_transferred(items))

    # ---------- submit ----------
    def accept(self):
        self.banner.show_message(None)
        edits = self.edits()
        try:
            prepared = self.reconciler.prepare(self.delivery, edits)
        except QuantityValidationError as exc:
            self._show_errors(exc)
            return

        for it in prepared.conflicts:
            if it.item_id not in self._resolutions:
                self._resolutions[it.item_id] = self.ask_resolution()
        conflict_ids = {it.item_id for it in prepared.conflicts}
        resolutions = {k: v for k, v in self._resolutions.items() if k in conflict_ids}
        self._submit(edits, resolutions)

    def _show_errors(self, exc: QuantityValidationError):
        keys = [item_key(it, r) for r, it in enumerate(self.delivery.items)]
        for r, key in enumerate(keys):
            self._set_row_error(r, exc.errors.get(key))
        self.banner.show_message(exc.message)

    def _set_submitting(self, busy: bool):
        self.btn_submit.setEnabled(not busy and not self._row_errors)
        self.btn_submit.setText("Submitting..." if busy else "Submit Changes")
        self.buttons.button(QDialogButtonBox.Cancel).setEnabled(not busy)
        self.tbl.setEnabled(not busy)

    def _submit(self, edits, resolutions):
        self._set_submitting(True)
        run_task(
            self,
            lambda: self.reconciler.submit(self.delivery, edits, resolutions),
            self._on_submitted,
            lambda exc: self._on_submit_failed(exc, edits, resolutions),
        )

    def _on_submitted(self, result):
        self._set_submitting(False)
        self.result_record = result
        super().accept()

    def _on_submit_failed(self, exc, edits, resolutions):
        self._set_submitting(False)
        if isinstance(exc, QuantityValidationError):
            self._show_errors(exc)
            return
        if isinstance(exc, ConfirmationRequired):
            self.banner.show_message(str(exc))
            return
        _log.warning("Delivery %s update failed: %s", self.delivery.id, exc)
        if uih.retry_error(self, "Update Delivery", exc):
            self._submit(edits, resolutions)
        else:
            self.banner.show_message(uih.error_text(exc))
