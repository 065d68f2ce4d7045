from dataclasses import replace

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import (
    QComboBox, QDialog, QDialogButtonBox, QDoubleSpinBox, QFormLayout, QGroupBox, QHeaderView,
    QLabel, QLineEdit, QTableWidget, QTableWidgetItem, QVBoxLayout,
)

from ...constants import DISCOUNT_FLAT, DISCOUNT_PERCENTAGE
from ...utils import ui_helpers as uih
from ...utils.helpers import fmt_money, fmt_qty
from ...utils.loggers import get_logger
from ...utils.tasks import run_task
from ...widgets.banner import ErrorBanner
from ..delivery_utilities.calculations import calc_amount
from ..delivery_utilities.errors import BillingNotAllowed, BillingValidationError

_log = get_logger(__name__)

MAX_AMOUNT = 100_000_000


def _money_spin(value: float = 0.0) -> QDoubleSpinBox:
    spin = QDoubleSpinBox()
    spin.setDecimals(2)
    spin.setRange(0, MAX_AMOUNT)
    spin.setValue(float(value or 0))
    return spin


def _type_combo(kind: str) -> QComboBox:
    cmb = QComboBox()
    cmb.addItem("Flat", DISCOUNT_FLAT)
    cmb.addItem("%", DISCOUNT_PERCENTAGE)
    cmb.setCurrentIndex(max(0, cmb.findData(kind)))
    return cmb


class GrnBillingDialog(QDialog):
    """
    Material-wise billing for one GRN. Amounts update as prices and discounts
    change; the saved record returned by the server is kept in `result_record`.
    """

    COLS = ["Material", "Qty", "Price", "Discount", "Type", "Amount", ""]
    COL_PRICE, COL_DISCOUNT, COL_TYPE, COL_AMOUNT, COL_ERROR = 2, 3, 4, 5, 6

    def __init__(self, delivery, service, parent=None):
        super().__init__(parent)
        self.setWindowTitle(f"GRN Billing: {delivery.reference}")
        self.setModal(True)
        self.resize(820, 520)
        self.delivery = delivery
        self.service = service
        self.result_record = None
        self._draft = service.draft(delivery)
        self._rows: list[tuple[QDoubleSpinBox, QDoubleSpinBox, QComboBox]] = []

        self.txt_invoice = QLineEdit(self._draft.invoice_number)
        self.txt_company = QLineEdit(self._draft.company_name)
        head = QFormLayout()
        head.addRow("Invoice No", self.txt_invoice)
        head.addRow("Company", self.txt_company)

        self.tbl = QTableWidget(0, len(self.COLS))
        self.tbl.setHorizontalHeaderLabels(self.COLS)
        self.tbl.verticalHeader().setVisible(False)
        self.tbl.setSelectionMode(QTableWidget.NoSelection)
        self.tbl.horizontalHeader().setSectionResizeMode(0, QHeaderView.Stretch)
        self.tbl.horizontalHeader().setSectionResizeMode(self.COL_ERROR, QHeaderView.ResizeToContents)

        # header-level billing for deliveries without items
        self.header_box = QGroupBox("Bill")
        hf = QFormLayout(self.header_box)
        self.spn_price = _money_spin(self._draft.price)
        self.spn_discount = _money_spin(self._draft.discount)
        self.cmb_type = _type_combo(self._draft.discount_type)
        self.lbl_header_error = QLabel()
        self.lbl_header_error.setStyleSheet("color:#b10000;")
        hf.addRow("Price", self.spn_price)
        hf.addRow("Discount", self.spn_discount)
        hf.addRow("Discount Type", self.cmb_type)
        hf.addRow("", self.lbl_header_error)
        for w in (self.spn_price, self.spn_discount):
            w.valueChanged.connect(lambda *_: self._update_preview())
        self.cmb_type.currentIndexChanged.connect(lambda *_: self._update_preview())

        self.lbl_total_price = QLabel("0.00")
        self.lbl_total_discount = QLabel("0.00")
        self.lbl_final = QLabel("0.00")
        self.lbl_final.setStyleSheet("font-weight:600;")
        totals = QFormLayout()
        totals.addRow("Total Price:", self.lbl_total_price)
        totals.addRow("Total Discount:", self.lbl_total_discount)
        totals.addRow("Final Amount:", self.lbl_final)

        self.banner = ErrorBanner()
        self.buttons = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel)
        self.btn_save = self.buttons.button(QDialogButtonBox.Save)
        self.buttons.accepted.connect(self.accept)
        self.buttons.rejected.connect(self.reject)

        lay = QVBoxLayout(self)
        lay.addLayout(head)
        lay.addWidget(self.tbl, 1)
        lay.addWidget(self.header_box)
        lay.addLayout(totals)
        lay.addWidget(self.banner)
        lay.addWidget(self.buttons)

        self._build_rows()
        has_lines = bool(self._draft.lines)
        self.tbl.setVisible(has_lines)
        self.header_box.setVisible(not has_lines)
        self._update_preview()

    def _build_rows(self):
        qty = {it.item_id: it.received_quantity for it in self.delivery.items}
        for r, line in enumerate(self._draft.lines):
            self.tbl.insertRow(r)
            name = QTableWidgetItem(line.material_name)
            name.setFlags(Qt.ItemIsEnabled)
            self.tbl.setItem(r, 0, name)
            q = QTableWidgetItem(fmt_qty(qty.get(line.material_id, 0)))
            q.setFlags(Qt.ItemIsEnabled)
            self.tbl.setItem(r, 1, q)

            price = _money_spin(line.price)
            discount = _money_spin(line.discount)
            kind = _type_combo(line.discount_type)
            price.valueChanged.connect(lambda *_: self._update_preview())
            discount.valueChanged.connect(lambda *_: self._update_preview())
            kind.currentIndexChanged.connect(lambda *_: self._update_preview())
            self.tbl.setCellWidget(r, self.COL_PRICE, price)
            self.tbl.setCellWidget(r, self.COL_DISCOUNT, discount)
            self.tbl.setCellWidget(r, self.COL_TYPE, kind)
            self._rows.append((price, discount, kind))

            for col in (self.COL_AMOUNT, self.COL_ERROR):
                cell = QTableWidgetItem("")
                cell.setFlags(Qt.ItemIsEnabled)
                self.tbl.setItem(r, col, cell)
            self.tbl.item(r, self.COL_ERROR).setForeground(QBrush(QColor("#b10000")))

    def billing(self):
        """Current dialog contents as a Billing."""
        lines = [
            replace(line, price=p.value(), discount=d.value(), discount_type=k.currentData())
            for line, (p, d, k) in zip(self._draft.lines, self._rows)
        ]
        return replace(
            self._draft,
            invoice_number=self.txt_invoice.text().strip(),
            company_name=self.txt_company.text().strip(),
            lines=lines,
            price=self.spn_price.value(),
            discount=self.spn_discount.value(),
            discount_type=self.cmb_type.currentData(),
        )

    # ---------- preview ----------
    def _update_preview(self):
        billing = self.billing()
        errors = {}
        for r, line in enumerate(billing.lines):
            try:
                amount = fmt_money(calc_amount(line.price, line.discount, line.discount_type))
            except BillingValidationError as exc:
                amount = "-"
                errors.update({f"{r}.{k}": v for k, v in exc.errors.items()})
            self.tbl.item(r, self.COL_AMOUNT).setText(amount)
        try:
            totals = self.service.preview(billing)
        except BillingValidationError as exc:
            if not billing.lines:
                errors.update(exc.errors)
            totals = None
        self._show_errors(errors)
        self.lbl_total_price.setText(fmt_money(totals.total_price) if totals else "-")
        self.lbl_total_discount.setText(fmt_money(totals.total_discount) if totals else "-")
        self.lbl_final.setText(fmt_money(totals.final_amount) if totals else "-")

    def _show_errors(self, errors: dict):
        for r in range(len(self._rows)):
            msgs = [v for k, v in errors.items() if k.split(".", 1)[0] == str(r)]
            self.tbl.item(r, self.COL_ERROR).setText(" ".join(msgs))
        header = [v for k, v in errors.items() if "." not in k]
        self.lbl_header_error.setText(" ".join(header))

    # ---------- save ----------
    def accept(self):
        self.banner.show_message(None)
        billing = self.billing()
        errors = self.service.validate(billing)
        if errors:
            self._show_errors(errors)
            self.banner.show_message("Please enter valid prices and discounts for all materials.")
            return
        self._save(billing)

    def _set_saving(self, busy: bool):
        self.btn_save.setEnabled(not busy)
        self.btn_save.setText("Saving..." if busy else "Save")
        self.buttons.button(QDialogButtonBox.Cancel).setEnabled(not busy)

    def _save(self, billing):
        self._set_saving(True)
        run_task(
            self,
            lambda: self.service.save(self.delivery, billing),
            self._on_saved,
            lambda exc: self._on_save_failed(exc, billing),
        )

    def _on_saved(self, saved):
        self._set_saving(False)
        self.result_record = saved
        super().accept()

    def _on_save_failed(self, exc, billing):
        self._set_saving(False)
        if isinstance(exc, BillingNotAllowed):
            uih.error(self, "GRN Billing", str(exc))
            return
        if isinstance(exc, BillingValidationError):
            self._show_errors(exc.errors)
            self.banner.show_message(exc.message)
            return
        _log.warning("Saving billing for %s failed: %s", self.delivery.id, exc)
        if uih.retry_error(self, "GRN Billing", exc):
            self._save(billing)
        else:
            self.banner.show_message(uih.error_text(exc))
