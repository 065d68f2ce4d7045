# tests/test_billing_dialog.py
import pytest

from material_ops.modules.grn import GrnBillingDialog, GrnBillingService

from conftest import FakeDeliveriesApi, make_delivery, make_item


@pytest.fixture()
def grn():
    return make_delivery(
        items=[make_item("a", st=10, received=10, category="Cement"), make_item("b", st=2, received=2, category="Sand")],
        transfer_number="PO20251223-LNBNE-01", type="PO",
    )


@pytest.fixture()
def api(grn):
    return FakeDeliveriesApi(grn)


@pytest.fixture()
def dialog(qtbot, api, bus, grn, events):
    dlg = GrnBillingDialog(grn, GrnBillingService(api, bus, event_logger=events))
    qtbot.addWidget(dlg)
    return dlg


def _set_line(dlg, row, price, discount=0, kind="flat"):
    p, d, k = dlg._rows[row]
    p.setValue(price)
    d.setValue(discount)
    k.setCurrentIndex(k.findData(kind))


def test_seeded_from_draft(dialog):
    assert dialog.txt_invoice.text() == "PO20251223-LNBNE"
    assert dialog.tbl.rowCount() == 2
    assert not dialog.header_box.isVisibleTo(dialog)


def test_live_preview(dialog):
    _set_line(dialog, 0, 1000, 10, "percentage")
    _set_line(dialog, 1, 50, 80)
    assert dialog.tbl.item(0, dialog.COL_AMOUNT).text() == "₹900.00"
    assert dialog.tbl.item(1, dialog.COL_AMOUNT).text() == "₹0.00"
    assert dialog.lbl_final.text() == "₹900.00"
    assert dialog.lbl_total_discount.text() == "₹180.00"


def test_percentage_over_100_shows_error(dialog):
    _set_line(dialog, 0, 100, 150, "percentage")
    assert "100" in dialog.tbl.item(0, dialog.COL_ERROR).text()
    assert dialog.lbl_final.text() == "-"


def test_missing_price_blocks_save(dialog, api):
    _set_line(dialog, 0, 100)
    dialog.accept()
    assert dialog.tbl.item(1, dialog.COL_ERROR).text()
    assert dialog.banner.isVisibleTo(dialog)
    assert api.calls == []


def test_save_stores_server_record(dialog, api, qtbot):
    _set_line(dialog, 0, 100)
    _set_line(dialog, 1, 20, 5)
    dialog.txt_invoice.setText("INV-77")
    dialog.accept()
    qtbot.waitUntil(lambda: dialog.result_record is not None, timeout=5000)
    assert dialog.result_record.billing.invoice_number == "INV-77"
    assert dialog.result_record.billing.final_amount == pytest.approx(115)


def test_header_mode_without_items(qtbot, bus, events):
    d = make_delivery("h1", items=[])
    dlg = GrnBillingDialog(d, GrnBillingService(FakeDeliveriesApi(d), bus, event_logger=events))
    qtbot.addWidget(dlg)
    assert dlg.header_box.isVisibleTo(dlg)
    dlg.spn_price.setValue(500)
    dlg.spn_discount.setValue(10)
    dlg.cmb_type.setCurrentIndex(dlg.cmb_type.findData("percentage"))
    assert dlg.lbl_final.text() == "₹450.00"
