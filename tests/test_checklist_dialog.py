# tests/test_checklist_dialog.py
import pytest
from PySide6.QtWidgets import QDialog

from material_ops.modules.delivery import DeliveryChecklistDialog, DeliveryReconciler
from material_ops.modules.delivery_utilities.validation import Resolution, msg_exceeds

from conftest import FakeDeliveriesApi, FakeRecordsApi, make_delivery, make_item


@pytest.fixture()
def delivery():
    return make_delivery(items=[make_item("a", st=10), make_item("b", st=5)])


@pytest.fixture()
def api(delivery):
    return FakeDeliveriesApi(delivery)


@pytest.fixture()
def dialog(qtbot, api, bus, delivery, events):
    rec = DeliveryReconciler(api, bus, site_transfers_api=FakeRecordsApi(), event_logger=events)
    dlg = DeliveryChecklistDialog(delivery, rec)
    qtbot.addWidget(dlg)
    return dlg


def _answer(dlg, monkeypatch, resolution):
    asked = []

    def fake_ask():
        asked.append(True)
        return resolution

    monkeypatch.setattr(dlg, "ask_resolution", fake_ask)
    return asked


def test_rows_and_summary(dialog):
    assert dialog.tbl.rowCount() == 2
    assert dialog.lbl_submitted.text() == "15"
    assert dialog.lbl_missing.text() == "15"
    assert not dialog.lbl_all_done.isVisibleTo(dialog)


def test_quantity_above_st_blocks_submit(dialog):
    dialog._spins[0].setValue(11)
    assert dialog.tbl.item(0, dialog.COL_ERROR).text() == msg_exceeds(10)
    assert not dialog.btn_submit.isEnabled()
    dialog._spins[0].setValue(10)
    assert dialog.tbl.item(0, dialog.COL_ERROR).text() == ""
    assert dialog.btn_submit.isEnabled()


def test_ticking_short_row_auto_fills(dialog, monkeypatch):
    asked = _answer(dialog, monkeypatch, Resolution.AUTO_FILL)
    dialog._spins[0].setValue(3)
    dialog._checks[0].setChecked(True)
    assert asked == [True]
    assert dialog._spins[0].value() == 10


def test_keep_current_is_remembered_until_quantity_changes(dialog, monkeypatch):
    _answer(dialog, monkeypatch, Resolution.KEEP_QUANTITY)
    dialog._spins[0].setValue(3)
    dialog._checks[0].setChecked(True)
    assert dialog._spins[0].value() == 3
    assert dialog._resolutions == {"a": Resolution.KEEP_QUANTITY}
    dialog._spins[0].setValue(4)
    assert dialog._resolutions == {}


def test_full_row_needs_no_question(dialog, monkeypatch):
    asked = _answer(dialog, monkeypatch, Resolution.AUTO_FILL)
    dialog._spins[1].setValue(5)
    dialog._checks[1].setChecked(True)
    assert asked == []


def test_all_transferred_banner(dialog):
    for spin, chk, st in zip(dialog._spins, dialog._checks, (10, 5)):
        spin.setValue(st)
        chk.setChecked(True)
    assert dialog.lbl_all_done.isVisibleTo(dialog)
    assert dialog.lbl_missing.text() == "0"


def test_submit_sends_items_and_accepts(dialog, api, qtbot, monkeypatch):
    _answer(dialog, monkeypatch, Resolution.KEEP_QUANTITY)
    dialog._spins[0].setValue(4)
    dialog._checks[0].setChecked(True)
    dialog.accept()
    qtbot.waitUntil(lambda: dialog.result_record is not None, timeout=5000)
    assert dialog.result() == QDialog.Accepted
    assert dialog.result_record.status == "Partial"
    sent = api.calls[0][2]
    assert [(i.item_id, i.received_quantity, i.is_received) for i in sent] == [("a", 4, True), ("b", 0, False)]


def test_unanswered_conflict_is_asked_on_submit(dialog, api, qtbot, monkeypatch):
    dialog._spins[0].setValue(4)
    dialog._checks[0].blockSignals(True)
    dialog._checks[0].setChecked(True)
    dialog._checks[0].blockSignals(False)
    asked = _answer(dialog, monkeypatch, Resolution.AUTO_FILL)
    dialog.accept()
    qtbot.waitUntil(lambda: dialog.result_record is not None, timeout=5000)
    assert asked == [True]
    assert api.calls[0][2][0].received_quantity == 10
