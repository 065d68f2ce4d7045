# tests/test_forms.py
import pytest

from material_ops.api.catalog_api import MaterialCatalog
from material_ops.modules.intent.form import IntentForm
from material_ops.modules.site_transfer.form import SiteTransferForm

SITES = ["Main Yard", "Tower A", "Tower B"]


@pytest.fixture()
def catalog():
    return MaterialCatalog([
        {"category": "Cement", "sub_category": "OPC", "sub_category1": "53 Grade"},
        {"category": "Cement", "sub_category": "OPC", "sub_category1": "43 Grade"},
        {"category": "Cement", "sub_category": "PPC", "sub_category1": ""},
        {"category": "Steel", "sub_category": "TMT", "sub_category1": "12mm"},
    ])


def _fill_row(editor, row, cat, sub="", sub1="", qty=1):
    editor.tbl.cellWidget(row, 0).setCurrentText(cat)
    editor.tbl.cellWidget(row, 1).setCurrentText(sub)
    editor.tbl.cellWidget(row, 2).setCurrentText(sub1)
    editor.tbl.cellWidget(row, 3).setValue(qty)


def _items(cmb):
    return [cmb.itemText(i) for i in range(cmb.count())]


def test_catalog_cascades(qtbot, catalog):
    dlg = IntentForm(sites=SITES, catalog=catalog)
    qtbot.addWidget(dlg)
    ed = dlg.materials
    assert _items(ed.tbl.cellWidget(0, 0)) == ["", "Cement", "Steel"]
    ed.tbl.cellWidget(0, 0).setCurrentText("Cement")
    assert _items(ed.tbl.cellWidget(0, 1)) == ["", "OPC", "PPC"]
    ed.tbl.cellWidget(0, 1).setCurrentText("OPC")
    assert _items(ed.tbl.cellWidget(0, 2)) == ["", "43 Grade", "53 Grade"]


def test_intent_requires_site_and_quantity(qtbot, catalog):
    dlg = IntentForm(sites=SITES, catalog=catalog, requested_by="Ravi")
    qtbot.addWidget(dlg)
    dlg.accept()
    text = dlg.lbl_error.text()
    assert "Delivery site is required." in text
    assert "Material 1: missing category, quantity." in text
    assert dlg.payload() is None


def test_intent_payload(qtbot, catalog):
    dlg = IntentForm(sites=SITES, catalog=catalog, requested_by=" Ravi ")
    qtbot.addWidget(dlg)
    dlg.cmb_site.setCurrentText("Tower B")
    _fill_row(dlg.materials, 0, "Cement", "OPC", qty=40)
    dlg.txt_remarks.setPlainText("  urgent ")
    dlg.accept()
    p = dlg.payload()
    assert p["delivery_site"] == "Tower B"
    assert p["requested_by"] == "Ravi"
    assert p["remarks"] == "urgent"
    assert p["attachments"] == []
    line = p["materials"][0]
    assert (line.item_name, line.quantity, line.uom) == ("Cement - OPC", 40, "Nos")


def test_site_transfer_rejects_same_sites(qtbot, catalog):
    dlg = SiteTransferForm(sites=SITES, catalog=catalog, requested_by="Ravi", from_site="Tower B")
    qtbot.addWidget(dlg)
    dlg.cmb_to.setCurrentText(" tower b ")
    _fill_row(dlg.materials, 0, "Steel", "TMT", "12mm", qty=5)
    dlg.accept()
    assert dlg.lbl_error.text() == "From and To sites must be different."
    assert dlg.payload() is None


def test_site_transfer_needs_full_category(qtbot, catalog):
    dlg = SiteTransferForm(sites=SITES, catalog=catalog, requested_by="Ravi", from_site="Main Yard")
    qtbot.addWidget(dlg)
    dlg.cmb_to.setCurrentText("Tower A")
    _fill_row(dlg.materials, 0, "Cement", "PPC", qty=5)
    dlg.accept()
    assert dlg.lbl_error.text() == "Material 1: missing sub category 1."


def test_site_transfer_payload(qtbot, catalog):
    dlg = SiteTransferForm(sites=SITES, catalog=catalog, requested_by="Ravi", from_site="Main Yard")
    qtbot.addWidget(dlg)
    dlg.cmb_to.setCurrentText("Tower A")
    _fill_row(dlg.materials, 0, "Steel", "TMT", "12mm", qty=5)
    dlg.materials.add_row()
    _fill_row(dlg.materials, 1, "Cement", "OPC", "53 Grade", qty=2)
    dlg.accept()
    p = dlg.payload()
    assert (p["from_site"], p["to_site"]) == ("Main Yard", "Tower A")
    assert [m.item_name for m in p["materials"]] == ["Steel - TMT - 12mm", "Cement - OPC - 53 Grade"]
